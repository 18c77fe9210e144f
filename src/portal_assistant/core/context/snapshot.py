"""Context snapshot — the read-only bundle of records behind one chat."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from portal_assistant.core.models import AssignmentRecord, Role, SubmissionRecord

SNAPSHOT_COMPLETE = "complete"
SNAPSHOT_PARTIAL = "partial"
SNAPSHOT_FAILED = "failed"

SnapshotStatus = Literal["complete", "partial", "failed"]


class ContextSnapshot(BaseModel):
    """Point-in-time records visible to one subject.

    ``status`` tells the caller how much of the fetch succeeded:
    ``complete`` (every query), ``partial`` (assignments loaded but some
    submission queries failed) or ``failed`` (assignments could not be
    loaded; both lists are empty).  ``errors`` holds one message per
    failed query.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str
    role: Role
    assignments: tuple[AssignmentRecord, ...] = ()
    submissions: tuple[SubmissionRecord, ...] = ()
    status: SnapshotStatus = SNAPSHOT_COMPLETE
    errors: tuple[str, ...] = Field(default=())

    @property
    def is_degraded(self) -> bool:
        return self.status != SNAPSHOT_COMPLETE
