"""Context fetcher — gathers the role-scoped records for a chat.

Students see every assignment plus their own submissions.  Teachers see
the assignments they created plus every submission to those
assignments, fetched with one query per assignment, in assignment
order.

Store failures never propagate: each is logged, recorded on the
snapshot, and reflected in ``ContextSnapshot.status``.  There is no
retry.
"""

import logging

from portal_assistant.core.metrics import CONTEXT_FETCH_TOTAL
from portal_assistant.core.models import (
    ROLE_STUDENT,
    AssignmentRecord,
    Role,
    SubmissionRecord,
)
from portal_assistant.infra.store import RecordStore
from portal_assistant.infra.telemetry import (
    ATTR_CONTEXT_ASSIGNMENTS,
    ATTR_CONTEXT_ROLE,
    ATTR_CONTEXT_STATUS,
    ATTR_CONTEXT_SUBMISSIONS,
    SPAN_CONTEXT_FETCH,
    tracer,
)

from .snapshot import (
    SNAPSHOT_COMPLETE,
    SNAPSHOT_FAILED,
    SNAPSHOT_PARTIAL,
    ContextSnapshot,
)

logger = logging.getLogger(__name__)


class ContextFetcher:
    """Builds ``ContextSnapshot`` objects from a ``RecordStore``."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def fetch(self, subject_id: str, role: Role) -> ContextSnapshot:
        with tracer.start_as_current_span(SPAN_CONTEXT_FETCH) as span:
            span.set_attribute(ATTR_CONTEXT_ROLE, role)
            errors: list[str] = []

            try:
                assignments = await self._store.list_assignments()
            except Exception as exc:
                logger.warning(
                    "Could not load assignments for %s %s",
                    role,
                    subject_id,
                    exc_info=True,
                )
                errors.append(f"assignments: {exc}")
                snapshot = ContextSnapshot(
                    subject_id=subject_id,
                    role=role,
                    status=SNAPSHOT_FAILED,
                    errors=tuple(errors),
                )
            else:
                if role == ROLE_STUDENT:
                    submissions = await self._student_submissions(subject_id, errors)
                else:
                    assignments = [a for a in assignments if a.created_by == subject_id]
                    submissions = await self._teacher_submissions(assignments, errors)
                snapshot = ContextSnapshot(
                    subject_id=subject_id,
                    role=role,
                    assignments=tuple(assignments),
                    submissions=tuple(submissions),
                    status=SNAPSHOT_PARTIAL if errors else SNAPSHOT_COMPLETE,
                    errors=tuple(errors),
                )

            span.set_attribute(ATTR_CONTEXT_STATUS, snapshot.status)
            span.set_attribute(ATTR_CONTEXT_ASSIGNMENTS, len(snapshot.assignments))
            span.set_attribute(ATTR_CONTEXT_SUBMISSIONS, len(snapshot.submissions))

        CONTEXT_FETCH_TOTAL.labels(role=role, status=snapshot.status).inc()
        if snapshot.is_degraded:
            logger.warning(
                "Context for %s %s is %s (%d errors)",
                role,
                subject_id,
                snapshot.status,
                len(errors),
            )
        return snapshot

    async def _student_submissions(
        self, student_id: str, errors: list[str]
    ) -> list[SubmissionRecord]:
        try:
            return await self._store.list_student_submissions(student_id)
        except Exception as exc:
            logger.warning(
                "Could not load submissions of student %s", student_id, exc_info=True
            )
            errors.append(f"submissions: {exc}")
            return []

    async def _teacher_submissions(
        self, assignments: list[AssignmentRecord], errors: list[str]
    ) -> list[SubmissionRecord]:
        submissions: list[SubmissionRecord] = []
        for assignment in assignments:
            try:
                subs = await self._store.list_assignment_submissions(assignment.id)
            except Exception as exc:
                logger.warning(
                    "Could not load submissions for assignment %s",
                    assignment.id,
                    exc_info=True,
                )
                errors.append(f"submissions for {assignment.id}: {exc}")
                continue
            submissions.extend(subs)
        return submissions
