"""Portal records read from the document store.

The store owns these entities; the assistant only reads them.  Field
names in the store are camelCase (``dueDate``, ``createdBy``, ...), so
every model accepts both the camelCase alias and the snake_case name.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"

STATUS_SUBMITTED = "submitted"
STATUS_GRADED = "graded"

Role = Literal["student", "teacher"]
SubmissionStatus = Literal["submitted", "graded"]


class _StoreRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class UserProfile(_StoreRecord):
    """A portal user (``users`` collection)."""

    id: str
    name: str = ""
    email: str = ""
    role: Role
    created_at: datetime | None = None


class AssignmentRecord(_StoreRecord):
    """An assignment created by a teacher (``assignments`` collection)."""

    id: str
    title: str
    description: str = ""
    due_date: str = Field(default="", description="ISO date, e.g. 2025-03-01")
    total_points: int | float = 0
    requirements: list[str] = Field(default_factory=list)
    created_by: str = ""
    created_at: datetime | None = None


class SubmissionRecord(_StoreRecord):
    """A student's submission for one assignment (``submissions`` collection)."""

    id: str
    student_id: str
    assignment_id: str
    content: str = ""
    images: list[str] = Field(default_factory=list)
    submitted_at: datetime | None = None
    status: SubmissionStatus = STATUS_SUBMITTED
    grade: int | float | None = None
    feedback: str | None = None

    @property
    def is_graded(self) -> bool:
        return self.status == STATUS_GRADED
