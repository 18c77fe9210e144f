"""Record store interface: read access to portal users, assignments and
submissions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal_assistant.core.models import (
    AssignmentRecord,
    SubmissionRecord,
    UserProfile,
)

USERS_COLLECTION = "users"
ASSIGNMENTS_COLLECTION = "assignments"
SUBMISSIONS_COLLECTION = "submissions"


class RecordStore(ABC):
    """Interface for the portal's document store.

    Implementations raise whatever their client raises on failure; the
    context fetcher decides how failures degrade the snapshot.
    """

    @abstractmethod
    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile for *user_id*, or ``None`` when it does not exist."""

    @abstractmethod
    async def list_assignments(self) -> list[AssignmentRecord]:
        """Return every assignment, ordered by due date (earliest first)."""

    @abstractmethod
    async def list_student_submissions(
        self, student_id: str
    ) -> list[SubmissionRecord]:
        """Return the student's submissions, newest first."""

    @abstractmethod
    async def list_assignment_submissions(
        self, assignment_id: str
    ) -> list[SubmissionRecord]:
        """Return all submissions for one assignment, newest first."""

    async def aclose(self) -> None:
        """Release any resources held by the store."""
