"""In-process record store, seeded from a YAML/JSON fixture file."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import yaml

from portal_assistant.core.models import (
    AssignmentRecord,
    SubmissionRecord,
    UserProfile,
)

from .base import (
    ASSIGNMENTS_COLLECTION,
    SUBMISSIONS_COLLECTION,
    USERS_COLLECTION,
    RecordStore,
)

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _newest_first(submissions: Iterable[SubmissionRecord]) -> list[SubmissionRecord]:
    def key(sub: SubmissionRecord) -> datetime:
        ts = sub.submitted_at
        if ts is None:
            return _OLDEST
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)

    return sorted(submissions, key=key, reverse=True)


class InMemoryRecordStore(RecordStore):
    """Dict-backed store with the same ordering rules as the Firestore one.

    Used for local development (``store.backend: memory``) and tests.
    """

    def __init__(
        self,
        users: Iterable[UserProfile] = (),
        assignments: Iterable[AssignmentRecord] = (),
        submissions: Iterable[SubmissionRecord] = (),
    ) -> None:
        self._users = {u.id: u for u in users}
        self._assignments = {a.id: a for a in assignments}
        self._submissions = {s.id: s for s in submissions}

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryRecordStore:
        """Load a fixture with ``users``, ``assignments`` and ``submissions`` lists."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        store = cls(
            users=[UserProfile.model_validate(u) for u in data.get(USERS_COLLECTION, [])],
            assignments=[
                AssignmentRecord.model_validate(a)
                for a in data.get(ASSIGNMENTS_COLLECTION, [])
            ],
            submissions=[
                SubmissionRecord.model_validate(s)
                for s in data.get(SUBMISSIONS_COLLECTION, [])
            ],
        )
        logger.info(
            "Loaded %d users, %d assignments, %d submissions from %s",
            len(store._users),
            len(store._assignments),
            len(store._submissions),
            path,
        )
        return store

    def add(self, record: UserProfile | AssignmentRecord | SubmissionRecord) -> None:
        if isinstance(record, UserProfile):
            self._users[record.id] = record
        elif isinstance(record, AssignmentRecord):
            self._assignments[record.id] = record
        else:
            self._submissions[record.id] = record

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        return self._users.get(user_id)

    async def list_assignments(self) -> list[AssignmentRecord]:
        return sorted(self._assignments.values(), key=lambda a: a.due_date)

    async def list_student_submissions(
        self, student_id: str
    ) -> list[SubmissionRecord]:
        return _newest_first(
            s for s in self._submissions.values() if s.student_id == student_id
        )

    async def list_assignment_submissions(
        self, assignment_id: str
    ) -> list[SubmissionRecord]:
        return _newest_first(
            s for s in self._submissions.values() if s.assignment_id == assignment_id
        )
