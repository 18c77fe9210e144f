"""Firestore-backed record store.

Reads the portal's ``users``, ``assignments`` and ``submissions``
collections with the same equality/ordering queries the web client
uses.  Documents carry camelCase fields; the document id becomes the
record ``id``.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

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

FIELD_DUE_DATE = "dueDate"
FIELD_STUDENT_ID = "studentId"
FIELD_ASSIGNMENT_ID = "assignmentId"
FIELD_SUBMITTED_AT = "submittedAt"


def _with_id(doc: Any) -> dict[str, Any]:
    return {"id": doc.id, **(doc.to_dict() or {})}


class FirestoreRecordStore(RecordStore):
    """Async Firestore implementation of ``RecordStore``."""

    def __init__(self, project: str | None = None, client: Any | None = None) -> None:
        try:
            from google.cloud import firestore
        except Exception as exc:
            raise RuntimeError(
                "google-cloud-firestore is required for the Firestore record store"
            ) from exc

        self._firestore = firestore
        self._client = client or firestore.AsyncClient(project=project or None)

    async def _stream(self, query: Any) -> list[dict[str, Any]]:
        return [_with_id(doc) async for doc in query.stream()]

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        snap = await self._client.collection(USERS_COLLECTION).document(user_id).get()
        if not snap.exists:
            return None
        return UserProfile.model_validate(_with_id(snap))

    async def list_assignments(self) -> list[AssignmentRecord]:
        query = self._client.collection(ASSIGNMENTS_COLLECTION).order_by(
            FIELD_DUE_DATE, direction=self._firestore.Query.ASCENDING
        )
        return [AssignmentRecord.model_validate(d) for d in await self._stream(query)]

    async def _submissions_where(self, field: str, value: str) -> list[SubmissionRecord]:
        query = (
            self._client.collection(SUBMISSIONS_COLLECTION)
            .where(filter=self._firestore.FieldFilter(field, "==", value))
            .order_by(FIELD_SUBMITTED_AT, direction=self._firestore.Query.DESCENDING)
        )
        return [SubmissionRecord.model_validate(d) for d in await self._stream(query)]

    async def list_student_submissions(
        self, student_id: str
    ) -> list[SubmissionRecord]:
        return await self._submissions_where(FIELD_STUDENT_ID, student_id)

    async def list_assignment_submissions(
        self, assignment_id: str
    ) -> list[SubmissionRecord]:
        return await self._submissions_where(FIELD_ASSIGNMENT_ID, assignment_id)

    async def aclose(self) -> None:
        close = getattr(self._client, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result
        logger.info("Firestore client closed")
