"""Tests for the record store backends."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_submission

from portal_assistant.configs.config import CONFIG_DIR
from portal_assistant.configs.system import StoreConfig
from portal_assistant.infra.store import (
    FirestoreRecordStore,
    InMemoryRecordStore,
    build_record_store,
)

# =========================================================================
# In-memory store
# =========================================================================


class TestInMemoryRecordStore:
    @pytest.mark.asyncio
    async def test_fixture_file_uses_store_field_names(self):
        store = InMemoryRecordStore.from_file(CONFIG_DIR / "fixtures.yaml")

        teacher = await store.get_user_profile("teacher-1")
        assert teacher is not None and teacher.role == "teacher"
        assert await store.get_user_profile("nobody") is None

        assignments = await store.list_assignments()
        assert [a.id for a in assignments] == ["essay-1", "lab-2"]
        assert assignments[0].total_points == 100
        assert assignments[0].created_by == "teacher-1"

        [submission] = await store.list_student_submissions("student-1")
        assert submission.assignment_id == "essay-1"
        assert submission.grade == 90
        assert submission.is_graded

    @pytest.mark.asyncio
    async def test_submissions_newest_first(self):
        store = InMemoryRecordStore(
            submissions=[
                make_submission("old", "a1", submitted_at="2025-01-01T00:00:00Z"),
                make_submission("undated", "a1"),
                make_submission("new", "a1", submitted_at="2025-02-01T00:00:00Z"),
            ]
        )
        subs = await store.list_assignment_submissions("a1")
        assert [s.id for s in subs] == ["new", "old", "undated"]

    def test_build_from_config(self):
        store = build_record_store(
            StoreConfig(backend="memory", fixture_path="configs/fixtures.yaml")
        )
        assert isinstance(store, InMemoryRecordStore)


# =========================================================================
# Firestore store (fake client)
# =========================================================================


class _FakeDoc:
    def __init__(self, id: str, data: dict | None):
        self.id = id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return self._data


class _FakeQuery:
    def __init__(self, docs: list[_FakeDoc]):
        self.docs = docs
        self.filters: list = []
        self.orders: list = []

    def where(self, *, filter):
        self.filters.append(filter)
        return self

    def order_by(self, field, direction=None):
        self.orders.append((field, direction))
        return self

    async def stream(self):
        for doc in self.docs:
            yield doc


class TestFirestoreRecordStore:
    @pytest.mark.asyncio
    async def test_user_profile(self):
        document = MagicMock()
        document.get = AsyncMock(
            return_value=_FakeDoc("u1", {"name": "Ada", "role": "teacher"})
        )
        client = MagicMock()
        client.collection.return_value.document.return_value = document

        profile = await FirestoreRecordStore(client=client).get_user_profile("u1")

        client.collection.assert_called_with("users")
        assert profile.id == "u1"
        assert profile.role == "teacher"

    @pytest.mark.asyncio
    async def test_missing_user_profile(self):
        document = MagicMock()
        document.get = AsyncMock(return_value=_FakeDoc("u1", None))
        client = MagicMock()
        client.collection.return_value.document.return_value = document

        assert await FirestoreRecordStore(client=client).get_user_profile("u1") is None

    @pytest.mark.asyncio
    async def test_student_submissions_query(self):
        query = _FakeQuery(
            [
                _FakeDoc(
                    "sub-1",
                    {
                        "studentId": "s1",
                        "assignmentId": "a1",
                        "status": "graded",
                        "grade": 80,
                    },
                )
            ]
        )
        client = MagicMock()
        client.collection.return_value = query

        [sub] = await FirestoreRecordStore(client=client).list_student_submissions(
            "s1"
        )

        client.collection.assert_called_with("submissions")
        assert sub.id == "sub-1"
        assert sub.grade == 80
        assert len(query.filters) == 1
        assert [field for field, _ in query.orders] == ["submittedAt"]

    @pytest.mark.asyncio
    async def test_assignments_ordered_by_due_date(self):
        query = _FakeQuery(
            [_FakeDoc("a1", {"title": "Essay", "dueDate": "2025-03-01", "totalPoints": 10})]
        )
        client = MagicMock()
        client.collection.return_value = query

        [assignment] = await FirestoreRecordStore(client=client).list_assignments()

        assert assignment.due_date == "2025-03-01"
        assert assignment.total_points == 10
        assert [field for field, _ in query.orders] == ["dueDate"]
