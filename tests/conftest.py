"""Shared fixtures: portal records, stores and a scripted completion endpoint."""

import json
from collections.abc import Callable

import httpx
import pytest

from portal_assistant.configs.system import LLMConfig
from portal_assistant.core.models import (
    AssignmentRecord,
    SubmissionRecord,
    UserProfile,
)
from portal_assistant.infra.store import InMemoryRecordStore

TEST_ENDPOINT = "https://llm.test/v1/chat/completions"
TEST_API_KEY = "test-key"


def completion_body(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def make_assignment(
    id: str, title: str, *, due: str = "2025-03-01", points: int = 100, by: str = "t1"
) -> AssignmentRecord:
    return AssignmentRecord(
        id=id, title=title, due_date=due, total_points=points, created_by=by
    )


def make_submission(
    id: str,
    assignment_id: str,
    *,
    student: str = "s1",
    grade: int | None = None,
    submitted_at: str | None = None,
) -> SubmissionRecord:
    return SubmissionRecord(
        id=id,
        student_id=student,
        assignment_id=assignment_id,
        status="graded" if grade is not None else "submitted",
        grade=grade,
        submitted_at=submitted_at,
    )


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(api_key=TEST_API_KEY, endpoint=TEST_ENDPOINT)


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    """Two teachers, two students, three assignments."""
    return InMemoryRecordStore(
        users=[
            UserProfile(id="t1", name="Ada", role="teacher"),
            UserProfile(id="t2", name="Grace", role="teacher"),
            UserProfile(id="s1", name="Sam", role="student"),
            UserProfile(id="s2", name="Kim", role="student"),
        ],
        assignments=[
            make_assignment("a1", "Essay", due="2025-03-01", points=100, by="t1"),
            make_assignment("a2", "Lab", due="2025-03-15", points=50, by="t1"),
            make_assignment("a3", "Quiz", due="2025-02-01", points=20, by="t2"),
        ],
        submissions=[
            make_submission(
                "sub1", "a1", student="s1", grade=90,
                submitted_at="2025-02-27T10:00:00Z",
            ),
            make_submission(
                "sub2", "a2", student="s1", submitted_at="2025-03-10T10:00:00Z"
            ),
            make_submission(
                "sub3", "a1", student="s2", submitted_at="2025-02-28T10:00:00Z"
            ),
        ],
    )


class ScriptedEndpoint:
    """Records every completion request and answers with a canned response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []
        self.respond = respond or (lambda _: httpx.Response(200, json=completion_body("ok")))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def endpoint() -> ScriptedEndpoint:
    return ScriptedEndpoint()
