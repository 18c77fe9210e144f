"""Context summarizer — renders a snapshot as the prompt's context block.

Pure and deterministic: the same snapshot always yields the same text.
The snapshot's role picks the branch; a student summary never mentions
other students' work and a teacher summary only covers assignments the
teacher created.
"""

from collections import defaultdict

from portal_assistant.core.models import (
    ROLE_STUDENT,
    AssignmentRecord,
    SubmissionRecord,
)

from .snapshot import ContextSnapshot

STUDENT_HEADER = "[STUDENT CONTEXT]"
TEACHER_HEADER = "[TEACHER CONTEXT]"
UNKNOWN_TITLE = "Unknown"
TRUNCATION_MARKER = "...(context truncated)"

DEFAULT_MAX_CONTEXT_CHARS = 4000


def _num(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _grade_label(sub: SubmissionRecord, assignment: AssignmentRecord | None) -> str:
    if sub.grade is None:
        return "Pending"
    total = _num(assignment.total_points) if assignment is not None else "?"
    return f"{_num(sub.grade)}/{total}"


def _student_lines(snapshot: ContextSnapshot) -> list[str]:
    by_id = {a.id: a for a in snapshot.assignments}
    submitted_ids = {s.assignment_id for s in snapshot.submissions}
    pending = sum(1 for a in snapshot.assignments if a.id not in submitted_ids)

    lines = [STUDENT_HEADER, f"Pending Assignments: {pending}"]

    entries = []
    for sub in snapshot.submissions:
        assignment = by_id.get(sub.assignment_id)
        title = assignment.title if assignment is not None else UNKNOWN_TITLE
        entries.append(f"- {title} (Grade: {_grade_label(sub, assignment)})")
    if entries:
        lines.append(f"Submitted/Graded: {', '.join(entries)}")
    return lines


def _teacher_lines(snapshot: ContextSnapshot) -> list[str]:
    owned = [a for a in snapshot.assignments if a.created_by == snapshot.subject_id]
    submissions = snapshot.submissions
    pending_grading = sum(1 for s in submissions if not s.is_graded)

    lines = [
        TEACHER_HEADER,
        f"Total Assignments Created: {len(owned)}",
        f"Total Submissions: {len(submissions)}",
        f"Pending Grading: {pending_grading}",
    ]

    grouped: dict[str, list[SubmissionRecord]] = defaultdict(list)
    for sub in submissions:
        grouped[sub.assignment_id].append(sub)

    if owned:
        lines += ["", "Assignments:"]
        for assignment in owned:
            subs = grouped.get(assignment.id, [])
            graded = sum(1 for s in subs if s.is_graded)
            lines.append(
                f'- "{assignment.title}" (ID: {assignment.id}): '
                f"{len(subs)} submissions, {graded} graded"
            )

    if submissions:
        titles = {a.id: a.title for a in owned}
        lines += ["", "Submissions Summary:"]
        for assignment_id, subs in grouped.items():
            graded = sum(1 for s in subs if s.is_graded)
            title = titles.get(assignment_id, UNKNOWN_TITLE)
            lines.append(
                f'- "{title}": {len(subs)} submissions '
                f"({graded} graded, {len(subs) - graded} pending)"
            )
    return lines


def truncate_context(text: str, max_chars: int) -> str:
    """Cut *text* to at most *max_chars*, preferring a line boundary.

    A truncated result ends with ``TRUNCATION_MARKER``.
    """
    if len(text) <= max_chars:
        return text
    if max_chars <= len(TRUNCATION_MARKER) + 1:
        return text[: max(max_chars, 0)]

    budget = max_chars - len(TRUNCATION_MARKER) - 1
    head = text[:budget]
    cut = head.rfind("\n")
    if cut > 0:
        head = head[:cut]
    return f"{head}\n{TRUNCATION_MARKER}"


def summarize_context(
    snapshot: ContextSnapshot, max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
) -> str:
    """Render *snapshot* as the context block appended to the system prompt.

    The block starts with a newline so it can be concatenated directly
    onto the persona preamble.
    """
    if snapshot.role == ROLE_STUDENT:
        lines = _student_lines(snapshot)
    else:
        lines = _teacher_lines(snapshot)
    body = "\n".join(lines) + "\n"
    return "\n" + truncate_context(body, max_chars - 1)


def build_system_prompt(
    preamble: str,
    snapshot: ContextSnapshot,
    max_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
) -> str:
    """Persona preamble followed by the summarized record context."""
    return preamble + summarize_context(snapshot, max_chars)
