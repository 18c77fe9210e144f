"""Output formatting for the interactive CLI."""

from typing import TextIO

_ROLE_LABELS = {"user": "You", "assistant": "Assistant", "system": "System"}


class ResponseFormatter:
    """Renders API payloads for the terminal."""

    def __init__(self, output: TextIO):
        self.output = output

    def context(self, context: dict) -> None:
        """Describe the loaded record context, warning when it is degraded."""
        status = context.get("status", "unknown")
        self._print(
            f"Context: {context.get('role', '?')} | "
            f"{context.get('assignment_count', 0)} assignments, "
            f"{context.get('submission_count', 0)} submissions ({status})\n"
        )
        if status != "complete":
            self._print("⚠️  Some portal data could not be loaded:\n")
            for error in context.get("errors", []):
                self._print(f"   - {error}\n")

    def reply(self, text: str) -> None:
        self._print(f"\nAssistant:\n{text}\n\n")

    def history(self, turns: list[dict]) -> None:
        if not turns:
            self._print("(no messages)\n")
            return
        for turn in turns:
            label = _ROLE_LABELS.get(turn.get("role", ""), turn.get("role", "?"))
            self._print(f"{label}: {turn.get('content', '')}\n")

    def error(self, code: str, message: str, hint: str = "") -> None:
        self._print(f"\n❌ Error [{code}]: {message}\n")
        if hint:
            self._print(f"   {hint}\n")

    def _print(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()
