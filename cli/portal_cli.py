"""Main CLI loop for interactive chat."""

import logging
import sys
from typing import TextIO

from .client import APIError, ChatAPIClient
from .config import CLIConfig
from .formatter import ResponseFormatter

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q")
CMD_CLEAR = "/clear"
CMD_HISTORY = "/history"
CMD_REFRESH = "/refresh"


class PortalCLI:
    """Interactive CLI for the portal assistant API."""

    def __init__(
        self,
        config: CLIConfig,
        subject_id: str,
        role: str | None = None,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        client: ChatAPIClient | None = None,
    ):
        self.config = config
        self.subject_id = subject_id
        self.role = role
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.client = client or ChatAPIClient(config)
        self.formatter = ResponseFormatter(output_stream)
        self.session_id: str | None = None

    async def run(self) -> None:
        """Open a session and run the interactive loop until exit."""
        try:
            self._print_welcome()
            try:
                opened = await self.client.open_session(self.subject_id, self.role)
            except APIError as e:
                self.formatter.error(e.code, str(e), e.hint)
                return
            session_id = opened["session_id"]
            self.session_id = session_id
            self.formatter.context(opened["context"])

            while True:
                try:
                    line = self._get_user_input()
                except EOFError:
                    self._print("\nGoodbye!\n")
                    break
                except KeyboardInterrupt:
                    self._print("\n\nInterrupted. Use 'exit' or 'quit' to exit.\n")
                    continue

                if not line.strip():
                    continue
                if line.strip().lower() in EXIT_COMMANDS:
                    self._print("Goodbye!\n")
                    break

                await self._dispatch(session_id, line.strip())

            await self._close_session()
        finally:
            await self.client.close()

    async def _dispatch(self, session_id: str, line: str) -> None:
        try:
            if line == CMD_CLEAR:
                await self.client.clear_history(session_id)
                self._print("History cleared.\n")
            elif line == CMD_HISTORY:
                self.formatter.history(await self.client.history(session_id))
            elif line == CMD_REFRESH:
                self.formatter.context(
                    await self.client.refresh_context(session_id)
                )
            else:
                result = await self.client.send(session_id, line)
                self.formatter.reply(result["reply"])
        except APIError as e:
            logger.debug("Request failed: %s", e)
            self.formatter.error(e.code, str(e), e.hint)

    async def _close_session(self) -> None:
        if self.session_id is None:
            return
        try:
            await self.client.close_session(self.session_id)
        except APIError:
            logger.debug("Session %s already gone", self.session_id)

    def _get_user_input(self) -> str:
        self._print("> ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        self._print("Portal Assistant CLI\n")
        self._print(f"Connected to: {self.config.sessions_url}\n")
        self._print(
            f"Commands: {CMD_CLEAR}, {CMD_HISTORY}, {CMD_REFRESH}. "
            "Type 'exit' or 'quit' to exit.\n\n"
        )

    def _print(self, text: str) -> None:
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(
    subject_id: str,
    role: str | None = None,
    host: str = "localhost",
    port: int = 8000,
    api_path: str = "/api/v1/chat",
    debug: bool = False,
) -> None:
    """Main entry point for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    config = CLIConfig(host=host, port=port, api_path=api_path)
    await PortalCLI(config, subject_id, role).run()
