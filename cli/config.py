"""Configuration management for the CLI tool."""

from pydantic import BaseModel, Field


class CLIConfig(BaseModel):
    """CLI configuration settings."""

    host: str = Field(default="localhost", description="Server host")
    port: int = Field(default=8000, description="Server port")
    api_path: str = Field(
        default="/api/v1/chat",
        description="API path prefix of the chat endpoints",
    )
    timeout: float = Field(
        default=120.0, description="HTTP timeout in seconds for one request"
    )

    @property
    def base_url(self) -> str:
        """Get the base URL for the API."""
        return f"http://{self.host}:{self.port}"

    @property
    def sessions_url(self) -> str:
        """Get the full URL of the sessions collection."""
        return f"{self.base_url}{self.api_path}/sessions"

    def session_url(self, session_id: str) -> str:
        return f"{self.sessions_url}/{session_id}"
