"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys

from .portal_cli import main


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive CLI for the portal assistant API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--subject-id",
        required=True,
        help="Portal user id (student or teacher) to chat as",
    )
    parser.add_argument(
        "--role",
        choices=("student", "teacher"),
        default=None,
        help="Role override (default: read from the user profile)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Server port (default: 8000)",
    )
    parser.add_argument(
        "--api-path",
        type=str,
        default="/api/v1/chat",
        help="API path prefix (default: /api/v1/chat)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args()


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    try:
        asyncio.run(
            main(
                subject_id=args.subject_id,
                role=args.role,
                host=args.host,
                port=args.port,
                api_path=args.api_path,
                debug=args.debug,
            )
        )
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
