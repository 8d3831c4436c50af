"""CLI entry point for the MCP server.

Provides a command-line interface to run the Amplitude MCP server with
configurable credentials, region, transport, and port. Every credential
flag falls back to an environment variable.

Example:
    Run with credentials from the environment (stdio transport):

    ```bash
    export AMPLITUDE_API_KEY=... AMPLITUDE_SECRET_KEY=...
    amplitude-mcp
    ```

    Run against an EU-resident project with project prompts:

    ```bash
    amplitude-mcp --amplitude-region eu --project-dir ./analytics
    ```

    Run with SSE transport (HTTP Server-Sent Events):

    ```bash
    amplitude-mcp --transport sse --port 8000
    ```
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from amplitude_mcp._internal.config import (
    API_KEY_ENV,
    PROJECT_DIR_ENV,
    REGION_ENV,
    SECRET_KEY_ENV,
    VALID_REGIONS,
    resolve_settings,
)
from amplitude_mcp.exceptions import ConfigError
from amplitude_mcp.prompts import register_project_prompts
from amplitude_mcp.server import configure, mcp

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(args: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Command-line arguments to parse. Uses sys.argv if None.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="amplitude-mcp",
        description="MCP server for Amplitude analytics",
    )

    parser.add_argument(
        "--amplitude-api-key",
        type=str,
        default=None,
        help=f"Amplitude project API key (default: ${API_KEY_ENV})",
    )

    parser.add_argument(
        "--amplitude-secret-key",
        type=str,
        default=None,
        help=f"Amplitude project secret key (default: ${SECRET_KEY_ENV})",
    )

    parser.add_argument(
        "--amplitude-region",
        type=str.lower,
        default=None,
        choices=VALID_REGIONS,
        help=f"Data residency region (default: ${REGION_ENV} or 'us')",
    )

    parser.add_argument(
        "--project-dir",
        type=Path,
        default=None,
        help=(
            "Directory whose prompts/*.json files are registered as prompts "
            f"(default: ${PROJECT_DIR_ENV})"
        ),
    )

    parser.add_argument(
        "--transport",
        type=str,
        default="stdio",
        choices=["stdio", "sse"],
        help="Transport type (default: stdio). 'sse' uses HTTP Server-Sent Events.",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only used with --transport sse)",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr output (default: WARNING)",
    )

    return parser.parse_args(args)


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT)


def main() -> None:
    """Run the MCP server with configured options.

    Entry point for the `amplitude-mcp` command.

    Credentials are resolved before the server starts so that a missing key
    is reported immediately instead of on the first tool call.
    """
    args = parse_args()
    configure_logging(args.log_level)

    try:
        settings = resolve_settings(
            api_key=args.amplitude_api_key,
            secret_key=args.amplitude_secret_key,
            region=args.amplitude_region,
            project_dir=args.project_dir,
        )
    except ConfigError as e:
        sys.stderr.write(f"Error: {e.message}\n")
        sys.exit(1)

    configure(settings)
    register_project_prompts(mcp, settings.project_dir)

    # Run the server with the specified transport
    if args.transport == "sse":
        mcp.run(transport="sse", port=args.port)
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
