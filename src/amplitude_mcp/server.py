"""FastMCP server with lifespan pattern for Amplitude analytics.

This module defines the MCP server that exposes Amplitude queries, managing
one AmplitudeAPIClient through the server lifespan.

Includes middleware for:
- Audit logging (timing and outcomes)

Example:
    Run the server for Claude Desktop:

    ```python
    from amplitude_mcp.server import configure, mcp
    from amplitude_mcp._internal.config import resolve_settings

    configure(resolve_settings())
    mcp.run()
    ```
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from amplitude_mcp._internal.api_client import AmplitudeAPIClient
from amplitude_mcp._internal.config import Settings, resolve_settings

# Module-level settings (set by CLI before server starts)
_settings: Settings | None = None


def configure(settings: Settings | None) -> None:
    """Set the settings used when the lifespan creates the API client.

    Args:
        settings: Resolved settings, or None to resolve from the
            environment at startup.
    """
    global _settings
    _settings = settings


def get_settings() -> Settings | None:
    """Get the currently configured settings.

    Returns:
        The settings passed to configure(), or None.
    """
    return _settings


@asynccontextmanager
async def lifespan(_server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Manage the API client lifecycle for the MCP server session.

    Creates one AmplitudeAPIClient on startup and closes it on shutdown.
    The client is stored in the lifespan state and is accessible to all
    tools through ``amplitude_mcp.context``.

    Args:
        _server: The FastMCP server instance (unused, required by signature).

    Yields:
        Dict containing the client.

    Raises:
        ConfigError: If no settings were configured and the environment
            lacks credentials.
    """
    settings = get_settings() or resolve_settings()
    client = AmplitudeAPIClient(settings.credentials)

    try:
        yield {"client": client}
    finally:
        await client.aclose()


# Create the FastMCP server instance
mcp = FastMCP(
    name="amplitude",
    instructions="""Amplitude Analytics MCP Server

This server runs read-only queries against an Amplitude project.

Capabilities:
- Taxonomy: list event types, event properties and user properties
- Event Segmentation: event counts over time, with filters and breakdowns
- Funnels: step-by-step conversion between ordered events
- Retention: how many users come back after a starting event

Dates are YYYYMMDD. Use list_events first to find exact event names.
""",
    lifespan=lifespan,
)

# Imports happen here to avoid circular imports
from amplitude_mcp.middleware import create_audit_middleware  # noqa: E402

mcp.add_middleware(create_audit_middleware())

# Import tool modules to register them with the server
# These imports must happen after mcp is defined
from amplitude_mcp import prompts, resources  # noqa: E402, F401
# Registration order is the order tools are listed to clients
from amplitude_mcp.tools import taxonomy  # noqa: E402, F401, I001
from amplitude_mcp.tools import segmentation  # noqa: E402, F401
from amplitude_mcp.tools import funnel  # noqa: E402, F401
from amplitude_mcp.tools import retention  # noqa: E402, F401
