"""Context helpers for accessing MCP server state.

This module provides utility functions for extracting the API client from
the FastMCP context object. The client is created once by the server
lifespan and is read-only afterwards.

Example:
    ```python
    @mcp.tool
    async def list_events(ctx: Context) -> ToolResult:
        client = get_client(ctx)
        payload = await client.list_events()
        ...
    ```
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastmcp import Context

from amplitude_mcp._internal.api_client import AmplitudeAPIClient


def _lifespan_state(ctx: "Context", key: str) -> object:
    # FastMCP 3.0 uses public lifespan_context property
    lifespan_state = ctx.lifespan_context

    if lifespan_state is None or key not in lifespan_state:
        raise RuntimeError(
            f"Server state '{key}' not initialized. "
            "Ensure the server is running with the lifespan context."
        )
    return lifespan_state[key]


def get_client(ctx: "Context") -> AmplitudeAPIClient:
    """Extract the Amplitude API client from the FastMCP context.

    Args:
        ctx: The FastMCP Context injected into tool functions.

    Returns:
        The AmplitudeAPIClient created by the server lifespan.

    Raises:
        RuntimeError: If the client is not initialized (lifespan not running).
    """
    client = _lifespan_state(ctx, "client")
    if not isinstance(client, AmplitudeAPIClient):
        raise RuntimeError("Server state 'client' is not an AmplitudeAPIClient")
    return client

