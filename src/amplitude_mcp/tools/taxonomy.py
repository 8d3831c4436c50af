"""Taxonomy discovery tools.

These tools answer "what is tracked in this project?" and are usually the
first calls an agent makes: event and property names must match exactly in
every other query.

Example:
    Ask Claude: "What events do we track?"
    Claude uses: list_events()
"""

from fastmcp import Context
from fastmcp.tools.tool import ToolResult

from amplitude_mcp.context import get_client
from amplitude_mcp.errors import handle_errors
from amplitude_mcp.formatters import (
    summarize_event_properties,
    summarize_events,
    summarize_user_properties,
    taxonomy_data,
)
from amplitude_mcp.server import mcp
from amplitude_mcp.tools import text_result


@mcp.tool
@handle_errors
async def list_events(ctx: Context) -> ToolResult:
    """List all active event types in the Amplitude project.

    Deleted and hidden events are left out. Events are sorted by volume,
    highest first.

    Args:
        ctx: FastMCP context with API client access.

    Returns:
        Markdown summary of event types, followed by the raw data list.
    """
    client = get_client(ctx)
    payload = await client.list_events()
    data = taxonomy_data(payload)
    if not data:
        return text_result("No events found in this Amplitude project.")
    return text_result(summarize_events(data), data)


@mcp.tool
@handle_errors
async def list_event_properties(ctx: Context, event_type: str) -> ToolResult:
    """List the properties recorded for one event type.

    Args:
        ctx: FastMCP context with API client access.
        event_type: Exact event name, as returned by list_events.

    Returns:
        Markdown summary of properties (type, first enum values,
        description), followed by the raw data list.

    Example:
        Ask: "What properties does the signup event have?"
        Uses: list_event_properties(event_type="signup")
    """
    client = get_client(ctx)
    payload = await client.get_event_properties(event_type)
    data = taxonomy_data(payload)
    if not data:
        return text_result(
            f'No properties found for event "{event_type}". '
            "Try checking if the event name is correct using list_events first."
        )
    return text_result(summarize_event_properties(event_type, data), data)


@mcp.tool
@handle_errors
async def list_user_properties(ctx: Context) -> ToolResult:
    """List the user properties defined in the Amplitude project.

    Args:
        ctx: FastMCP context with API client access.

    Returns:
        Markdown summary of user properties, followed by the raw data list.
    """
    client = get_client(ctx)
    payload = await client.list_user_properties()
    data = taxonomy_data(payload)
    if not data:
        return text_result("No user properties found.")
    return text_result(summarize_user_properties(data), data)
