"""Retention analysis tool."""

from fastmcp import Context
from fastmcp.tools.tool import ToolResult

from amplitude_mcp._literal_types import RetentionType
from amplitude_mcp.context import get_client
from amplitude_mcp.errors import handle_errors
from amplitude_mcp.server import mcp
from amplitude_mcp.tools import text_result
from amplitude_mcp.types import (
    DateString,
    RetentionEvent,
    RetentionRequest,
    SegmentCondition,
)


@mcp.tool
@handle_errors
async def analyze_retention(
    ctx: Context,
    start_event: RetentionEvent,
    return_event: RetentionEvent,
    start: DateString,
    end: DateString,
    retention_type: RetentionType = "bracket",
    segment: list[SegmentCondition] | None = None,
    group_by: str | None = None,
) -> ToolResult:
    """Analyze how many users come back after a starting event.

    Args:
        ctx: FastMCP context with API client access.
        start_event: Event that puts a user into a cohort.
        return_event: Event that counts as the user returning.
        start: Start date (YYYYMMDD).
        end: End date (YYYYMMDD).
        retention_type: "bracket" or "rolling" retention.
        segment: User segment conditions restricting who is counted.
        group_by: Property to group retention by.

    Returns:
        Confirmation line followed by the raw retention response.

    Example:
        Ask: "Do users who sign up come back to view content?"
        Uses: analyze_retention(start_event={"event_type": "signup"},
                                return_event={"event_type": "view"},
                                start="20240101", end="20240131")
    """
    request = RetentionRequest(
        start_event=start_event,
        return_event=return_event,
        start=start,
        end=end,
        retention_type=retention_type,
        segment=segment,
        group_by=group_by,
    )
    payload = await get_client(ctx).analyze_retention(request)
    return text_result("Retention Analysis Results:", payload)
