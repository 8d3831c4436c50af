"""Event segmentation tools.

Example:
    Ask Claude: "How many signups per day last week?"
    Claude uses: query_events(events=[{"event_type": "signup"}],
                              start="20240101", end="20240107")
"""

from typing import Annotated

from fastmcp import Context
from fastmcp.tools.tool import ToolResult
from pydantic import Field

from amplitude_mcp._literal_types import Interval
from amplitude_mcp.context import get_client
from amplitude_mcp.errors import handle_errors
from amplitude_mcp.server import mcp
from amplitude_mcp.tools import text_result
from amplitude_mcp.types import (
    Breakdown,
    DateString,
    EventSpec,
    EventWithFilters,
    SegmentationRequest,
)


@mcp.tool
@handle_errors
async def query_events(
    ctx: Context,
    events: Annotated[list[EventSpec], Field(min_length=1)],
    start: DateString,
    end: DateString,
    interval: Interval = "day",
) -> ToolResult:
    """Get event counts over a date range.

    Only the first event in the list is queried; pass one event per call.

    Args:
        ctx: FastMCP context with API client access.
        events: Events to count. Only the first one is sent.
        start: Start date (YYYYMMDD).
        end: End date (YYYYMMDD).
        interval: Grouping interval (day, week, month).

    Returns:
        Confirmation line followed by the raw series
        ({"data": {"series", "seriesLabels", "xValues"}}).
    """
    request = SegmentationRequest(
        events=[event.model_dump() for event in events],
        start=start,
        end=end,
        interval=interval,
    )
    payload = await get_client(ctx).query_events(request)
    return text_result("Event data retrieved successfully:", payload)


@mcp.tool
@handle_errors
async def segment_events(
    ctx: Context,
    events: Annotated[list[EventWithFilters], Field(min_length=1)],
    start: DateString,
    end: DateString,
    interval: Interval = "day",
    breakdowns: list[Breakdown] | None = None,
) -> ToolResult:
    """Get event counts filtered by property values and broken down by
    event or user properties.

    Only the first event in the list is queried; pass one event per call.

    Args:
        ctx: FastMCP context with API client access.
        events: Events with optional property filters. Only the first one
            is sent.
        start: Start date (YYYYMMDD).
        end: End date (YYYYMMDD).
        interval: Grouping interval (day, week, month).
        breakdowns: Properties to group results by.

    Returns:
        Confirmation line followed by the raw series, one series per
        breakdown value.

    Example:
        Ask: "Daily purchases from the US, split by platform"
        Uses: segment_events(
            events=[{"event_type": "purchase", "property_filters": [
                {"property_name": "country", "op": "is", "value": "US"}]}],
            start="20240101", end="20240131",
            breakdowns=[{"type": "event", "property_name": "platform"}])
    """
    request = SegmentationRequest(
        events=events,
        start=start,
        end=end,
        interval=interval,
        breakdowns=breakdowns,
    )
    payload = await get_client(ctx).query_events(request)
    return text_result("Segmented event data retrieved successfully:", payload)
