"""Funnel analysis tool.

Example:
    Ask Claude: "What share of signups go on to purchase?"
    Claude uses: analyze_funnel(events=[{"event_type": "signup"},
                                        {"event_type": "purchase"}], ...)
"""

from typing import Annotated

from fastmcp import Context
from fastmcp.tools.tool import ToolResult
from pydantic import Field

from amplitude_mcp._literal_types import FunnelMode
from amplitude_mcp.context import get_client
from amplitude_mcp.errors import handle_errors
from amplitude_mcp.formatters import summarize_funnel
from amplitude_mcp.server import mcp
from amplitude_mcp.tools import text_result
from amplitude_mcp.types import (
    DateString,
    EventWithFilters,
    FunnelRequest,
    SegmentCondition,
)


@mcp.tool
@handle_errors
async def analyze_funnel(
    ctx: Context,
    events: Annotated[list[EventWithFilters], Field(min_length=2, max_length=10)],
    start: DateString,
    end: DateString,
    mode: FunnelMode = "this order",
    conversion_window: Annotated[int | None, Field(ge=0)] = None,
    segment: list[SegmentCondition] | None = None,
    group_by: str | None = None,
) -> ToolResult:
    """Analyze conversion through a sequence of 2 to 10 events.

    Args:
        ctx: FastMCP context with API client access.
        events: Funnel steps in order, each with optional property filters.
        start: Start date (YYYYMMDD).
        end: End date (YYYYMMDD).
        mode: Step ordering ("this order", "any order", "exact order").
        conversion_window: Seconds a user has to complete the funnel.
        segment: User segment conditions restricting who is counted.
        group_by: Property to group conversion by.

    Returns:
        Per-step counts with overall and step-over-step conversion,
        followed by the raw response.
    """
    request = FunnelRequest(
        events=events,
        start=start,
        end=end,
        mode=mode,
        conversion_window=conversion_window,
        segment=segment,
        group_by=group_by,
    )
    payload = await get_client(ctx).analyze_funnel(request)
    return text_result(summarize_funnel(payload), payload)
