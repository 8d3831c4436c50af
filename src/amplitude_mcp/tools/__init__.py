"""MCP tools for Amplitude analytics.

This package contains tool implementations organized by category:

- taxonomy: Event type, event property and user property discovery
- segmentation: Event counts over time, with filters and breakdowns
- funnel: Step-by-step conversion analysis
- retention: Returning-user analysis
"""

from typing import Any

from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from amplitude_mcp.formatters import format_json


def text_result(summary: str, payload: Any = None) -> ToolResult:
    """Build a tool result from a summary and the raw response.

    Args:
        summary: Human-readable digest shown first.
        payload: Raw response, rendered as pretty-printed JSON in a second
            block. Omitted when None.

    Returns:
        ToolResult with one or two text content blocks.
    """
    content = [TextContent(type="text", text=summary)]
    if payload is not None:
        content.append(TextContent(type="text", text=format_json(payload)))
    return ToolResult(content=content)
