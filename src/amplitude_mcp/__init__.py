"""MCP server exposing Amplitude analytics queries to AI assistants.

This package provides an MCP (Model Context Protocol) server that turns tool
calls into Amplitude Dashboard REST API queries: taxonomy discovery, event
segmentation, funnels and retention.

Example:
    Run the server for Claude Desktop:

    ```bash
    AMPLITUDE_API_KEY=... AMPLITUDE_SECRET_KEY=... amplitude-mcp
    ```

    Run against an EU-resident project:

    ```bash
    amplitude-mcp --amplitude-region eu
    ```
"""

from amplitude_mcp._literal_types import (
    BreakdownType,
    FilterOperator,
    FunnelMode,
    Interval,
    Region,
    RetentionType,
    SegmentOperator,
    TimeRange,
)
from amplitude_mcp.server import mcp

__all__ = [
    "BreakdownType",
    "FilterOperator",
    "FunnelMode",
    "Interval",
    "Region",
    "RetentionType",
    "SegmentOperator",
    "TimeRange",
    "mcp",
]
__version__ = "0.1.0"
