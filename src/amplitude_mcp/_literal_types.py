"""Shared Literal type aliases for parameter validation.

These aliases double as the enumerated choices advertised in the MCP tool
input schemas, so changing one changes what agents are allowed to send.

Example:
    from amplitude_mcp import Interval

    def weekly(interval: Interval = "week") -> str:
        return interval
"""

from __future__ import annotations

from typing import Literal

# Data residency regions
Region = Literal["us", "eu"]

# Grouping interval for segmentation queries
Interval = Literal["day", "week", "month"]

# Comparison operators for event property filters
FilterOperator = Literal[
    "is", "is not", "contains", "does not contain", ">", "<", ">=", "<="
]

# Comparison operators for user segment conditions
SegmentOperator = Literal[
    "is",
    "is not",
    "contains",
    "does not contain",
    "less",
    "less or equal",
    "greater",
    "greater or equal",
    "set is",
    "set is not",
]

# Property scope for breakdowns
BreakdownType = Literal["event", "user"]

# Funnel ordering modes as presented to agents
FunnelMode = Literal["this order", "any order", "exact order"]

# Retention bucketing
RetentionType = Literal["bracket", "rolling"]

# Relative windows accepted by the guidance prompts
TimeRange = Literal["last_7_days", "last_30_days", "last_90_days"]

__all__ = [
    "BreakdownType",
    "FilterOperator",
    "FunnelMode",
    "Interval",
    "Region",
    "RetentionType",
    "SegmentOperator",
    "TimeRange",
]
