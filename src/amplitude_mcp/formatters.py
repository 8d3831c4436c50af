"""Human-readable summaries of Amplitude API responses.

Each tool returns two text blocks: a short markdown digest produced here and
the raw payload pretty-printed as JSON. The digests only read the typed
views in ``amplitude_mcp.types``; the raw payload is never modified.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from amplitude_mcp.exceptions import TransportError
from amplitude_mcp.types import (
    FunnelResponse,
    FunnelStep,
    TaxonomyEvent,
    TaxonomyProperty,
    TaxonomyResponse,
)

M = TypeVar("M", bound=BaseModel)

EVENT_PROPERTY_ENUM_LIMIT = 10
USER_PROPERTY_ENUM_LIMIT = 5


def parse_response(model: type[M], payload: Any) -> M:
    """Validate a raw payload against a response model.

    Args:
        model: Response model class.
        payload: Decoded JSON body.

    Returns:
        The typed view of the payload.

    Raises:
        TransportError: If the payload does not have the expected shape.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise TransportError(
            f"Unexpected response shape for {model.__name__}",
            details={"errors": e.errors(include_url=False, include_input=False)},
        ) from e


def format_json(payload: Any) -> str:
    """Pretty-print a payload with two-space indentation."""
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def format_count(value: int | float) -> str:
    """Render a count without a trailing ".0" for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def last_n_days(days: int) -> tuple[str, str]:
    """Return (start, end) YYYYMMDD strings for the last N days, in UTC.

    Example:
        ```python
        last_n_days(7)  # ("20240101", "20240108") when run on 2024-01-08
        ```
    """
    today = datetime.now(timezone.utc).date()
    start = today - timedelta(days=days)
    return start.strftime("%Y%m%d"), today.strftime("%Y%m%d")


# =============================================================================
# Taxonomy
# =============================================================================


def active_events(data: Sequence[dict[str, Any]]) -> list[TaxonomyEvent]:
    """Drop deleted and hidden events and sort by volume, highest first.

    Events without totals sort as zero; ties keep API order.
    """
    events = [parse_response(TaxonomyEvent, item) for item in data]
    return sorted(
        (e for e in events if e.is_active),
        key=lambda e: e.totals or 0,
        reverse=True,
    )


def summarize_events(data: Sequence[dict[str, Any]]) -> str:
    """Render the event-type listing.

    Args:
        data: The ``data`` list of a ``/taxonomy/event`` response.

    Returns:
        Markdown bullet list, one line per active event.

    Example:
        ```python
        summarize_events([{"value": "login", "totals": 10}])
        # 'Found 1 active event types (sorted by volume):\\n\\n- **login** (10 total)\\n'
        ```
    """
    events = active_events(data)
    lines = [f"Found {len(events)} active event types (sorted by volume):\n\n"]
    for event in events:
        line = f"- **{event.event_type}**"
        if event.display_name != event.event_type:
            line += f' - "{event.display_name}"'
        if event.totals is not None:
            line += f" ({format_count(event.totals)} total)"
        lines.append(line + "\n")
    return "".join(lines)


def _summarize_property(prop: TaxonomyProperty, enum_limit: int) -> str:
    line = f"- **{prop.display_name}** ({prop.display_type})"
    if prop.is_enum and prop.enum_values:
        shown = ", ".join(str(v) for v in prop.enum_values[:enum_limit])
        more = "..." if len(prop.enum_values) > enum_limit else ""
        line += f" - values: {shown}{more}"
    line += "\n"
    if prop.description:
        line += f"  {prop.description}\n"
    return line


def summarize_properties(
    header: str,
    data: Sequence[dict[str, Any]],
    enum_limit: int,
) -> str:
    """Render a property listing under a header.

    Args:
        header: First line of the summary.
        data: The ``data`` list of a taxonomy property response.
        enum_limit: How many enum values to show per property.

    Returns:
        Markdown bullet list, one entry per property.
    """
    props = [parse_response(TaxonomyProperty, item) for item in data]
    body = "".join(_summarize_property(p, enum_limit) for p in props)
    return f"{header}\n\n{body}"


def summarize_event_properties(event_type: str, data: Sequence[dict[str, Any]]) -> str:
    """Render the properties of one event type (first 10 enum values)."""
    return summarize_properties(
        f'Properties for "{event_type}":', data, EVENT_PROPERTY_ENUM_LIMIT
    )


def summarize_user_properties(data: Sequence[dict[str, Any]]) -> str:
    """Render the user property listing (first 5 enum values)."""
    return summarize_properties(
        f"Found {len(data)} user properties:", data, USER_PROPERTY_ENUM_LIMIT
    )


def taxonomy_data(payload: Any) -> list[dict[str, Any]]:
    """Return the ``data`` list of a taxonomy response, empty when absent."""
    return parse_response(TaxonomyResponse, payload).data or []


# =============================================================================
# Funnels
# =============================================================================


def _rate(numerator: int | float, denominator: int | float) -> str:
    if denominator > 0:
        return f"{numerator / denominator * 100:.1f}"
    return "0"


def funnel_steps(series: Sequence[int | float]) -> list[FunnelStep]:
    """Compute conversion rates for each funnel step.

    Overall rate compares each step with the first; step rate compares it
    with the previous one. The first step's step rate is measured against
    itself, so it is "100.0" (or "0" when nobody entered the funnel).

    Args:
        series: User counts per step, in funnel order.

    Returns:
        One FunnelStep per count.

    Example:
        ```python
        [s.step_rate for s in funnel_steps([100, 50, 25])]
        # ["100.0", "50.0", "50.0"]
        ```
    """
    steps: list[FunnelStep] = []
    for i, count in enumerate(series):
        previous = series[i - 1] if i > 0 else count
        steps.append(
            FunnelStep(
                step=i + 1,
                count=count,
                overall_rate=_rate(count, series[0]),
                step_rate=_rate(count, previous),
            )
        )
    return steps


def summarize_funnel(payload: Any) -> str:
    """Render per-step conversion for a funnel response.

    Responses without a flat numeric ``data.series`` yield the header only.
    """
    response = parse_response(FunnelResponse, payload)
    summary = "Funnel Analysis Results:\n"
    if response.data is None or response.data.series is None:
        return summary
    for step in funnel_steps(response.data.series):
        summary += (
            f"Step {step.step}: {format_count(step.count)} users "
            f"({step.overall_rate}% overall, {step.step_rate}% from prev)\n"
        )
    return summary
