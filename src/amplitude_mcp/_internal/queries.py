"""Query builders for the Amplitude Dashboard REST API.

Pure functions that turn validated request models into the query-string
parameters of a single GET request. Parameters are returned as an ordered
list of ``(name, value)`` pairs because the funnel endpoint takes one ``e``
parameter per step.

Several parameters are themselves JSON documents (event objects, segment
conditions). They are encoded compactly, without whitespace.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from amplitude_mcp.types import (
    Breakdown,
    EventWithFilters,
    FunnelRequest,
    PropertyFilter,
    RetentionEvent,
    RetentionRequest,
    SegmentationRequest,
    SegmentCondition,
)

logger = logging.getLogger(__name__)

QueryParams = list[tuple[str, str]]

SEGMENTATION_PATH = "/events/segmentation"
FUNNELS_PATH = "/funnels"
RETENTION_PATH = "/retention"
TAXONOMY_EVENT_PATH = "/taxonomy/event"
TAXONOMY_EVENT_PROPERTY_PATH = "/taxonomy/event-property"
TAXONOMY_USER_PROPERTY_PATH = "/taxonomy/user-property"

INTERVAL_CODES: dict[str, str] = {
    "day": "1",
    "week": "7",
    "month": "30",
}

FUNNEL_MODE_CODES: dict[str, str] = {
    "this order": "ordered",
    "any order": "unordered",
    "exact order": "sequential",
}


def encode_json(value: Any) -> str:
    """Encode a query-string JSON document without whitespace."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def interval_code(interval: str) -> str:
    """Map an interval token to the numeric code the API expects.

    Args:
        interval: "day", "week", "month", or an already-numeric token.

    Returns:
        "1", "7" or "30" for the named intervals; any other token unchanged.
    """
    return INTERVAL_CODES.get(interval, interval)


def to_remote_filter(prop_filter: PropertyFilter) -> dict[str, Any]:
    """Convert a property filter to the API's ``subprop`` shape.

    Scalar values are wrapped in a one-element list; list values are sent
    as given.
    """
    value = prop_filter.value
    return {
        "subprop_type": "event",
        "subprop_key": prop_filter.property_name,
        "subprop_op": prop_filter.op,
        "subprop_value": list(value) if isinstance(value, list) else [value],
    }


def to_remote_group_by(breakdowns: Sequence[Breakdown]) -> list[dict[str, str]]:
    """Convert breakdowns to ``group_by`` entries."""
    return [{"type": b.type, "value": b.property_name} for b in breakdowns]


def to_remote_segment(segment: Sequence[SegmentCondition]) -> list[dict[str, Any]]:
    """Convert segment conditions to the API's segment definition."""
    return [{"prop": c.prop, "op": c.op, "values": list(c.values)} for c in segment]


def build_event_object(
    event_type: str,
    filters: Sequence[PropertyFilter] | None = None,
    breakdowns: Sequence[Breakdown] | None = None,
) -> dict[str, Any]:
    """Build the JSON event object shared by all analysis endpoints.

    Empty filter and breakdown lists are omitted from the object.
    """
    event: dict[str, Any] = {"event_type": event_type}
    if filters:
        event["filters"] = [to_remote_filter(f) for f in filters]
    if breakdowns:
        event["group_by"] = to_remote_group_by(breakdowns)
    return event


def _optional_params(
    segment: Sequence[SegmentCondition] | None,
    group_by: str | None,
) -> QueryParams:
    params: QueryParams = []
    if segment:
        params.append(("s", encode_json(to_remote_segment(segment))))
    if group_by:
        params.append(("g", group_by))
    return params


def build_segmentation_params(request: SegmentationRequest) -> QueryParams:
    """Build parameters for ``/events/segmentation``.

    Only ``request.events[0]`` is queried; breakdowns are attached to that
    event as ``group_by``.

    Args:
        request: Validated segmentation request.

    Returns:
        Parameters ``e``, ``start``, ``end`` and, when an interval is set, ``i``.
    """
    if len(request.events) > 1:
        logger.warning(
            "Segmentation queries only the first event; ignoring %d more: %s",
            len(request.events) - 1,
            ", ".join(e.event_type for e in request.events[1:]),
        )
    first: EventWithFilters = request.events[0]
    event = build_event_object(
        first.event_type,
        filters=first.property_filters,
        breakdowns=request.breakdowns,
    )
    params: QueryParams = [
        ("e", encode_json(event)),
        ("start", request.start),
        ("end", request.end),
    ]
    if request.interval:
        params.append(("i", interval_code(request.interval)))
    return params


def build_funnel_params(request: FunnelRequest) -> QueryParams:
    """Build parameters for ``/funnels``.

    Every step becomes its own ``e`` parameter, in funnel order.

    Args:
        request: Validated funnel request.

    Returns:
        Parameters ``e`` (repeated), ``start``, ``end``, ``mode`` and, when
        set, ``cs`` (conversion window seconds), ``s`` and ``g``.
    """
    params: QueryParams = [
        ("e", encode_json(build_event_object(e.event_type, e.property_filters)))
        for e in request.events
    ]
    params.append(("start", request.start))
    params.append(("end", request.end))
    params.append(("mode", FUNNEL_MODE_CODES[request.mode]))
    if request.conversion_window is not None:
        params.append(("cs", str(request.conversion_window)))
    params.extend(_optional_params(request.segment, request.group_by))
    return params


def _retention_event(event: RetentionEvent) -> str:
    return encode_json(build_event_object(event.event_type, event.filters))


def build_retention_params(request: RetentionRequest) -> QueryParams:
    """Build parameters for ``/retention``.

    Args:
        request: Validated retention request.

    Returns:
        Parameters ``se``, ``re``, ``start``, ``end``, ``rm`` and, when set,
        ``s`` and ``g``.
    """
    params: QueryParams = [
        ("se", _retention_event(request.start_event)),
        ("re", _retention_event(request.return_event)),
        ("start", request.start),
        ("end", request.end),
        ("rm", request.retention_type),
    ]
    params.extend(_optional_params(request.segment, request.group_by))
    return params


def build_event_property_params(event_type: str) -> QueryParams:
    """Build parameters for ``/taxonomy/event-property``."""
    return [("event_type", event_type)]
