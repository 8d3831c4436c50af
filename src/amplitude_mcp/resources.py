"""MCP resources for reading Amplitude event data by address.

One resource template runs a basic single-event segmentation query:

- amplitude://events/{event_type}/{start}/{end} - daily counts for an event

Three concrete example resources are advertised so clients can discover the
address format without reading documentation. Their date ranges are fixed
when the server starts.

Failures are not raised. A resource read always returns a JSON body; on
failure the body is ``{"error": <message>, "uri": <requested uri>}``.

Example:
    MCP clients can read amplitude://events/signup/20240101/20240131 to get
    daily signup counts for January without making a tool call.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec

from fastmcp import Context
from pydantic import ValidationError

from amplitude_mcp.context import get_client
from amplitude_mcp.exceptions import AmplitudeMCPError, QueryValidationError
from amplitude_mcp.formatters import last_n_days
from amplitude_mcp.server import mcp
from amplitude_mcp.types import SegmentationRequest

logger = logging.getLogger(__name__)

P = ParamSpec("P")

EVENTS_URI_TEMPLATE = "amplitude://events/{event_type}/{start}/{end}"


def error_body(message: str, uri: str) -> str:
    """Render the JSON body returned by a failed resource read."""
    return json.dumps({"error": message, "uri": uri}, indent=2)


def handle_resource_errors(
    uri_template: str,
) -> Callable[[Callable[P, Awaitable[str]]], Callable[P, Awaitable[str]]]:
    """Decorator to turn resource failures into a JSON error body.

    The requested URI is rebuilt from the keyword arguments FastMCP passes
    for the template parameters.

    Args:
        uri_template: The resource's URI template.

    Returns:
        Decorator for an async resource function.

    Example:
        ```python
        @handle_resource_errors(EVENTS_URI_TEMPLATE)
        async def read_events(
            event_type: str, start: str, end: str, ctx: Context
        ) -> str:
            ...
        ```
    """

    def decorator(func: Callable[P, Awaitable[str]]) -> Callable[P, Awaitable[str]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> str:
            try:
                return await func(*args, **kwargs)
            except (AmplitudeMCPError, ValidationError) as e:
                uri = _format_uri(uri_template, kwargs)
                logger.warning("Resource error for %s: %s", uri, e)
                return error_body(_describe(e), uri)
            except Exception as e:
                uri = _format_uri(uri_template, kwargs)
                logger.exception("Unexpected resource error for %s", uri)
                return error_body(f"Unexpected error: {type(e).__name__}: {e}", uri)

        return wrapper

    return decorator


def _format_uri(uri_template: str, params: dict[str, Any]) -> str:
    values = {k: v for k, v in params.items() if isinstance(v, str)}
    for name in ("event_type", "start", "end"):
        values.setdefault(name, "")
    return uri_template.format(**values)


def _describe(e: AmplitudeMCPError | ValidationError) -> str:
    if isinstance(e, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors(include_url=False)
        )
    return e.message


@handle_resource_errors(EVENTS_URI_TEMPLATE)
async def read_events(event_type: str, start: str, end: str, ctx: Context) -> str:
    """Daily counts for one event type over a date range.

    Args:
        event_type: Event name.
        start: Start date (YYYYMMDD).
        end: End date (YYYYMMDD).
        ctx: FastMCP context with API client access.

    Returns:
        JSON string with the raw segmentation response.
    """
    if not event_type or not start or not end:
        raise QueryValidationError(
            f"Missing required parameters. Format: {EVENTS_URI_TEMPLATE}"
        )

    request = SegmentationRequest(
        events=[{"event_type": event_type}],
        start=start,
        end=end,
    )
    payload = await get_client(ctx).query_events(request)
    return json.dumps(payload, indent=2, ensure_ascii=False)


mcp.resource(
    EVENTS_URI_TEMPLATE,
    name="amplitude_events",
    description="Daily counts for one event type over a date range",
    mime_type="application/json",
)(read_events)


# =============================================================================
# Example resources
# =============================================================================

EXAMPLE_RESOURCES: list[tuple[str, str, str, int]] = [
    ("_active", "Active Events - Last 7 Days", "All active events from the last 7 days", 7),
    ("_all", "All Events - Last 7 Days", "All tracked events from the last 7 days", 7),
    ("_active", "Active Events - Last 30 Days", "All active events from the last 30 days", 30),
]


def _register_example(event_type: str, name: str, description: str, days: int) -> str:
    start, end = last_n_days(days)
    uri = EVENTS_URI_TEMPLATE.format(event_type=event_type, start=start, end=end)

    async def example_resource(ctx: Context) -> str:
        return await read_events(
            event_type=event_type, start=start, end=end, ctx=ctx
        )

    mcp.resource(
        uri,
        name=name,
        description=description,
        mime_type="application/json",
    )(example_resource)
    return uri


EXAMPLE_URIS = [_register_example(*example) for example in EXAMPLE_RESOURCES]
