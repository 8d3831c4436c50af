"""Error handling for MCP tools.

This module provides a decorator for converting amplitude_mcp exceptions
to FastMCP ToolError with appropriate messages and actionable guidance.
FastMCP returns a ToolError to the client as a normal result flagged with
``isError``, so a failing tool never surfaces as a protocol-level fault.

Example:
    ```python
    @mcp.tool
    @handle_errors
    async def list_events(ctx: Context) -> ToolResult:
        client = get_client(ctx)
        return text_result("...", await client.list_events())
    ```
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from fastmcp.exceptions import ToolError
from pydantic import ValidationError

from amplitude_mcp.exceptions import (
    AmplitudeMCPError,
    APIError,
    ConfigError,
    QueryValidationError,
    TransportError,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def format_rich_error(
    summary: str,
    error: AmplitudeMCPError,
    suggestions: list[str] | None = None,
) -> str:
    """Format error with structured details for agent parsing.

    Creates an error message with three parts:
    1. Human-readable summary line
    2. JSON block with full error details (parseable by agents)
    3. Actionable suggestions

    Args:
        summary: Human-readable summary line.
        error: The exception with to_dict() method.
        suggestions: Optional list of actionable suggestions.

    Returns:
        Formatted error message with embedded JSON.
    """
    lines = [summary, ""]

    lines.append("Error Details:")
    lines.append(json.dumps(error.to_dict(), indent=2, default=str))

    if suggestions:
        lines.append("")
        lines.append("Suggestions:")
        for suggestion in suggestions:
            lines.append(f"- {suggestion}")

    return "\n".join(lines)


def _api_error_suggestions(e: APIError) -> list[str]:
    if e.status_code in (401, 403):
        return [
            "Check AMPLITUDE_API_KEY and AMPLITUDE_SECRET_KEY",
            "Verify AMPLITUDE_REGION matches the project's data residency",
        ]
    if e.status_code == 429:
        return ["Wait before retrying; Amplitude limits concurrent queries"]
    if e.status_code >= 500:
        return ["This may be a transient issue - try again in a few moments"]
    return [
        "Check query parameters for typos or invalid values",
        "Verify event and property names with list_events/list_event_properties",
    ]


def _validation_error(e: ValidationError) -> QueryValidationError:
    errors = [
        {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
        for err in e.errors(include_url=False)
    ]
    return QueryValidationError(
        f"Invalid arguments: {e.error_count()} validation error(s)", errors=errors
    )


def _handle_exception(e: Exception) -> None:
    """Handle an exception and convert it to ToolError.

    Args:
        e: The exception to handle.

    Raises:
        ToolError: Always raises with appropriate formatting.
    """
    if isinstance(e, ToolError):
        raise e

    if isinstance(e, ValidationError | QueryValidationError):
        error = _validation_error(e) if isinstance(e, ValidationError) else e
        logger.info("Validation error: %s", error.errors)
        suggestions = [
            "Dates must be YYYYMMDD",
            "Funnels need between 2 and 10 events",
        ]
        raise ToolError(format_rich_error(error.message, error, suggestions)) from e

    if isinstance(e, APIError):
        logger.warning(
            "Amplitude API error: status_code=%s reason=%s", e.status_code, e.reason
        )
        raise ToolError(
            format_rich_error(e.message, e, _api_error_suggestions(e))
        ) from e

    if isinstance(e, TransportError):
        logger.warning("Transport error: %s", e)
        suggestions = [
            "Check network connectivity to the Amplitude API host",
            "Try again; no partial results were produced",
        ]
        raise ToolError(format_rich_error(e.message, e, suggestions)) from e

    if isinstance(e, ConfigError):
        logger.warning("Config error: %s", e)
        suggestions = [
            "Set AMPLITUDE_API_KEY and AMPLITUDE_SECRET_KEY, "
            "or pass --amplitude-api-key/--amplitude-secret-key",
        ]
        raise ToolError(format_rich_error(e.message, e, suggestions)) from e

    if isinstance(e, AmplitudeMCPError):
        logger.warning("Unhandled AmplitudeMCPError: %s", e)
        raise ToolError(format_rich_error(f"Amplitude error: {e}", e)) from e

    logger.exception("Unexpected error in tool")
    error_details = {
        "code": "UNEXPECTED_ERROR",
        "type": type(e).__name__,
        "message": str(e),
    }
    raise ToolError(
        f"Unexpected error: {type(e).__name__}: {e}\n\n"
        "Error Details:\n"
        f"{json.dumps(error_details, indent=2)}"
    ) from e


def handle_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to convert exceptions to FastMCP ToolError.

    Supports both synchronous and asynchronous functions.

    Args:
        func: The tool function to wrap.

    Returns:
        The wrapped function that converts exceptions.
    """
    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await cast(Coroutine[Any, Any, R], func(*args, **kwargs))
            except Exception as e:
                _handle_exception(e)
                raise  # Should not reach here, but satisfies type checker

        return cast(Callable[P, R], async_wrapper)

    @wraps(func)
    def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _handle_exception(e)
            raise  # Should not reach here, but satisfies type checker

    return cast(Callable[P, R], sync_wrapper)
