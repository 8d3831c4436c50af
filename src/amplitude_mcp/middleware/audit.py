"""Audit logging middleware for the Amplitude MCP server.

Records every tool call and resource read with its arguments, elapsed time
and outcome. Expected failures (a ``ToolError`` carrying an Amplitude error
envelope) are logged at WARNING; anything else at ERROR.

Example:
    ```python
    from amplitude_mcp.middleware.audit import create_audit_middleware

    mcp.add_middleware(create_audit_middleware())
    ```
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import mcp.types as mt
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult

logger = logging.getLogger("amplitude_mcp.audit")


@dataclass
class AuditConfig:
    """Configuration for audit logging.

    Attributes:
        log_level: Logging level for successful calls.
        include_params: Whether to include tool arguments in logs.
        include_results: Whether to include the summary block in logs.
        max_param_length: Maximum length of each logged argument value.
        max_result_length: Maximum length of the logged summary.
    """

    log_level: int = logging.INFO
    include_params: bool = True
    include_results: bool = False
    max_param_length: int = 200
    max_result_length: int = 500


def truncate(value: str, max_length: int) -> str:
    """Shorten a string to ``max_length`` characters, ending with "..."."""
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class AuditMiddleware(Middleware):
    """Log tool invocations and resource reads with timing and outcome.

    Example:
        ```python
        mcp.add_middleware(AuditMiddleware(AuditConfig(include_results=True)))
        ```
    """

    def __init__(self, config: AuditConfig | None = None) -> None:
        self.config = config or AuditConfig()

    def _format_params(self, params: dict[str, Any]) -> str:
        if not self.config.include_params:
            return "(params hidden)"
        parts = [
            f"{key}={truncate(str(value), self.config.max_param_length)}"
            for key, value in params.items()
        ]
        return "{" + ", ".join(parts) + "}"

    def _format_result(self, result: ToolResult) -> str:
        """Return the first text block of a result, truncated.

        Tool results lead with a human-readable summary; the raw payload
        that follows is never logged.
        """
        for block in result.content:
            if isinstance(block, mt.TextContent):
                return truncate(block.text, self.config.max_result_length)
        return f"({len(result.content)} content blocks)"

    def _log_failure(self, kind: str, name: str, elapsed_ms: float, e: Exception) -> None:
        if isinstance(e, ToolError):
            # First line of the envelope is the summary.
            summary = str(e).split("\n", 1)[0]
            logger.warning("%s failed: %s (%.1fms) - %s", kind, name, elapsed_ms, summary)
        else:
            logger.error(
                "%s failed: %s (%.1fms) - %s: %s",
                kind,
                name,
                elapsed_ms,
                type(e).__name__,
                e,
            )

    async def on_call_tool(
        self,
        context: MiddlewareContext[mt.CallToolRequestParams],
        call_next: CallNext[mt.CallToolRequestParams, ToolResult],
    ) -> ToolResult:
        """Log a tool call, then pass it on unchanged.

        Args:
            context: The middleware context with request information.
            call_next: Function to call the next middleware or tool.

        Returns:
            The result from the tool execution.
        """
        tool_name = context.message.name
        logger.log(
            self.config.log_level,
            "Tool invoked: %s %s",
            tool_name,
            self._format_params(context.message.arguments or {}),
        )

        start_time = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            self._log_failure("Tool", tool_name, (time.perf_counter() - start_time) * 1000, e)
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if self.config.include_results:
            logger.log(
                self.config.log_level,
                "Tool completed: %s (%.1fms) -> %s",
                tool_name,
                elapsed_ms,
                self._format_result(result),
            )
        else:
            logger.log(
                self.config.log_level,
                "Tool completed: %s (%.1fms)",
                tool_name,
                elapsed_ms,
            )
        return result

    async def on_read_resource(
        self,
        context: MiddlewareContext[mt.ReadResourceRequestParams],
        call_next: CallNext[mt.ReadResourceRequestParams, Any],
    ) -> Any:
        """Log a resource read, then pass it on unchanged."""
        uri = str(context.message.uri)
        logger.log(self.config.log_level, "Resource read: %s", uri)

        start_time = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            self._log_failure("Resource", uri, (time.perf_counter() - start_time) * 1000, e)
            raise

        logger.log(
            self.config.log_level,
            "Resource completed: %s (%.1fms)",
            uri,
            (time.perf_counter() - start_time) * 1000,
        )
        return result


def create_audit_middleware(
    log_level: int = logging.INFO,
    include_params: bool = True,
    include_results: bool = False,
) -> AuditMiddleware:
    """Create a configured audit logging middleware.

    Args:
        log_level: Logging level for successful calls. Default INFO.
        include_params: Whether to include tool arguments. Default True.
        include_results: Whether to include the summary block. Default False.

    Returns:
        A configured AuditMiddleware instance.
    """
    return AuditMiddleware(
        AuditConfig(
            log_level=log_level,
            include_params=include_params,
            include_results=include_results,
        )
    )
