"""Exception hierarchy for amplitude_mcp.

All package exceptions inherit from AmplitudeMCPError, so callers can catch
every failure with a single except clause and still branch on the specific
type when needed. Each exception serializes to a JSON-friendly dict through
``to_dict()``, which the tool error envelope embeds for agents to parse.
"""

from __future__ import annotations

from typing import Any, Literal

ErrorReason = Literal["json", "text", "status"]
"""Where an API error message came from.

Values:
    - json: A string ``error``/``message``/``code`` field of a JSON body
    - text: The raw response body
    - status: The HTTP status line (empty or unreadable body)
"""


class AmplitudeMCPError(Exception):
    """Base exception for all amplitude_mcp errors.

    All package exceptions inherit from this class, allowing callers to:
    - Catch all package errors: except AmplitudeMCPError
    - Handle specific errors: except APIError
    - Serialize errors: error.to_dict()
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code for programmatic handling.
            details: Additional structured data about the error.
        """
        super().__init__(message)
        self._message = message
        self._code = code
        self._details = details or {}

    @property
    def code(self) -> str:
        """Machine-readable error code."""
        return self._code

    @property
    def message(self) -> str:
        """Human-readable error message."""
        return self._message

    @property
    def details(self) -> dict[str, Any]:
        """Additional structured error data."""
        return self._details

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/JSON output.

        Returns:
            Dictionary with keys: code, message, details.
        """
        return {
            "code": self._code,
            "message": self._message,
            "details": self._details,
        }

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self._message

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return (
            f"{self.__class__.__name__}(message={self._message!r}, code={self._code!r})"
        )


class ConfigError(AmplitudeMCPError):
    """Credentials or settings could not be resolved at startup.

    Fatal for the server process. The message names which setting is
    missing or invalid, never the secret values themselves.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Human-readable error message.
            details: Additional structured data.
        """
        super().__init__(message, code="CONFIG_ERROR", details=details)

    @property
    def missing(self) -> list[str]:
        """Names of the settings that were missing, if any."""
        missing = self._details.get("missing")
        return missing if isinstance(missing, list) else []


class QueryValidationError(AmplitudeMCPError):
    """A query request failed schema validation before any network call."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize QueryValidationError.

        Args:
            message: Human-readable error message.
            errors: Per-field validation errors (location, message).
        """
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"errors": errors or []},
        )

    @property
    def errors(self) -> list[dict[str, Any]]:
        """Per-field validation errors."""
        errors = self._details.get("errors")
        return errors if isinstance(errors, list) else []


class APIError(AmplitudeMCPError):
    """The Amplitude API answered with a non-2xx status.

    The message is derived from the response body with a fixed fallback
    order, recorded in ``reason`` so callers can branch without re-parsing
    the message text.

    Example:
        ```python
        try:
            await client.analyze_funnel(request)
        except APIError as e:
            if e.reason == "json":
                print(e.message)  # "Amplitude API error: rate limited"
        ```
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        reason: ErrorReason,
        response_body: str | None = None,
        request_url: str | None = None,
        request_params: list[tuple[str, str]] | None = None,
    ) -> None:
        """Initialize APIError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from response.
            reason: Which fallback level produced the message.
            response_body: Raw response text, when it could be read.
            request_url: Full request URL.
            request_params: Query parameters sent.
        """
        self._status_code = status_code
        self._reason: ErrorReason = reason
        self._response_body = response_body
        self._request_url = request_url
        self._request_params = request_params

        details: dict[str, Any] = {
            "status_code": status_code,
            "reason": reason,
        }
        if response_body:
            details["response_body"] = response_body[:500]
        if request_url is not None:
            details["request_url"] = request_url
        if request_params is not None:
            details["request_params"] = [list(p) for p in request_params]

        super().__init__(message, code="API_ERROR", details=details)

    @property
    def status_code(self) -> int:
        """HTTP status code from response."""
        return self._status_code

    @property
    def reason(self) -> ErrorReason:
        """Which fallback level produced the message."""
        return self._reason

    @property
    def response_body(self) -> str | None:
        """Raw response text."""
        return self._response_body

    @property
    def request_url(self) -> str | None:
        """Full request URL."""
        return self._request_url

    @property
    def request_params(self) -> list[tuple[str, str]] | None:
        """Query parameters sent."""
        return self._request_params


class TransportError(AmplitudeMCPError):
    """The request could not be completed or its body could not be decoded.

    Covers connection failures, timeouts and successful responses whose
    body is not valid JSON or does not have the expected shape.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize TransportError.

        Args:
            message: Human-readable error message.
            details: Additional structured data.
        """
        super().__init__(message, code="TRANSPORT_ERROR", details=details)
