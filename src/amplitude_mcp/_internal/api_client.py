"""Amplitude Dashboard REST API client.

Low-level async HTTP client for the Amplitude analytics endpoints. Handles:
- Project authentication via HTTP Basic auth (API key / secret key)
- Regional endpoint routing (US, EU residency)
- Error message extraction from non-2xx responses

Every call issues exactly one GET request. There are no retries.

This is a private implementation detail. Tools reach the client through the
server lifespan context (see ``amplitude_mcp.context.get_client``).
"""

from __future__ import annotations

import base64
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from amplitude_mcp._internal.config import Credentials
from amplitude_mcp._internal.queries import (
    FUNNELS_PATH,
    RETENTION_PATH,
    SEGMENTATION_PATH,
    TAXONOMY_EVENT_PATH,
    TAXONOMY_EVENT_PROPERTY_PATH,
    TAXONOMY_USER_PROPERTY_PATH,
    QueryParams,
    build_event_property_params,
    build_funnel_params,
    build_retention_params,
    build_segmentation_params,
)
from amplitude_mcp.exceptions import APIError, ErrorReason, TransportError

if TYPE_CHECKING:
    from types import TracebackType

    from amplitude_mcp.types import (
        FunnelRequest,
        RetentionRequest,
        SegmentationRequest,
    )

logger = logging.getLogger(__name__)

# Regional base URLs of the Dashboard REST API
BASE_URLS: dict[str, str] = {
    "us": "https://amplitude.com/api/2",
    "eu": "https://analytics.eu.amplitude.com/api/2",
}

ERROR_PREFIX = "Amplitude API error"


def get_base_url(region: str | None) -> str:
    """Return the API base URL for a region.

    Args:
        region: "eu" selects the EU residency host; anything else, including
            None, selects the default host.

    Returns:
        Base URL without a trailing slash.
    """
    if region == "eu":
        return BASE_URLS["eu"]
    return BASE_URLS["us"]


def extract_error_message(text: str) -> tuple[str, ErrorReason]:
    """Derive an error message from a non-empty error response body.

    A JSON object body contributes its first truthy ``error``, ``message``
    or ``code`` field when that field is a string. Any other body is quoted
    verbatim.

    Args:
        text: Raw response body.

    Returns:
        Tuple of (message, reason) where reason is "json" or "text".

    Example:
        ```python
        extract_error_message('{"error": "rate limited"}')
        # ("Amplitude API error: rate limited", "json")
        ```
    """
    try:
        data = json.loads(text)
    except ValueError:
        return f"{ERROR_PREFIX}: {text}", "text"

    if isinstance(data, dict):
        value = data.get("error") or data.get("message") or data.get("code")
        if isinstance(value, str):
            return f"{ERROR_PREFIX}: {value}", "json"
    return f"{ERROR_PREFIX}: {text}", "text"


class AmplitudeAPIClient:
    """Low-level async HTTP client for the Amplitude Dashboard REST API.

    Example:
        ```python
        from amplitude_mcp._internal.config import resolve_settings
        from amplitude_mcp._internal.api_client import AmplitudeAPIClient

        settings = resolve_settings()

        async with AmplitudeAPIClient(settings.credentials) as client:
            events = await client.list_events()
            print(events["data"])
        ```
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        timeout: float = 120.0,
        _transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            credentials: Immutable authentication credentials.
            timeout: Request timeout in seconds.
            _transport: Internal parameter for testing with MockTransport.
        """
        self._credentials = credentials
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._transport = _transport

    @property
    def base_url(self) -> str:
        """Base URL for the configured region."""
        return get_base_url(self._credentials.region)

    def _get_auth_header(self) -> str:
        """Generate HTTP Basic auth header value.

        Returns:
            Base64-encoded "api_key:secret_key" prefixed with "Basic ".
        """
        secret = self._credentials.secret_key.get_secret_value()
        auth_string = f"{self._credentials.api_key}:{secret}"
        encoded = base64.b64encode(auth_string.encode()).decode()
        return f"Basic {encoded}"

    def _build_url(self, path: str) -> str:
        """Build the full URL for an endpoint path.

        Args:
            path: API endpoint path (e.g., "/funnels").

        Returns:
            Full URL for the endpoint.
        """
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized.

        Returns:
            The httpx.AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AmplitudeAPIClient:
        """Enter async context manager."""
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager, closing client."""
        await self.aclose()

    async def _error_from_response(
        self,
        response: httpx.Response,
        params: QueryParams | None,
    ) -> APIError:
        """Build an APIError from a non-2xx streamed response.

        Fallback order for the message:
        1. Body unreadable: "Amplitude API error: HTTP <status>: <phrase>"
        2. Body empty: "HTTP <status>: <phrase>"
        3. Body is JSON with a string error/message/code field: that field
        4. Otherwise: the raw body text

        Args:
            response: The unread streamed response.
            params: Query parameters that were sent.

        Returns:
            The APIError to raise.
        """
        status_line = f"HTTP {response.status_code}: {response.reason_phrase}"
        request_url = str(response.request.url)

        try:
            await response.aread()
            text = response.text
        except httpx.HTTPError as e:
            logger.warning(
                "Could not read error body (HTTP %d): %s", response.status_code, e
            )
            return APIError(
                f"{ERROR_PREFIX}: {status_line}",
                status_code=response.status_code,
                reason="status",
                request_url=request_url,
                request_params=params,
            )

        if not text:
            message, reason = status_line, "status"
        else:
            message, reason = extract_error_message(text)

        return APIError(
            message,
            status_code=response.status_code,
            reason=reason,
            response_body=text or None,
            request_url=request_url,
            request_params=params,
        )

    async def _request(self, path: str, params: QueryParams | None = None) -> Any:
        """Execute one GET request and return the decoded JSON body.

        Args:
            path: API endpoint path.
            params: Query parameters, in order (names may repeat).

        Returns:
            Parsed JSON response, unvalidated.

        Raises:
            APIError: Non-2xx response.
            TransportError: Network failure or a body that is not JSON.
        """
        client = self._ensure_client()
        url = self._build_url(path)
        headers = {
            "Authorization": self._get_auth_header(),
            "Content-Type": "application/json",
        }

        logger.debug("GET %s params=%s", url, params)
        try:
            async with client.stream(
                "GET", url, params=params, headers=headers
            ) as response:
                if not response.is_success:
                    raise await self._error_from_response(response, params)
                await response.aread()
                try:
                    return response.json()
                except ValueError as e:
                    raise TransportError(
                        f"Invalid JSON in response from {path}",
                        details={
                            "request_url": url,
                            "response_body": response.text[:500],
                        },
                    ) from e
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportError(
                f"Request to Amplitude failed: {type(e).__name__}: {e}",
                details={"request_url": url},
            ) from e

    # =========================================================================
    # Analysis endpoints
    # =========================================================================

    async def query_events(self, request: SegmentationRequest) -> Any:
        """Run an event segmentation query.

        Args:
            request: Validated segmentation request.

        Returns:
            Raw response: {"data": {"series", "seriesLabels", "xValues"}, ...}.
        """
        return await self._request(
            SEGMENTATION_PATH, build_segmentation_params(request)
        )

    async def analyze_funnel(self, request: FunnelRequest) -> Any:
        """Run a funnel query.

        Args:
            request: Validated funnel request.

        Returns:
            Raw funnel response.
        """
        return await self._request(FUNNELS_PATH, build_funnel_params(request))

    async def analyze_retention(self, request: RetentionRequest) -> Any:
        """Run a retention query.

        Args:
            request: Validated retention request.

        Returns:
            Raw retention response.
        """
        return await self._request(RETENTION_PATH, build_retention_params(request))

    # =========================================================================
    # Taxonomy endpoints
    # =========================================================================

    async def list_events(self) -> Any:
        """List event types in the project taxonomy."""
        return await self._request(TAXONOMY_EVENT_PATH)

    async def get_event_properties(self, event_type: str) -> Any:
        """List properties recorded for an event type.

        Args:
            event_type: Event name.
        """
        return await self._request(
            TAXONOMY_EVENT_PROPERTY_PATH, build_event_property_params(event_type)
        )

    async def list_user_properties(self) -> Any:
        """List user properties in the project taxonomy."""
        return await self._request(TAXONOMY_USER_PROPERTY_PATH)
