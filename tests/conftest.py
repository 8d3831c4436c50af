"""Shared fixtures for amplitude_mcp tests.

Tool and resource tests run against a real AmplitudeAPIClient backed by
``httpx.MockTransport``, placed in a mock FastMCP context the same way the
server lifespan would place it.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar
from unittest.mock import MagicMock

import httpx
import pytest
from hypothesis import Phase, Verbosity, settings
from pydantic import SecretStr

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.normal,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
    derandomize=True,
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
    report_multiple_bugs=False,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

if TYPE_CHECKING:
    from amplitude_mcp._internal.api_client import AmplitudeAPIClient
    from amplitude_mcp._internal.config import Credentials, Settings

Handler = Callable[[httpx.Request], httpx.Response]


# =============================================================================
# Credentials and settings
# =============================================================================


@pytest.fixture
def mock_credentials() -> Credentials:
    """Create credentials for API client testing."""
    from amplitude_mcp._internal.config import Credentials

    return Credentials(
        api_key="test_api_key",
        secret_key=SecretStr("test_secret_key"),
        region="us",
    )


@pytest.fixture
def mock_settings(mock_credentials: Credentials) -> Settings:
    """Create settings with no project directory."""
    from amplitude_mcp._internal.config import Settings

    return Settings(credentials=mock_credentials)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def mock_client_factory(
    mock_credentials: Credentials,
) -> Callable[[Handler], AmplitudeAPIClient]:
    """Factory for creating API clients over a mock transport.

    Usage:
        async def test_something(mock_client_factory):
            def handler(request):
                return httpx.Response(200, json={"data": []})

            async with mock_client_factory(handler) as client:
                result = await client.list_events()
    """
    from amplitude_mcp._internal.api_client import AmplitudeAPIClient

    def factory(handler: Handler) -> AmplitudeAPIClient:
        return AmplitudeAPIClient(
            mock_credentials, _transport=httpx.MockTransport(handler)
        )

    return factory


@pytest.fixture
def json_handler() -> Callable[..., Handler]:
    """Build a handler that records requests and answers with fixed JSON.

    Usage:
        requests = []
        handler = json_handler({"data": []}, requests=requests)
    """

    def build(
        body: Any,
        status_code: int = 200,
        requests: list[httpx.Request] | None = None,
    ) -> Handler:
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            return httpx.Response(status_code, json=body)

        return handler

    return build


@pytest.fixture
def context_factory(
    mock_client_factory: Callable[[Handler], AmplitudeAPIClient],
) -> Callable[[Handler], MagicMock]:
    """Create a mock FastMCP Context whose lifespan state holds a client.

    Returns:
        Factory taking a transport handler and returning the context.
    """

    def factory(handler: Handler) -> MagicMock:
        ctx = MagicMock()
        ctx.lifespan_context = {"client": mock_client_factory(handler)}
        return ctx

    return factory


# =============================================================================
# Registration Fixtures
# =============================================================================

T = TypeVar("T")


def _get_mcp_items(
    list_func: Callable[[], Awaitable[Sequence[T]]], extractor: Callable[[T], str]
) -> list[str]:
    """Run an async MCP list function and extract one string per item."""

    async def get_items() -> list[str]:
        items = await list_func()
        return [extractor(item) for item in items]

    return asyncio.run(get_items())


@pytest.fixture
def registered_tool_names() -> list[str]:
    """Names of all tools registered on the server, in listing order."""
    from amplitude_mcp.server import mcp

    return _get_mcp_items(mcp.list_tools, lambda t: t.name)


@pytest.fixture
def registered_resource_uris() -> list[str]:
    """URIs of the concrete resources registered on the server."""
    from amplitude_mcp.server import mcp

    return _get_mcp_items(mcp.list_resources, lambda r: str(r.uri))


@pytest.fixture
def registered_resource_template_uris() -> list[str]:
    """URI templates registered on the server."""
    from amplitude_mcp.server import mcp

    return _get_mcp_items(mcp.list_resource_templates, lambda t: str(t.uri_template))


@pytest.fixture
def registered_prompt_names() -> list[str]:
    """Names of all prompts registered on the server."""
    from amplitude_mcp.server import mcp

    return _get_mcp_items(mcp.list_prompts, lambda p: p.name)


@pytest.fixture
def registered_tool_parameters() -> dict[str, dict[str, Any]]:
    """Advertised input schema of each registered tool, keyed by name."""
    from amplitude_mcp.server import mcp

    async def get_parameters() -> dict[str, dict[str, Any]]:
        return {tool.name: tool.parameters for tool in await mcp.list_tools()}

    return asyncio.run(get_parameters())
