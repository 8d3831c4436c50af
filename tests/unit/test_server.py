"""Tests for FastMCP server configuration and lifespan.

These tests verify the server is correctly configured with name, instructions,
registered capabilities, and lifespan management of the API client.
"""

import json
from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from amplitude_mcp._internal.config import Settings
from amplitude_mcp.exceptions import ConfigError


@pytest.fixture
def reset_settings() -> Iterator[None]:
    """Restore the module-level settings after each test."""
    from amplitude_mcp import server

    previous = server.get_settings()
    yield
    server.configure(previous)


class TestServerConfiguration:
    """Tests for server metadata and configuration."""

    def test_server_has_name(self) -> None:
        """Server should have a descriptive name for MCP clients."""
        from amplitude_mcp.server import mcp

        assert mcp.name == "amplitude"

    def test_server_has_instructions(self) -> None:
        """Server should have instructions describing its capabilities."""
        from amplitude_mcp.server import mcp

        assert mcp.instructions is not None
        assert "Amplitude" in mcp.instructions

    def test_tools_listed_in_order(self, registered_tool_names: list[str]) -> None:
        """All seven tools should be registered in their listing order."""
        assert registered_tool_names == [
            "list_events",
            "list_event_properties",
            "list_user_properties",
            "query_events",
            "segment_events",
            "analyze_funnel",
            "analyze_retention",
        ]

    def test_event_list_bounds_advertised(
        self, registered_tool_parameters: dict[str, dict[str, Any]]
    ) -> None:
        """Event count limits should be part of the advertised schemas."""
        funnel = registered_tool_parameters["analyze_funnel"]["properties"]
        assert funnel["events"]["minItems"] == 2
        assert funnel["events"]["maxItems"] == 10
        assert '"minimum": 0' in json.dumps(funnel["conversion_window"])

        for name in ("query_events", "segment_events"):
            events = registered_tool_parameters[name]["properties"]["events"]
            assert events["minItems"] == 1

    @pytest.mark.usefixtures("reset_settings")
    def test_configure_round_trip(self, mock_settings: Settings) -> None:
        """configure() should store settings for the lifespan."""
        from amplitude_mcp.server import configure, get_settings

        configure(mock_settings)
        assert get_settings() is mock_settings
        configure(None)
        assert get_settings() is None


@pytest.mark.usefixtures("reset_settings")
class TestLifespan:
    """Tests for server lifespan management."""

    @pytest.mark.asyncio
    async def test_lifespan_creates_client(self, mock_settings: Settings) -> None:
        """Lifespan should create one client from the configured credentials."""
        from amplitude_mcp.server import configure, lifespan, mcp

        configure(mock_settings)
        with patch("amplitude_mcp.server.AmplitudeAPIClient") as mock_client_cls:
            mock_client_cls.return_value = MagicMock(aclose=AsyncMock())

            async with lifespan(mcp) as state:
                assert state == {"client": mock_client_cls.return_value}

            mock_client_cls.assert_called_once_with(mock_settings.credentials)

    @pytest.mark.asyncio
    async def test_lifespan_closes_client(self, mock_settings: Settings) -> None:
        """Lifespan should close the client on shutdown."""
        from amplitude_mcp.server import configure, lifespan, mcp

        configure(mock_settings)
        with patch("amplitude_mcp.server.AmplitudeAPIClient") as mock_client_cls:
            mock_client = MagicMock(aclose=AsyncMock())
            mock_client_cls.return_value = mock_client

            async with lifespan(mcp):
                pass

            mock_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lifespan_closes_client_on_error(
        self, mock_settings: Settings
    ) -> None:
        """Lifespan should close the client even if the session fails."""
        from amplitude_mcp.server import configure, lifespan, mcp

        configure(mock_settings)
        with patch("amplitude_mcp.server.AmplitudeAPIClient") as mock_client_cls:
            mock_client = MagicMock(aclose=AsyncMock())
            mock_client_cls.return_value = mock_client

            with pytest.raises(RuntimeError):
                async with lifespan(mcp):
                    raise RuntimeError("session failed")

            mock_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lifespan_resolves_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without configured settings, lifespan should fail fast on missing keys."""
        from amplitude_mcp.server import configure, lifespan, mcp

        configure(None)
        monkeypatch.delenv("AMPLITUDE_API_KEY", raising=False)
        monkeypatch.delenv("AMPLITUDE_SECRET_KEY", raising=False)

        with pytest.raises(ConfigError):
            async with lifespan(mcp):
                pass
