"""Internal implementation modules. Not part of the public API."""

from amplitude_mcp._internal.api_client import AmplitudeAPIClient
from amplitude_mcp._internal.config import Credentials, Settings, resolve_settings

__all__ = ["AmplitudeAPIClient", "Credentials", "Settings", "resolve_settings"]
