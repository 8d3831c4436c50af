"""Configuration management for amplitude_mcp.

Resolves the API credentials, region and optional project directory once at
startup. Each value comes from an explicit argument (a CLI flag) when given,
otherwise from the environment, otherwise from its default.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from amplitude_mcp._literal_types import Region
from amplitude_mcp.exceptions import ConfigError

logger = logging.getLogger(__name__)

VALID_REGIONS = ("us", "eu")
DEFAULT_REGION: Region = "us"

API_KEY_ENV = "AMPLITUDE_API_KEY"
SECRET_KEY_ENV = "AMPLITUDE_SECRET_KEY"
REGION_ENV = "AMPLITUDE_REGION"
PROJECT_DIR_ENV = "AMPLITUDE_PROJECT_DIR"


class Credentials(BaseModel):
    """Immutable credentials for Amplitude API authentication.

    This is a frozen Pydantic model that ensures:
    - All fields are validated on construction
    - The secret key is never exposed in repr/str output
    - The object cannot be modified after creation
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    """Project API key (Basic auth username)."""

    secret_key: SecretStr
    """Project secret key (Basic auth password, redacted in output)."""

    region: Region = DEFAULT_REGION
    """Data residency region (us or eu)."""

    @field_validator("region", mode="before")
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate and normalize region to lowercase."""
        if not isinstance(v, str):
            raise ValueError(f"Region must be a string. Got: {type(v).__name__}")
        v_lower = v.lower()
        if v_lower not in VALID_REGIONS:
            valid = ", ".join(VALID_REGIONS)
            raise ValueError(f"Region must be one of: {valid}. Got: {v}")
        return v_lower

    @field_validator("api_key")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Validate the API key is non-empty."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("secret_key")
    @classmethod
    def validate_secret_non_empty(cls, v: SecretStr) -> SecretStr:
        """Validate the secret key is non-empty."""
        if not v.get_secret_value().strip():
            raise ValueError("Field cannot be empty")
        return v

    def __repr__(self) -> str:
        """Return string representation with redacted secret."""
        return (
            f"Credentials(api_key={self.api_key!r}, secret_key=***, "
            f"region={self.region!r})"
        )

    def __str__(self) -> str:
        """Return string representation with redacted secret."""
        return self.__repr__()


@dataclass(frozen=True)
class Settings:
    """Process-wide server settings, resolved once at startup."""

    credentials: Credentials
    """API credentials and region."""

    project_dir: Path | None = None
    """Directory holding a ``prompts/`` folder of project prompt files."""


def _first(*values: str | None) -> str | None:
    """Return the first non-blank value, treating "" as absent."""
    for value in values:
        if value and value.strip():
            return value
    return None


def resolve_settings(
    *,
    api_key: str | None = None,
    secret_key: str | None = None,
    region: str | None = None,
    project_dir: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve settings from explicit values and the environment.

    Resolution order for every setting:
    1. Explicit argument (CLI flag)
    2. Environment variable (AMPLITUDE_API_KEY, AMPLITUDE_SECRET_KEY,
       AMPLITUDE_REGION, AMPLITUDE_PROJECT_DIR)
    3. Default (region "us", no project directory)

    Args:
        api_key: API key from the command line.
        secret_key: Secret key from the command line.
        region: Region from the command line.
        project_dir: Project directory from the command line.
        environ: Environment to read. Defaults to ``os.environ``.

    Returns:
        Immutable Settings object.

    Raises:
        ConfigError: If the API key or secret key is missing, or the
            region is not one of us/eu.
    """
    env = os.environ if environ is None else environ

    resolved_key = _first(api_key, env.get(API_KEY_ENV))
    resolved_secret = _first(secret_key, env.get(SECRET_KEY_ENV))

    missing: list[str] = []
    if resolved_key is None:
        missing.append(f"API key (--amplitude-api-key or {API_KEY_ENV})")
    if resolved_secret is None:
        missing.append(f"secret key (--amplitude-secret-key or {SECRET_KEY_ENV})")
    if missing:
        logger.error("Amplitude credentials missing: %s", ", ".join(missing))
        raise ConfigError(
            "Amplitude API credentials not provided. Missing: " + ", ".join(missing),
            details={"missing": missing},
        )

    resolved_region = _first(region, env.get(REGION_ENV)) or DEFAULT_REGION
    if resolved_region.lower() not in VALID_REGIONS:
        raise ConfigError(
            f"Invalid region: '{resolved_region}'. Must be 'us' or 'eu'.",
            details={"region": resolved_region},
        )

    dir_value = _first(
        str(project_dir) if project_dir is not None else None,
        env.get(PROJECT_DIR_ENV),
    )

    credentials = Credentials(
        api_key=cast(str, resolved_key),
        secret_key=SecretStr(cast(str, resolved_secret)),
        region=cast(Region, resolved_region.lower()),
    )
    return Settings(
        credentials=credentials,
        project_dir=Path(dir_value).expanduser() if dir_value else None,
    )
