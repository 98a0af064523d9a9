"""Loading of the deployment outputs document and the optional settings file.

The outputs document is produced by the backend provisioning step
(``tracker-backend outputs``) and tells the client where the data API and the
user pool live. The settings file is a small YAML document with knobs for the
desktop client. Both are read once by :func:`expense_tracker.bootstrap.initialize`.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from expense_tracker.errors import ConfigurationError

OUTPUTS_ENV: Final[str] = "TRACKER_OUTPUTS"
DEFAULT_OUTPUTS_PATH: Final[Path] = Path("tracker_outputs.json")
SUPPORTED_VERSIONS: Final[frozenset[str]] = frozenset({"1"})

# Access modes accepted by ``generate_client`` and the outputs value they require.
AUTH_MODES: Final[dict[str, str]] = {"userPool": "USER_POOL"}


def _require_http_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"expected an http(s) URL, got {value!r}")
    return value.rstrip("/")


class AuthOutputs(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    url: str
    user_pool_id: str = Field(..., min_length=1)
    user_pool_client_id: str = Field(..., min_length=1)

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _require_http_url(value)


class DataOutputs(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    url: str
    default_authorization_type: str = "USER_POOL"
    authorization_types: tuple[str, ...] = ("USER_POOL",)
    models: tuple[str, ...] = ("Expense",)

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _require_http_url(value)


class BackendOutputs(BaseModel):
    """Validated view of the outputs document."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    version: str = "1"
    auth: AuthOutputs
    data: DataOutputs

    @field_validator("version")
    @classmethod
    def known_version(cls, value: str) -> str:
        if value not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported outputs version {value!r}")
        return value


@dataclass(slots=True, frozen=True)
class TrackerSettings:
    """Client-side knobs; every field has a usable default."""

    outputs_path: str | None = None
    poll_interval_ms: int = 2000
    request_timeout: float = 5.0
    remember_session: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.poll_interval_ms <= 0:
            raise ConfigurationError("poll_interval_ms must be positive")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")


def resolve_outputs_path(path: Path | str | None = None, settings: TrackerSettings | None = None) -> Path:
    """Explicit argument first, then the environment, then the settings, then the default."""

    if path is not None:
        return Path(path)
    env_value = os.environ.get(OUTPUTS_ENV)
    if env_value:
        return Path(env_value)
    if settings is not None and settings.outputs_path:
        return Path(settings.outputs_path)
    return DEFAULT_OUTPUTS_PATH


def parse_outputs(payload: Any) -> BackendOutputs:
    if not isinstance(payload, dict):
        raise ConfigurationError("Outputs document must be a JSON object")
    try:
        return BackendOutputs.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid outputs document: {exc}") from exc


def load_outputs(path: Path | str) -> BackendOutputs:
    """Read and validate the outputs document at ``path``."""

    location = Path(path)
    try:
        with location.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Outputs document not found: {location}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Outputs document {location} is not valid JSON: {exc}") from exc
    return parse_outputs(payload)


def load_settings(path: Path | str | None = None) -> TrackerSettings:
    """Read the optional YAML settings file; ``None`` returns the defaults."""

    if path is None:
        return TrackerSettings()
    location = Path(path)
    try:
        with location.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Settings file not found: {location}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Settings file {location} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must contain a mapping")

    known = {item.name for item in fields(TrackerSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")
    try:
        return TrackerSettings(
            outputs_path=data.get("outputs_path"),
            poll_interval_ms=int(data.get("poll_interval_ms", 2000)),
            request_timeout=float(data.get("request_timeout", 5.0)),
            remember_session=bool(data.get("remember_session", True)),
            log_level=str(data.get("log_level", "INFO")).upper(),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid settings value: {exc}") from exc


__all__ = [
    "AUTH_MODES",
    "AuthOutputs",
    "BackendOutputs",
    "DataOutputs",
    "TrackerSettings",
    "load_outputs",
    "load_settings",
    "parse_outputs",
    "resolve_outputs_path",
]
