from __future__ import annotations

import json
from pathlib import Path

import pytest

from expense_tracker.config import (
    DEFAULT_OUTPUTS_PATH,
    OUTPUTS_ENV,
    TrackerSettings,
    load_outputs,
    load_settings,
    parse_outputs,
    resolve_outputs_path,
)
from expense_tracker.errors import ConfigurationError

OUTPUTS = {
    "version": "1",
    "auth": {
        "url": "https://api.example.test/",
        "user_pool_id": "pool-1",
        "user_pool_client_id": "desktop",
    },
    "data": {"url": "https://api.example.test", "authorization_types": ["USER_POOL"]},
}


def _write(tmp_path: Path, payload: object, name: str = "outputs.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_outputs_normalises_urls(tmp_path: Path) -> None:
    outputs = load_outputs(_write(tmp_path, OUTPUTS))
    assert outputs.auth.url == "https://api.example.test"
    assert outputs.auth.user_pool_id == "pool-1"
    assert outputs.data.models == ("Expense",)


def test_missing_outputs_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_outputs(tmp_path / "absent.json")


def test_malformed_outputs_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="not valid JSON"):
        load_outputs(path)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"auth": OUTPUTS["auth"]},
        {**OUTPUTS, "version": "9"},
        {**OUTPUTS, "data": {"url": "ftp://nope"}},
        {**OUTPUTS, "auth": {**OUTPUTS["auth"], "user_pool_id": ""}},
    ],
)
def test_invalid_outputs_rejected(payload: object) -> None:
    with pytest.raises(ConfigurationError):
        parse_outputs(payload)


def test_resolve_outputs_path_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = TrackerSettings(outputs_path="from-settings.json")
    assert resolve_outputs_path() == DEFAULT_OUTPUTS_PATH
    assert resolve_outputs_path(None, settings) == Path("from-settings.json")
    monkeypatch.setenv(OUTPUTS_ENV, "from-env.json")
    assert resolve_outputs_path(None, settings) == Path("from-env.json")
    assert resolve_outputs_path("explicit.json", settings) == Path("explicit.json")


def test_load_settings_defaults_and_overrides(tmp_path: Path) -> None:
    assert load_settings(None) == TrackerSettings()
    path = tmp_path / "settings.yaml"
    path.write_text("poll_interval_ms: 500\nremember_session: false\nlog_level: debug\n", encoding="utf-8")
    settings = load_settings(path)
    assert settings.poll_interval_ms == 500
    assert settings.remember_session is False
    assert settings.log_level == "DEBUG"


def test_load_settings_rejects_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("poll_every: 5\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="poll_every"):
        load_settings(path)


def test_settings_reject_non_positive_values() -> None:
    with pytest.raises(ConfigurationError):
        TrackerSettings(poll_interval_ms=0)
    with pytest.raises(ConfigurationError):
        TrackerSettings(request_timeout=-1)
