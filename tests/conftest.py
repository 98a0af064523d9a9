"""Shared pytest configuration for the expense tracker client tests."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest


def _insert_repo_root() -> None:
    """Make sure the repository root is importable."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()
os.environ.setdefault("TRACKER_DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import backend.models  # noqa: F401,E402  # register tables on the metadata
from backend import database  # noqa: E402
from backend.server import app, build_outputs  # noqa: E402
from expense_tracker.config import BackendOutputs  # noqa: E402

BASE_URL = "http://testserver"


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    """Show diagnostic context for the test run."""

    log_level = os.environ.get("TRACKER_LOG_LEVEL", "INFO")
    return [f"expense tracker repo: {Path.cwd()}", f"TRACKER_LOG_LEVEL={log_level}"]


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the log level and drop deployment variables that change behaviour."""

    monkeypatch.setenv("TRACKER_LOG_LEVEL", "INFO")
    monkeypatch.delenv("TRACKER_OUTPUTS", raising=False)
    monkeypatch.delenv("TRACKER_JSON_LOGS", raising=False)
    monkeypatch.delenv("TRACKER_USER_POOL_CLIENT_ID", raising=False)


@pytest.fixture()
def backend_client() -> Iterator[TestClient]:
    """A TestClient over a fresh in-memory backend database."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    database.Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def override_get_db():
        with database.session_scope(TestingSession) as session:
            yield session

    app.dependency_overrides[database.get_db] = override_get_db
    with TestClient(app, base_url=BASE_URL) as client:
        yield client
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture()
def outputs() -> BackendOutputs:
    document = build_outputs(BASE_URL, client_id="desktop")
    return BackendOutputs.model_validate(document.model_dump(mode="json"))
