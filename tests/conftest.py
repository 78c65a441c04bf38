"""
Shared pytest fixtures for theia-cli tests.

This module provides:
- Settings/logging isolation between tests
- An in-memory Theia manager (``httpx.MockTransport``) and a recording
  connection provider built on it

Usage:
    def test_something(tad_server, provider_factory):
        provider = provider_factory(tad_server([...]))
"""

import json
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
import structlog

# Ensure theia package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from theia.connection.client import TheiaClient
from theia.core.config import TheiaSettings, clear_settings_cache

TAD_PATH = "/apis/intelligence.theia.antrea.io/v1alpha1/throughputanomalydetectors"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests as unit unless marked otherwise."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Drop THEIA_* env vars and any cached settings; run from an empty dir."""
    import os

    for key in list(os.environ):
        if key.startswith("THEIA_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()


@pytest.fixture
def settings() -> TheiaSettings:
    return TheiaSettings(insecure_skip_tls_verify=True)


# =============================================================================
# Fake Theia manager
# =============================================================================


def tad_item(name: str, spark_application: str = "", **status: Any) -> dict[str, Any]:
    """One ThroughputAnomalyDetector as the manager serialises it."""
    body = {"sparkApplication": spark_application, **status}
    return {"metadata": {"name": name}, "status": body}


class RecordingProvider:
    """Connection provider that counts setups and closes."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.calls: list[tuple[TheiaSettings, bool]] = []
        self.requests: list[httpx.Request] = []
        self.clients: list[TheiaClient] = []

    def _record(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def __call__(self, settings: TheiaSettings, use_cluster_ip: bool) -> TheiaClient:
        self.calls.append((settings, use_cluster_ip))
        http = httpx.Client(
            base_url="https://theia-manager.test:11347",
            transport=httpx.MockTransport(self._record),
        )
        client = TheiaClient(http)
        self.clients.append(client)
        return client

    @property
    def close_count(self) -> int:
        return sum(1 for c in self.clients if c.closed)


@pytest.fixture
def tad_server() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Build a MockTransport handler serving a fixed TAD list (or status)."""

    def _build(
        items: list[dict[str, Any]] | None = None,
        *,
        status_code: int = 200,
        body: str | None = None,
    ) -> Callable[[httpx.Request], httpx.Response]:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path != TAD_PATH:
                return httpx.Response(404, text="404 page not found")
            if status_code != 200:
                return httpx.Response(status_code, text=httpx.codes.get_reason_phrase(status_code))
            if body is not None:
                return httpx.Response(200, text=body, headers={"Content-Type": "application/json"})
            payload = {
                "kind": "ThroughputAnomalyDetectorList",
                "apiVersion": "intelligence.theia.antrea.io/v1alpha1",
                "metadata": {},
                "items": items or [],
            }
            return httpx.Response(200, text=json.dumps(payload), headers={"Content-Type": "application/json"})

        return handler

    return _build


@pytest.fixture
def provider_factory() -> Callable[[Callable[[httpx.Request], httpx.Response]], RecordingProvider]:
    return RecordingProvider


@pytest.fixture(name="tad_item")
def tad_item_fixture() -> Callable[..., dict[str, Any]]:
    return tad_item
