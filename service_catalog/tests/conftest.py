"""
Shared fixtures for catalog service tests.
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest
from prometheus_client import CollectorRegistry

from service_catalog.app.adapters.upstream_client import UpstreamClient, UpstreamResponse
from service_catalog.app.caching.cache_store import InMemoryCacheStore
from shared.config import ServiceConfig
from shared.metrics import MetricsCollector


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def upstream_response(
    status_code: int = 200,
    payload: Any = None,
    headers: Optional[Dict[str, str]] = None,
    body: Optional[bytes] = None,
) -> UpstreamResponse:
    """Build an UpstreamResponse from a JSON payload or raw body."""
    if body is None:
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
    return UpstreamResponse(status_code=status_code, headers=httpx.Headers(headers or {}), body=body)


def catalog_payload(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"data": items}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_store():
    return InMemoryCacheStore()


@pytest.fixture
def upstream():
    client = AsyncMock(spec=UpstreamClient)
    client.get.return_value = upstream_response(payload=catalog_payload([{"id": "a"}]))
    return client


@pytest.fixture
def metrics():
    return MetricsCollector("catalog", CollectorRegistry())


def make_config(**overrides) -> ServiceConfig:
    settings = {
        "service_name": "catalog",
        "upstream_api_key": "test-key",
        "upstream_base_url": "https://upstream.test/api/v1",
        "admin_refresh_key": "secret",
        "refresh_interval_seconds": 120,
        "rate_limit_max_requests": 100,
        "rate_limit_window_seconds": 60,
        "redis_url": None,
        "ios_min_version": "1.0",
        "catalog_single_flight": False,
    }
    settings.update(overrides)
    return ServiceConfig(**settings)
