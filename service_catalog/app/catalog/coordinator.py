"""
Cache-aside coordinator for the upstream model catalog.

The coordinator decides, per call, whether the cached catalog snapshot can be
served or whether the upstream must be asked again. It keeps two independent
entries in the shared cache store: the serialized list and the Unix timestamp
of the last successful upstream fetch. The two writes are not atomic together;
readers may observe a fresh list with a stale timestamp or the reverse.

Concurrent ``REVALIDATE``/``FORCE`` calls on a cold or expired cache each go
to the upstream unless ``single_flight`` is enabled, in which case callers that
arrive while a fetch is in progress share its outcome.
"""

import asyncio
import json
import time
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from pydantic import ValidationError

from shared.errors import (
    MisconfiguredError,
    UnexpectedUpstreamFormatError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)
from shared.logging import get_logger

from ..adapters.upstream_client import UpstreamClient, UpstreamNetworkError
from ..caching.cache_store import CacheStore
from ..policies.refresh import RefreshPolicy
from .models import ModelInfo, dump_catalog, load_catalog

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


CATALOG_CACHE_KEY = "openrouter:models:simple:v1"
LAST_FETCH_KEY = "openrouter:models:lastFetch"


class RefreshMode(str, Enum):
    """How far a catalog request may go past the cache."""

    CACHE_ONLY = "cache_only"   # serve any cached snapshot
    REVALIDATE = "revalidate"   # refetch once the refresh interval has elapsed
    FORCE = "force"             # always refetch; admin only


class CatalogCacheCoordinator:
    """Serves the model catalog from cache, refreshing from upstream when due."""

    def __init__(
        self,
        cache_store: CacheStore,
        upstream_client: UpstreamClient,
        *,
        base_url: str,
        api_key: str,
        refresh_policy: Optional[RefreshPolicy] = None,
        clock: Callable[[], float] = time.time,
        metrics: Optional["MetricsCollector"] = None,
        single_flight: bool = False,
    ):
        self.cache_store = cache_store
        self.upstream_client = upstream_client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.refresh_policy = refresh_policy or RefreshPolicy()
        self.metrics = metrics
        self.single_flight = single_flight
        self.logger = get_logger("catalog.coordinator")
        self._clock = clock
        self._inflight: Optional["asyncio.Task[List[ModelInfo]]"] = None

    @property
    def catalog_url(self) -> str:
        return f"{self.base_url}/models"

    async def fetch_catalog(self, mode: RefreshMode = RefreshMode.CACHE_ONLY) -> List[ModelInfo]:
        """Return the normalized, deduplicated catalog sorted by id."""
        mode = RefreshMode(mode)
        if mode is not RefreshMode.FORCE:
            cached = await self._read_cached_catalog()
            if cached is not None:
                if mode is RefreshMode.CACHE_ONLY:
                    return cached

                last_fetch = await self._read_last_fetch()
                if not self.refresh_policy.should_fetch(self._clock(), last_fetch):
                    return cached

                self.logger.info("Catalog refresh due", last_fetch=last_fetch)

        if self.single_flight:
            return await self._shared_fetch()
        return await self._fetch_and_store()

    async def _shared_fetch(self) -> List[ModelInfo]:
        """Join the in-flight upstream fetch, starting one if none is running."""
        task = self._inflight
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        else:
            self.logger.debug("Joining in-flight catalog fetch")
        # one caller being cancelled must not cancel the fetch for the others
        return await asyncio.shield(task)

    def _clear_inflight(self, task: "asyncio.Task[List[ModelInfo]]") -> None:
        if self._inflight is task:
            self._inflight = None

    async def _fetch_and_store(self) -> List[ModelInfo]:
        models = await self._fetch_upstream()
        await self._store(models)
        self.logger.info("Fetched catalog from upstream", unique_models=len(models))
        return models

    async def _fetch_upstream(self) -> List[ModelInfo]:
        if not self.api_key:
            self.logger.error("Upstream API key not configured")
            raise MisconfiguredError("OPENROUTER_KEY")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

        start = time.perf_counter()
        try:
            response = await self.upstream_client.get(self.catalog_url, headers)
        except UpstreamNetworkError as exc:
            self._record_fetch("network_error", start)
            self.logger.error("Network error fetching catalog", error=str(exc))
            raise UpstreamUnavailableError("Network error fetching catalog") from exc

        if response.status_code == 429:
            self._record_fetch("rate_limited", start)
            retry_after = response.headers.get("Retry-After")
            self.logger.warning("Upstream rate limited catalog fetch", retry_after=retry_after)
            raise UpstreamRateLimitedError(retry_after)

        if not response.is_success:
            self._record_fetch("bad_status", start)
            self.logger.error(
                "Upstream returned non-success status",
                status_code=response.status_code,
                body=response.excerpt(),
            )
            raise UpstreamUnavailableError(
                f"Upstream returned {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            models = self._parse_catalog(response.body)
        except (UpstreamUnavailableError, UnexpectedUpstreamFormatError):
            self._record_fetch("bad_payload", start)
            raise

        self._record_fetch("ok", start)
        return models

    def _parse_catalog(self, body: bytes) -> List[ModelInfo]:
        """Decode the upstream body and build the catalog list."""
        if not body:
            self.logger.error("Empty upstream response")
            raise UpstreamUnavailableError("Empty upstream response")

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            self.logger.error("Upstream response is not valid UTF-8", error=str(exc))
            raise UpstreamUnavailableError("Upstream response is not valid UTF-8") from exc

        try:
            payload = json.loads(text)
        except (ValueError, RecursionError) as exc:
            self.logger.error("Upstream response is not JSON", error=str(exc), body=text[:200])
            raise UnexpectedUpstreamFormatError() from exc

        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            self.logger.error("Unexpected upstream format", body=text[:200])
            raise UnexpectedUpstreamFormatError()

        return self.normalize(items)

    def normalize(self, items: List[Any]) -> List[ModelInfo]:
        """Map items, drop id-less ones, keep the first of each id and sort by id."""
        seen = set()
        unique: List[ModelInfo] = []
        dropped = 0

        for item in items:
            model = ModelInfo.from_upstream(item)
            if model is None:
                dropped += 1
                continue
            if model.id in seen:
                self.logger.warning("Duplicate model skipped", model_id=model.id, name=model.name)
                continue
            seen.add(model.id)
            unique.append(model)

        if dropped:
            self.logger.warning("Skipped unparsable upstream items", count=dropped)

        unique.sort(key=lambda model: model.id)
        return unique

    async def _read_cached_catalog(self) -> Optional[List[ModelInfo]]:
        try:
            payload = await self.cache_store.get(CATALOG_CACHE_KEY)
        except Exception as exc:
            self.logger.warning("Catalog cache read failed", error=str(exc))
            self._record_lookup("error")
            return None

        if payload is None:
            self._record_lookup("miss")
            return None

        try:
            models = load_catalog(payload)
        except ValidationError as exc:
            self.logger.warning("Discarding corrupt catalog cache entry", error=str(exc))
            self._record_lookup("corrupt")
            return None

        self._record_lookup("hit")
        return models

    async def _read_last_fetch(self) -> Optional[float]:
        try:
            payload = await self.cache_store.get(LAST_FETCH_KEY)
        except Exception as exc:
            self.logger.warning("Last fetch timestamp read failed", error=str(exc))
            return None

        if payload is None:
            return None

        try:
            return float(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            self.logger.warning("Ignoring malformed last fetch timestamp")
            return None

    async def _store(self, models: List[ModelInfo]) -> None:
        """Write list and timestamp independently; failures only cost the cache."""
        try:
            await self.cache_store.set(CATALOG_CACHE_KEY, dump_catalog(models))
        except Exception as exc:
            self.logger.warning("Could not cache catalog", error=str(exc))

        try:
            await self.cache_store.set(LAST_FETCH_KEY, repr(self._clock()).encode("utf-8"))
        except Exception as exc:
            self.logger.warning("Could not record last fetch timestamp", error=str(exc))

    def _record_lookup(self, result: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("catalog_cache_lookups_total", result=result)

    def _record_fetch(self, outcome: str, start: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("catalog_upstream_fetches_total", outcome=outcome)
        self.metrics.observe_histogram(
            "catalog_upstream_fetch_duration_seconds",
            time.perf_counter() - start,
        )
