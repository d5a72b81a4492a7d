"""
Model catalog service for the Model Catalog Gateway.
"""

import hmac
import time
from typing import Callable, Dict, Optional

from fastapi import Header, Query, Request
from fastapi.responses import JSONResponse
from prometheus_client import CollectorRegistry

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AuthorizationError, RateLimitError
from shared.logging import request_id_var

from .adapters.upstream_client import UpstreamClient
from .caching.cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore
from .catalog.coordinator import CatalogCacheCoordinator, RefreshMode
from .policies.refresh import RefreshPolicy
from .ratelimit.fixed_window import FixedWindowRateLimiter, RateLimitMiddleware


class CatalogService(BaseService):
    """Catalog service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache_store: Optional[CacheStore] = None,
        upstream_client: Optional[UpstreamClient] = None,
        clock: Callable[[], float] = time.time,
        metrics_registry: Optional[CollectorRegistry] = None,
    ):
        super().__init__("catalog", config, metrics_registry)

        if cache_store is None:
            if self.config.redis_url:
                cache_store = RedisCacheStore(self.config.redis_url)
            else:
                self.logger.info("No redis_url configured, using in-memory catalog cache")
                cache_store = InMemoryCacheStore()
        self.cache_store = cache_store
        self.upstream_client = upstream_client or UpstreamClient(timeout=self.config.upstream_timeout_seconds)

        self.coordinator = CatalogCacheCoordinator(
            self.cache_store,
            self.upstream_client,
            base_url=self.config.upstream_base_url,
            api_key=self.config.upstream_api_key,
            refresh_policy=RefreshPolicy(self.config.refresh_interval_seconds),
            clock=clock,
            metrics=self.metrics,
            single_flight=self.config.catalog_single_flight,
        )

        self.rate_limiter = FixedWindowRateLimiter(
            max_requests=self.config.rate_limit_max_requests,
            window=self.config.rate_limit_window_seconds,
        )
        self.rate_limit_middleware = RateLimitMiddleware(
            self.rate_limiter,
            trust_forwarded_for=self.config.trust_forwarded_for,
        )

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.upstream_client.close()
            await self.cache_store.close()

        self._setup_catalog_routes()
        self._setup_config_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.catalog_service = self

    def _setup_service_middleware(self):
        """Gate every inbound request on the per-client limiter.

        Runs before any route handler but after CORS and request-id tagging, so
        rejections still carry both. Reads the limiter at request time because
        the base class registers middleware before it is built.
        """

        @self.app.middleware("http")
        async def enforce_rate_limit(request: Request, call_next):
            allowed = self.rate_limit_middleware.check_request(request)
            self.metrics.increment_counter(
                "rate_limit_decisions_total",
                decision="allowed" if allowed else "denied",
            )
            if not allowed:
                error = RateLimitError()
                self.metrics.record_error(error.code)
                return JSONResponse(
                    status_code=error.status_code,
                    content=error.to_response(request_id=request_id_var.get()).model_dump(),
                )
            return await call_next(request)

    def _setup_catalog_routes(self):
        """Set up catalog routes."""

        @self.app.get("/models")
        async def list_models(refresh: Optional[str] = Query(None)):
            """Return the catalog; ``refresh=true`` revalidates once the interval has elapsed."""
            mode = RefreshMode.REVALIDATE if _is_truthy(refresh) else RefreshMode.CACHE_ONLY
            models = await self.coordinator.fetch_catalog(mode)
            return [model.model_dump() for model in models]

        @self.app.post("/models/refresh")
        async def refresh_models(x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key")):
            """Force an upstream refresh (admin only)."""
            self._authorize_admin(x_admin_key)
            models = await self.coordinator.fetch_catalog(RefreshMode.FORCE)
            return {"status": "ok", "count": len(models)}

    def _setup_config_routes(self):
        """Set up client configuration routes."""

        @self.app.get("/config/ios-min-version")
        async def ios_min_version():
            """Return the minimum supported iOS app version."""
            min_version = self.config.ios_min_version
            self.logger.info("Serving min version", min_version=min_version)
            return {"minVersion": min_version}

    def _authorize_admin(self, provided: Optional[str]) -> None:
        expected = self.config.admin_refresh_key
        if not expected:
            self.logger.error("Admin refresh key not configured")
            raise AuthorizationError("Admin refresh is disabled")
        if not provided or not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            raise AuthorizationError("Invalid admin key")

    async def _check_dependencies(self) -> Dict[str, str]:
        self.metrics.set_gauge("rate_limit_buckets", self.rate_limiter.bucket_count)
        cache_ok = await self.cache_store.ping()
        return {"cache_store": "ok" if cache_ok else "error"}


def _is_truthy(value: Optional[str]) -> bool:
    # unrecognized values fall back to false rather than a 422
    return value is not None and value.strip().lower() in ("true", "1", "on")


def create_app(config: Optional[ServiceConfig] = None, **kwargs):
    """Create FastAPI application."""
    service = CatalogService(config, **kwargs)
    return service.app


def main():
    service = CatalogService()
    service.run()


if __name__ == "__main__":
    main()
