"""
Model Catalog Service package.

The service fronts a rate-limited upstream model catalog, enforcing:
- Rate limiting: per-client fixed window, checked before any routing
- Caching: cache-aside catalog snapshots refreshed on an interval
- Admin-only forced refresh guarded by a shared key

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: HTTP client for the upstream catalog.
- app.caching: Cache stores (Redis, in-memory).
- app.catalog: Catalog models and the cache coordinator.
- app.policies: Refresh policy.
- app.ratelimit: Fixed-window limiter and request adapter.
"""
