"""
Directory Service package for the Employee Directory Access Layer.

The service fronts an unreliable third-party employee API, adding:
- Cache-aside reads of the full directory, invalidated on writes
- Bounded exponential backoff for rate-limited upstream calls
- A stale-cache fallback for failed by-id lookups

Structure:
- app.main: FastAPI app and routes.
- app.adapters: Upstream HTTP client and its tagged call outcomes.
- app.caching: Directory snapshot cache.
- app.directory: Fallback resolver, derived queries and the service facade.
"""
