"""
Posts Gateway service package.

The gateway fronts the public placeholder API (posts and comments),
adding:
- Caching: in-process TTL cache with get-or-populate access
- Aggregation: comment counts per post, ordered by popularity
- Filtering: query-parameter driven comment search

Structure:
- app.main: FastAPI app, routes, and lifecycle wiring.
- app.adapters: HTTP client for the upstream API.
- app.caching: TTL cache store.
- app.posts: Records, cached collections, aggregation and search.
"""
