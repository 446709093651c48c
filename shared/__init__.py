"""
Shared utilities for the Posts Gateway.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI app wiring (middleware, health, error handlers)

Do not import from service_* packages into shared/.
"""
