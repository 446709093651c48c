"""
Base service class for Posts Gateway services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Dict, Any, Optional
import time
import uvicorn

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import ClientError, ErrorDetail, ErrorResponse, GatewayException, ValidationError


REQUEST_ID_HEADER = "X-Request-ID"


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.port = port
        self.config = config or get_config(service_name, port)
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level, json_logs=not self.config.is_local())

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Gateway",
            description=f"{self.service_name.title()} Gateway - cached, reshaped upstream data",
            version="1.0.0",
            docs_url=None if self.config.is_production() else "/docs",
            redoc_url=None if self.config.is_production() else "/redoc",
            lifespan=self._lifespan,
        )

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Run startup and shutdown hooks around the application lifetime."""
        await self._on_startup()
        self.logger.info("Service started", service=self.service_name, env=self.config.env)
        try:
            yield
        finally:
            await self._on_shutdown()
            self.logger.info("Service stopped", service=self.service_name)

    async def _on_startup(self) -> None:
        """Startup hook. Override in subclasses."""

    async def _on_shutdown(self) -> None:
        """Shutdown hook. Override in subclasses."""

    def _setup_middleware(self):
        """Set up middleware."""

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=[] if self.config.is_production() else ["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def add_request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            start_time = time.perf_counter()

            try:
                response = await call_next(request)
                duration = time.perf_counter() - start_time

                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=request.url.path,
                    status_code=response.status_code,
                    duration=duration
                )

                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    query=str(request.url.query),
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )

                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            except Exception:
                duration = time.perf_counter() - start_time
                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=request.url.path,
                    status_code=500,
                    duration=duration
                )
                self.logger.error(
                    "HTTP request failed",
                    method=request.method,
                    path=request.url.path,
                    query=str(request.url.query),
                    duration_ms=round(duration * 1000, 2),
                    exc_info=True
                )
                raise
            finally:
                clear_context()

    def _error_response(self, exc: GatewayException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(include_details=not self.config.is_production()),
        )

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "service": self.service_name,
                "status": "ok",
                "env": self.config.env,
                "uptime_seconds": round(self._get_uptime(), 3),
                "dependencies": await self._check_dependencies(),
                "version": "1.0.0",
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(self.metrics.registry),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.exception_handler(GatewayException)
        async def gateway_exception_handler(request: Request, exc: GatewayException):
            """Handle GatewayException and subclasses."""
            log = self.logger.warning if isinstance(exc, ClientError) else self.logger.error
            log(
                "Gateway error",
                path=request.url.path,
                code=exc.code,
                message=exc.message,
                details=exc.details
            )
            self.metrics.record_error(exc.code)
            return self._error_response(exc)

        @self.app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            """Report the first failing request parameter."""
            errors = exc.errors()
            param = str(errors[0]["loc"][-1]) if errors and errors[0].get("loc") else "request"
            self.logger.debug("Request validation failed", path=request.url.path, errors=errors)
            self.metrics.record_error("VALIDATION_ERROR")
            return self._error_response(ValidationError.for_param(param))

        @self.app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            """Render framework HTTP errors (e.g. unknown routes) in the generic envelope."""
            body = ErrorResponse(errors=ErrorDetail(message=str(exc.detail)))
            return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            error: Dict[str, Any] = {}
            if not self.config.is_production():
                error = {"code": "INTERNAL_ERROR", "details": {"type": type(exc).__name__}}
            body = ErrorResponse(errors=ErrorDetail(message=str(exc) or "Internal server error", error=error))
            return JSONResponse(status_code=500, content=body.model_dump())

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check service dependencies. Override in subclasses."""
        return {}

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
