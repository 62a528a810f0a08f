"""
HTTP API for sector mapping lookups, health checks and metrics.

Endpoints:
- GET  /sectors/ateco/search?q=...  - ATECO 2-digit code search
- GET  /sectors/ateco/macros        - ATECO macro-sectors
- GET  /sectors/ateco/{code}        - One ATECO division (404 when not catalogued)
- POST /sectors/damodaran           - Resolve an onboarding sector
- GET  /sectors/damodaran           - Damodaran industries used by the mappings
- GET  /sectors/damodaran/catalog   - Full Damodaran industry list
- GET  /sectors/onboarding          - Onboarding sectors with suggested ATECO codes
- GET  /health, /ready, /status     - Liveness, readiness and detailed status
- GET  /metrics                     - Prometheus metrics

Lookup errors are answered with plain-text bodies; health checks answer with JSON.

Usage:
    from sector_mapping_server.http_server import create_http_server

    http_server = create_http_server(health_checker=health_checker)

    # Start in background
    await http_server.start()

    # Stop gracefully
    await http_server.stop()
"""

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from .config import AppConfig, get_config
from .core.ateco_lookup import (
    get_ateco_2digit_codes,
    get_ateco_macros,
    require_ateco_code,
    search_ateco_codes,
    to_search_result,
)
from .core.damodaran_catalog import get_damodaran_catalog, get_damodaran_industries
from .core.errors import SectorMappingException
from .core.health import HealthChecker, liveness_check
from .core.reference_data import ReferenceTables, get_reference_tables
from .core.sector_resolver import resolve_sector_to_damodaran
from .core.validation import validate_ateco_code
from .observability.logging import (
    clear_request_context,
    generate_request_id,
    sanitize_text,
    set_request_context,
)
from .observability.metrics import (
    get_metrics_text,
    record_ateco_search,
    record_request,
    record_sector_resolution,
    update_health_status,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Awaitable[Response]]


@dataclass
class HTTPServerConfig:
    """Configuration for the HTTP server."""

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080
    search_result_limit: int = 20
    warn_on_unsuggested_ateco: bool = True
    enable_metrics: bool = True
    metrics_path: str = "/metrics"

    @classmethod
    def from_config(cls, config: AppConfig) -> "HTTPServerConfig":
        """Create HTTP server config from the validated application config."""
        return cls(
            enabled=config.http.enable_http,
            host=config.http.http_host,
            port=config.http.http_port,
            search_result_limit=config.lookup.search_result_limit,
            warn_on_unsuggested_ateco=config.lookup.warn_on_unsuggested_ateco,
            enable_metrics=config.metrics.enable_metrics,
            metrics_path=config.metrics.metrics_path,
        )


@dataclass
class HTTPServerState:
    """State shared with HTTP handlers."""

    tables: ReferenceTables | None = None
    health_checker: HealthChecker | None = None
    server_version: str = "0.1.0"
    start_time: float = field(default_factory=time.monotonic)

    @property
    def uptime_seconds(self) -> float:
        """Get server uptime in seconds."""
        return time.monotonic() - self.start_time


def _error_text(exc: Exception) -> str:
    return str(exc) or "Internal server error"


class HTTPServer:
    """
    HTTP server for the sector mapping API.

    Serves the lookup endpoints together with container health checks
    and Prometheus metrics scraping.
    """

    def __init__(
        self,
        config: HTTPServerConfig | None = None,
        tables: ReferenceTables | None = None,
        health_checker: HealthChecker | None = None,
        server_version: str = "0.1.0",
    ):
        """
        Initialize HTTP server.

        Args:
            config: HTTP server configuration
            tables: Reference tables to serve (process-wide tables by default)
            health_checker: Health checker instance for health endpoints
            server_version: Server version for the status endpoint
        """
        self.config = config or HTTPServerConfig()
        self.state = HTTPServerState(
            tables=tables,
            health_checker=health_checker,
            server_version=server_version,
        )
        self._app: Starlette | None = None
        self._started = False
        self._server_task: asyncio.Task | None = None
        self._uvicorn_server = None

    @property
    def tables(self) -> ReferenceTables:
        if self.state.tables is None:
            self.state.tables = get_reference_tables()
        return self.state.tables

    @property
    def app(self) -> Starlette:
        """The Starlette application, created on first access."""
        if self._app is None:
            self._app = self._create_app()
        return self._app

    def _create_app(self) -> Starlette:
        """Create the Starlette application with routes."""
        routes = [
            Route(
                "/sectors/ateco/search",
                self._instrument("ateco_search", self._ateco_search_handler),
                methods=["GET"],
            ),
            Route(
                "/sectors/ateco/macros",
                self._instrument("ateco_macros", self._ateco_macros_handler),
                methods=["GET"],
            ),
            Route(
                "/sectors/ateco/{code}",
                self._instrument("ateco_code", self._ateco_code_handler),
                methods=["GET"],
            ),
            Route(
                "/sectors/damodaran",
                self._instrument("resolve_sector", self._resolve_handler),
                methods=["POST"],
            ),
            Route(
                "/sectors/damodaran",
                self._instrument("damodaran_industries", self._industries_handler),
                methods=["GET"],
            ),
            Route(
                "/sectors/damodaran/catalog",
                self._instrument("damodaran_catalog", self._catalog_handler),
                methods=["GET"],
            ),
            Route(
                "/sectors/onboarding",
                self._instrument("onboarding_sectors", self._onboarding_handler),
                methods=["GET"],
            ),
            Route("/health", self._health_handler, methods=["GET"]),
            Route("/ready", self._ready_handler, methods=["GET"]),
            Route("/status", self._status_handler, methods=["GET"]),
            Route(self.config.metrics_path, self._metrics_handler, methods=["GET"]),
        ]

        app = Starlette(routes=routes)
        app.state.http_state = self.state
        return app

    def _instrument(self, endpoint: str, handler: Handler) -> Handler:
        """Wrap a lookup handler with request context, logging and metrics."""

        async def endpoint_handler(request: Request) -> Response:
            set_request_context(
                request_id=generate_request_id(),
                operation=endpoint,
                correlation_id=request.headers.get("x-request-id"),
            )
            start = time.perf_counter()
            try:
                response = await handler(request)
            except Exception as e:
                logger.error(f"Unhandled error in {endpoint}: {e}", exc_info=True)
                response = PlainTextResponse(_error_text(e), status_code=500)

            duration = time.perf_counter() - start
            if self.config.enable_metrics:
                status = "success" if response.status_code < 400 else str(response.status_code)
                record_request(endpoint, status, duration)
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={"data": {"latency_ms": int(duration * 1000)}},
            )
            clear_request_context()
            return response

        return endpoint_handler

    # --- Lookup endpoints ---

    async def _ateco_search_handler(self, request: Request) -> Response:
        """
        Search ATECO 2-digit codes.

        A blank or absent q lists the whole catalog; otherwise results are
        capped at the configured search limit.
        """
        query = request.query_params.get("q", "")

        try:
            if not query.strip():
                results = [to_search_result(entry) for entry in get_ateco_2digit_codes(self.tables)]
            else:
                results = search_ateco_codes(
                    query, limit=self.config.search_result_limit, tables=self.tables
                )
                if self.config.enable_metrics:
                    record_ateco_search(len(results))
        except Exception as e:
            logger.error(f"ATECO search failed for {sanitize_text(query, 80)!r}: {e}", exc_info=True)
            return PlainTextResponse(_error_text(e), status_code=500)

        return JSONResponse({"results": [r.to_dict() for r in results]})

    async def _ateco_macros_handler(self, request: Request) -> Response:
        """List the ATECO macro-sectors with their 2-digit codes."""
        macros = get_ateco_macros(self.tables)
        return JSONResponse({"macros": [m.to_dict() for m in macros]})

    async def _ateco_code_handler(self, request: Request) -> Response:
        """
        Look up one ATECO division.

        Dotted codes such as 62.01 are answered with their division.

        Response:
            200: AtecoSearchResult JSON
            400: Malformed code
            404: Code not catalogued
        """
        try:
            code = validate_ateco_code(
                request.path_params["code"], field_name="code", required=True
            ).value
            entry = require_ateco_code(code, self.tables)
        except SectorMappingException as e:
            return PlainTextResponse(e.message, status_code=e.http_status)

        return JSONResponse(to_search_result(entry).to_dict())

    async def _resolve_handler(self, request: Request) -> Response:
        """
        Resolve an onboarding sector to weighted Damodaran industries.

        Body: {"onboardingSector": str, "atecoCode": str | null}

        Response:
            200: SectorResolution JSON
            400: Plain-text reason (bad body, missing or unknown sector)
        """
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return PlainTextResponse("Invalid JSON body", status_code=400)

        if not isinstance(body, dict):
            return PlainTextResponse("Request body must be a JSON object", status_code=400)

        onboarding_sector = body.get("onboardingSector")
        ateco_code = body.get("atecoCode")

        if not onboarding_sector:
            return PlainTextResponse("onboardingSector is required", status_code=400)

        if ateco_code is not None and not isinstance(ateco_code, str):
            return PlainTextResponse("atecoCode must be a string", status_code=400)

        try:
            resolution = resolve_sector_to_damodaran(
                onboarding_sector,
                ateco_code,
                tables=self.tables,
                warn_on_unsuggested_ateco=self.config.warn_on_unsuggested_ateco,
            )
        except Exception as e:
            logger.error(f"Sector resolution failed: {e}", exc_info=True)
            return PlainTextResponse(_error_text(e), status_code=500)

        if self.config.enable_metrics:
            record_sector_resolution(resolution.onboarding_sector.value if resolution else None)

        if resolution is None:
            return PlainTextResponse("Invalid onboarding sector", status_code=400)

        return JSONResponse(resolution.to_dict())

    async def _industries_handler(self, request: Request) -> Response:
        """List the Damodaran industries referenced by any sector mapping."""
        try:
            industries = get_damodaran_industries(self.tables)
        except Exception as e:
            logger.error(f"Failed to list Damodaran industries: {e}", exc_info=True)
            return PlainTextResponse(_error_text(e), status_code=500)

        return JSONResponse({"industries": industries})

    async def _catalog_handler(self, request: Request) -> Response:
        """List the full Damodaran industry catalog."""
        return JSONResponse({"industries": get_damodaran_catalog(self.tables)})

    async def _onboarding_handler(self, request: Request) -> Response:
        """List onboarding sectors with their macro groups and suggested ATECO codes."""
        sectors = []
        for mapping in self.tables.sector_mappings:
            entry: dict[str, Any] = {
                "label": mapping.onboarding_sector.value,
                "atecoMacroPrimary": mapping.ateco_macro_primary.value,
                "atecoMacroPrimaryName": mapping.ateco_macro_primary_name,
                "suggestedAtecoCodes": list(mapping.suggested_ateco_codes),
            }
            if mapping.ateco_macro_secondary is not None:
                entry["atecoMacroSecondary"] = mapping.ateco_macro_secondary.value
                entry["atecoMacroSecondaryName"] = mapping.ateco_macro_secondary_name
            sectors.append(entry)

        return JSONResponse({"sectors": sectors})

    # --- Health endpoints ---

    async def _health_handler(self, request: Request) -> Response:
        """
        Liveness check handler.

        Returns 200 if the process is alive and responsive.
        """
        return JSONResponse(await liveness_check(), status_code=200)

    async def _ready_handler(self, request: Request) -> Response:
        """
        Readiness check handler.

        Response:
            200: Reference tables loaded, ready for traffic
            503: Not ready
        """
        state: HTTPServerState = request.app.state.http_state

        if state.health_checker:
            is_ready = await state.health_checker.check_readiness()
            if not is_ready:
                return JSONResponse(
                    {
                        "status": "not_ready",
                        "reason": "components_not_ready",
                        "timestamp": datetime.now(UTC).isoformat(),
                    },
                    status_code=503,
                )

        return JSONResponse(
            {
                "status": "ready",
                "uptime_seconds": round(state.uptime_seconds, 1),
                "timestamp": datetime.now(UTC).isoformat(),
            },
            status_code=200,
        )

    async def _status_handler(self, request: Request) -> Response:
        """Detailed status including component health (always 200)."""
        state: HTTPServerState = request.app.state.http_state

        status_data: dict[str, Any] = {
            "version": state.server_version,
            "uptime_seconds": round(state.uptime_seconds, 1),
            "timestamp": datetime.now(UTC).isoformat(),
        }

        if state.health_checker:
            health_result = await state.health_checker.check_health()
            status_data["health"] = health_result.to_dict()
            if self.config.enable_metrics:
                update_health_status(health_result.status.value, state.uptime_seconds)
        else:
            status_data["health"] = {
                "status": "unknown",
                "message": "Health checker not configured",
            }

        return JSONResponse(status_data, status_code=200)

    async def _metrics_handler(self, request: Request) -> Response:
        """Prometheus metrics in text exposition format."""
        if not self.config.enable_metrics:
            return PlainTextResponse("Metrics disabled\n", status_code=404)

        try:
            metrics_text = get_metrics_text()
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return PlainTextResponse(f"# Error generating metrics: {e}\n", status_code=500)

        return PlainTextResponse(
            metrics_text,
            status_code=200,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start uvicorn in a background task."""
        if not self.config.enabled:
            logger.info("HTTP server disabled by configuration")
            return

        if self._started:
            logger.warning("HTTP server already started")
            return

        import uvicorn

        config = uvicorn.Config(
            app=self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)

        self._server_task = asyncio.create_task(server.serve())
        self._uvicorn_server = server
        self._started = True

        logger.info(f"HTTP server started on http://{self.config.host}:{self.config.port}")

    async def stop(self) -> None:
        """Stop the HTTP server gracefully."""
        if not self._started:
            return

        logger.info("Stopping HTTP server...")

        if self._uvicorn_server is not None:
            self._uvicorn_server.should_exit = True

        if self._server_task is not None:
            try:
                await asyncio.wait_for(self._server_task, timeout=5.0)
            except TimeoutError:
                logger.warning("HTTP server stop timed out, cancelling...")
                self._server_task.cancel()
                try:
                    await self._server_task
                except asyncio.CancelledError:
                    pass

        self._started = False
        logger.info("HTTP server stopped")

    def run(self) -> None:
        """Serve in the foreground until interrupted."""
        import uvicorn

        logger.info(f"Serving HTTP API on http://{self.config.host}:{self.config.port}")
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
            access_log=False,
        )

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._started


def create_http_server(
    tables: ReferenceTables | None = None,
    health_checker: HealthChecker | None = None,
    config: AppConfig | None = None,
) -> HTTPServer:
    """
    Create an HTTP server configured from the application config.

    Args:
        tables: Reference tables (process-wide tables by default)
        health_checker: Health checker instance (built from tables if omitted)
        config: Application config (singleton by default)

    Returns:
        Configured HTTPServer instance
    """
    app_config = config or get_config()
    tables = tables or get_reference_tables()
    if health_checker is None:
        health_checker = HealthChecker(tables=tables, version=app_config.server.version)

    return HTTPServer(
        config=HTTPServerConfig.from_config(app_config),
        tables=tables,
        health_checker=health_checker,
        server_version=app_config.server.version,
    )
