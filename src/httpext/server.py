"""FastAPI application factory and route setup for httpext.

The service exposes a read-only collection under ``/resources`` whose pages
are selected with a ``Range`` header:

    GET /resources
    Range: resources=0-99

    206 Partial Content
    Content-Range: resources 0-99/1000
"""

import logging
import secrets
import time

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from httpext import __version__
from httpext.config import HttpExtConfig
from httpext.cors import CORSPolicy
from httpext.errors import RangeError
from httpext.httperror import HTTPError, InternalError, NotFound, from_range_error
from httpext.middleware import Endpoint, MiddlewareSet
from httpext.range_header import (
    HEADER_ACCEPT_RANGES,
    HEADER_CONTENT_RANGE,
    HEADER_RANGE,
    ContentRange,
    format_unsatisfied,
    parse_range,
)

logger = logging.getLogger(__name__)

HEADER_REQUEST_ID = "X-Request-Id"

# Paths to suppress from per-request logging
_QUIET_PATHS = {"/health"}


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(config: HttpExtConfig) -> FastAPI:
    """Create and configure the httpext FastAPI application.

    Args:
        config: The loaded httpext configuration.

    Returns:
        A configured FastAPI application ready to run.
    """
    app = FastAPI(
        title="httpext",
        version=__version__,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    app.state.config = config
    app.state.resources = [
        {"id": i, "name": f"{config.resources.units}-{i}"}
        for i in range(config.resources.count)
    ]

    _register_exception_handlers(app)
    _build_middleware(config).install(app)
    _setup_routes(app, config)

    logger.debug(
        "Created app serving %d %s (cors=%s)",
        config.resources.count,
        config.resources.units,
        config.cors.enabled,
    )
    return app


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def render_error(
    request: Request, exc: HTTPError, headers: dict[str, str] | None = None
) -> Response:
    """Render an HTTPError as a JSON response. HEAD responses have no body."""
    if request.method == "HEAD":
        return Response(status_code=exc.status, headers=headers)
    return JSONResponse(content=exc.marshal(), status_code=exc.status, headers=headers)


def _register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the FastAPI app."""

    @app.exception_handler(HTTPError)
    async def http_error_handler(request: Request, exc: HTTPError) -> Response:
        return render_error(request, exc)

    @app.exception_handler(RangeError)
    async def range_error_handler(request: Request, exc: RangeError) -> Response:
        """Map range errors that escaped a handler to 400/416 responses."""
        return render_error(request, from_range_error(exc))

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> Response:
        return render_error(request, NotFound)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> Response:
        """Catch unexpected exceptions and return InternalError."""
        logger.exception("Unhandled exception in request handler")
        return render_error(request, InternalError)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def _build_middleware(config: HttpExtConfig) -> MiddlewareSet:
    """Assemble the middleware set: request id, request log, then CORS."""
    middleware = MiddlewareSet()

    async def assign_request_id(request: Request) -> None:
        request.state.request_id = secrets.token_hex(8)

    def request_log(next_endpoint: Endpoint) -> Endpoint:
        async def logged(request: Request) -> Response:
            start = time.monotonic()
            response = await next_endpoint(request)
            duration_ms = round((time.monotonic() - start) * 1000, 2)

            request_id = getattr(request.state, "request_id", "")
            response.headers[HEADER_REQUEST_ID] = request_id

            if request.url.path not in _QUIET_PATHS:
                logger.info(
                    "%s %s %d %.2fms",
                    request.method,
                    request.url.path,
                    response.status_code,
                    duration_ms,
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status": response.status_code,
                        "duration_ms": duration_ms,
                        "request_id": request_id,
                        "content_range": response.headers.get(HEADER_CONTENT_RANGE),
                    },
                )
            return response

        return logged

    middleware.use_handler(assign_request_id)
    middleware.use(request_log)
    if config.cors.enabled:
        middleware.use(CORSPolicy.from_config(config.cors).middleware())
    return middleware


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


def _select_page(header: str | None, units: str, total: int, page_size: int) -> ContentRange:
    """Resolve the page of the collection a request asks for.

    A missing header, or one naming a different unit, selects the first page.
    Pages are capped at ``page_size`` items.

    Raises:
        RangeError: If the header is malformed or cannot be satisfied.
    """
    rng = None
    if header:
        rng = parse_range(header)
        if rng.units != units:
            logger.debug("Ignoring Range with unknown unit %r", rng.units)
            rng = None
    if rng is None:
        if total == 0:
            # An empty suffix is the only range an empty collection satisfies.
            rng = ContentRange(units)
            rng.set_last(-page_size)
        else:
            rng = ContentRange(units, first=0)

    rng.set_total(total)
    if rng.is_fixed and rng.limit + 1 > page_size:
        rng = ContentRange(units, rng.first, rng.first + page_size - 1)
        rng.set_total(total)
    return rng


def _setup_routes(app: FastAPI, config: HttpExtConfig) -> None:
    """Register the service routes on the application.

    Args:
        app: The FastAPI application to attach routes to.
        config: The httpext configuration.
    """
    units = config.resources.units
    page_size = config.resources.max_page_size

    @app.get("/health")
    async def health_check() -> Response:
        return JSONResponse(content={"status": "ok"})

    @app.options("/resources")
    async def resources_preflight() -> Response:
        """CORS preflight; the CORS middleware supplies the headers."""
        return Response(status_code=204)

    @app.get("/resources")
    async def list_resources(request: Request) -> Response:
        """Return the page of resources selected by the Range header.

        Answers 200 when the page covers the whole collection and 206
        otherwise. Unsatisfiable ranges answer 416 with ``*/<total>``.
        """
        resources: list[dict] = app.state.resources
        total = len(resources)

        try:
            rng = _select_page(request.headers.get(HEADER_RANGE), units, total, page_size)
        except RangeError as exc:
            logger.info("Rejected range %r: %s", request.headers.get(HEADER_RANGE), exc.message)
            headers = None
            if exc.http_status == 416:
                headers = {HEADER_CONTENT_RANGE: format_unsatisfied(units, total)}
            return render_error(request, from_range_error(exc), headers=headers)

        page = resources[rng.as_slice()]
        complete = rng.is_empty or (rng.first == 0 and rng.last == total - 1)
        return JSONResponse(
            content=page,
            status_code=200 if complete else 206,
            headers={
                HEADER_CONTENT_RANGE: rng.format(),
                HEADER_ACCEPT_RANGES: units,
            },
        )
