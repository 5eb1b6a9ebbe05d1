"""FastAPI application entry point."""
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import bookmarks, health
from core.config import get_settings
from db.session import build_engine, build_session_factory, create_schema
from services.bookmark_repository import BookmarkRepository
from services.oembed import OEmbedFetcher


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("application is starting...")

    # Startup: database
    engine = build_engine(app_settings)
    try:
        if app_settings.create_schema:
            await create_schema(engine)
        session_factory = build_session_factory(engine)
        app.state.session_factory = session_factory
        app.state.bookmark_repository = BookmarkRepository(
            session_factory, logger=logging.getLogger("bookmarks.repository"),
        )

        # Startup: oEmbed provider registry. There is no point serving bookmarks
        # creation without it, so a failure here aborts startup.
        async with httpx.AsyncClient(
            timeout=app_settings.oembed_timeout,
            follow_redirects=True,
        ) as http_client:
            app.state.oembed_fetcher = await OEmbedFetcher.from_registry(
                http_client,
                app_settings.oembed_providers_url,
                logger=logging.getLogger("bookmarks.oembed"),
            )

            yield
    finally:
        # Shutdown, or failed startup
        await engine.dispose()
        logger.info("application stopped")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request.

    The record carries the method, url, matched route name, optional
    `transaction_id` query parameter, status code and duration as extra
    attributes, so structured handlers can pick them up.
    """

    def __init__(self, app: FastAPI, logger: logging.Logger | None = None) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("bookmarks.request")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Time the request and log it once the response is ready."""
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        # Set by the router on the shared scope once a route matched
        route = request.scope.get("route")
        fields = {
            "method": request.method,
            "url": str(request.url),
            "route_name": getattr(route, "name", None),
            "transaction_id": request.query_params.get("transaction_id") or None,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 1),
        }
        self._logger.info(
            "%s %s %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra=fields,
        )
        return response


app = FastAPI(
    title="Bookmarks API",
    description="Stores links with their oEmbed metadata and keywords.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(health.router)
app.include_router(bookmarks.router)
