"""FastAPI application for the book catalog.

Exposes:
- GET    /v1/healthcheck
- GET    /v1/books, POST /v1/books
- GET    /v1/books/{book_id}, PATCH /v1/books/{book_id}, DELETE /v1/books/{book_id}
- POST   /v1/users
- PUT    /v1/users/password
- POST   /v1/tokens/authentication, DELETE /v1/tokens/authentication
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from catalog import __version__
from catalog.config import CatalogConfig
from catalog.logging_config import get_logger

from .dependencies import get_settings
from .error_handlers import register_error_handlers
from .routers import books as books_router
from .routers import tokens as tokens_router
from .routers import users as users_router

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request, call_next):
        request_logger = logging.getLogger("catalog.request")
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        client_ip = request.client.host if request.client else "unknown"
        request_logger.info(
            'ip="%s" url="%s %s" status=%d duration_ms=%.1f'
            % (client_ip, request.method, request.url.path, response.status_code, elapsed_ms)
        )
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    async def _print_startup_messages():
        await asyncio.sleep(0.1)
        logger.info("Started server process [" + str(os.getpid()) + "]")
        logger.info("Application startup complete. (Press CTRL+C to quit)")
        api_url = getattr(app.state, "api_url", None)
        if api_url:
            logger.info("Book catalog API available at: " + api_url)

    asyncio.create_task(_print_startup_messages())
    yield


app = FastAPI(title="Book Catalog", version=__version__, lifespan=_lifespan)
app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)

app.include_router(books_router.router, prefix="/v1/books")
app.include_router(users_router.router, prefix="/v1/users")
app.include_router(tokens_router.router, prefix="/v1/tokens")


@app.get("/v1/healthcheck")
def healthcheck(config: CatalogConfig = Depends(get_settings)) -> dict:
    return {
        "status": "available",
        "system_info": {
            "environment": config.server.env,
            "version": __version__,
        },
    }


class _UvicornStartupFilter(logging.Filter):
    """Suppress uvicorn's own startup lines; the lifespan prints ours."""

    def filter(self, record: logging.LogRecord) -> bool:
        raw = str(getattr(record, "msg", ""))
        for marker in (
            "Started server process",
            "Waiting for application startup",
            "Application startup complete",
            "running on",
        ):
            if marker in raw:
                return False
        return True


def run_server(
    config: CatalogConfig,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    """Run the FastAPI app with Uvicorn."""
    import uvicorn

    effective_host = host or config.server_host
    effective_port = port or config.server_port

    display_host = "localhost" if effective_host == "0.0.0.0" else effective_host
    app.state.api_url = f"http://{display_host}:{effective_port}/v1/"
    logger.info(f"Starting {config.server.env} server on {effective_host}:{effective_port}")

    startup_filter = _UvicornStartupFilter()
    for name in ("uvicorn", "uvicorn.error", "uvicorn.lifespan"):
        logging.getLogger(name).addFilter(startup_filter)

    uvicorn.run(
        app,
        host=effective_host,
        port=effective_port,
        log_level="info",
        log_config=None,
    )
