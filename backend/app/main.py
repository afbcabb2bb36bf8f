"""
Rostomyia Listing Search -- FastAPI Application
Faceted search, autocomplete and price-range control over the
in-memory listing catalog.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Callable, Optional
import logging
import logging.config
from datetime import datetime, timezone
import time
import asyncio

from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.rate_limiting import limiter, rate_limit_handler
from app.db.database import SessionLocal, init_db, mark_unavailable
from app.services.catalog import load_catalog
from app.api import health, routes_i18n, routes_search

logging.config.dictConfig({
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        },
        "json": {
            "()": "app.core.monitoring.JSONFormatter",
        },
    },
    "handlers": {
        "default": {
            "formatter": "json" if settings.log_format == "json" else "detailed",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "app": {"handlers": ["default"], "level": settings.log_level},
        "uvicorn": {"handlers": ["default"], "level": "INFO"},
        "sqlalchemy": {"handlers": ["default"], "level": "WARNING"},
    },
})
logger = logging.getLogger(__name__)

DB_INIT_ATTEMPTS = 3

# Probes hit the service constantly; their access lines go to debug
_QUIET_PREFIX = f"{settings.api_prefix}/health"


async def open_listing_store() -> Optional[Callable[[], Session]]:
    """Session factory for the listing store, or None when it stays unreachable."""
    for attempt in range(1, DB_INIT_ATTEMPTS + 1):
        try:
            init_db()
            return SessionLocal
        except Exception as e:
            if attempt < DB_INIT_ATTEMPTS:
                logger.warning(f"Listing store init attempt {attempt}/{DB_INIT_ATTEMPTS} failed: {e}, retrying in 2s...")
                await asyncio.sleep(2)
            else:
                logger.warning(f"Listing store unreachable after {DB_INIT_ATTEMPTS} attempts, falling back to the seed file: {e}")
    mark_unavailable()
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the catalog once at startup; it is immutable for the process lifetime."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment} | Workers: {settings.api_workers}")

    session_factory = await open_listing_store()
    app.state.catalog = load_catalog(session_factory)
    stats = app.state.catalog.stats()
    logger.info(
        f"Catalog ready from {stats.source}: {stats.listings} listings, "
        f"{stats.communes} communes, {stats.aliases} district aliases"
    )

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Listing search and faceted filters for the Oran property marketplace.",
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Search views carry full listing lists; compress anything over 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.middleware("http")
async def request_middleware(request: Request, call_next):
    """Request timing, security headers and access logging in one pass."""
    start = time.perf_counter()
    request_id = request.headers.get("X-Request-ID", "")

    response = await call_next(request)

    elapsed = time.perf_counter() - start
    response.headers["X-Process-Time"] = f"{elapsed:.3f}"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if request_id:
        response.headers["X-Request-ID"] = request_id

    path = request.url.path
    log = logger.debug if path.startswith(_QUIET_PREFIX) else logger.info
    log(f"{request.method} {path} -> {response.status_code} in {elapsed:.3f}s")
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Uncaught errors become a JSON 500; details only in debug mode."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
            "path": request.url.path,
            "request_id": request.headers.get("X-Request-ID", ""),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(routes_search.router, prefix=settings.api_prefix)
app.include_router(routes_i18n.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    """API entry points."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "health": f"{settings.api_prefix}/health",
        "search": f"{settings.api_prefix}/search",
        "suggest": f"{settings.api_prefix}/search/suggest",
        "languages": f"{settings.api_prefix}/i18n/languages",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
