"""
Memory Gateway — Application entry point.

Bootstraps FastAPI, wires up middleware and the error handler, and
registers route groups. The service is a stateless backend-for-frontend
for the memory-notes web app: it forwards prompts to LLM providers,
proxies the YouTube Data API, resolves transcripts, and scrapes pages.

Run locally:
    uvicorn memory_gateway.main:app --port 3001
    python -m memory_gateway.main

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from memory_gateway.core.config import settings
from memory_gateway.core.cors import OriginEchoMiddleware
from memory_gateway.core.errors import (
    GatewayError,
    gateway_error_handler,
    validation_error_handler,
)
from memory_gateway.routes.ai import router as ai_router
from memory_gateway.routes.health import VERSION
from memory_gateway.routes.health import router as health_router
from memory_gateway.routes.scrape import router as scrape_router
from memory_gateway.routes.social import router as social_router
from memory_gateway.routes.youtube import router as youtube_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Log which integrations are usable. Missing keys only disable their
    own branch, so nothing here can fail startup.
    """
    logger.info("Starting Memory Gateway (env: %s)", settings.environment)
    for name, enabled in settings.provider_status().items():
        logger.info("  %-10s %s", name, "enabled" if enabled else "disabled (no key)")
    logger.info("Default CORS origin: %s", settings.frontend_url)
    yield
    logger.info("Shutting down Memory Gateway")


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Memory Gateway",
    description=(
        "AI provider proxy, YouTube metadata/transcripts and website scraping "
        "for the memory-notes app."
    ),
    version=VERSION,
    lifespan=lifespan,
    # Disable docs in production to reduce attack surface
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)

app.add_exception_handler(GatewayError, gateway_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
# Echo allow-listed and localhost origins; everyone else gets FRONTEND_URL.
app.add_middleware(OriginEchoMiddleware)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(ai_router)
app.include_router(youtube_router)
app.include_router(scrape_router)
app.include_router(social_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "Memory Gateway",
        "version": VERSION,
        "status": "running",
        "environment": settings.environment,
    }


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
