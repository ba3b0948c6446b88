"""
Storefront: Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `services/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.v1.api import api_router
from storefront.container import build_backends
from storefront.core.config import settings
from storefront.core.exceptions import register_exception_handlers
from storefront.core.limiter import limiter
from storefront.platform.middleware import RequestLoggingMiddleware
from storefront.schemas.user import RegisterRequest
from storefront.services.catalog import CatalogService
from storefront.services.users import UserService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    backends = build_backends(settings)
    await backends.store.initialize()

    app.state.store = backends.store
    app.state.identity = backends.identity
    app.state.storage = backends.storage

    for bucket in (settings.PRODUCTS_BUCKET, settings.PROFILES_BUCKET):
        await backends.storage.ensure_bucket(bucket)

    # Repair index drift left by interrupted or concurrent writers
    await CatalogService(backends.store).reconcile_index()

    # Seed default owner on first run
    owner_email = settings.FIRST_OWNER_EMAIL.strip().lower()
    if await backends.store.get(f"user:email:{owner_email}") is None:
        await UserService(backends.store, backends.identity).register(
            RegisterRequest(
                email=owner_email,
                password=settings.FIRST_OWNER_PASSWORD,
                name="Store Owner",
                role="owner",
            )
        )
        logger.info("Default owner created: %s (password: <redacted>)", owner_email)

    logger.info("Storefront v%s started", settings.VERSION)
    yield
    await backends.store.close()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Storefront catalog, cart and attendance API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length", "X-Request-Id"],
        max_age=600,
    )

    # Access log (outermost, so it sees the final status)
    application.add_middleware(RequestLoggingMiddleware)

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Rate limiting on the public auth endpoints
    application.state.limiter = limiter

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
