import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from serene.api.api_v1.api import api_router
from serene.api.auth_deps import get_storage
from serene.core.config import settings
from serene.core.error_handlers import (
    general_exception_handler,
    request_validation_exception_handler,
    service_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from serene.core.errors import ServiceError
from serene.crud.storage import Storage
from serene.db.init_db import init_db, seed_catalog
from serene.db.session import AsyncSessionLocal
from serene.services.billing import configure_billing

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ("authorization", "cookie", "stripe-signature")


def _masked_headers(request: Request) -> dict:
    headers = dict(request.headers)
    for name in SENSITIVE_HEADERS:
        if name in headers:
            headers[name] = headers[name][:10] + "..."
    return headers


def create_app(storage: Optional[Storage] = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        storage: Backing store to use instead of the configured database.
            Tables are neither created nor checked when one is given.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for FastAPI application."""
        logger.info(f"Environment: {settings.ENV}")
        if not configure_billing():
            logger.warning("Billing integration is disabled. STRIPE_SECRET_KEY is not set.")

        if storage is not None:
            await seed_catalog(storage)
        else:
            try:
                await init_db()
                logger.info("Database connection verified")
            except Exception as e:
                logger.error(f"Database initialization failed: {e}")
                # Don't fail startup for database issues in development
                if settings.ENV == "production":
                    raise
        yield

    app = FastAPI(
        lifespan=lifespan,
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )

    if storage is not None:
        app.dependency_overrides[get_storage] = lambda: storage

    # Health check endpoint
    @app.get("/healthz")
    async def health_check():
        """Health check endpoint for container orchestration."""
        try:
            if storage is None:
                async with AsyncSessionLocal() as session:
                    await session.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "service": settings.PROJECT_NAME,
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(status_code=503, detail="Service unhealthy")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        logger.debug(f"Headers: {_masked_headers(request)}")
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.4f}s)"
        )
        return response

    # Add exception handlers
    app.add_exception_handler(ServiceError, service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    if settings.ENV == "development":
        logger.info("Development mode: allowing all localhost CORS origins")
        cors_origins = list(settings.BACKEND_CORS_ORIGINS) + [
            "http://localhost:3000",
            "http://localhost:5000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    else:
        cors_origins = list(settings.BACKEND_CORS_ORIGINS)
    logger.info("Final CORS Origins: %s", cors_origins)

    # credentials need explicit origins, the session is a cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(set(cors_origins)),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="localhost", port=settings.SERVER_PORT)
