"""Application configuration and router setup."""

from contextlib import asynccontextmanager
from typing import Optional

import fastapi
from fastapi import status
from fastapi.middleware import cors
from fastapi.responses import JSONResponse

from components.core import config, init_db, schemas
from components.core.database import DatabaseManager
from components.core.exceptions import NotFoundError, StorageUnavailableError, ValidationError
from components.core.logging import setup_logging
from restapi.endpoints import dashboard, defaulters, health_check, loans, payments


def _error_handler(status_code: int):
    async def handler(request: fastapi.Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=schemas.ErrorResponse(detail=str(exc)).model_dump())
    return handler


def create_app(db_manager: Optional[DatabaseManager] = None) -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = config.get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    db_manager = db_manager or DatabaseManager()

    @asynccontextmanager
    async def lifespan(app: fastapi.FastAPI):
        await db_manager.create_all()
        yield
        await db_manager.dispose()

    app = fastapi.FastAPI(
        title=settings.SERVICE_NAME,
        description="Loan tracking for savings and credit cooperatives",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Initialize database
    init_db.init_db(app, db_manager)

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store errors, ValidationError covers PaymentExceedsBalanceError
    app.add_exception_handler(NotFoundError, _error_handler(status.HTTP_404_NOT_FOUND))
    app.add_exception_handler(ValidationError, _error_handler(status.HTTP_400_BAD_REQUEST))
    app.add_exception_handler(StorageUnavailableError, _error_handler(status.HTTP_503_SERVICE_UNAVAILABLE))

    # Include routers
    app.include_router(health_check.router)
    app.include_router(loans.router)
    app.include_router(payments.router)
    app.include_router(defaulters.router)
    app.include_router(dashboard.router)

    return app
