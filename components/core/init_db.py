"""Database initialization and dependency injection."""

from typing import AsyncGenerator

import fastapi
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
# Import all models to ensure they're registered
import components.loan.models
import components.payment.models


def init_db(app: fastapi.FastAPI, db_manager: DatabaseManager) -> None:
    """Attach the database manager to the application."""
    app.state.db_manager = db_manager


async def get_db(request: fastapi.Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    db_manager: DatabaseManager = request.app.state.db_manager
    async with db_manager.get_db() as session:
        yield session
