"""FastAPI application configuration module."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

# Internal imports
from ellarises.config.environment import (  # Environment must be imported first
    IS_PRODUCTION_ENVIRONMENT,
    SESSION_SECRET,
    DB_CONNECT_TIMEOUT,
)
from ellarises.config.cors import CORS_CONFIG
from ellarises.utils.logging_config import setup_logging
from ellarises.db import Database, DatabaseError, reconcile_sequences
from ellarises.errors import BookingError
from .routes import admin, auth, booking, health

# Set up logging
setup_logging()
logger = logging.getLogger(__name__)

SESSION_MAX_AGE = 24 * 60 * 60

async def check_database(database: Database, timeout: float) -> bool:
    """Race the connectivity check against ``timeout`` seconds."""
    try:
        await asyncio.wait_for(asyncio.to_thread(database.check_connection), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"⚠ Database connection timed out after {timeout}s. Server will continue without database.")
        return False
    except Exception as e:
        logger.warning(f"⚠ Database connection failed. Server will continue without database. Error: {e}")
        return False
    logger.info("✓ Database connected successfully")
    return True

def prepare_database(database: Database) -> bool:
    """Create missing tables and realign id sequences. Returns False if the schema check fails."""
    try:
        database.ensure_tables_exist()
    except DatabaseError as e:
        logger.error(f"Database schema check failed: {e}")
        return False

    # Non-fatal: failures are logged inside
    reconcile_sequences(database)
    return True

def create_lifespan(connect_timeout: float):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        database: Optional[Database] = app.state.database
        # Startup: the service starts whatever the connectivity check says
        if database is None:
            logger.warning("⚠ Database not configured. Database features will be unavailable.")
        elif await check_database(database, connect_timeout):
            ready = await asyncio.to_thread(prepare_database, database)
            database.mark_available(ready)
        else:
            database.mark_available(False)
        yield
        # Shutdown
        if database is not None:
            database.dispose()
    return lifespan

def _default_database() -> Optional[Database]:
    try:
        return Database()
    except (ValueError, DatabaseError) as e:
        logger.error(f"Database configuration failed: {e}")
        return None

def create_application(
    database: Optional[Database] = None,
    connect_timeout: float = DB_CONNECT_TIMEOUT,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Ella Rises API",
        description="Event availability, reservations and back-office management",
        version="1.0.0",
        docs_url=None if IS_PRODUCTION_ENVIRONMENT else '/api/docs',
        redoc_url=None if IS_PRODUCTION_ENVIRONMENT else '/api/redoc',
        lifespan=create_lifespan(connect_timeout)
    )
    app.state.database = database if database is not None else _default_database()

    # Configure CORS and the session cookie
    app.add_middleware(CORSMiddleware, **CORS_CONFIG)
    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
        https_only=IS_PRODUCTION_ENVIRONMENT,
    )

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "code": "database_error",
                "message": "An error occurred. Please try again later.",
            },
        )

    # Include health check router without prefix
    app.include_router(health.router)

    # Include routers with prefix
    app.include_router(auth.router)
    app.include_router(booking.router, prefix="/api")
    app.include_router(admin.router)

    return app

# Create the application instance
app = create_application()
