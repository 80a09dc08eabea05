"""
Family Finance — FastAPI Application.

This is the entry point for the application.
All routers and error handlers are registered here. The
database handle lives for the lifetime of the process: built
on startup, disposed on shutdown.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from family_finance.config import get_settings
from family_finance.database import Database
from family_finance.logging_config import setup_logging
from family_finance.api.errors import register_exception_handlers
from family_finance.api.health import router as health_router
from family_finance.api.accounts import router as accounts_router
from family_finance.api.transfers import router as transfers_router

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    app.state.database = Database(
        settings.DATABASE_URL,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )
    logger.info(
        "%s %s started (%s)",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
    )
    try:
        yield
    finally:
        app.state.database.dispose()
        logger.info("Database connections released")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Household accounts and transfers between them",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transfers_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "family_finance.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
