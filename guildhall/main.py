"""Guildhall API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - GraphQL served at /graphql; uploaded images served at /images
    - Global error handlers map GuildhallError → structured JSON responses outside resolvers
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: cleaner startup/shutdown pairing
    - Images mounted AFTER API routes so /api/v1/* and /graphql take precedence
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import guildhall.infrastructure.database as db_module
from guildhall.api.error_handlers import register_error_handlers
from guildhall.api.graphql.schema import create_graphql_router
from guildhall.api.routes import health
from guildhall.config import get_settings
from guildhall.infrastructure.database import init_db
from guildhall.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    Path(settings.image_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Guildhall API started")
    yield
    logger.info("Guildhall API shutting down")
    if db_module.db_manager:
        await db_module.db_manager.dispose()


app = FastAPI(
    title="Guildhall API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Accept",
        "Authorization",
        "Content-Type",
        "X-Requested-With",
        "apollo-require-preflight",
        "x-apollo-operation-name",
    ],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(create_graphql_router(settings.graphiql), prefix="/graphql")

app.mount(
    "/images",
    StaticFiles(directory=settings.image_dir, check_dir=False),
    name="images",
)
