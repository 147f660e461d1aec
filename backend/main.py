"""
blockcanvas FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend import config, db
from backend.routes import blocks as block_routes
from backend.routes import compile as compile_routes
from backend.routes import generate as generate_routes
from backend.routes import layouts as layout_routes
from backend.services import kernel
from blockcanvas.kernel.assembly import MemoryStorage
from blockcanvas.kernel.postgres_storage import PostgresStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Choose layout storage (Postgres when DATABASE_URL is set, else memory)
    - Close database pool on shutdown
    """
    # Startup
    if config.settings.uses_database:
        pool = await db.init_pool()
        storage = PostgresStorage(pool)
        await storage.ensure_schema()
        logger.info("Database pool initialized")
    else:
        storage = MemoryStorage()
        logger.info("DATABASE_URL not set, layouts are kept in memory")
    kernel.configure(storage)

    yield

    # Shutdown
    await db.close_pool()


app = FastAPI(
    title="blockcanvas",
    lifespan=lifespan,
)

# Register routes
app.include_router(block_routes.router)
app.include_router(layout_routes.router)
app.include_router(compile_routes.router)
app.include_router(generate_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
