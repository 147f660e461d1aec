"""
PostgresStorage adapter for the blockcanvas assembly layer.

Implements the LayoutStorage protocol using Postgres as the backend.
Stores serialized Layout documents directly in the layouts table.
"""

from __future__ import annotations

import asyncpg

from blockcanvas.kernel.assembly import LayoutStorage

CREATE_LAYOUTS_TABLE = """
CREATE TABLE IF NOT EXISTS layouts (
    canvas_id  TEXT PRIMARY KEY,
    document   TEXT NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""


class PostgresStorage(LayoutStorage):
    """
    Postgres-based storage for layout documents.

    One row per canvas; a save replaces the whole document.
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def ensure_schema(self) -> None:
        """Create the layouts table if it does not exist yet."""
        async with self.pool.acquire() as conn:
            await conn.execute(CREATE_LAYOUTS_TABLE)

    async def get(self, canvas_id: str) -> str | None:
        """Fetch the layout document for a canvas. Returns None if not found."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT document FROM layouts WHERE canvas_id = $1",
                canvas_id,
            )
            return row["document"] if row else None

    async def put(self, canvas_id: str, document: str) -> None:
        """Write the layout document for a canvas."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO layouts (canvas_id, document, updated_at)
                VALUES ($1, $2, now())
                ON CONFLICT (canvas_id)
                DO UPDATE SET document = EXCLUDED.document, updated_at = now()
                """,
                canvas_id,
                document,
            )

    async def delete(self, canvas_id: str) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "DELETE FROM layouts WHERE canvas_id = $1",
                canvas_id,
            )

    async def close(self) -> None:
        """Close the connection pool."""
        await self.pool.close()
