"""
blockcanvas configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Database (empty → in-memory layout storage)
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")

    # Structure generator (empty → static starter list)
    GENERATOR_URL: str = os.environ.get("GENERATOR_URL", "")
    GENERATOR_API_KEY: str = os.environ.get("GENERATOR_API_KEY", "")

    # Timeouts
    PERSISTENCE_TIMEOUT_SECONDS: float = float(os.environ.get("PERSISTENCE_TIMEOUT_SECONDS", "10"))
    GENERATOR_TIMEOUT_SECONDS: float = float(os.environ.get("GENERATOR_TIMEOUT_SECONDS", "30"))

    # Canvas geometry for server-side sessions
    CANVAS_WIDTH: int = int(os.environ.get("CANVAS_WIDTH", "1200"))
    CANVAS_HEIGHT: int = int(os.environ.get("CANVAS_HEIGHT", "800"))

    # Export
    EXPORT_DIR: str = os.environ.get("EXPORT_DIR", "")

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def uses_database(self) -> bool:
        return bool(self.DATABASE_URL)


# Singleton instance
settings = Settings()
