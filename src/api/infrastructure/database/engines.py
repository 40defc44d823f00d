"""Database engine creation for async SQLAlchemy.

This module provides the factory used to open one engine per tenant. The
driver is selected by the URI (``postgresql+asyncpg://`` in production,
``sqlite+aiosqlite://`` for local runs and tests).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from infrastructure.database.exceptions import DatabaseConnectionError

__all__ = [
    "BASELINE_ENGINE_OPTIONS",
    "create_tenant_engine",
    "merge_engine_options",
    "redact_url",
]

# Applied to every tenant engine, caller supplied options win.
BASELINE_ENGINE_OPTIONS: dict[str, Any] = {
    "pool_pre_ping": True,  # Verify connections before using
}


def merge_engine_options(options: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge caller supplied engine options over the baseline defaults.

    Args:
        options: Driver specific options returned by the options builder,
            or None when no builder is configured.

    Returns:
        A new dictionary safe to pass to ``create_async_engine``.
    """
    return {**BASELINE_ENGINE_OPTIONS, **dict(options or {})}


def create_tenant_engine(uri: str, options: Mapping[str, Any] | None = None) -> AsyncEngine:
    """Create the async engine backing a single tenant connection.

    Engines connect lazily; callers that need to know the database is
    reachable should ping it after creation.

    Args:
        uri: SQLAlchemy database URL for the tenant
        options: Engine keyword options (already merged with the baseline)

    Returns:
        Configured async engine

    Raises:
        DatabaseConnectionError: If the URL or options are rejected by SQLAlchemy.
    """
    try:
        return create_async_engine(uri, **dict(options or {}))
    except (ArgumentError, TypeError, ValueError) as e:
        raise DatabaseConnectionError(
            f"Invalid engine configuration for {redact_url(uri)}: {e}"
        ) from e


def redact_url(uri: str) -> str:
    """Render a database URL without its password, for logging."""
    try:
        return make_url(uri).render_as_string(hide_password=True)
    except ArgumentError:
        return "<invalid url>"
