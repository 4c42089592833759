"""Database engine factory — PostgreSQL, SQLite.

SQLite ``:memory:`` databases are pinned to a single shared connection so
the schema created at open time stays visible to every session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from tx_composer.config.settings import DatabaseEngine

if TYPE_CHECKING:
    from tx_composer.config.settings import DatabaseConfig


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from database configuration.

    Raises:
        ValueError: If the DSN does not match the configured engine.
    """
    scheme = config.dsn.split(":", 1)[0]
    if not scheme.startswith(config.engine.value):
        msg = f"DSN scheme {scheme!r} does not match database engine {config.engine.value!r}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {"echo": config.debug_sql}

    if config.engine is DatabaseEngine.SQLITE:
        if ":memory:" in config.dsn:
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_size"] = config.max_idle_connections
        kwargs["max_overflow"] = config.max_open_connections - config.max_idle_connections
        kwargs["pool_pre_ping"] = True

    return create_async_engine(config.dsn, **kwargs)
