"""Async engine for the cluster store."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from keyword_clusters.config.settings import get_settings

_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first use.

    SQL echo follows ``log_level=DEBUG``.  SQLite URLs skip the pre-ping,
    which only matters for pooled server connections.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.database_url
        _engine = create_async_engine(
            url,
            echo=settings.log_level.upper() == "DEBUG",
            pool_pre_ping=not url.startswith("sqlite"),
        )
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
