from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from keyword_clusters.db.engine import dispose_engine, get_engine

_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return a cached session factory bound to the engine.

    Objects stay usable after commit; ``commit_clusters`` reads generated
    ids after its transaction closes.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def close_db() -> None:
    """Drop the session factory and dispose the engine (end of CLI run / app shutdown)."""
    global _session_factory
    _session_factory = None
    await dispose_engine()
