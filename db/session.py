import os
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine

_engine: Optional[AsyncEngine] = None


def get_engine(url: Optional[str] = None) -> AsyncEngine:
    """Return a singleton AsyncEngine, creating it on first use."""
    global _engine
    if _engine is None:
        dsn = url or os.getenv("DATABASE_URL")
        if not dsn:
            raise RuntimeError(
                "DATABASE_URL is not set. Export it or load it in your entrypoint before calling get_engine()."
            )
        _engine = create_async_engine(dsn, **_pool_options(dsn))
    return _engine


async def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def _pool_options(dsn: str) -> dict:
    # SQLite uses a static/null pool that rejects sizing arguments
    if dsn.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 5,
        "pool_timeout": 30,
        "pool_recycle": 1800,
    }
