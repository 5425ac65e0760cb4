# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Database engine — single source of truth for DB connectivity.

PostgreSQL in deployment; SQLite for local runs and tests.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from stargate.core.config import settings

# Dialects that honour SELECT ... FOR UPDATE
ROW_LOCK_DIALECTS: frozenset[str] = frozenset({"postgresql", "mysql", "mariadb", "oracle"})


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite+pysqlite://") or ":memory:" in url


def build_engine(url: str) -> Engine:
    """Create an engine for ``url`` with pool settings suited to its backend."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            # One shared connection, otherwise every checkout sees an empty DB
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, **kwargs)

        @event.listens_for(sqlite_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

        return sqlite_engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def supports_row_locks(engine: Engine) -> bool:
    return engine.dialect.name in ROW_LOCK_DIALECTS


engine = build_engine(settings.DATABASE_URL)
