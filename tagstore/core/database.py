"""Database connection and session management."""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite:
        - in-memory БД живёт только в одном соединении, поэтому StaticPool
        - каждая транзакция открывается через BEGIN IMMEDIATE: писатели ждут
          блокировку БД на старте транзакции, а не падают на эскалации
          SHARED -> RESERVED посреди неё
    PostgreSQL:
        - NullPool, изоляция и блокировки на стороне сервера
    """
    if url.startswith("sqlite"):
        if ":memory:" in url:
            engine = create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,  # SQLite in-memory requires a single connection
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_async_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
        _use_immediate_transactions(engine)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,  # Disable connection pooling for PostgreSQL
    )


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """Hand transaction control to SQLAlchemy and start every transaction with BEGIN IMMEDIATE."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Отключаем неявный BEGIN драйвера pysqlite
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with the settings used across the app and the tests."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

AsyncSessionLocal = create_session_factory(engine)


async def init_db(bind: AsyncEngine | None = None):
    """Initialize database (create all tables)."""
    from ..models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None):
    """Drop all tables (use with caution!)."""
    from ..models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
