from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from config import settings


def _get_engine_kwargs(database_url: str) -> dict:
    """Return dialect-specific engine options for SQLite vs PostgreSQL."""
    kwargs: dict = {"echo": settings.debug}
    if database_url.split(":")[0].lower().startswith("sqlite"):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, **_get_engine_kwargs(database_url))


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.database_url)

AsyncSessionLocal = build_sessionmaker(engine)


class Base(DeclarativeBase):
    pass


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine = engine):
    # Import models so their tables are registered on Base.metadata
    import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
