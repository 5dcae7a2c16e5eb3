from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import MetaData

from brightenroll.core.config import settings

class Base(DeclarativeBase):
    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )

def make_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        future=True
    )

def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

# Local (offline-capable) store and cloud store: same metadata, two engines
local_engine = make_engine(settings.LOCAL_DATABASE_URL)
cloud_engine = make_engine(settings.CLOUD_DATABASE_URL)

LocalSessionLocal = make_sessionmaker(local_engine)
CloudSessionLocal = make_sessionmaker(cloud_engine)


async def init_db(engine: AsyncEngine = local_engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
