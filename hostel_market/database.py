from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from hostel_market.config import settings
from hostel_market.infrastructure.db_schema import metadata

engine = create_async_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
