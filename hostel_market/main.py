import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from hostel_market.config import settings
from hostel_market.database import create_tables
from hostel_market.presentation.api import router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    await create_tables()
    logger.info("Таблицы созданы")
    yield
    logger.info("Приложение останавливается...")


app = FastAPI(
    title="Hostel Market",
    description="Заказы снеков между жильцами общежитий",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Hostel Market работает"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
