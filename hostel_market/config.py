import os
from dotenv import load_dotenv

load_dotenv()


def _with_driver(url: str, scheme: str) -> str:
    """Подставляет нужный драйвер для postgres:// и postgresql:// URL"""
    for prefix in ("postgres://", "postgresql://", "postgresql+asyncpg://"):
        if url.startswith(prefix):
            return f"{scheme}://{url[len(prefix):]}"
    return url


class Settings:
    # Database
    POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")
    SQLITE_PATH: str = os.getenv("SQLITE_PATH", "./hostel_market.db")

    # Identity service
    IDENTITY_BASE_URL: str = os.getenv("IDENTITY_BASE_URL", "http://localhost:3000")
    API_TOKEN: str = os.getenv("API_TOKEN", "")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def DATABASE_URL(self) -> str:
        """Асинхронный URL для приложения"""
        if not self.POSTGRES_CONNECTION_STRING:
            return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"
        return _with_driver(self.POSTGRES_CONNECTION_STRING, "postgresql+asyncpg")

    @property
    def SYNC_DATABASE_URL(self) -> str:
        """Синхронный URL для Alembic"""
        if not self.POSTGRES_CONNECTION_STRING:
            return f"sqlite:///{self.SQLITE_PATH}"
        return _with_driver(self.POSTGRES_CONNECTION_STRING, "postgresql")


settings = Settings()
