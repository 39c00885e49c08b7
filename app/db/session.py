from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from app.core.config import settings

# Базовый класс моделей
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    kwargs = {}
    # Подключение к SQLite
    if "sqlite" in database_url:
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory база живёт в одном соединении, его делят все сессии
        if ":memory:" in database_url or database_url.endswith("://"):
            kwargs["poolclass"] = StaticPool
    return create_async_engine(database_url, echo=echo, **kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
async_session = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_db():
    async with async_session() as session:
        yield session
