import os
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Settings() читает окружение при импорте app.core.config
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from app.core.config import Settings, settings as app_settings  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.db import models  # noqa: E402,F401
from app.db.models.account import Account  # noqa: E402
from app.db.models.otp_code import OtpCode  # noqa: E402
from app.db.models.role import Permission, Role  # noqa: E402
from app.db.session import Base, build_engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from tests.utils import MOBILE, RecordingSender  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return app_settings.model_copy(update={"SMS_GATEWAY_URL": None})


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sender(settings) -> RecordingSender:
    return RecordingSender(settings)


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --------------------------------------------------------------------------
# Фабрики данных
# --------------------------------------------------------------------------

@pytest.fixture
def make_role(db_session):
    async def _make_role(name: str, permissions: tuple[str, ...] = ()) -> Role:
        granted = []
        for permission_name in permissions:
            result = await db_session.execute(select(Permission).where(Permission.name == permission_name))
            granted.append(result.scalars().first() or Permission(name=permission_name))
        role = Role(name=name, permissions=granted)
        db_session.add(role)
        await db_session.commit()
        await db_session.refresh(role)
        return role
    return _make_role


@pytest.fixture
def make_account(db_session):
    async def _make_account(mobile: str = MOBILE, password: str | None = None,
                            roles: list[Role] | None = None, **profile) -> Account:
        account = Account(
            mobile=mobile,
            password=get_password_hash(password) if password else None,
            roles=list(roles or []),
            **profile,
        )
        db_session.add(account)
        await db_session.commit()
        await db_session.refresh(account)
        return account
    return _make_account


@pytest.fixture
def make_otp(db_session):
    async def _make_otp(mobile: str = MOBILE, code: str = "123456", expires_in_minutes: int = 5,
                        is_used: bool = False) -> OtpCode:
        now = datetime.utcnow()
        otp_code = OtpCode(
            mobile=mobile,
            code=code,
            created_at=now,
            expires_at=now + timedelta(minutes=expires_in_minutes),
            is_used=is_used,
        )
        db_session.add(otp_code)
        await db_session.commit()
        await db_session.refresh(otp_code)
        return otp_code
    return _make_otp
