# app/db/repositories/otp_code.py

from datetime import datetime, timedelta
from sqlalchemy import Boolean, DateTime, String, delete, insert, literal, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.otp_code import OtpCode

async def create_otp_code_if_absent(db: AsyncSession, mobile: str, code: str, ttl_minutes: int = 5) -> bool:
    """
    Создаёт запись с одноразовым кодом, если у телефона нет живого кода.
    Проверка и вставка идут одним INSERT ... SELECT ... WHERE NOT EXISTS,
    поэтому из параллельных запросов запись создаёт только один.
    ttl_minutes - время жизни кода (по умолчанию 5 минут).
    """
    now = datetime.utcnow()
    live_code = (
        select(OtpCode.id)
        .where(OtpCode.mobile == mobile)
        .where(OtpCode.is_used == False)  # noqa: E712
        .where(OtpCode.expires_at > now)
    )
    row = select(
        literal(mobile, String),
        literal(code, String),
        literal(now, DateTime),
        literal(now + timedelta(minutes=ttl_minutes), DateTime),
        literal(False, Boolean),
    ).where(~live_code.exists())
    result = await db.execute(
        insert(OtpCode).from_select(
            [OtpCode.mobile, OtpCode.code, OtpCode.created_at, OtpCode.expires_at, OtpCode.is_used],
            row,
        )
    )
    await db.commit()
    return result.rowcount == 1

async def get_valid_otp_code(db: AsyncSession, mobile: str, code: str) -> OtpCode | None:
    """
    Ищет неиспользованный код, ещё не истёкший и соответствующий телефону.
    """
    now = datetime.utcnow()
    query = (
        select(OtpCode)
        .where(OtpCode.mobile == mobile)
        .where(OtpCode.code == code)
        .where(OtpCode.is_used == False)  # noqa: E712
        .where(OtpCode.expires_at > now)
    )
    result = await db.execute(query)
    return result.scalars().first()

async def mark_code_as_used(db: AsyncSession, otp_code: OtpCode) -> bool:
    """
    Помечаем код как использованный (чтобы нельзя было использовать повторно).
    Условный UPDATE: True только у того запроса, который реально перевёл запись
    из "живой" в "использованную".
    """
    result = await db.execute(
        update(OtpCode)
        .where(OtpCode.id == otp_code.id)
        .where(OtpCode.is_used == False)  # noqa: E712
        .values(is_used=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1

async def delete_stale_otp_codes(db: AsyncSession) -> int:
    """Удаляет использованные и истёкшие коды, возвращает их количество."""
    now = datetime.utcnow()
    result = await db.execute(
        delete(OtpCode)
        .where(or_(OtpCode.is_used == True, OtpCode.expires_at <= now))  # noqa: E712
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
