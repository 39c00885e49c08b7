from sqlalchemy.ext.asyncio import AsyncSession
from app.db.repositories.otp_code import delete_stale_otp_codes
import logging

logger = logging.getLogger(__name__)

async def purge_stale_otp_codes(db: AsyncSession) -> int:
    """Удаляет использованные и истёкшие OTP-коды; они уже ни на что не влияют."""
    logger.info("Начало очистки OTP-кодов.")
    deleted = await delete_stale_otp_codes(db)
    if not deleted:
        logger.info("Нет кодов для удаления.")
    else:
        logger.info("Очистка завершена. Удалено кодов: %d", deleted)
    return deleted
