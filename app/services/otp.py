import logging
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.errors import InvalidOrExpiredOtp
from app.db.repositories.otp_code import (
    create_otp_code_if_absent,
    get_valid_otp_code,
    mark_code_as_used,
)
from app.services.sms import SmsSender

logger = logging.getLogger(__name__)


def generate_numeric_code(length: int) -> str:
    """Код из `length` цифр, каждая равновероятна 0-9, ведущие нули допустимы."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


class OtpManager:
    def __init__(self, db: AsyncSession, settings: Settings, sender: SmsSender | None = None):
        self.db = db
        self.code_length = settings.OTP_CODE_LENGTH
        self.ttl_minutes = settings.OTP_EXPIRES_IN_MINUTES
        self.sender = sender or SmsSender(settings)

    async def issue_if_absent(self, mobile: str) -> bool:
        """
        Создаёт и отправляет новый код, только если у телефона нет живого кода.
        Повторный запрос в течение срока жизни кода ничего не делает.
        """
        code = generate_numeric_code(self.code_length)
        if not await create_otp_code_if_absent(self.db, mobile, code, ttl_minutes=self.ttl_minutes):
            logger.info("Live OTP already exists for %s, skipping", mobile)
            return False
        logger.info("OTP issued for %s, valid for %d min", mobile, self.ttl_minutes)

        # Запись уже сохранена; неудачная доставка её не откатывает
        if not await self.sender.send_otp(mobile, code):
            logger.warning("OTP for %s was stored but not delivered", mobile)
        return True

    async def consume(self, mobile: str, code: str) -> None:
        otp_code = await get_valid_otp_code(self.db, mobile, code)
        if not otp_code:
            raise InvalidOrExpiredOtp()

        # Если параллельный запрос успел погасить этот же код, проигравший получает ошибку
        if not await mark_code_as_used(self.db, otp_code):
            logger.info("OTP for %s consumed concurrently", mobile)
            raise InvalidOrExpiredOtp()
