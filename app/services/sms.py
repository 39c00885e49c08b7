import logging

import aiohttp

from app.core.config import Settings

logger = logging.getLogger(__name__)


class SmsSender:
    """
    Доставка OTP. Без SMS_GATEWAY_URL код только пишется в лог (режим разработки),
    иначе уходит POST-запросом на шлюз. Ошибки доставки не пробрасываются.
    """

    def __init__(self, settings: Settings):
        self.gateway_url = settings.SMS_GATEWAY_URL

    async def send_otp(self, mobile: str, code: str) -> bool:
        if not self.gateway_url:
            logger.debug("SMS gateway not configured, OTP for %s: %s", mobile, code)
            return True

        payload = {"mobile": mobile, "code": code}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.gateway_url, json=payload) as resp:
                    if resp.status == 200:
                        return True
                    logger.warning("SMS gateway answered %s for %s", resp.status, mobile)
        except aiohttp.ClientError as e:
            logger.error("OTP delivery to %s failed: %s", mobile, str(e))
        return False
