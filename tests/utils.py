from app.core.config import Settings
from app.services.sms import SmsSender

MOBILE = "09120000000"


class RecordingSender(SmsSender):
    """Вместо SMS запоминает отправленные коды."""

    def __init__(self, settings: Settings, ok: bool = True):
        super().__init__(settings)
        self.ok = ok
        self.sent: list[tuple[str, str]] = []

    async def send_otp(self, mobile: str, code: str) -> bool:
        self.sent.append((mobile, code))
        return self.ok
