from datetime import datetime, timedelta, timezone
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
ROLE_SELECTION_TOKEN_TYPE = "role_selection"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # В базе лежит что-то, что не является хэшем
        return False


class TokenIssuer:
    """
    Подписывает и проверяет JWT.

    Токен несёт клейм `typ`, чтобы токен выбора роли нельзя было
    предъявить вместо обычного access-токена.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.access_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.selection_expires = timedelta(minutes=settings.ROLE_SELECTION_EXPIRE_MINUTES)

    def _encode(self, claims: dict, token_type: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {k: v for k, v in claims.items() if v is not None}
        payload.update({
            "typ": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
        })
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_access_token(self, account_id: int, mobile: str, role_id: int | None = None,
                            expires_delta: timedelta | None = None) -> str:
        claims = {"id": account_id, "mobile": mobile, "role_id": role_id}
        return self._encode(claims, ACCESS_TOKEN_TYPE, expires_delta or self.access_expires)

    def create_role_selection_token(self, account_id: int, mobile: str) -> str:
        claims = {"id": account_id, "mobile": mobile}
        return self._encode(claims, ROLE_SELECTION_TOKEN_TYPE, self.selection_expires)

    def decode(self, token: str, token_type: str = ACCESS_TOKEN_TYPE) -> dict | None:
        """Возвращает payload или None, если токен просрочен, подделан или другого типа."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.info("Token rejected: %s", exc)
            return None
        if payload.get("typ") != token_type or "id" not in payload:
            return None
        return payload
