from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Mobile Auth Service"
    API_V1_STR: str = "/api/v1"
    PORT: int = 8000
    DATABASE_URL: str = "sqlite+aiosqlite:///./auth.db"
    SQL_ECHO: bool = False

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    ROLE_SELECTION_EXPIRE_MINUTES: int = 5

    # Длина кода ограничена полем code в VerifySchema
    OTP_CODE_LENGTH: int = Field(6, ge=4, le=8)
    OTP_EXPIRES_IN_MINUTES: int = 5
    OTP_CLEANUP_INTERVAL_SECONDS: int = 3600
    SMS_GATEWAY_URL: str | None = None

    # Роль, которая выдаётся аккаунту при регистрации через OTP
    DEFAULT_ROLE_NAME: str | None = "user"
    DEFAULT_LOCALE: str = "fa"

    class Config:
        from_attributes = True
        env_file = ".env"

settings = Settings()


def get_settings() -> Settings:
    """Зависимость FastAPI: сервисы получают настройки явно, а не из глобала."""
    return settings
