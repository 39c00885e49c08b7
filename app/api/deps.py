from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.errors import AuthenticationFailed, Forbidden
from app.core.security import TokenIssuer
from app.db.session import get_db
from app.services.auth import AuthenticatedUser, AuthService

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer(settings)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(db, settings, token_issuer=token_issuer)


def decode_access_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict:
    """Payload access-токена из заголовка Authorization: Bearer <token>."""
    if credentials is None:
        raise AuthenticationFailed()
    payload = token_issuer.decode(credentials.credentials)
    if payload is None:
        raise AuthenticationFailed()
    return payload


async def get_current_user(
    token: dict = Depends(decode_access_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    return await auth_service.get_authenticated_user(token["id"])


def require_permission(permission: str):
    async def checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not user.can(permission):
            raise Forbidden()
        return user
    return checker


def require_role(role: str):
    async def checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not user.has_role(role):
            raise Forbidden()
        return user
    return checker
