"""
Двухшаговый вход/регистрация по номеру мобильного.

Шаг 1 (`check_mobile`) сообщает, есть ли у номера пароль, и при необходимости
отправляет OTP. Шаг 2 (`verify`) проверяет пароль или OTP, при первом входе
по OTP создаёт аккаунт, выбирает роль и выдаёт JWT.
"""
from dataclasses import dataclass, field
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.errors import (
    AccountResolutionFailed,
    AuthenticationFailed,
    CredentialRequired,
    InvalidCredentials,
    InvalidRoleId,
    NoRolesAssigned,
    RoleSelectionRequired,
    UserNotFound,
)
from app.core.security import ROLE_SELECTION_TOKEN_TYPE, TokenIssuer, verify_password
from app.db.models.account import Account
from app.db.repositories.account import (
    create_account,
    get_account_by_id,
    get_account_by_mobile,
    get_account_with_permissions,
)
from app.db.repositories.role import get_role_by_name, get_roles_for_account
from app.services.otp import OtpManager

logger = logging.getLogger(__name__)


@dataclass
class VerifyResult:
    user: Account
    token: str | None = None
    roles: list[dict] | None = None
    selection_token: str | None = None

    @property
    def role_selection_pending(self) -> bool:
        return self.token is None


@dataclass(frozen=True)
class AuthenticatedUser:
    id: int
    mobile: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)

    def can(self, permission: str) -> bool:
        return permission in self.permissions

    def has_role(self, role: str) -> bool:
        return role in self.roles


class AuthService:
    def __init__(self, db: AsyncSession, settings: Settings,
                 otp_manager: OtpManager | None = None, token_issuer: TokenIssuer | None = None):
        self.db = db
        self.settings = settings
        self.otp = otp_manager or OtpManager(db, settings)
        self.tokens = token_issuer or TokenIssuer(settings)

    async def check_mobile(self, mobile: str, force_otp: bool = False) -> dict:
        account = await get_account_by_mobile(self.db, mobile)

        if not account:
            # Номер неизвестен: OTP для регистрации
            await self.otp.issue_if_absent(mobile)
            return {"has_password": False, "otp_sent": True}

        has_password = account.has_password
        if not has_password or force_otp:
            await self.otp.issue_if_absent(mobile)
            return {"has_password": has_password, "otp_sent": True}

        return {"has_password": True, "otp_sent": False}

    async def verify(self, mobile: str, password: str | None = None, code: str | None = None,
                     role_id: int | None = None) -> VerifyResult:
        if password:
            account = await get_account_by_mobile(self.db, mobile)
            if not account or not account.password:
                logger.info("Password login for %s rejected: no account or no password", mobile)
                raise InvalidCredentials()
            if not verify_password(password, account.password):
                logger.info("Password login for %s rejected: mismatch", mobile)
                raise InvalidCredentials()
        elif code:
            await self.otp.consume(mobile, code)
            account = await get_account_by_mobile(self.db, mobile)
            if not account:
                account = await self._register(mobile)
        else:
            raise CredentialRequired()

        if not account:
            raise AccountResolutionFailed()

        return await self._issue_for_account(account, role_id)

    async def select_role(self, selection_token: str, role_id: int) -> VerifyResult:
        """Выбор роли после шага verify, без повторной проверки пароля/OTP."""
        payload = self.tokens.decode(selection_token, token_type=ROLE_SELECTION_TOKEN_TYPE)
        if not payload:
            raise AuthenticationFailed()

        account = await get_account_by_id(self.db, payload["id"])
        if not account:
            raise UserNotFound()
        return await self._issue_for_account(account, role_id)

    async def get_authenticated_user(self, account_id: int) -> AuthenticatedUser:
        account = await get_account_with_permissions(self.db, account_id)
        if not account:
            raise UserNotFound()

        return AuthenticatedUser(
            id=account.id,
            mobile=account.mobile,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            roles=frozenset(role.name for role in account.roles),
            permissions=frozenset(
                permission.name for role in account.roles for permission in role.permissions
            ),
        )

    async def _register(self, mobile: str) -> Account:
        roles = []
        if self.settings.DEFAULT_ROLE_NAME:
            default_role = await get_role_by_name(self.db, self.settings.DEFAULT_ROLE_NAME)
            if default_role:
                roles.append(default_role)
            else:
                logger.warning("Default role %r does not exist", self.settings.DEFAULT_ROLE_NAME)

        account = await create_account(self.db, mobile, roles=roles)
        logger.info("Account %s created for %s", account.id, mobile)
        return account

    async def _issue_for_account(self, account: Account, role_id: int | None) -> VerifyResult:
        roles = await get_roles_for_account(self.db, account.id)
        if not roles:
            raise NoRolesAssigned()

        if len(roles) > 1 and role_id is None:
            # Не ошибка: клиент должен выбрать роль и прийти ещё раз
            return VerifyResult(
                user=account,
                roles=[{"id": role.id, "name": role.name} for role in roles],
                selection_token=self.tokens.create_role_selection_token(account.id, account.mobile),
            )

        selected_role_id = None
        if len(roles) == 1:
            selected_role_id = roles[0].id
        elif role_id is not None:
            if role_id not in {role.id for role in roles}:
                raise InvalidRoleId()
            selected_role_id = role_id

        if len(roles) > 1 and selected_role_id is None:
            raise RoleSelectionRequired()

        token = self.tokens.create_access_token(account.id, account.mobile, role_id=selected_role_id)
        return VerifyResult(user=account, token=token)
