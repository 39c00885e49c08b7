from fastapi import status


class AuthError(Exception):
    """Базовая ошибка аутентификации. Текст для клиента берётся из каталога по message_key."""

    http_status = status.HTTP_400_BAD_REQUEST
    message_key = "auth.error"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.message_key
        super().__init__(self.detail)

    @property
    def code(self) -> str:
        return type(self).__name__


class InvalidCredentials(AuthError):
    http_status = status.HTTP_401_UNAUTHORIZED
    message_key = "auth.invalid_credentials"


class InvalidOrExpiredOtp(AuthError):
    http_status = status.HTTP_401_UNAUTHORIZED
    message_key = "auth.invalid_or_expired_otp"


class CredentialRequired(AuthError):
    message_key = "auth.otp_or_password_required"


class AccountResolutionFailed(AuthError):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_key = "auth.account_resolution_failed"


class NoRolesAssigned(AuthError):
    http_status = status.HTTP_403_FORBIDDEN
    message_key = "auth.no_roles_assigned"


class InvalidRoleId(AuthError):
    message_key = "auth.invalid_role_id"


class RoleSelectionRequired(AuthError):
    message_key = "auth.role_selection_required"


class UserNotFound(AuthError):
    http_status = status.HTTP_404_NOT_FOUND
    message_key = "auth.user_not_found"


class AuthenticationFailed(AuthError):
    http_status = status.HTTP_401_UNAUTHORIZED
    message_key = "auth.authentication_failed"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AuthError):
    http_status = status.HTTP_403_FORBIDDEN
    message_key = "auth.forbidden"
