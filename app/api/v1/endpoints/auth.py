from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service, get_current_user
from app.schemas.auth import (
    AccountRead,
    CheckMobileResponse,
    CheckMobileSchema,
    ProfileRead,
    RoleSelectionResponse,
    SelectRoleSchema,
    TokenResponse,
    VerifySchema,
)
from app.services.auth import AuthenticatedUser, AuthService, VerifyResult

router = APIRouter()


def _verify_response(result: VerifyResult) -> TokenResponse | RoleSelectionResponse:
    user = AccountRead.model_validate(result.user)
    if result.role_selection_pending:
        return RoleSelectionResponse(user=user, roles=result.roles, selection_token=result.selection_token)
    return TokenResponse(token=result.token, user=user)


@router.post("/check-mobile", response_model=CheckMobileResponse)
async def check_mobile(data: CheckMobileSchema, auth_service: AuthService = Depends(get_auth_service)):
    """
    Первый шаг: известен ли номер и есть ли у него пароль.
    OTP отправляется, если номера нет, пароля нет или передан force_otp.
    """
    return await auth_service.check_mobile(data.mobile, data.force_otp)


@router.post("/verify", response_model=TokenResponse | RoleSelectionResponse)
async def verify(data: VerifySchema, auth_service: AuthService = Depends(get_auth_service)):
    """
    Второй шаг: вход по паролю или OTP (регистрация, если номера ещё нет).
    - **Возвращает**: токен и пользователя, либо список ролей для выбора
    """
    result = await auth_service.verify(data.mobile, data.password, data.code, data.role_id)
    return _verify_response(result)


@router.post("/select-role", response_model=TokenResponse)
async def select_role(data: SelectRoleSchema, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.select_role(data.selection_token, data.role_id)
    return _verify_response(result)


@router.get("/me", response_model=ProfileRead)
async def me(user: AuthenticatedUser = Depends(get_current_user)):
    return ProfileRead(
        id=user.id,
        mobile=user.mobile,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        roles=sorted(user.roles),
        permissions={name: True for name in sorted(user.permissions)},
    )
