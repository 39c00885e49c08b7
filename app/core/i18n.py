from fastapi import Request

from app.core.config import Settings

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "auth.error": "Authentication error.",
        "auth.invalid_credentials": "Invalid credentials.",
        "auth.invalid_or_expired_otp": "Invalid or expired OTP.",
        "auth.otp_or_password_required": "Either password or OTP code is required for verification.",
        "auth.account_resolution_failed": "User not found after verification.",
        "auth.no_roles_assigned": "No roles are assigned to this account.",
        "auth.invalid_role_id": "The selected role is not assigned to this account.",
        "auth.role_selection_required": "Please select a role to continue.",
        "auth.user_not_found": "User not found.",
        "auth.authentication_failed": "Authentication failed.",
        "auth.forbidden": "Insufficient permissions.",
    },
    "fa": {
        "auth.error": "خطای احراز هویت.",
        "auth.invalid_credentials": "اطلاعات ورود نامعتبر است.",
        "auth.invalid_or_expired_otp": "کد یکبار مصرف نامعتبر یا منقضی شده است.",
        "auth.otp_or_password_required": "وارد کردن رمز عبور یا کد یکبار مصرف الزامی است.",
        "auth.account_resolution_failed": "کاربر پس از تایید یافت نشد.",
        "auth.no_roles_assigned": "هیچ نقشی به این حساب اختصاص داده نشده است.",
        "auth.invalid_role_id": "نقش انتخاب شده متعلق به این حساب نیست.",
        "auth.role_selection_required": "لطفا برای ادامه یک نقش انتخاب کنید.",
        "auth.user_not_found": "کاربر یافت نشد.",
        "auth.authentication_failed": "احراز هویت ناموفق بود.",
        "auth.forbidden": "دسترسی کافی ندارید.",
    },
}


class Translator:
    def __init__(self, locale: str, fallback: str = "en"):
        self.fallback = fallback if fallback in MESSAGES else "en"
        self.locale = locale if locale in MESSAGES else self.fallback

    def t(self, key: str) -> str:
        catalogue = MESSAGES[self.locale]
        if key in catalogue:
            return catalogue[key]
        return MESSAGES[self.fallback].get(key, key)


def parse_accept_language(header: str | None, default: str) -> str:
    # "fa-IR,fa;q=0.9,en;q=0.8" -> "fa"
    if not header:
        return default
    first = header.split(",")[0].split(";")[0].strip()
    return first.split("-")[0].lower() or default


def translator_for_request(request: Request, settings: Settings) -> Translator:
    locale = parse_accept_language(request.headers.get("accept-language"), settings.DEFAULT_LOCALE)
    return Translator(locale, fallback=settings.DEFAULT_LOCALE)
