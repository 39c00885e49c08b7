import re
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, model_validator

MOBILE_PATTERN = re.compile(r"^(\+98|0)?9\d{9}$")

def validate_mobile(mobile: str) -> str:
    # Иранский формат: 09xxxxxxxxx, +989xxxxxxxxx или 9xxxxxxxxx
    if not MOBILE_PATTERN.match(mobile):
        raise ValueError("Invalid mobile number.")
    # Все три записи одного номера хранятся как 09xxxxxxxxx
    return "0" + mobile[-10:]

Mobile = Annotated[str, AfterValidator(validate_mobile)]


class CheckMobileSchema(BaseModel):
    mobile: Mobile
    force_otp: bool = False


class CheckMobileResponse(BaseModel):
    has_password: bool
    otp_sent: bool


class VerifySchema(BaseModel):
    mobile: Mobile
    password: str | None = Field(default=None, min_length=6)
    code: str | None = Field(default=None, min_length=4, max_length=8, pattern=r"^\d+$")
    role_id: int | None = None

    @model_validator(mode="after")
    def password_xor_code(self):
        if self.password and self.code:
            raise ValueError("Cannot provide both OTP and password.")
        return self


class SelectRoleSchema(BaseModel):
    selection_token: str
    role_id: int


class AccountRead(BaseModel):
    id: int
    mobile: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    has_password: bool = False

    class Config:
        from_attributes = True


class RoleOption(BaseModel):
    id: int
    name: str


class TokenResponse(BaseModel):
    token: str
    user: AccountRead


class RoleSelectionResponse(BaseModel):
    user: AccountRead
    roles: list[RoleOption]
    selection_token: str


class ProfileRead(BaseModel):
    id: int
    mobile: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    roles: list[str]
    permissions: dict[str, bool]
