# Импорт всех моделей, чтобы строковые relationship(...) резолвились
from app.db.models.account import Account, account_roles
from app.db.models.role import Role, Permission, role_permissions
from app.db.models.otp_code import OtpCode

__all__ = ["Account", "account_roles", "Role", "Permission", "role_permissions", "OtpCode"]
