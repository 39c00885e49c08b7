from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from app.db.models.account import Account
from app.db.models.role import Role

async def get_account_by_mobile(db: AsyncSession, mobile: str) -> Account | None:
    result = await db.execute(select(Account).filter(Account.mobile == mobile))
    return result.scalars().first()

async def get_account_by_id(db: AsyncSession, account_id: int) -> Account | None:
    result = await db.execute(select(Account).filter(Account.id == account_id))
    return result.scalars().first()

async def get_account_with_permissions(db: AsyncSession, account_id: int) -> Account | None:
    """Аккаунт вместе с ролями и правами этих ролей (для профиля)."""
    query = (
        select(Account)
        .options(selectinload(Account.roles).selectinload(Role.permissions))
        .filter(Account.id == account_id)
    )
    result = await db.execute(query)
    return result.scalars().first()

async def create_account(db: AsyncSession, mobile: str, roles: list[Role] | None = None) -> Account:
    # Телефон уникален: при конкурентной регистрации второй INSERT упадёт на ограничении
    account = Account(mobile=mobile, roles=list(roles or []))
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account
