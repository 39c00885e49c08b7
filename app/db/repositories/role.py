from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.db.models.account import account_roles
from app.db.models.role import Role

async def get_role_by_name(db: AsyncSession, name: str) -> Role | None:
    result = await db.execute(select(Role).filter(Role.name == name))
    return result.scalars().first()

async def get_roles_for_account(db: AsyncSession, account_id: int) -> list[Role]:
    query = (
        select(Role)
        .join(account_roles, account_roles.c.role_id == Role.id)
        .where(account_roles.c.account_id == account_id)
        .order_by(Role.id)
    )
    result = await db.execute(query)
    return list(result.scalars().all())
