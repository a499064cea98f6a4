from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.provider_account_repository import ProviderAccountRepository
from src.domain.provider_account import ProviderAccount


class SqlAlchemyProviderAccountRepository(ProviderAccountRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_tenant_id(self, account_id: str) -> Optional[str]:
        stmt = select(ProviderAccount.tenant_id).where(ProviderAccount.account_id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
