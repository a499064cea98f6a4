"""Provider Account Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional


class ProviderAccountRepository(ABC):

    @abstractmethod
    async def get_tenant_id(self, account_id: str) -> Optional[str]:
        """Tenant owning a provider account, None if unknown"""
        pass
