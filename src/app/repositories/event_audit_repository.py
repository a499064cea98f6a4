"""Event Audit Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.event_audit_entry import EventAuditEntry


class EventAuditRepository(ABC):

    @abstractmethod
    async def create(self, entry: EventAuditEntry) -> EventAuditEntry:
        pass

    @abstractmethod
    async def get_by_target(self, target_id: str) -> List[EventAuditEntry]:
        pass
