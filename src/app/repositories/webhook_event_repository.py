"""Webhook Event Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from src.domain.webhook_event import WebhookEvent


class WebhookEventRepository(ABC):

    @abstractmethod
    async def create(self, event: WebhookEvent) -> WebhookEvent:
        """
        Insert a new event row

        Raises:
            DuplicateKeyError: If event_id was already stored (duplicate delivery)
        """
        pass

    @abstractmethod
    async def get_by_event_id(self, event_id: str) -> Optional[WebhookEvent]:
        pass

    @abstractmethod
    async def update(self, event: WebhookEvent) -> WebhookEvent:
        pass

    @abstractmethod
    async def claim_match(self, event_pk: int, processed_at: datetime) -> bool:
        """
        Atomically flip matched from False to True

        Returns:
            True if this caller flipped it, False if the event was already matched
        """
        pass

    @abstractmethod
    async def list_events(
        self,
        matched: Optional[bool] = None,
        provider: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[WebhookEvent], int]:
        """Stored events, newest first, with total count"""
        pass

    @abstractmethod
    async def get_unmatched(
        self, event_types: Iterable[str], limit: int = 100, after_id: Optional[int] = None
    ) -> List[WebhookEvent]:
        """Unmatched events whose type is in event_types, in id order, past the after_id cursor"""
        pass
