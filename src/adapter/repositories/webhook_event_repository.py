"""SQLAlchemy implementation of WebhookEventRepository

The unique index on event_id is the deduplication mechanism: a second insert
of the same id fails with DuplicateKeyError, which the caller treats as a
duplicate delivery.
"""

from typing import Iterable, List, Optional, Tuple
from datetime import datetime
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.errors import DuplicateKeyError
from src.app.repositories.webhook_event_repository import WebhookEventRepository
from src.domain.webhook_event import WebhookEvent


class SqlAlchemyWebhookEventRepository(WebhookEventRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: WebhookEvent) -> WebhookEvent:
        self.session.add(event)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateKeyError(f"Webhook event {event.event_id} already stored") from e
        await self.session.refresh(event)
        return event

    async def get_by_event_id(self, event_id: str) -> Optional[WebhookEvent]:
        stmt = select(WebhookEvent).where(WebhookEvent.event_id == event_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, event: WebhookEvent) -> WebhookEvent:
        self.session.add(event)
        await self.session.flush()
        return event

    async def claim_match(self, event_pk: int, processed_at: datetime) -> bool:
        """Conditional UPDATE; the row lock serializes concurrent claimers"""
        stmt = (
            update(WebhookEvent)
            .where(WebhookEvent.id == event_pk, WebhookEvent.matched == False)  # noqa: E712
            .values(matched=True, processed_at=processed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_events(
        self,
        matched: Optional[bool] = None,
        provider: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[WebhookEvent], int]:
        conditions = []
        if matched is not None:
            conditions.append(WebhookEvent.matched == matched)
        if provider is not None:
            conditions.append(WebhookEvent.provider == provider)

        count_stmt = select(func.count()).select_from(WebhookEvent).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(WebhookEvent)
            .where(*conditions)
            .order_by(WebhookEvent.created_at.desc(), WebhookEvent.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_unmatched(
        self, event_types: Iterable[str], limit: int = 100, after_id: Optional[int] = None
    ) -> List[WebhookEvent]:
        conditions = [
            WebhookEvent.matched == False,  # noqa: E712
            WebhookEvent.event_type.in_(list(event_types)),
        ]
        if after_id is not None:
            conditions.append(WebhookEvent.id > after_id)

        stmt = select(WebhookEvent).where(*conditions).order_by(WebhookEvent.id).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
