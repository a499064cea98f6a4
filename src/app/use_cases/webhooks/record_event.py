"""RecordEvent Use Case (event deduplicator)

Stores an inbound event exactly once per provider event id. The insert runs
in its own short transaction and commits before any reconciliation, so a
duplicate delivery is discarded before it can cause a side effect.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.errors import DuplicateKeyError
from src.app.repositories.provider_account_repository import ProviderAccountRepository
from src.app.repositories.webhook_event_repository import WebhookEventRepository
from src.domain.event_envelope import EventEnvelope
from src.domain.webhook_event import WebhookEvent
from .dtos import RecordedEvent

logger = logging.getLogger(__name__)


class RecordEvent:
    """
    Use Case: record_if_new

    Business Rules:
    1. The provider event id is the only dedup key
    2. Concurrent deliveries of one id: exactly one insert wins, the others
       receive is_new=False and the stored row (never an exception)
    3. Tenant resolution failure stores tenant_id=None
    """

    def __init__(
        self,
        uow: UnitOfWork,
        event_repo: WebhookEventRepository,
        account_repo: ProviderAccountRepository,
    ):
        self.uow = uow
        self.event_repo = event_repo
        self.account_repo = account_repo

    async def execute(self, envelope: EventEnvelope, correlation_id: str) -> Result[RecordedEvent]:
        try:
            tenant_id = None
            if envelope.account_id:
                tenant_id = await self.account_repo.get_tenant_id(envelope.account_id)
                if tenant_id is None:
                    logger.info(
                        f"[{correlation_id}] No tenant for {envelope.provider} account {envelope.account_id}"
                    )

            event = WebhookEvent(
                event_id=envelope.event_id,
                provider=envelope.provider,
                event_type=envelope.event_type,
                object_type=envelope.object_type,
                object_id=envelope.object_id,
                account_id=envelope.account_id,
                tenant_id=tenant_id,
                raw_payload=envelope.raw_payload,
                parser_version=envelope.parser_version,
                correlation_id=correlation_id,
            )

            try:
                stored = await self.event_repo.create(event)
            except DuplicateKeyError:
                await self.uow.rollback()
                existing = await self.event_repo.get_by_event_id(envelope.event_id)
                if existing is None:
                    raise
                logger.info(f"[{correlation_id}] Duplicate event ignored: {envelope.event_id}")
                return Return.ok(RecordedEvent(is_new=False, event=existing))

            await self.uow.commit()
            logger.info(f"[{correlation_id}] Event stored: {stored.event_id} (id={stored.id})")
            return Return.ok(RecordedEvent(is_new=True, event=stored))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"[{correlation_id}] Failed to store event {envelope.event_id}: {e}")
            return Return.err(
                Error(
                    code="EVENT_STORE_FAILED",
                    message="Failed to store webhook event",
                    reason=str(e),
                )
            )
