"""Unmatched Event Replay Background Worker

Periodically re-runs reconciliation for stored events that did not match a
record when they arrived (for example because the campaign lead or the
enrichment job was written after the provider's webhook).
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.parsers import PARSERS
from src.adapter.repositories.event_audit_repository import SqlAlchemyEventAuditRepository
from src.adapter.repositories.reconciliation_target_repository import (
    SqlAlchemyCampaignLeadRepository,
    SqlAlchemyEnrichmentJobRepository,
)
from src.adapter.repositories.webhook_event_repository import SqlAlchemyWebhookEventRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.webhooks import (
    ReconcileEvent,
    ReplayBatchResultDTO,
    ReplayEvent,
    ReplayUnmatchedEvents,
    new_correlation_id,
)

logger = logging.getLogger(__name__)


class EventReplayerWorker:
    """
    Background worker replaying unmatched webhook events

    Usage:
        worker = EventReplayerWorker()
        result = await worker.run_once()
        await worker.run_forever(interval_seconds=300)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        batch_size: Optional[int] = None,
        enabled: Optional[bool] = None,
    ):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.batch_size = batch_size or ApplicationConfig.EVENT_REPLAY_BATCH_SIZE
        self.enabled = ApplicationConfig.EVENT_REPLAY_ENABLED if enabled is None else enabled
        self.cursor: Optional[int] = None

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("EventReplayerWorker initialized")

    async def run_once(self) -> ReplayBatchResultDTO:
        if not self.enabled:
            logger.info("Event replay is disabled, skipping")
            return ReplayBatchResultDTO(total_candidates=0, matched=0, unmatched=0, failed=0)

        correlation_id = new_correlation_id()

        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            event_repo = SqlAlchemyWebhookEventRepository(session)
            reconcile_event = ReconcileEvent(
                uow=uow,
                event_repo=event_repo,
                lead_repo=SqlAlchemyCampaignLeadRepository(session),
                job_repo=SqlAlchemyEnrichmentJobRepository(session),
                audit_repo=SqlAlchemyEventAuditRepository(session),
            )
            use_case = ReplayUnmatchedEvents(
                event_repo=event_repo,
                replay_event=ReplayEvent(event_repo, reconcile_event, PARSERS),
            )

            result = await use_case.execute(self.batch_size, correlation_id, after_id=self.cursor)

            if result.is_err():
                logger.error(f"[{correlation_id}] Event replay failed: {result.error.reason}")
                raise RuntimeError(f"Event replay failed: {result.error.message}")

            response = result.value
            self.cursor = response.next_cursor
            logger.info(
                f"[{correlation_id}] Replayed {response.total_candidates} events: "
                f"matched={response.matched}, unmatched={response.unmatched}, failed={response.failed}"
            )
            return response

    async def run_forever(self, interval_seconds: int = 300):
        logger.info(f"Starting unmatched event replay with {interval_seconds}s interval")

        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Event replay cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()
        logger.info("EventReplayerWorker shutdown complete")


async def main():
    """
    Usage:
        python -m src.worker.event_replayer --once
        python -m src.worker.event_replayer --interval 300
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Unmatched Event Replay Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.EVENT_REPLAY_INTERVAL_SECONDS,
        help="Interval between runs in seconds"
    )
    args = parser.parse_args()

    worker = EventReplayerWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print(f"Replayed {result.total_candidates} events, matched {result.matched}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
