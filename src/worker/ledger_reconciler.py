"""Ledger Reconciliation Background Worker

Periodically compares every credit balance with the sum of its ledger
entries. Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.credit_balance_repository import SqlAlchemyCreditBalanceRepository
from src.adapter.repositories.ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from src.app.use_cases.billing import ReconcileLedger, ReconciliationResultDTO
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class LedgerReconcilerWorker:
    """
    Background worker for credit ledger reconciliation

    Features:
    - Compares balances against ledger delta sums
    - Logs discrepancies for investigation, never corrects them
    - Can run once or continuously

    Usage:
        worker = LedgerReconcilerWorker()
        result = await worker.run_once()
        await worker.run_forever(interval_seconds=86400)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            enabled: Overrides ApplicationConfig.RECONCILIATION_ENABLED
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.enabled = ApplicationConfig.RECONCILIATION_ENABLED if enabled is None else enabled

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("LedgerReconcilerWorker initialized")

    async def run_once(self) -> ReconciliationResultDTO:
        if not self.enabled:
            logger.info("Ledger reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_balances_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedger(
                balance_repo=SqlAlchemyCreditBalanceRepository(session),
                entry_repo=SqlAlchemyLedgerEntryRepository(session),
            )

            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Reconciliation failed: {result.error.message}")
                raise RuntimeError(f"Reconciliation failed: {result.error.message}")

            response = result.value

            if response.discrepancies_found > 0:
                logger.error(
                    f"ALERT: {response.discrepancies_found} ledger discrepancies found!"
                )
                for d in response.discrepancies:
                    logger.error(
                        f"  - Tenant {d.tenant_id} ({d.kind.value}, balance_id={d.balance_id}): "
                        f"expected={d.calculated_balance}, actual={d.recorded_balance}, "
                        f"diff={d.discrepancy}"
                    )

            return response

    async def run_forever(self, interval_seconds: int = 86400):
        logger.info(
            f"Starting continuous ledger reconciliation with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.total_balances_checked} balances, "
                    f"found {result.discrepancies_found} discrepancies "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("LedgerReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m src.worker.ledger_reconciler --once
        python -m src.worker.ledger_reconciler --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Ledger Reconciliation Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: RECONCILIATION_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = LedgerReconcilerWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Total balances checked: {result.total_balances_checked}")
            print(f"  Discrepancies found: {result.discrepancies_found}")
            print(f"  Execution time: {result.execution_time_ms}ms")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
