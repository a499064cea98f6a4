"""ReconcileLedger Use Case

Reconciles credit balances against ledger history to detect discrepancies.
"""

import logging
import time
from libs.result import Result, Return, Error
from src.app.repositories.credit_balance_repository import CreditBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.base import utcnow
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile credit balances against ledger entries

    Business Rules:
    1. Every balance row must equal the sum of its entries' deltas
    2. Mismatches are reported and logged, never corrected
    3. Read-only: no data is modified

    Flow:
    1. Get all balance rows
    2. For each row, sum the deltas of its (tenant, kind) entries
    3. Record a discrepancy when the two differ
    """

    def __init__(
        self,
        balance_repo: CreditBalanceRepository,
        entry_repo: LedgerEntryRepository,
    ):
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = utcnow()

        try:
            logger.info("Starting credit ledger reconciliation")

            balances = await self.balance_repo.get_all()
            total_balances = len(balances)

            logger.info(f"Found {total_balances} balances to reconcile")

            discrepancies: list[LedgerDiscrepancyDTO] = []

            for balance in balances:
                delta_sum = await self.entry_repo.get_delta_sum(balance.tenant_id, balance.kind)

                if balance.balance != delta_sum:
                    difference = balance.balance - delta_sum
                    discrepancies.append(
                        LedgerDiscrepancyDTO(
                            tenant_id=balance.tenant_id,
                            kind=balance.kind,
                            balance_id=balance.id,
                            recorded_balance=balance.balance,
                            calculated_balance=delta_sum,
                            discrepancy=difference,
                        )
                    )

                    logger.warning(
                        f"Discrepancy found for tenant {balance.tenant_id} "
                        f"({balance.kind}, balance_id={balance.id}): "
                        f"recorded={balance.balance}, ledger_sum={delta_sum}, "
                        f"discrepancy={difference}"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {total_balances} balances in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {total_balances} balances match "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(
                ReconciliationResultDTO(
                    total_balances_checked=total_balances,
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile credit ledger",
                    reason=str(e),
                )
            )
