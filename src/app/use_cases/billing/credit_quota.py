"""CreditQuota Use Case

Credits a tenant's balance: administrative top-ups, and the rollback of a
debit whose external action failed (same idempotency token as the debit).
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.credit_balance_repository import CreditBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.repositories.errors import DuplicateKeyError
from src.domain.credit_balance import CreditBalance
from src.domain.ledger_entry import EntryType, LedgerEntry
from .dtos import CreditCommandDTO, LedgerMutationResponseDTO
from .validation import validate_mutation

logger = logging.getLogger(__name__)


class CreditQuota:
    """
    Use Case: Credit tenant balance

    Business Rules:
    1. Idempotency: a known (token, credit) pair returns the original entry
    2. Balance increment: balance += amount, no upper limit
    3. A missing balance row is created on first credit
    4. Atomic updates: entry and balance change commit together

    Flow:
    1. Check idempotency (return existing entry as a replay)
    2. Claim the token by inserting the entry
    3. Get balance with lock, creating the row if absent
    4. Record balance snapshots and increment balance
    5. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        balance_repo: CreditBalanceRepository,
        entry_repo: LedgerEntryRepository,
    ):
        self.uow = uow
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo

    async def execute(self, command: CreditCommandDTO) -> Result[LedgerMutationResponseDTO]:
        invalid = validate_mutation(command.amount, command.idempotency_token)
        if invalid:
            return Return.err(invalid)

        try:
            # Step 1: Check idempotency
            existing = await self.entry_repo.get_by_token(
                command.tenant_id, command.kind, EntryType.CREDIT, command.idempotency_token
            )
            if existing:
                return Return.ok(self._to_response_dto(existing, replayed=True))

            # Step 2: Claim the token
            entry = LedgerEntry(
                tenant_id=command.tenant_id,
                kind=command.kind,
                entry_type=EntryType.CREDIT,
                delta=command.amount,
                balance_before=0,
                balance_after=0,
                idempotency_token=command.idempotency_token,
                description=command.description,
            )
            try:
                entry = await self.entry_repo.create(entry)
            except DuplicateKeyError:
                await self.uow.rollback()
                existing = await self.entry_repo.get_by_token(
                    command.tenant_id, command.kind, EntryType.CREDIT, command.idempotency_token
                )
                if existing is None:
                    raise
                return Return.ok(self._to_response_dto(existing, replayed=True))

            # Step 3: Get balance with pessimistic lock
            balance = await self.balance_repo.get(
                command.tenant_id, command.kind, for_update=True
            )
            if balance is None:
                try:
                    balance = await self.balance_repo.create(
                        CreditBalance(tenant_id=command.tenant_id, kind=command.kind, balance=0)
                    )
                except DuplicateKeyError:
                    # A concurrent first credit created the row; wait on its lock
                    balance = await self.balance_repo.get(
                        command.tenant_id, command.kind, for_update=True
                    )
                    if balance is None:
                        raise

            # Step 4: Increment
            entry.balance_before = balance.balance
            entry.balance_after = balance.balance + command.amount
            await self.balance_repo.update_balance(balance.id, entry.balance_after)

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Credited {command.amount} {command.kind.value} credits to tenant "
                f"{command.tenant_id} (token={command.idempotency_token}, "
                f"balance={entry.balance_after})"
            )
            return Return.ok(self._to_response_dto(entry, replayed=False))

        except Exception as e:
            await self.uow.rollback()
            logger.error(
                f"Credit failed for tenant {command.tenant_id} token {command.idempotency_token}: {e}"
            )
            return Return.err(
                Error(
                    code="CREDIT_FAILED",
                    message="Failed to credit credits",
                    reason=str(e),
                )
            )

    def _to_response_dto(self, entry: LedgerEntry, replayed: bool) -> LedgerMutationResponseDTO:
        return LedgerMutationResponseDTO(
            applied=True,
            replayed=replayed,
            tenant_id=entry.tenant_id,
            kind=entry.kind,
            entry_type=EntryType.CREDIT.value,
            amount=entry.amount,
            idempotency_token=entry.idempotency_token,
            entry_id=entry.id,
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            created_at=entry.created_at,
        )
