"""DebitQuota Use Case

Debits credits from a tenant's balance before a metered external action,
with idempotency guarantees and pessimistic locking so concurrent requests
can never overdraw the balance.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.credit_balance_repository import CreditBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.repositories.errors import DuplicateKeyError
from src.domain.ledger_entry import EntryType, LedgerEntry
from .dtos import DebitCommandDTO, LedgerMutationResponseDTO
from .validation import validate_mutation

logger = logging.getLogger(__name__)


class DebitQuota:
    """
    Use Case: Debit credits from tenant balance

    Business Rules:
    1. Idempotency: a known token returns the original outcome, no second debit
    2. Sufficient balance: balance >= amount required, otherwise applied=False
    3. Atomic updates: entry and balance change commit together or not at all
    4. Pessimistic locking: SELECT FOR UPDATE serializes debits per balance row

    Flow:
    1. Check idempotency (return existing entry as a replay)
    2. Claim the token by inserting the entry (unique key)
    3. Get balance with lock (SELECT FOR UPDATE)
    4. Reject without trace when balance is missing or too low
    5. Record balance snapshots and decrement balance
    6. Commit transaction

    The entry is inserted before the balance is read so that the write lock
    is held before the read on engines without row locks (SQLite).
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

    async def execute(self, command: DebitCommandDTO) -> Result[LedgerMutationResponseDTO]:
        """
        Execute credit debit

        Returns:
            Result[LedgerMutationResponseDTO]: applied=True when debited (or
            replayed), applied=False on insufficient balance, or an error
        """
        invalid = validate_mutation(command.amount, command.idempotency_token)
        if invalid:
            return Return.err(invalid)

        try:
            # Step 1: Check idempotency - if the debit exists, return it
            existing = await self.entry_repo.get_by_token(
                command.tenant_id, command.kind, EntryType.DEBIT, command.idempotency_token
            )
            if existing:
                return Return.ok(self._to_response_dto(existing, replayed=True))

            # Step 2: Claim the token
            entry = LedgerEntry(
                tenant_id=command.tenant_id,
                kind=command.kind,
                entry_type=EntryType.DEBIT,
                delta=-command.amount,
                balance_before=0,
                balance_after=0,
                idempotency_token=command.idempotency_token,
                description=command.description,
            )
            try:
                entry = await self.entry_repo.create(entry)
            except DuplicateKeyError:
                # A concurrent request with the same token committed first
                await self.uow.rollback()
                return await self._replay_after_conflict(command)

            # Step 3: Get balance with pessimistic lock (SELECT FOR UPDATE)
            balance = await self.balance_repo.get(
                command.tenant_id, command.kind, for_update=True
            )
            current = balance.balance if balance else 0

            # Step 4: Reject - rollback drops the claimed entry
            if balance is None or current < command.amount:
                await self.uow.rollback()
                logger.info(
                    f"Debit rejected for tenant {command.tenant_id} ({command.kind.value}): "
                    f"required={command.amount}, available={current}"
                )
                return Return.ok(
                    LedgerMutationResponseDTO(
                        applied=False,
                        tenant_id=command.tenant_id,
                        kind=command.kind,
                        entry_type=EntryType.DEBIT.value,
                        amount=command.amount,
                        idempotency_token=command.idempotency_token,
                        balance_before=current,
                        balance_after=current,
                    )
                )

            # Step 5: Snapshots are flushed together with the balance update
            entry.balance_before = current
            entry.balance_after = current - command.amount
            await self.balance_repo.update_balance(balance.id, entry.balance_after)

            # Step 6: Commit transaction
            await self.uow.commit()

            return Return.ok(self._to_response_dto(entry, replayed=False))

        except Exception as e:
            await self.uow.rollback()
            logger.error(
                f"Debit failed for tenant {command.tenant_id} token {command.idempotency_token}: {e}"
            )
            return Return.err(
                Error(
                    code="DEBIT_FAILED",
                    message="Failed to debit credits",
                    reason=str(e),
                )
            )

    async def _replay_after_conflict(self, command: DebitCommandDTO) -> Result[LedgerMutationResponseDTO]:
        existing = await self.entry_repo.get_by_token(
            command.tenant_id, command.kind, EntryType.DEBIT, command.idempotency_token
        )
        if existing is None:
            return Return.err(
                Error(
                    code="DEBIT_FAILED",
                    message="Failed to debit credits",
                    reason=f"Token {command.idempotency_token} conflicted but no entry was found",
                )
            )
        logger.info(f"Concurrent debit with token {command.idempotency_token} answered as replay")
        return Return.ok(self._to_response_dto(existing, replayed=True))

    def _to_response_dto(self, entry: LedgerEntry, replayed: bool) -> LedgerMutationResponseDTO:
        """
        Convert LedgerEntry entity to response DTO

        Balance snapshots are stored in the entry for perfect idempotency.
        """
        return LedgerMutationResponseDTO(
            applied=True,
            replayed=replayed,
            tenant_id=entry.tenant_id,
            kind=entry.kind,
            entry_type=EntryType.DEBIT.value,
            amount=entry.amount,
            idempotency_token=entry.idempotency_token,
            entry_id=entry.id,
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            created_at=entry.created_at,
        )
