"""Unit tests for DebitQuota use case

Tests cover:
- Successful debit with balance snapshots
- Insufficient and missing balance (applied=False, nothing recorded)
- Idempotent replay by token, including the concurrent-insert race
- Argument validation and infrastructure failures
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from src.app.repositories.errors import DuplicateKeyError
from src.app.use_cases.billing.debit_quota import DebitQuota
from src.app.use_cases.billing.dtos import DebitCommandDTO
from src.domain.credit_balance import CreditBalance, CreditKind
from src.domain.ledger_entry import EntryType, LedgerEntry


@pytest.fixture
def mock_balance_repo():
    return MagicMock()


@pytest.fixture
def mock_entry_repo():
    repo = MagicMock()

    async def assign_id(entry):
        entry.id = 42
        return entry

    repo.get_by_token = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=assign_id)
    return repo


@pytest.fixture
def debit_use_case(mock_uow, mock_balance_repo, mock_entry_repo):
    return DebitQuota(uow=mock_uow, balance_repo=mock_balance_repo, entry_repo=mock_entry_repo)


@pytest.fixture
def sample_command():
    return DebitCommandDTO(
        tenant_id="tenant_123",
        kind=CreditKind.LEAD_SEARCH,
        amount=10,
        idempotency_token="tok-1",
        description="Lead search: 10 leads",
    )


def make_balance(balance: int) -> CreditBalance:
    return CreditBalance(id=1, tenant_id="tenant_123", kind=CreditKind.LEAD_SEARCH, balance=balance)


@pytest.mark.asyncio
class TestDebitQuotaSuccess:

    async def test_debit_with_sufficient_balance(
        self, debit_use_case, mock_balance_repo, mock_entry_repo, mock_uow, sample_command
    ):
        """
        Given: Balance 100
        When: Debit 10
        Then: Entry recorded with snapshots 100 -> 90, balance updated, committed
        """
        mock_balance_repo.get = AsyncMock(return_value=make_balance(100))
        mock_balance_repo.update_balance = AsyncMock()

        result = await debit_use_case.execute(sample_command)

        assert result.is_ok()
        response = result.value
        assert response.applied is True
        assert response.replayed is False
        assert response.entry_type == "debit"
        assert response.amount == 10
        assert response.balance_before == 100
        assert response.balance_after == 90
        assert response.entry_id == 42

        created = mock_entry_repo.create.call_args[0][0]
        assert created.entry_type == EntryType.DEBIT
        assert created.delta == -10
        assert created.idempotency_token == "tok-1"

        mock_balance_repo.get.assert_called_once_with("tenant_123", CreditKind.LEAD_SEARCH, for_update=True)
        mock_balance_repo.update_balance.assert_called_once_with(1, 90)
        mock_uow.commit.assert_called_once()

    async def test_debit_exact_balance_reaches_zero(
        self, debit_use_case, mock_balance_repo, sample_command
    ):
        mock_balance_repo.get = AsyncMock(return_value=make_balance(10))
        mock_balance_repo.update_balance = AsyncMock()

        result = await debit_use_case.execute(sample_command)

        assert result.value.applied is True
        assert result.value.balance_after == 0
        mock_balance_repo.update_balance.assert_called_once_with(1, 0)


@pytest.mark.asyncio
class TestDebitQuotaRejected:

    async def test_insufficient_balance_returns_not_applied(
        self, debit_use_case, mock_balance_repo, mock_uow, sample_command
    ):
        """
        Given: Balance 5
        When: Debit 10
        Then: applied=False, balance untouched, claimed entry rolled back
        """
        mock_balance_repo.get = AsyncMock(return_value=make_balance(5))
        mock_balance_repo.update_balance = AsyncMock()

        result = await debit_use_case.execute(sample_command)

        assert result.is_ok()
        assert result.value.applied is False
        assert result.value.balance_before == 5
        assert result.value.balance_after == 5
        assert result.value.entry_id is None
        mock_balance_repo.update_balance.assert_not_called()
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()

    async def test_missing_balance_row_is_zero(
        self, debit_use_case, mock_balance_repo, mock_uow, sample_command
    ):
        mock_balance_repo.get = AsyncMock(return_value=None)

        result = await debit_use_case.execute(sample_command)

        assert result.is_ok()
        assert result.value.applied is False
        assert result.value.balance_after == 0
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestDebitQuotaIdempotency:

    async def test_known_token_replays_original_outcome(
        self, debit_use_case, mock_balance_repo, mock_entry_repo, mock_uow, sample_command
    ):
        existing = LedgerEntry(
            id=7,
            tenant_id="tenant_123",
            kind=CreditKind.LEAD_SEARCH,
            entry_type=EntryType.DEBIT,
            delta=-10,
            balance_before=100,
            balance_after=90,
            idempotency_token="tok-1",
            created_at=datetime(2024, 1, 1),
        )
        mock_entry_repo.get_by_token = AsyncMock(return_value=existing)
        mock_balance_repo.get = AsyncMock()

        result = await debit_use_case.execute(sample_command)

        assert result.is_ok()
        assert result.value.applied is True
        assert result.value.replayed is True
        assert result.value.entry_id == 7
        assert result.value.balance_after == 90
        mock_entry_repo.get_by_token.assert_called_once_with(
            "tenant_123", CreditKind.LEAD_SEARCH, EntryType.DEBIT, "tok-1"
        )
        mock_entry_repo.create.assert_not_called()
        mock_balance_repo.get.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_concurrent_insert_of_same_token_answers_as_replay(
        self, debit_use_case, mock_entry_repo, mock_uow, sample_command
    ):
        """
        Given: Another request with the same token commits between the check and the insert
        When: The insert hits the unique key
        Then: The winner's entry is returned as a replay
        """
        winner = LedgerEntry(
            id=8,
            tenant_id="tenant_123",
            kind=CreditKind.LEAD_SEARCH,
            entry_type=EntryType.DEBIT,
            delta=-10,
            balance_before=50,
            balance_after=40,
            idempotency_token="tok-1",
        )
        mock_entry_repo.get_by_token = AsyncMock(side_effect=[None, winner])
        mock_entry_repo.create = AsyncMock(side_effect=DuplicateKeyError("exists"))

        result = await debit_use_case.execute(sample_command)

        assert result.is_ok()
        assert result.value.replayed is True
        assert result.value.entry_id == 8
        mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
class TestDebitQuotaErrors:

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount_is_rejected(self, debit_use_case, mock_entry_repo, amount):
        command = DebitCommandDTO(
            tenant_id="tenant_123", kind=CreditKind.PHONE_REVEAL, amount=amount, idempotency_token="t"
        )

        result = await debit_use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"
        mock_entry_repo.get_by_token.assert_not_called()

    async def test_blank_token_is_rejected(self, debit_use_case):
        command = DebitCommandDTO(
            tenant_id="tenant_123", kind=CreditKind.PHONE_REVEAL, amount=1, idempotency_token="  "
        )

        result = await debit_use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_TOKEN"

    async def test_database_error_rolls_back(
        self, debit_use_case, mock_balance_repo, mock_uow, sample_command
    ):
        mock_balance_repo.get = AsyncMock(side_effect=Exception("connection lost"))

        result = await debit_use_case.execute(sample_command)

        assert result.is_err()
        assert result.error.code == "DEBIT_FAILED"
        assert "connection lost" in result.error.reason
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
