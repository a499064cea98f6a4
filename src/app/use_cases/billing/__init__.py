"""Credit ledger use cases"""
from .debit_quota import DebitQuota
from .credit_quota import CreditQuota
from .get_balance import GetBalance
from .list_ledger_entries import ListLedgerEntries
from .reconcile_ledger import ReconcileLedger
from .dtos import (
    DebitCommandDTO,
    CreditCommandDTO,
    LedgerMutationResponseDTO,
    BalanceResponseDTO,
    TenantBalancesResponseDTO,
    LedgerEntryDTO,
    ListLedgerEntriesResponseDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "DebitQuota",
    "CreditQuota",
    "GetBalance",
    "ListLedgerEntries",
    "ReconcileLedger",
    "DebitCommandDTO",
    "CreditCommandDTO",
    "LedgerMutationResponseDTO",
    "BalanceResponseDTO",
    "TenantBalancesResponseDTO",
    "LedgerEntryDTO",
    "ListLedgerEntriesResponseDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
]
