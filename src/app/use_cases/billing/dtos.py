"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.credit_balance import CreditKind


class DebitCommandDTO(BaseModel):
    """
    Command DTO for debiting credits

    Used as input to DebitQuota use case. The token must be generated by the
    caller before any side effect so a retry carries the same value.
    """

    tenant_id: str = Field(
        ...,
        description="Tenant identifier"
    )

    kind: CreditKind = Field(
        ...,
        description="Credit kind to debit"
    )

    amount: int = Field(
        ...,
        description="Credits to debit (validated > 0 by the use case)"
    )

    idempotency_token: str = Field(
        ...,
        description="Caller-generated token shared by a debit and its rollback"
    )

    description: Optional[str] = Field(
        default=None,
        description="Human readable reason recorded on the ledger entry"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "workspace_42",
                "kind": "lead_search",
                "amount": 10,
                "idempotency_token": "3f1c7a52-0d7e-4b8f-9f44-1a2b3c4d5e6f",
                "description": "Lead search: Head of Sales"
            }
        }


class CreditCommandDTO(BaseModel):
    """
    Command DTO for crediting credits

    Used as input to CreditQuota use case, both for administrative top-ups
    (fresh token) and for rolling back a debit (the debit's token).
    """

    tenant_id: str = Field(
        ...,
        description="Tenant identifier"
    )

    kind: CreditKind = Field(
        ...,
        description="Credit kind to credit"
    )

    amount: int = Field(
        ...,
        description="Credits to add (validated > 0 by the use case)"
    )

    idempotency_token: str = Field(
        ...,
        description="Token of the debit being reversed, or a fresh one for a top-up"
    )

    description: Optional[str] = Field(
        default=None,
        description="Human readable reason recorded on the ledger entry"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "workspace_42",
                "kind": "lead_search",
                "amount": 10,
                "idempotency_token": "3f1c7a52-0d7e-4b8f-9f44-1a2b3c4d5e6f",
                "description": "Rollback: actor run failed"
            }
        }


class LedgerMutationResponseDTO(BaseModel):
    """
    Response DTO for debit / credit operations

    applied is the boolean outcome of the operation. A rejected debit
    (insufficient balance) has applied=False and no entry_id.
    """

    applied: bool = Field(
        ...,
        description="True if the balance changed (or had changed on the original request)"
    )

    replayed: bool = Field(
        default=False,
        description="True if the token was already recorded and the original outcome is returned"
    )

    tenant_id: str
    kind: CreditKind
    entry_type: str = Field(..., description="debit or credit")
    amount: int
    idempotency_token: str

    entry_id: Optional[int] = Field(
        default=None,
        description="Ledger entry id, absent when nothing was recorded"
    )

    balance_before: Optional[int] = None
    balance_after: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "applied": True,
                "replayed": False,
                "tenant_id": "workspace_42",
                "kind": "lead_search",
                "entry_type": "debit",
                "amount": 10,
                "idempotency_token": "3f1c7a52-0d7e-4b8f-9f44-1a2b3c4d5e6f",
                "entry_id": 17,
                "balance_before": 100,
                "balance_after": 90,
                "created_at": "2024-01-01T00:00:00Z"
            }
        }


class BalanceResponseDTO(BaseModel):
    """
    Response DTO for get balance operation

    A tenant without a balance row has balance 0 and no last_updated.
    """

    tenant_id: str = Field(
        ...,
        description="Tenant identifier"
    )

    kind: CreditKind = Field(
        ...,
        description="Credit kind"
    )

    balance: int = Field(
        ...,
        description="Current credit balance"
    )

    last_updated: Optional[datetime] = Field(
        default=None,
        description="Timestamp of last balance update"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "workspace_42",
                "kind": "phone_reveal",
                "balance": 25,
                "last_updated": "2024-01-01T00:00:00Z"
            }
        }


class TenantBalancesResponseDTO(BaseModel):
    tenant_id: str
    balances: List[BalanceResponseDTO]


class LedgerEntryDTO(BaseModel):
    """Single ledger entry for history listing"""

    id: int
    kind: CreditKind
    entry_type: str
    delta: int
    balance_after: int
    idempotency_token: str
    description: Optional[str] = None
    created_at: datetime


class ListLedgerEntriesResponseDTO(BaseModel):
    """Paginated ledger history, newest first"""

    entries: List[LedgerEntryDTO]
    total: int
    limit: int
    offset: int


class LedgerDiscrepancyDTO(BaseModel):
    """A balance row whose value disagrees with the sum of its entries"""

    tenant_id: str
    kind: CreditKind
    balance_id: int
    recorded_balance: int
    calculated_balance: int
    discrepancy: int = Field(..., description="recorded_balance - calculated_balance")


class ReconciliationResultDTO(BaseModel):
    total_balances_checked: int
    discrepancies_found: int
    discrepancies: List[LedgerDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int
