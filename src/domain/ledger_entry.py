"""Ledger Entry Domain Entity

Immutable append-only history of every accepted balance change. The unique
key doubles as the idempotency guard: a retried debit or credit carrying the
same token finds its original entry instead of applying twice.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from src.domain.base import BaseModel, BigIntPK, utcnow
from src.domain.credit_balance import CreditKind


class EntryType(str, Enum):
    """Ledger entry direction"""
    DEBIT = "debit"      # Credits taken for a metered action
    CREDIT = "credit"    # Credits added (admin top-up or rollback of a debit)


class LedgerEntry(BaseModel, table=True):
    """
    Ledger Entry - one accepted mutation of a CreditBalance

    Domain Rules:
    - Entries are immutable (append-only)
    - (tenant_id, kind, entry_type, idempotency_token) is unique, so a debit
      and the credit that rolls it back may share one token
    - delta is negative for debits and positive for credits
    - balance_before/balance_after snapshot the balance so replays can answer
      with the original outcome
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "kind", "entry_type", "idempotency_token",
            name="uq_ledger_entries_idempotency",
        ),
        Index("ix_ledger_entries_created_at", "created_at"),
        Index("ix_ledger_entries_tenant_kind", "tenant_id", "kind"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
        description="Unique entry identifier (auto-increment)"
    )

    tenant_id: str = Field(
        description="Tenant (workspace) ID"
    )

    kind: CreditKind = Field(
        description="Credit kind the entry applies to"
    )

    entry_type: EntryType = Field(
        description="Direction of the mutation (debit, credit)"
    )

    delta: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Signed balance change (negative for debits)"
    )

    balance_before: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Balance before the mutation"
    )

    balance_after: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Balance after the mutation"
    )

    idempotency_token: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Caller-generated token; shared by a debit and its rollback"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
        description="Human readable reason for the mutation"
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime,
        description="Entry timestamp (immutable)"
    )

    @property
    def amount(self) -> int:
        return abs(self.delta)
