"""Credit Balance Domain Entity

One row per tenant per credit kind. Balance is always >= 0 and is only
changed by the quota consumer, which appends a LedgerEntry for every accepted
mutation.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, DateTime, Integer, UniqueConstraint
from src.domain.base import BaseModel, BigIntPK, utcnow


class CreditKind(str, Enum):
    """Metered credit kinds"""
    LEAD_SEARCH = "lead_search"      # Paid lead search jobs (one credit per lead requested)
    PHONE_REVEAL = "phone_reveal"    # Phone number reveal (one credit per reveal)


class CreditBalance(BaseModel, table=True):
    """
    Credit Balance - current balance of one credit kind for one tenant

    Domain Rules:
    - One row per (tenant_id, kind)
    - Balance must be non-negative
    - A missing row is a zero balance
    - Balance updates only through the quota consumer (debit / credit)
    """

    __tablename__ = "credit_balances"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="balance_non_negative"),
        UniqueConstraint("tenant_id", "kind", name="uq_credit_balances_tenant_kind"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
        description="Unique balance identifier (auto-increment)"
    )

    tenant_id: str = Field(
        index=True,
        description="Tenant (workspace) ID"
    )

    kind: CreditKind = Field(
        description="Credit kind (lead_search, phone_reveal)"
    )

    balance: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Current credit balance (must be >= 0)"
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime,
        description="Balance row creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime,
        description="Last balance update timestamp"
    )
