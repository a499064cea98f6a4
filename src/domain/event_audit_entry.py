"""Event Audit Entry Domain Entity

Append-only trail of every matched webhook event, written whether or not the
target's fields actually changed.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String
from src.domain.base import BaseModel, BigIntPK, utcnow
from src.domain.event_transition import TargetType


class EventAuditEntry(BaseModel, table=True):
    __tablename__ = "event_audit_entries"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )
    tenant_id: Optional[str] = Field(default=None, index=True)
    target_type: TargetType
    target_id: str = Field(index=True)
    campaign_id: Optional[str] = None
    event_type: str = Field(sa_column=Column(String(100), nullable=False))
    object_id: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    correlation_id: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    provider_event_id: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
