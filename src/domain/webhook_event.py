"""Webhook Event Domain Entity

One row per inbound provider event, keyed uniquely by the provider's event
id. The row is written before any reconciliation side effect and keeps the
raw payload verbatim for audit and replay.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, DateTime, String
from src.domain.base import BaseModel, BigIntPK, utcnow


class ObjectType(str, Enum):
    """Kind of provider object an event refers to"""
    MESSAGE = "message"
    INVITATION = "invitation"
    RUN = "run"
    UNKNOWN = "unknown"


class WebhookEvent(BaseModel, table=True):
    """
    Webhook Event - deduplicated record of a provider delivery

    Domain Rules:
    - event_id is unique; later deliveries of the same id are discarded
    - matched flips from False to True at most once
    - raw_payload is never modified
    """

    __tablename__ = "webhook_events"
    __table_args__ = (
        Index("ix_webhook_events_matched_created_at", "matched", "created_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
    )

    event_id: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True),
        description="Provider-supplied event id (dedup key)"
    )

    provider: str = Field(
        sa_column=Column(String(50), nullable=False, index=True),
        description="Provider that delivered the event (unipile, apify)"
    )

    event_type: str = Field(
        sa_column=Column(String(100), nullable=False, index=True),
        description="Raw provider event type; unknown types are kept"
    )

    object_type: ObjectType = Field(
        default=ObjectType.UNKNOWN,
        description="message | invitation | run | unknown"
    )

    object_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, index=True),
        description="Provider message / invitation / run id"
    )

    account_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Provider account the event belongs to"
    )

    tenant_id: Optional[str] = Field(
        default=None,
        index=True,
        description="Resolved tenant, None when resolution failed"
    )

    raw_payload: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Payload exactly as received"
    )

    parser_version: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
    )

    correlation_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
    )

    matched: bool = Field(
        default=False,
        description="Whether a target record was found and transitioned"
    )

    matched_record_type: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
    )

    matched_record_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
    )

    processed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    def record_match(self, record_type: str, record_id: str, processed_at: datetime) -> None:
        """Link the event to the record it transitioned.

        Callers claim the event first (matched False -> True) so this runs
        at most once per event.
        """
        self.matched = True
        self.matched_record_type = record_type
        self.matched_record_id = record_id
        self.processed_at = processed_at
