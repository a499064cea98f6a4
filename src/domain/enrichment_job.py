"""Enrichment Job Domain Entity

Tracks an asynchronous lead search run started on the actor platform. The
run's completion arrives later as a webhook and is reconciled here.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String, Text
from src.domain.base import BaseModel, generate_uuid, utcnow
from src.domain.credit_balance import CreditKind
from src.domain.event_transition import EventTransition


class EnrichmentJobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_JOB_STATUSES = frozenset({EnrichmentJobStatus.COMPLETED, EnrichmentJobStatus.FAILED})


class EnrichmentJob(BaseModel, table=True):
    __tablename__ = "enrichment_jobs"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: str = Field(index=True)
    kind: CreditKind = Field(default=CreditKind.LEAD_SEARCH)

    external_run_id: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True),
        description="Actor platform run id"
    )

    idempotency_token: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Token of the debit that paid for this job"
    )

    credits_charged: int = Field(default=0)
    status: EnrichmentJobStatus = Field(default=EnrichmentJobStatus.PROCESSING)
    error_message: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    def apply_event(
        self,
        transition: EventTransition,
        occurred_at: datetime,
        error_text: Optional[str] = None,
    ) -> bool:
        if self.status in TERMINAL_JOB_STATUSES:
            return False

        self.status = EnrichmentJobStatus(transition.target_status)
        self.completed_at = occurred_at
        if transition.is_failure:
            self.error_message = error_text
        return True
