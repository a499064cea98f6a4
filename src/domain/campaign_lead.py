"""Campaign Lead Domain Entity

Delivery state of one lead inside one campaign. Owned by the campaign
module; the event reconciler only moves it forward.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String, Text, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid, utcnow
from src.domain.event_transition import EventTransition


class CampaignLeadStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# Forward-only order of the non-terminal statuses
_STATUS_RANK = {
    CampaignLeadStatus.PENDING: 0,
    CampaignLeadStatus.SENT: 1,
}

ENGAGEMENT_FIELDS = ("sent_at", "delivered_at", "seen_at", "replied_at", "accepted_at")


class CampaignLead(BaseModel, table=True):
    """
    Campaign Lead - monotonic status: pending -> sent -> failed

    Delivery and engagement (delivered, seen, replied, accepted) are kept in
    timestamps while the business status stays "sent". "failed" is terminal:
    only an operator may revive such a record.
    """

    __tablename__ = "campaign_leads"
    __table_args__ = (
        UniqueConstraint("campaign_id", "lead_id", name="uq_campaign_leads_campaign_lead"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: str = Field(index=True)
    campaign_id: str = Field(index=True)
    lead_id: str

    provider_message_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, index=True),
        description="Provider message / invitation id used to match events"
    )

    status: CampaignLeadStatus = Field(default=CampaignLeadStatus.PENDING)

    sent_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    delivered_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    seen_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    replied_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    accepted_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    error: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    def apply_event(
        self,
        transition: EventTransition,
        occurred_at: datetime,
        error_text: Optional[str] = None,
    ) -> bool:
        """
        Apply a mapped event; returns True if any field changed.

        Timestamps are first-write-wins, so re-applying an event is a no-op.
        """
        if self.status == CampaignLeadStatus.FAILED:
            return False

        if transition.is_failure:
            self.status = CampaignLeadStatus.FAILED
            self.error = error_text
            self.updated_at = utcnow()
            return True

        changed = False
        target = CampaignLeadStatus(transition.target_status)
        if _STATUS_RANK[target] > _STATUS_RANK[self.status]:
            self.status = target
            changed = True

        if transition.target_field in ENGAGEMENT_FIELDS and getattr(self, transition.target_field) is None:
            setattr(self, transition.target_field, occurred_at)
            changed = True

        # A later success heals a transient error
        if self.error is not None:
            self.error = None
            changed = True

        if changed:
            self.updated_at = utcnow()
        return changed
