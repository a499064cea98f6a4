"""Static mapping from provider event types to target transitions

Event types missing from EVENT_TRANSITIONS are stored but never acted on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class TargetType(str, Enum):
    CAMPAIGN_LEAD = "campaign_lead"
    ENRICHMENT_JOB = "enrichment_job"


ERROR_FIELD = "error"


@dataclass(frozen=True)
class EventTransition:
    target_type: TargetType
    target_field: str
    target_status: str

    @property
    def is_failure(self) -> bool:
        return self.target_field == ERROR_FIELD


def _lead(field: str, status: str = "sent") -> EventTransition:
    return EventTransition(TargetType.CAMPAIGN_LEAD, field, status)


def _job(field: str, status: str) -> EventTransition:
    return EventTransition(TargetType.ENRICHMENT_JOB, field, status)


EVENT_TRANSITIONS: Dict[str, EventTransition] = {
    # Messages
    "message.sent": _lead("sent_at"),
    "message.delivered": _lead("delivered_at"),
    "message.seen": _lead("seen_at"),
    "message.read": _lead("seen_at"),
    "message.replied": _lead("replied_at"),
    "message.reaction": _lead("seen_at"),
    "message.failed": _lead(ERROR_FIELD, "failed"),
    # Chat events (alternative naming used by the provider dashboard)
    "chat.new_message": _lead("sent_at"),
    "chat.message_sent": _lead("sent_at"),
    "chat.message_delivered": _lead("delivered_at"),
    "chat.message_read": _lead("seen_at"),
    "chat.message_replied": _lead("replied_at"),
    "chat.message_reaction": _lead("seen_at"),
    # Invitations
    "invitation.sent": _lead("sent_at"),
    "invitation.accepted": _lead("accepted_at"),
    "invitation.withdrawn": _lead(ERROR_FIELD, "failed"),
    "invitation.failed": _lead(ERROR_FIELD, "failed"),
    # A new relation means the invitation was accepted
    "relation.new": _lead("accepted_at"),
    "connection.new": _lead("accepted_at"),
    "connection.accepted": _lead("accepted_at"),
    "connection.rejected": _lead(ERROR_FIELD, "failed"),
    # Actor platform runs backing lead search jobs
    "ACTOR.RUN.SUCCEEDED": _job("completed_at", "completed"),
    "ACTOR.RUN.FAILED": _job(ERROR_FIELD, "failed"),
    "ACTOR.RUN.TIMED_OUT": _job(ERROR_FIELD, "failed"),
    "ACTOR.RUN.ABORTED": _job(ERROR_FIELD, "failed"),
}


def lookup_transition(event_type: str) -> Optional[EventTransition]:
    return EVENT_TRANSITIONS.get(event_type)
