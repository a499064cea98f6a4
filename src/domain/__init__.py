from .base import BaseModel, generate_uuid
from .credit_balance import CreditBalance, CreditKind
from .ledger_entry import LedgerEntry, EntryType
from .webhook_event import WebhookEvent, ObjectType
from .campaign_lead import CampaignLead, CampaignLeadStatus
from .enrichment_job import EnrichmentJob, EnrichmentJobStatus
from .event_audit_entry import EventAuditEntry
from .provider_account import ProviderAccount
from .event_transition import EventTransition, TargetType, EVENT_TRANSITIONS, lookup_transition
from .event_envelope import EventEnvelope
from .metered_action import MeteredActionState

__all__ = [
    "BaseModel",
    "generate_uuid",
    "CreditBalance",
    "CreditKind",
    "LedgerEntry",
    "EntryType",
    "WebhookEvent",
    "ObjectType",
    "CampaignLead",
    "CampaignLeadStatus",
    "EnrichmentJob",
    "EnrichmentJobStatus",
    "EventAuditEntry",
    "ProviderAccount",
    "EventTransition",
    "TargetType",
    "EVENT_TRANSITIONS",
    "lookup_transition",
    "EventEnvelope",
    "MeteredActionState",
]
