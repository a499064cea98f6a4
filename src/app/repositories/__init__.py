from .credit_balance_repository import CreditBalanceRepository
from .ledger_entry_repository import LedgerEntryRepository
from .webhook_event_repository import WebhookEventRepository
from .reconciliation_target_repository import CampaignLeadRepository, EnrichmentJobRepository
from .event_audit_repository import EventAuditRepository
from .provider_account_repository import ProviderAccountRepository
from .errors import DuplicateKeyError

__all__ = [
    "CreditBalanceRepository",
    "LedgerEntryRepository",
    "WebhookEventRepository",
    "CampaignLeadRepository",
    "EnrichmentJobRepository",
    "EventAuditRepository",
    "ProviderAccountRepository",
    "DuplicateKeyError",
]
