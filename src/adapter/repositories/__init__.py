from .credit_balance_repository import SqlAlchemyCreditBalanceRepository
from .ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from .webhook_event_repository import SqlAlchemyWebhookEventRepository
from .reconciliation_target_repository import (
    SqlAlchemyCampaignLeadRepository,
    SqlAlchemyEnrichmentJobRepository,
)
from .event_audit_repository import SqlAlchemyEventAuditRepository
from .provider_account_repository import SqlAlchemyProviderAccountRepository

__all__ = [
    "SqlAlchemyCreditBalanceRepository",
    "SqlAlchemyLedgerEntryRepository",
    "SqlAlchemyWebhookEventRepository",
    "SqlAlchemyCampaignLeadRepository",
    "SqlAlchemyEnrichmentJobRepository",
    "SqlAlchemyEventAuditRepository",
    "SqlAlchemyProviderAccountRepository",
]
