"""Background workers for the outreach event ledger"""
from .event_replayer import EventReplayerWorker
from .ledger_reconciler import LedgerReconcilerWorker

__all__ = ["EventReplayerWorker", "LedgerReconcilerWorker"]
