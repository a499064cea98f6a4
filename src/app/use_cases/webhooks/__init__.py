"""Webhook event pipeline use cases"""
from .ingest_webhook import IngestWebhook
from .record_event import RecordEvent
from .reconcile_event import ReconcileEvent
from .replay_event import ReplayEvent, ReplayUnmatchedEvents
from .list_events import ListWebhookEvents
from .signature import verify_signature, compute_signature, SIGNATURE_HEADERS
from .correlation import new_correlation_id
from .dtos import (
    WebhookIngestCommandDTO,
    WebhookIngestResponseDTO,
    RecordedEvent,
    ReconcileOutcomeDTO,
    WebhookEventDTO,
    ListWebhookEventsResponseDTO,
    ReplayEventResponseDTO,
    ReplayBatchResultDTO,
)

__all__ = [
    "IngestWebhook",
    "RecordEvent",
    "ReconcileEvent",
    "ReplayEvent",
    "ReplayUnmatchedEvents",
    "ListWebhookEvents",
    "verify_signature",
    "compute_signature",
    "SIGNATURE_HEADERS",
    "new_correlation_id",
    "WebhookIngestCommandDTO",
    "WebhookIngestResponseDTO",
    "RecordedEvent",
    "ReconcileOutcomeDTO",
    "WebhookEventDTO",
    "ListWebhookEventsResponseDTO",
    "ReplayEventResponseDTO",
    "ReplayBatchResultDTO",
]
