"""Data Transfer Objects for webhook ingestion and replay"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.webhook_event import WebhookEvent


class WebhookIngestCommandDTO(BaseModel):
    provider: str
    raw_body: bytes
    signature: Optional[str] = None
    correlation_id: str


class WebhookIngestResponseDTO(BaseModel):
    """
    Body of every webhook response (HTTP status is always 200)

    success carries the real outcome; duplicate deliveries are successful.
    """

    success: bool = Field(..., description="Whether the delivery was accepted and processed")
    correlation_id: str = Field(..., description="Per-request id, prefixes every log line")
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    matched: bool = False
    matched_id: Optional[str] = Field(default=None, description="Id of the transitioned record")
    duplicate: bool = False
    error: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "correlation_id": "evt-1717171717171-k3j9x",
                "event_id": "evt_01HX",
                "event_type": "message.delivered",
                "matched": True,
                "matched_id": "5c3e1f0a-...",
                "duplicate": False,
                "error": None
            }
        }


@dataclass
class RecordedEvent:
    is_new: bool
    event: WebhookEvent


class ReconcileOutcomeDTO(BaseModel):
    matched: bool
    matched_record_type: Optional[str] = None
    matched_id: Optional[str] = None
    changed: bool = Field(default=False, description="Whether the target's fields changed")
    already_matched: bool = False
    reason: Optional[str] = Field(default=None, description="Why the event did not match")


class WebhookEventDTO(BaseModel):
    event_id: str
    provider: str
    event_type: str
    object_type: str
    object_id: Optional[str] = None
    account_id: Optional[str] = None
    tenant_id: Optional[str] = None
    matched: bool
    matched_record_type: Optional[str] = None
    matched_record_id: Optional[str] = None
    parser_version: Optional[str] = None
    correlation_id: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    raw_payload: Dict[str, Any]


class ListWebhookEventsResponseDTO(BaseModel):
    events: List[WebhookEventDTO]
    total: int
    limit: int
    offset: int


class ReplayEventResponseDTO(BaseModel):
    event_id: str
    correlation_id: str
    matched: bool
    matched_id: Optional[str] = None
    already_matched: bool = False
    reason: Optional[str] = None


class ReplayBatchResultDTO(BaseModel):
    total_candidates: int
    matched: int
    unmatched: int
    failed: int
    next_cursor: Optional[int] = None
