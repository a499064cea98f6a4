"""Normalized provider event

Parsers turn each provider's loosely structured JSON into this envelope so
that nothing downstream probes alternative field names.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from src.domain.webhook_event import ObjectType


class EventEnvelope(BaseModel):
    provider: str
    event_id: str = Field(..., min_length=1)
    event_type: str
    object_type: ObjectType = ObjectType.UNKNOWN
    object_id: Optional[str] = None
    account_id: Optional[str] = None
    error_text: Optional[str] = None
    occurred_at: Optional[datetime] = None
    parser_version: str
    raw_payload: Dict[str, Any] = Field(default_factory=dict)
