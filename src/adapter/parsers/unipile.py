"""Unified messaging provider webhook parser

The provider's payload shape varies between event families and dashboard
versions: the event body may sit under "data", under "object" or at the root,
and ids appear under several names. Every fallback lives here.
"""

from typing import Any
from src.app.services.payload_parser import PayloadParseError
from src.domain.event_envelope import EventEnvelope
from src.domain.webhook_event import ObjectType
from .base import fallback_event_id, first_present, first_text, parse_timestamp

PROVIDER = "unipile"
PARSER_VERSION = "unipile.v1"

_OBJECT_TYPES = {item.value for item in ObjectType}


def infer_object_type(event_type: str) -> ObjectType:
    lowered = event_type.lower()
    if "message" in lowered:
        return ObjectType.MESSAGE
    if "invitation" in lowered or "connection" in lowered or "relation" in lowered:
        return ObjectType.INVITATION
    return ObjectType.UNKNOWN


def parse_unipile_v1(payload: Any) -> EventEnvelope:
    if not isinstance(payload, dict):
        raise PayloadParseError(f"{PROVIDER} payload must be a JSON object, got {type(payload).__name__}")

    body = payload.get("data") or payload.get("object") or payload
    if not isinstance(body, dict):
        body = payload

    event_type = (
        first_present(payload, "event", "type")
        or first_present(body, "event", "type")
        or "unknown"
    )

    object_id = (
        first_present(body, "message_id", "id", "invitation_id")
        or first_present(payload, "message_id")
    )

    # body ids name the object; one object sees many distinct events
    event_id = first_present(payload, "id", "event_id")
    if not event_id:
        event_id = f"{event_type}:{object_id}" if object_id else fallback_event_id(PROVIDER, payload)

    declared_type = first_present(body, "object_type")
    if declared_type and declared_type.lower() in _OBJECT_TYPES:
        object_type = ObjectType(declared_type.lower())
    else:
        object_type = infer_object_type(event_type)

    occurred_at = parse_timestamp(
        body.get("timestamp") or body.get("date") or payload.get("timestamp")
    )

    return EventEnvelope(
        provider=PROVIDER,
        event_id=event_id,
        event_type=event_type,
        object_type=object_type,
        object_id=object_id,
        account_id=first_present(body, "account_id") or first_present(payload, "account_id"),
        error_text=first_text(body, "error", "message"),
        occurred_at=occurred_at,
        parser_version=PARSER_VERSION,
        raw_payload=payload,
    )
