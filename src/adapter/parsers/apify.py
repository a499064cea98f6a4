"""Actor platform webhook parser

Run webhooks carry eventType, eventData.actorRunId and the run resource.
The platform sends no event id unless the webhook template adds one, so the
fallback is "<eventType>:<runId>", which is unique per run outcome.
"""

from typing import Any
from src.app.services.payload_parser import PayloadParseError
from src.domain.event_envelope import EventEnvelope
from src.domain.webhook_event import ObjectType
from .base import fallback_event_id, first_present, first_text, parse_timestamp

PROVIDER = "apify"
PARSER_VERSION = "apify.v1"


def parse_apify_v1(payload: Any) -> EventEnvelope:
    if not isinstance(payload, dict):
        raise PayloadParseError(f"{PROVIDER} payload must be a JSON object, got {type(payload).__name__}")

    event_data = payload.get("eventData") if isinstance(payload.get("eventData"), dict) else {}
    resource = payload.get("resource") if isinstance(payload.get("resource"), dict) else {}

    event_type = first_present(payload, "eventType") or "unknown"
    run_id = first_present(event_data, "actorRunId") or first_present(resource, "id")

    event_id = first_present(payload, "id", "eventId")
    if not event_id:
        event_id = f"{event_type}:{run_id}" if run_id else fallback_event_id(PROVIDER, payload)

    return EventEnvelope(
        provider=PROVIDER,
        event_id=event_id,
        event_type=event_type,
        object_type=ObjectType.RUN if run_id else ObjectType.UNKNOWN,
        object_id=run_id,
        account_id=first_present(event_data, "actorId") or first_present(resource, "actId"),
        error_text=first_text(resource, "statusMessage", "status"),
        occurred_at=parse_timestamp(resource.get("finishedAt") or payload.get("createdAt")),
        parser_version=PARSER_VERSION,
        raw_payload=payload,
    )
