"""IngestWebhook Use Case

Entry point of the event pipeline:

    verify signature -> parse -> record_if_new (commit) -> reconcile

The result is always a response body; the HTTP status is always 200 so that
providers never retry into the same pipeline. success=False carries parse,
signature, storage and reconciliation failures.
"""

import json
import logging
from typing import Mapping, Optional
from pydantic import ValidationError
from src.app.services.payload_parser import PayloadParseError, PayloadParser
from .dtos import WebhookIngestCommandDTO, WebhookIngestResponseDTO
from .record_event import RecordEvent
from .reconcile_event import ReconcileEvent
from .signature import PERMISSIVE, verify_signature

logger = logging.getLogger(__name__)


class IngestWebhook:

    def __init__(
        self,
        record_event: RecordEvent,
        reconcile_event: ReconcileEvent,
        parsers: Mapping[str, PayloadParser],
        webhook_secret: Optional[str] = None,
        signature_mode: str = PERMISSIVE,
    ):
        self.record_event = record_event
        self.reconcile_event = reconcile_event
        self.parsers = parsers
        self.webhook_secret = webhook_secret
        self.signature_mode = signature_mode

    async def execute(self, command: WebhookIngestCommandDTO) -> WebhookIngestResponseDTO:
        cid = command.correlation_id
        response = WebhookIngestResponseDTO(success=False, correlation_id=cid)

        try:
            parser = self.parsers.get(command.provider)
            if parser is None:
                logger.warning(f"[{cid}] Webhook for unknown provider {command.provider}")
                response.error = f"UNKNOWN_PROVIDER: {command.provider}"
                return response

            if not verify_signature(command.raw_body, command.signature, self.webhook_secret, self.signature_mode):
                logger.error(f"[{cid}] Webhook rejected: invalid {command.provider} signature")
                response.error = "INVALID_SIGNATURE"
                return response

            try:
                payload = json.loads(command.raw_body)
                envelope = parser(payload)
            except (ValueError, PayloadParseError, ValidationError) as e:
                # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
                logger.warning(f"[{cid}] Invalid {command.provider} payload: {e}")
                response.error = f"INVALID_PAYLOAD: {e}"
                return response

            response.event_id = envelope.event_id
            response.event_type = envelope.event_type
            logger.info(
                f"[{cid}] Webhook received: provider={envelope.provider}, "
                f"type={envelope.event_type}, event_id={envelope.event_id}, "
                f"object_id={envelope.object_id}, account_id={envelope.account_id}"
            )

            recorded = await self.record_event.execute(envelope, cid)
            if recorded.is_err():
                response.error = f"{recorded.error.code}: {recorded.error.reason or recorded.error.message}"
                return response

            stored = recorded.value
            if not stored.is_new:
                response.success = True
                response.duplicate = True
                response.matched = bool(stored.event.matched)
                response.matched_id = stored.event.matched_record_id
                return response

            outcome = await self.reconcile_event.execute(stored.event, envelope, cid)
            if outcome.is_err():
                # Stored unmatched; the replayer picks it up later
                response.error = f"{outcome.error.code}: {outcome.error.reason or outcome.error.message}"
                return response

            response.success = True
            response.matched = outcome.value.matched
            response.matched_id = outcome.value.matched_id
            return response

        except Exception as e:
            logger.exception(f"[{cid}] Webhook error: {e}")
            response.success = False
            response.error = str(e) or type(e).__name__
            return response
