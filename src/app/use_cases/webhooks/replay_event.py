"""Replay Use Cases

Re-run reconciliation for stored, unmatched events from their raw payload,
for example after the target record was created late.
"""

import logging
from typing import Mapping, Optional
from libs.result import Result, Return, Error
from src.app.services.payload_parser import PayloadParser
from src.app.repositories.webhook_event_repository import WebhookEventRepository
from src.domain.event_transition import EVENT_TRANSITIONS
from .dtos import ReplayBatchResultDTO, ReplayEventResponseDTO
from .reconcile_event import ReconcileEvent

logger = logging.getLogger(__name__)


class ReplayEvent:

    def __init__(
        self,
        event_repo: WebhookEventRepository,
        reconcile_event: ReconcileEvent,
        parsers: Mapping[str, PayloadParser],
    ):
        self.event_repo = event_repo
        self.reconcile_event = reconcile_event
        self.parsers = parsers

    async def execute(self, event_id: str, correlation_id: str) -> Result[ReplayEventResponseDTO]:
        """
        Errors:
            EVENT_NOT_FOUND: No stored event with this id
            REPLAY_FAILED: The stored payload no longer parses
            RECONCILE_FAILED: Reconciliation raised; the event stays unmatched
        """
        event = await self.event_repo.get_by_event_id(event_id)
        if event is None:
            return Return.err(
                Error(code="EVENT_NOT_FOUND", message=f"Webhook event {event_id} not found")
            )

        if event.matched:
            return Return.ok(
                ReplayEventResponseDTO(
                    event_id=event.event_id,
                    correlation_id=correlation_id,
                    matched=True,
                    matched_id=event.matched_record_id,
                    already_matched=True,
                )
            )

        parser = self.parsers.get(event.provider)
        try:
            if parser is None:
                raise ValueError(f"no parser for provider {event.provider}")
            envelope = parser(event.raw_payload)
        except Exception as e:
            return Return.err(
                Error(
                    code="REPLAY_FAILED",
                    message=f"Stored payload of event {event_id} could not be parsed",
                    reason=str(e),
                )
            )

        logger.info(f"[{correlation_id}] Replaying event {event_id} ({event.event_type})")
        outcome = await self.reconcile_event.execute(event, envelope, correlation_id)
        if outcome.is_err():
            return Return.err(outcome.error)

        return Return.ok(
            ReplayEventResponseDTO(
                event_id=event_id,
                correlation_id=correlation_id,
                matched=outcome.value.matched,
                matched_id=outcome.value.matched_id,
                already_matched=outcome.value.already_matched,
                reason=outcome.value.reason,
            )
        )


class ReplayUnmatchedEvents:
    """
    Replay a bounded batch of unmatched events with a mapped type

    Unmapped types are never candidates: they can not match. Batches walk the
    unmatched events by id from after_id; next_cursor is the last id of a full
    batch and None once the end is reached, so the next sweep starts over.
    """

    def __init__(self, event_repo: WebhookEventRepository, replay_event: ReplayEvent):
        self.event_repo = event_repo
        self.replay_event = replay_event

    async def execute(
        self, batch_size: int, correlation_id: str, after_id: Optional[int] = None
    ) -> Result[ReplayBatchResultDTO]:
        try:
            candidates = await self.event_repo.get_unmatched(
                EVENT_TRANSITIONS.keys(), limit=batch_size, after_id=after_id
            )
        except Exception as e:
            return Return.err(
                Error(code="REPLAY_FAILED", message="Failed to load unmatched events", reason=str(e))
            )

        event_ids = [event.event_id for event in candidates]
        next_cursor = candidates[-1].id if candidates and len(candidates) >= batch_size else None
        matched = unmatched = failed = 0

        for event_id in event_ids:
            result = await self.replay_event.execute(event_id, correlation_id)
            if result.is_err():
                failed += 1
                logger.warning(f"[{correlation_id}] Replay of {event_id} failed: {result.error.code}")
            elif result.value.matched and not result.value.already_matched:
                matched += 1
            else:
                unmatched += 1

        return Return.ok(
            ReplayBatchResultDTO(
                total_candidates=len(event_ids),
                matched=matched,
                unmatched=unmatched,
                failed=failed,
                next_cursor=next_cursor,
            )
        )
