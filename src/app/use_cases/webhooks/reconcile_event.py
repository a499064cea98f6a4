"""ReconcileEvent Use Case (event reconciler)

Maps a stored event to the record it reports on and applies a monotonic
transition:

1. Look up the static mapping for the event type; unmapped types stop here
2. Claim the event (matched False -> True, atomic)
3. Find the target by the provider object id, locked; none -> undo claim
4. Apply the transition (no-op on terminal records) and link the event
5. Append exactly one audit entry, changed or not
6. Commit

Any failure rolls back, leaving the event unmatched for replay.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.event_audit_repository import EventAuditRepository
from src.app.repositories.reconciliation_target_repository import (
    CampaignLeadRepository,
    EnrichmentJobRepository,
)
from src.app.repositories.webhook_event_repository import WebhookEventRepository
from src.domain.base import utcnow
from src.domain.event_audit_entry import EventAuditEntry
from src.domain.event_envelope import EventEnvelope
from src.domain.event_transition import TargetType, lookup_transition
from src.domain.webhook_event import WebhookEvent
from .dtos import ReconcileOutcomeDTO

logger = logging.getLogger(__name__)


class ReconcileEvent:

    def __init__(
        self,
        uow: UnitOfWork,
        event_repo: WebhookEventRepository,
        lead_repo: CampaignLeadRepository,
        job_repo: EnrichmentJobRepository,
        audit_repo: EventAuditRepository,
    ):
        self.uow = uow
        self.event_repo = event_repo
        self.lead_repo = lead_repo
        self.job_repo = job_repo
        self.audit_repo = audit_repo

    async def execute(
        self,
        event: WebhookEvent,
        envelope: EventEnvelope,
        correlation_id: str,
    ) -> Result[ReconcileOutcomeDTO]:
        # Rollback expires loaded instances; keep plain values for later use
        event_pk, event_id, event_type = event.id, event.event_id, event.event_type

        transition = lookup_transition(event_type)
        if transition is None:
            logger.info(f"[{correlation_id}] No mapping for event type {event_type}, stored only")
            return Return.ok(ReconcileOutcomeDTO(matched=False, reason="unmapped_event_type"))

        if not envelope.object_id:
            logger.info(f"[{correlation_id}] Event {event_id} carries no object id")
            return Return.ok(ReconcileOutcomeDTO(matched=False, reason="missing_object_id"))

        try:
            processed_at = utcnow()

            if not await self.event_repo.claim_match(event_pk, processed_at):
                await self.uow.rollback()
                stored = await self.event_repo.get_by_event_id(event_id)
                logger.info(f"[{correlation_id}] Event {event_id} already matched")
                return Return.ok(
                    ReconcileOutcomeDTO(
                        matched=True,
                        matched_record_type=stored.matched_record_type if stored else None,
                        matched_id=stored.matched_record_id if stored else None,
                        already_matched=True,
                    )
                )

            if transition.target_type == TargetType.CAMPAIGN_LEAD:
                target = await self.lead_repo.get_by_provider_message_id(envelope.object_id, for_update=True)
            else:
                target = await self.job_repo.get_by_external_run_id(envelope.object_id, for_update=True)

            if target is None:
                await self.uow.rollback()
                logger.info(
                    f"[{correlation_id}] No {transition.target_type.value} matched for "
                    f"object id {envelope.object_id}"
                )
                return Return.ok(ReconcileOutcomeDTO(matched=False, reason="target_not_found"))

            occurred_at = envelope.occurred_at or processed_at
            error_text = envelope.error_text or event_type
            changed = target.apply_event(transition, occurred_at, error_text)

            if changed:
                if transition.target_type == TargetType.CAMPAIGN_LEAD:
                    await self.lead_repo.update(target)
                else:
                    await self.job_repo.update(target)
            else:
                logger.info(
                    f"[{correlation_id}] {transition.target_type.value} {target.id} unchanged "
                    f"by {event_type} (status={target.status.value})"
                )

            event.record_match(transition.target_type.value, target.id, processed_at)
            await self.event_repo.update(event)

            await self.audit_repo.create(
                EventAuditEntry(
                    tenant_id=target.tenant_id,
                    target_type=transition.target_type,
                    target_id=target.id,
                    campaign_id=getattr(target, "campaign_id", None),
                    event_type=event_type,
                    object_id=envelope.object_id,
                    correlation_id=correlation_id,
                    provider_event_id=event_id,
                )
            )

            await self.uow.commit()

            logger.info(
                f"[{correlation_id}] Matched {event_type} to "
                f"{transition.target_type.value} {target.id} (changed={changed})"
            )
            return Return.ok(
                ReconcileOutcomeDTO(
                    matched=True,
                    matched_record_type=transition.target_type.value,
                    matched_id=target.id,
                    changed=changed,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"[{correlation_id}] Reconciliation failed for event {event_id}: {e}")
            return Return.err(
                Error(
                    code="RECONCILE_FAILED",
                    message="Failed to reconcile webhook event",
                    reason=str(e),
                )
            )
