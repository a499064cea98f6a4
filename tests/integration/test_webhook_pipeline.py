"""Integration tests for the webhook event pipeline against a real database

Tests cover:
- A delivered event transitions its lead and writes one audit entry
- Redelivery of the same event id is a duplicate with no side effect
- Unmapped event types are stored unmatched
- Concurrent deliveries of one event id store exactly one row
- Concurrent reconciliation of one event audits it once
- A late target is matched by replay
- Terminal leads are matched and audited but never changed
- Actor run webhooks complete their enrichment job
"""

import asyncio
import pytest
from datetime import datetime
from sqlmodel import select

from src.adapter.parsers import PARSERS, parse_apify_v1, parse_unipile_v1
from src.adapter.repositories.event_audit_repository import SqlAlchemyEventAuditRepository
from src.adapter.repositories.provider_account_repository import SqlAlchemyProviderAccountRepository
from src.adapter.repositories.reconciliation_target_repository import (
    SqlAlchemyCampaignLeadRepository,
    SqlAlchemyEnrichmentJobRepository,
)
from src.adapter.repositories.webhook_event_repository import SqlAlchemyWebhookEventRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.webhooks.reconcile_event import ReconcileEvent
from src.app.use_cases.webhooks.record_event import RecordEvent
from src.app.use_cases.webhooks.replay_event import ReplayEvent, ReplayUnmatchedEvents
from src.domain.campaign_lead import CampaignLead, CampaignLeadStatus
from src.domain.enrichment_job import EnrichmentJob, EnrichmentJobStatus
from src.domain.event_audit_entry import EventAuditEntry
from src.domain.provider_account import ProviderAccount
from src.domain.webhook_event import WebhookEvent

CID = "evt-1717237800000-abcde"


def unipile_envelope(event_id: str, event_type: str = "message.delivered", message_id: str = "m1"):
    return parse_unipile_v1(
        {
            "event": event_type,
            "id": event_id,
            "data": {
                "message_id": message_id,
                "account_id": "acc_1",
                "timestamp": "2024-06-01T10:30:00Z",
            },
        }
    )


def record_use_case(session) -> RecordEvent:
    return RecordEvent(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyWebhookEventRepository(session),
        SqlAlchemyProviderAccountRepository(session),
    )


def reconcile_use_case(session) -> ReconcileEvent:
    return ReconcileEvent(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyWebhookEventRepository(session),
        SqlAlchemyCampaignLeadRepository(session),
        SqlAlchemyEnrichmentJobRepository(session),
        SqlAlchemyEventAuditRepository(session),
    )


def replay_use_case(session) -> ReplayEvent:
    return ReplayEvent(SqlAlchemyWebhookEventRepository(session), reconcile_use_case(session), PARSERS)


async def ingest(session, envelope):
    """Record, then reconcile only when the event is new"""
    recorded = await record_use_case(session).execute(envelope, CID)
    assert recorded.is_ok()
    if not recorded.value.is_new:
        return recorded.value, None
    outcome = await reconcile_use_case(session).execute(recorded.value.event, envelope, CID)
    return recorded.value, outcome


async def seed(session_factory, *rows):
    async with session_factory() as session:
        for row in rows:
            session.add(row)
        await session.commit()


def sent_lead(**overrides) -> CampaignLead:
    values = dict(
        id="lead_row_1",
        tenant_id="tenant_1",
        campaign_id="campaign_1",
        lead_id="lead_1",
        provider_message_id="m1",
        status=CampaignLeadStatus.SENT,
        sent_at=datetime(2024, 6, 1, 9, 0),
    )
    values.update(overrides)
    return CampaignLead(**values)


async def read_lead(session_factory, lead_id: str = "lead_row_1") -> CampaignLead:
    async with session_factory() as session:
        return await session.get(CampaignLead, lead_id)


async def read_events(session_factory, event_id: str):
    async with session_factory() as session:
        result = await session.execute(select(WebhookEvent).where(WebhookEvent.event_id == event_id))
        return list(result.scalars().all())


async def read_audit(session_factory, target_id: str = "lead_row_1"):
    async with session_factory() as session:
        return await SqlAlchemyEventAuditRepository(session).get_by_target(target_id)


@pytest.mark.asyncio
class TestWebhookPipeline:

    async def test_delivered_event_transitions_lead(self, session_factory, db_session):
        """
        Given: lead with provider message id m1 in status sent
        When: evt-100 message.delivered for m1 arrives
        Then: delivered_at set, status stays sent, one audit entry, event matched
        """
        await seed(session_factory, sent_lead())

        recorded, outcome = await ingest(db_session, unipile_envelope("evt-100"))

        assert recorded.is_new is True
        assert outcome.value.matched is True
        assert outcome.value.matched_id == "lead_row_1"
        assert outcome.value.changed is True

        lead = await read_lead(session_factory)
        assert lead.status == CampaignLeadStatus.SENT
        assert lead.delivered_at == datetime(2024, 6, 1, 10, 30)

        audit = await read_audit(session_factory)
        assert len(audit) == 1
        assert audit[0].event_type == "message.delivered"
        assert audit[0].provider_event_id == "evt-100"
        assert audit[0].campaign_id == "campaign_1"
        assert audit[0].correlation_id == CID

        (event,) = await read_events(session_factory, "evt-100")
        assert event.matched is True
        assert event.matched_record_type == "campaign_lead"
        assert event.matched_record_id == "lead_row_1"
        assert event.processed_at is not None

    async def test_redelivery_is_a_duplicate(self, session_factory, db_session):
        await seed(session_factory, sent_lead())
        await ingest(db_session, unipile_envelope("evt-100"))

        recorded, outcome = await ingest(db_session, unipile_envelope("evt-100"))

        assert recorded.is_new is False
        assert recorded.event.matched is True
        assert outcome is None
        assert len(await read_events(session_factory, "evt-100")) == 1
        assert len(await read_audit(session_factory)) == 1

    async def test_events_without_own_id_are_kept_apart_per_type(self, session_factory, db_session):
        """
        Given: provider payloads carrying only the message id
        When: message.delivered then message.seen for m1 arrive
        Then: both are stored and both timestamps land on the lead
        """
        await seed(session_factory, sent_lead())

        def body_only(event_type, timestamp):
            return parse_unipile_v1(
                {"event": event_type, "data": {"message_id": "m1", "timestamp": timestamp}}
            )

        delivered, _ = await ingest(db_session, body_only("message.delivered", "2024-06-01T10:30:00Z"))
        seen, outcome = await ingest(db_session, body_only("message.seen", "2024-06-01T11:00:00Z"))

        assert delivered.is_new is True
        assert seen.is_new is True
        assert outcome.value.matched is True

        lead = await read_lead(session_factory)
        assert lead.delivered_at == datetime(2024, 6, 1, 10, 30)
        assert lead.seen_at == datetime(2024, 6, 1, 11, 0)
        assert len(await read_events(session_factory, "message.delivered:m1")) == 1
        assert len(await read_events(session_factory, "message.seen:m1")) == 1
        assert len(await read_audit(session_factory)) == 2

    async def test_unmapped_event_type_is_stored_only(self, session_factory, db_session):
        await seed(session_factory, sent_lead())

        recorded, outcome = await ingest(db_session, unipile_envelope("evt-200", "message.unsubscribed"))

        assert recorded.is_new is True
        assert outcome.value.matched is False
        assert outcome.value.reason == "unmapped_event_type"

        (event,) = await read_events(session_factory, "evt-200")
        assert event.matched is False
        assert event.raw_payload["event"] == "message.unsubscribed"
        assert await read_audit(session_factory) == []

    async def test_tenant_is_resolved_from_account(self, session_factory, db_session):
        await seed(session_factory, ProviderAccount(account_id="acc_1", tenant_id="tenant_1"))

        await ingest(db_session, unipile_envelope("evt-300", message_id="unknown"))

        (event,) = await read_events(session_factory, "evt-300")
        assert event.tenant_id == "tenant_1"
        assert event.account_id == "acc_1"

    async def test_failed_lead_is_matched_but_unchanged(self, session_factory, db_session):
        await seed(session_factory, sent_lead(status=CampaignLeadStatus.FAILED, error="bounced"))

        _, outcome = await ingest(db_session, unipile_envelope("evt-400", "message.replied"))

        assert outcome.value.matched is True
        assert outcome.value.changed is False

        lead = await read_lead(session_factory)
        assert lead.status == CampaignLeadStatus.FAILED
        assert lead.replied_at is None
        assert lead.error == "bounced"
        assert len(await read_audit(session_factory)) == 1

    async def test_failure_event_marks_lead_failed(self, session_factory, db_session):
        await seed(session_factory, sent_lead())

        await ingest(db_session, unipile_envelope("evt-500", "message.failed"))

        lead = await read_lead(session_factory)
        assert lead.status == CampaignLeadStatus.FAILED
        assert lead.error == "message.failed"


@pytest.mark.asyncio
class TestReplay:

    async def test_late_target_is_matched_by_replay(self, session_factory, db_session):
        """
        Given: evt-600 arrives before its lead exists
        When: the lead is created and the event replayed
        Then: the event is matched and the lead transitioned
        """
        _, outcome = await ingest(db_session, unipile_envelope("evt-600", "message.seen"))
        assert outcome.value.matched is False
        assert outcome.value.reason == "target_not_found"
        assert (await read_events(session_factory, "evt-600"))[0].matched is False

        await seed(session_factory, sent_lead())

        async with session_factory() as session:
            result = await replay_use_case(session).execute("evt-600", CID)

        assert result.is_ok()
        assert result.value.matched is True
        assert result.value.matched_id == "lead_row_1"
        assert (await read_lead(session_factory)).seen_at == datetime(2024, 6, 1, 10, 30)
        assert (await read_events(session_factory, "evt-600"))[0].matched is True

    async def test_replay_of_matched_event_is_a_no_op(self, session_factory, db_session):
        await seed(session_factory, sent_lead())
        await ingest(db_session, unipile_envelope("evt-700"))

        async with session_factory() as session:
            result = await replay_use_case(session).execute("evt-700", CID)

        assert result.value.already_matched is True
        assert len(await read_audit(session_factory)) == 1

    async def test_replay_unknown_event(self, session_factory):
        async with session_factory() as session:
            result = await replay_use_case(session).execute("missing", CID)

        assert result.is_err()
        assert result.error.code == "EVENT_NOT_FOUND"

    async def test_batch_replay_matches_what_it_can(self, session_factory, db_session):
        await ingest(db_session, unipile_envelope("evt-801", "message.delivered", "m1"))
        await ingest(db_session, unipile_envelope("evt-802", "message.delivered", "m2"))
        await ingest(db_session, unipile_envelope("evt-803", "message.unsubscribed", "m1"))
        await seed(session_factory, sent_lead())

        async with session_factory() as session:
            event_repo = SqlAlchemyWebhookEventRepository(session)
            result = await ReplayUnmatchedEvents(event_repo, replay_use_case(session)).execute(10, CID)

        assert result.is_ok()
        assert result.value.total_candidates == 2
        assert result.value.matched == 1
        assert result.value.unmatched == 1
        assert result.value.failed == 0
        assert result.value.next_cursor is None

    async def test_batches_advance_past_events_that_never_match(self, session_factory, db_session):
        """
        Given: three unmatched events and a lead created late for the newest
        When: batches of two are replayed following the cursor
        Then: the second batch reaches and matches the newest event
        """
        for n in (1, 2, 3):
            await ingest(db_session, unipile_envelope(f"evt-90{n}", "message.delivered", f"m{n}"))
        await seed(session_factory, sent_lead(provider_message_id="m3"))

        async with session_factory() as session:
            event_repo = SqlAlchemyWebhookEventRepository(session)
            use_case = ReplayUnmatchedEvents(event_repo, replay_use_case(session))
            first = await use_case.execute(2, CID)
            second = await use_case.execute(2, CID, after_id=first.value.next_cursor)

        assert (first.value.total_candidates, first.value.matched) == (2, 0)
        assert first.value.next_cursor is not None
        assert (second.value.total_candidates, second.value.matched) == (1, 1)
        assert second.value.next_cursor is None
        assert (await read_events(session_factory, "evt-903"))[0].matched is True
        assert (await read_lead(session_factory)).delivered_at == datetime(2024, 6, 1, 10, 30)


@pytest.mark.asyncio
class TestPipelineConcurrency:

    async def test_concurrent_deliveries_store_one_row(self, session_factory):
        """
        Given: no stored event
        When: 8 deliveries of evt-900 race, each with its own session
        Then: exactly one is new and one row exists
        """
        envelope = unipile_envelope("evt-900")

        async def deliver():
            async with session_factory() as session:
                return await record_use_case(session).execute(envelope, CID)

        results = await asyncio.gather(*(deliver() for _ in range(8)))

        assert all(r.is_ok() for r in results)
        assert sum(1 for r in results if r.value.is_new) == 1
        assert len(await read_events(session_factory, "evt-900")) == 1

    async def test_concurrent_reconciliation_audits_once(self, session_factory, db_session):
        await seed(session_factory, sent_lead())
        envelope = unipile_envelope("evt-950", "message.replied")
        assert (await record_use_case(db_session).execute(envelope, CID)).value.is_new

        async def reconcile():
            async with session_factory() as session:
                event = await SqlAlchemyWebhookEventRepository(session).get_by_event_id("evt-950")
                return await reconcile_use_case(session).execute(event, envelope, CID)

        results = await asyncio.gather(*(reconcile() for _ in range(4)))

        assert all(r.is_ok() and r.value.matched for r in results)
        assert sum(1 for r in results if not r.value.already_matched) == 1
        assert len(await read_audit(session_factory)) == 1


@pytest.mark.asyncio
class TestEnrichmentJobEvents:

    async def test_run_succeeded_completes_job(self, session_factory, db_session):
        await seed(
            session_factory,
            EnrichmentJob(
                id="job_1",
                tenant_id="tenant_1",
                external_run_id="run_42",
                idempotency_token="tok",
                credits_charged=10,
            ),
        )
        envelope = parse_apify_v1(
            {
                "eventType": "ACTOR.RUN.SUCCEEDED",
                "eventData": {"actorId": "actor_1", "actorRunId": "run_42"},
                "resource": {"id": "run_42", "status": "SUCCEEDED", "finishedAt": "2024-06-01T11:00:00Z"},
            }
        )

        _, outcome = await ingest(db_session, envelope)

        assert outcome.value.matched is True
        assert outcome.value.matched_record_type == "enrichment_job"

        async with session_factory() as session:
            job = await session.get(EnrichmentJob, "job_1")
            audit = (await session.execute(select(EventAuditEntry))).scalars().all()

        assert job.status == EnrichmentJobStatus.COMPLETED
        assert job.completed_at == datetime(2024, 6, 1, 11, 0)
        assert len(audit) == 1
        assert audit[0].campaign_id is None
