"""Unit tests for ReconcileEvent use case

Tests cover:
- Mapped message event transitions a campaign lead and writes one audit entry
- Terminal targets are linked and audited without changes
- Unmapped types, missing object ids and unknown targets stay unmatched
- A lost claim reports the event as already matched
- Failures roll back and surface RECONCILE_FAILED
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.webhooks.reconcile_event import ReconcileEvent
from src.domain.campaign_lead import CampaignLead, CampaignLeadStatus
from src.domain.enrichment_job import EnrichmentJob, EnrichmentJobStatus
from src.domain.event_envelope import EventEnvelope
from src.domain.event_transition import TargetType
from src.domain.webhook_event import ObjectType, WebhookEvent

OCCURRED = datetime(2024, 6, 1, 10, 30)


def make_event(event_type: str = "message.delivered") -> WebhookEvent:
    return WebhookEvent(id=1, event_id="evt_1", provider="unipile", event_type=event_type)


def make_envelope(event_type: str = "message.delivered", object_id="msg_1", **extra) -> EventEnvelope:
    return EventEnvelope(
        provider="unipile",
        event_id="evt_1",
        event_type=event_type,
        object_type=ObjectType.MESSAGE,
        object_id=object_id,
        occurred_at=OCCURRED,
        parser_version="unipile.v1",
        **extra,
    )


@pytest.fixture
def mock_event_repo():
    repo = MagicMock()
    repo.claim_match = AsyncMock(return_value=True)
    repo.update = AsyncMock(side_effect=lambda event: event)
    return repo


@pytest.fixture
def mock_lead_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda lead: lead)
    return repo


@pytest.fixture
def mock_job_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda job: job)
    return repo


@pytest.fixture
def mock_audit_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def reconcile_use_case(mock_uow, mock_event_repo, mock_lead_repo, mock_job_repo, mock_audit_repo):
    return ReconcileEvent(
        uow=mock_uow,
        event_repo=mock_event_repo,
        lead_repo=mock_lead_repo,
        job_repo=mock_job_repo,
        audit_repo=mock_audit_repo,
    )


@pytest.fixture
def sent_lead():
    return CampaignLead(
        id="lead-1",
        tenant_id="tenant_1",
        campaign_id="camp-1",
        lead_id="person-1",
        provider_message_id="msg_1",
        status=CampaignLeadStatus.SENT,
        sent_at=datetime(2024, 6, 1, 9, 0),
    )


@pytest.mark.asyncio
class TestReconcileCampaignLead:

    async def test_delivered_event_sets_timestamp_and_audits(
        self, reconcile_use_case, mock_event_repo, mock_lead_repo, mock_audit_repo, mock_uow, sent_lead
    ):
        mock_lead_repo.get_by_provider_message_id = AsyncMock(return_value=sent_lead)
        event = make_event()

        result = await reconcile_use_case.execute(event, make_envelope(), "cid-1")

        assert result.is_ok()
        outcome = result.value
        assert outcome.matched is True
        assert outcome.changed is True
        assert outcome.matched_id == "lead-1"
        assert outcome.matched_record_type == "campaign_lead"

        assert sent_lead.delivered_at == OCCURRED
        assert sent_lead.status == CampaignLeadStatus.SENT
        assert event.matched is True
        assert event.matched_record_id == "lead-1"
        assert event.processed_at is not None

        mock_event_repo.claim_match.assert_called_once()
        mock_lead_repo.get_by_provider_message_id.assert_called_once_with("msg_1", for_update=True)
        mock_lead_repo.update.assert_called_once_with(sent_lead)
        audit = mock_audit_repo.create.call_args[0][0]
        assert audit.target_type == TargetType.CAMPAIGN_LEAD
        assert audit.target_id == "lead-1"
        assert audit.campaign_id == "camp-1"
        assert audit.provider_event_id == "evt_1"
        assert audit.correlation_id == "cid-1"
        mock_uow.commit.assert_called_once()

    async def test_failed_lead_is_linked_but_unchanged(
        self, reconcile_use_case, mock_lead_repo, mock_audit_repo, mock_uow
    ):
        """
        Given: A lead in terminal status failed
        When: message.delivered arrives
        Then: Lead unchanged, event still matched, one audit entry written
        """
        failed_lead = CampaignLead(
            id="lead-2",
            tenant_id="tenant_1",
            campaign_id="camp-1",
            lead_id="person-2",
            provider_message_id="msg_1",
            status=CampaignLeadStatus.FAILED,
            error="message.failed",
        )
        mock_lead_repo.get_by_provider_message_id = AsyncMock(return_value=failed_lead)
        event = make_event()

        result = await reconcile_use_case.execute(event, make_envelope(), "cid")

        assert result.value.matched is True
        assert result.value.changed is False
        assert failed_lead.status == CampaignLeadStatus.FAILED
        assert failed_lead.delivered_at is None
        assert event.matched is True
        mock_lead_repo.update.assert_not_called()
        mock_audit_repo.create.assert_called_once()
        mock_uow.commit.assert_called_once()

    async def test_failure_event_records_error_text(self, reconcile_use_case, mock_lead_repo, sent_lead):
        mock_lead_repo.get_by_provider_message_id = AsyncMock(return_value=sent_lead)

        result = await reconcile_use_case.execute(
            make_event("message.failed"),
            make_envelope("message.failed", error_text="Recipient unreachable"),
            "cid",
        )

        assert result.value.changed is True
        assert sent_lead.status == CampaignLeadStatus.FAILED
        assert sent_lead.error == "Recipient unreachable"


@pytest.mark.asyncio
class TestReconcileEnrichmentJob:

    async def test_run_succeeded_completes_job(self, reconcile_use_case, mock_job_repo, mock_lead_repo):
        job = EnrichmentJob(
            id="job-1", tenant_id="tenant_1", external_run_id="run_1", idempotency_token="tok", credits_charged=10
        )
        mock_job_repo.get_by_external_run_id = AsyncMock(return_value=job)
        mock_lead_repo.get_by_provider_message_id = AsyncMock()
        event = WebhookEvent(id=2, event_id="ACTOR.RUN.SUCCEEDED:run_1", provider="apify", event_type="ACTOR.RUN.SUCCEEDED")
        envelope = EventEnvelope(
            provider="apify",
            event_id="ACTOR.RUN.SUCCEEDED:run_1",
            event_type="ACTOR.RUN.SUCCEEDED",
            object_type=ObjectType.RUN,
            object_id="run_1",
            occurred_at=OCCURRED,
            parser_version="apify.v1",
        )

        result = await reconcile_use_case.execute(event, envelope, "cid")

        assert result.value.matched is True
        assert result.value.matched_record_type == "enrichment_job"
        assert job.status == EnrichmentJobStatus.COMPLETED
        assert job.completed_at == OCCURRED
        mock_job_repo.get_by_external_run_id.assert_called_once_with("run_1", for_update=True)
        mock_lead_repo.get_by_provider_message_id.assert_not_called()


@pytest.mark.asyncio
class TestReconcileUnmatched:

    async def test_unmapped_event_type_is_stored_only(self, reconcile_use_case, mock_event_repo, mock_uow):
        result = await reconcile_use_case.execute(
            make_event("account.status"), make_envelope("account.status"), "cid"
        )

        assert result.value.matched is False
        assert result.value.reason == "unmapped_event_type"
        mock_event_repo.claim_match.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_missing_object_id(self, reconcile_use_case, mock_event_repo):
        result = await reconcile_use_case.execute(make_event(), make_envelope(object_id=None), "cid")

        assert result.value.matched is False
        assert result.value.reason == "missing_object_id"
        mock_event_repo.claim_match.assert_not_called()

    async def test_target_not_found_undoes_claim(
        self, reconcile_use_case, mock_lead_repo, mock_audit_repo, mock_uow
    ):
        mock_lead_repo.get_by_provider_message_id = AsyncMock(return_value=None)

        result = await reconcile_use_case.execute(make_event(), make_envelope(), "cid")

        assert result.is_ok()
        assert result.value.matched is False
        assert result.value.reason == "target_not_found"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
        mock_audit_repo.create.assert_not_called()

    async def test_lost_claim_reports_already_matched(
        self, reconcile_use_case, mock_event_repo, mock_lead_repo, mock_uow
    ):
        mock_event_repo.claim_match = AsyncMock(return_value=False)
        mock_event_repo.get_by_event_id = AsyncMock(
            return_value=WebhookEvent(
                id=1,
                event_id="evt_1",
                provider="unipile",
                event_type="message.delivered",
                matched=True,
                matched_record_type="campaign_lead",
                matched_record_id="lead-1",
            )
        )
        mock_lead_repo.get_by_provider_message_id = AsyncMock()

        result = await reconcile_use_case.execute(make_event(), make_envelope(), "cid")

        assert result.value.matched is True
        assert result.value.already_matched is True
        assert result.value.matched_id == "lead-1"
        mock_lead_repo.get_by_provider_message_id.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_failure_rolls_back(self, reconcile_use_case, mock_lead_repo, mock_uow):
        mock_lead_repo.get_by_provider_message_id = AsyncMock(side_effect=Exception("deadlock"))

        result = await reconcile_use_case.execute(make_event(), make_envelope(), "cid")

        assert result.is_err()
        assert result.error.code == "RECONCILE_FAILED"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
