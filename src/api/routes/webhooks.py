"""Webhook ingestion routes

POST /webhooks/{provider} always answers 200: the body's success flag
carries the outcome, so providers never retry into the pipeline.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import raise_for_error
from src.adapter.parsers import PARSERS
from src.adapter.repositories.event_audit_repository import SqlAlchemyEventAuditRepository
from src.adapter.repositories.provider_account_repository import SqlAlchemyProviderAccountRepository
from src.adapter.repositories.reconciliation_target_repository import (
    SqlAlchemyCampaignLeadRepository,
    SqlAlchemyEnrichmentJobRepository,
)
from src.adapter.repositories.webhook_event_repository import SqlAlchemyWebhookEventRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.webhooks.correlation import new_correlation_id
from src.app.use_cases.webhooks.dtos import (
    ListWebhookEventsResponseDTO,
    ReplayEventResponseDTO,
    WebhookIngestCommandDTO,
    WebhookIngestResponseDTO,
)
from src.app.use_cases.webhooks.ingest_webhook import IngestWebhook
from src.app.use_cases.webhooks.list_events import ListWebhookEvents
from src.app.use_cases.webhooks.reconcile_event import ReconcileEvent
from src.app.use_cases.webhooks.record_event import RecordEvent
from src.app.use_cases.webhooks.replay_event import ReplayEvent
from src.app.use_cases.webhooks.signature import SIGNATURE_HEADERS
from src.depends import get_config, get_session

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def _build_reconciler(uow: SqlAlchemyUnitOfWork, session: AsyncSession) -> ReconcileEvent:
    return ReconcileEvent(
        uow=uow,
        event_repo=SqlAlchemyWebhookEventRepository(session),
        lead_repo=SqlAlchemyCampaignLeadRepository(session),
        job_repo=SqlAlchemyEnrichmentJobRepository(session),
        audit_repo=SqlAlchemyEventAuditRepository(session),
    )


@router.get(
    "/events",
    response_model=ListWebhookEventsResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def list_webhook_events(
    matched: Optional[bool] = Query(default=None),
    provider: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    """Stored events, newest first; use matched=false to inspect unmatched ones."""
    use_case = ListWebhookEvents(SqlAlchemyWebhookEventRepository(session))
    result = await use_case.execute(matched=matched, provider=provider, limit=limit, offset=offset)
    return result.value


@router.post(
    "/events/{event_id}/replay",
    response_model=ReplayEventResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Event not found",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "EVENT_NOT_FOUND", "message": "Webhook event x not found"}}
                }
            }
        }
    }
)
async def replay_webhook_event(
    event_id: str,
    session: AsyncSession = Depends(get_session),
):
    """
    Re-run reconciliation of a stored event from its raw payload.

    Already-matched events are reported and left untouched.
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = ReplayEvent(
        event_repo=SqlAlchemyWebhookEventRepository(session),
        reconcile_event=_build_reconciler(uow, session),
        parsers=PARSERS,
    )
    result = await use_case.execute(event_id, new_correlation_id())

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{provider}",
    response_model=WebhookIngestResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def ingest_webhook(
    provider: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Receive a provider webhook (unipile, apify).

    The optional signature is the hex HMAC-SHA256 of the raw body in
    X-Webhook-Signature or X-Signature.
    """
    raw_body = await request.body()
    signature = next(
        (request.headers[name] for name in SIGNATURE_HEADERS if request.headers.get(name)),
        None,
    )

    uow = SqlAlchemyUnitOfWork(session)
    use_case = IngestWebhook(
        record_event=RecordEvent(
            uow=uow,
            event_repo=SqlAlchemyWebhookEventRepository(session),
            account_repo=SqlAlchemyProviderAccountRepository(session),
        ),
        reconcile_event=_build_reconciler(uow, session),
        parsers=PARSERS,
        webhook_secret=config.WEBHOOK_SECRET,
        signature_mode=config.WEBHOOK_SIGNATURE_MODE,
    )

    return await use_case.execute(
        WebhookIngestCommandDTO(
            provider=provider,
            raw_body=raw_body,
            signature=signature,
            correlation_id=new_correlation_id(),
        )
    )
