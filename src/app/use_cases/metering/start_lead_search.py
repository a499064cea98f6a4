"""StartLeadSearch Use Case

Starts a paid lead search run on the actor platform. One lead_search credit
is debited per requested lead; a successful start creates an EnrichmentJob
that the run's completion webhook later reconciles.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.lead_search_service import LeadSearchService
from src.app.repositories.reconciliation_target_repository import EnrichmentJobRepository
from src.domain.credit_balance import CreditKind
from src.domain.enrichment_job import EnrichmentJob
from .dtos import LeadSearchCommandDTO, MeteredActionResponseDTO
from .run_metered_action import MeteredActionOrchestrator

logger = logging.getLogger(__name__)


class StartLeadSearch:

    def __init__(
        self,
        uow: UnitOfWork,
        orchestrator: MeteredActionOrchestrator,
        lead_search_service: LeadSearchService,
        job_repo: EnrichmentJobRepository,
        default_fetch_count: int = 10,
    ):
        self.uow = uow
        self.orchestrator = orchestrator
        self.lead_search_service = lead_search_service
        self.job_repo = job_repo
        self.default_fetch_count = default_fetch_count

    async def execute(self, command: LeadSearchCommandDTO) -> Result[MeteredActionResponseDTO]:
        fetch_count = command.fetch_count if command.fetch_count is not None else self.default_fetch_count

        outcome = await self.orchestrator.run(
            tenant_id=command.tenant_id,
            kind=CreditKind.LEAD_SEARCH,
            amount=fetch_count,
            action=lambda: self.lead_search_service.start_search(command.filters, fetch_count),
            description=f"Lead search: {fetch_count} leads",
        )

        if not outcome.succeeded:
            return Return.err(outcome.error)

        run_id = outcome.external.data["run_id"]
        result = dict(outcome.external.data)
        result["job_id"] = await self._record_job(command.tenant_id, run_id, outcome.idempotency_token, fetch_count)

        return Return.ok(
            MeteredActionResponseDTO(
                state=outcome.state.value,
                idempotency_token=outcome.idempotency_token,
                credits_charged=fetch_count,
                result=result,
            )
        )

    async def _record_job(self, tenant_id: str, run_id: str, token: str, credits: int):
        """
        Persist the job the completion webhook will be matched against.

        The run is already started and paid for, so a failure here is logged
        and the run's webhook stays unmatched until replayed.
        """
        try:
            job = await self.job_repo.create(
                EnrichmentJob(
                    tenant_id=tenant_id,
                    kind=CreditKind.LEAD_SEARCH,
                    external_run_id=run_id,
                    idempotency_token=token,
                    credits_charged=credits,
                )
            )
            await self.uow.commit()
            return job.id
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to record enrichment job for run {run_id} (token={token}): {e}")
            return None
