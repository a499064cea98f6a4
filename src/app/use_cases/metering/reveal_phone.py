"""RevealPhone Use Case

Looks up a contact's phone number on the contact enrichment API for one
phone_reveal credit. "No phone found" is refunded like any other failure.
"""

from libs.result import Result, Return
from src.app.services.phone_enrichment_service import PhoneEnrichmentService
from src.domain.credit_balance import CreditKind
from .dtos import PhoneRevealCommandDTO, MeteredActionResponseDTO
from .run_metered_action import MeteredActionOrchestrator

PHONE_REVEAL_COST = 1


class RevealPhone:

    def __init__(
        self,
        orchestrator: MeteredActionOrchestrator,
        phone_service: PhoneEnrichmentService,
    ):
        self.orchestrator = orchestrator
        self.phone_service = phone_service

    async def execute(self, command: PhoneRevealCommandDTO) -> Result[MeteredActionResponseDTO]:
        outcome = await self.orchestrator.run(
            tenant_id=command.tenant_id,
            kind=CreditKind.PHONE_REVEAL,
            amount=PHONE_REVEAL_COST,
            action=lambda: self.phone_service.reveal_phone(command.email),
            description=f"Phone reveal: {command.email}",
        )

        if not outcome.succeeded:
            return Return.err(outcome.error)

        return Return.ok(
            MeteredActionResponseDTO(
                state=outcome.state.value,
                idempotency_token=outcome.idempotency_token,
                credits_charged=PHONE_REVEAL_COST,
                result=outcome.external.data,
            )
        )
