"""Repository interfaces for records the event reconciler transitions"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.campaign_lead import CampaignLead
from src.domain.enrichment_job import EnrichmentJob


class CampaignLeadRepository(ABC):

    @abstractmethod
    async def get_by_provider_message_id(
        self, provider_message_id: str, for_update: bool = False
    ) -> Optional[CampaignLead]:
        pass

    @abstractmethod
    async def update(self, lead: CampaignLead) -> CampaignLead:
        pass


class EnrichmentJobRepository(ABC):

    @abstractmethod
    async def create(self, job: EnrichmentJob) -> EnrichmentJob:
        pass

    @abstractmethod
    async def get_by_external_run_id(
        self, external_run_id: str, for_update: bool = False
    ) -> Optional[EnrichmentJob]:
        pass

    @abstractmethod
    async def update(self, job: EnrichmentJob) -> EnrichmentJob:
        pass
