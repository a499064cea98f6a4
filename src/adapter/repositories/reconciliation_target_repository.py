"""SQLAlchemy implementations of the reconciliation target repositories"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.reconciliation_target_repository import (
    CampaignLeadRepository,
    EnrichmentJobRepository,
)
from src.domain.campaign_lead import CampaignLead
from src.domain.enrichment_job import EnrichmentJob


class SqlAlchemyCampaignLeadRepository(CampaignLeadRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_provider_message_id(
        self, provider_message_id: str, for_update: bool = False
    ) -> Optional[CampaignLead]:
        stmt = select(CampaignLead).where(CampaignLead.provider_message_id == provider_message_id)
        if for_update:
            # Refresh identity-mapped rows with the values read under the lock
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        # Several rows can share a message id only through bad data; take the first
        return result.scalars().first()

    async def update(self, lead: CampaignLead) -> CampaignLead:
        self.session.add(lead)
        await self.session.flush()
        return lead


class SqlAlchemyEnrichmentJobRepository(EnrichmentJobRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, job: EnrichmentJob) -> EnrichmentJob:
        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def get_by_external_run_id(
        self, external_run_id: str, for_update: bool = False
    ) -> Optional[EnrichmentJob]:
        stmt = select(EnrichmentJob).where(EnrichmentJob.external_run_id == external_run_id)
        if for_update:
            # Refresh identity-mapped rows with the values read under the lock
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, job: EnrichmentJob) -> EnrichmentJob:
        self.session.add(job)
        await self.session.flush()
        return job
