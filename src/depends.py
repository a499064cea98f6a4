from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.apify_lead_search_service import ApifyLeadSearchService
from src.adapter.services.apollo_phone_enrichment_service import ApolloPhoneEnrichmentService
from src.app.services.lead_search_service import LeadSearchService
from src.app.services.phone_enrichment_service import PhoneEnrichmentService

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_config(request: Request):
    """Config the app was created with (ApplicationConfig unless overridden)"""
    return getattr(request.app.state, "config", ApplicationConfig)


def get_lead_search_service(config=Depends(get_config)) -> LeadSearchService:
    return ApifyLeadSearchService(
        api_token=config.APIFY_API_TOKEN,
        actor=config.APIFY_LEAD_SEARCH_ACTOR,
        base_url=config.APIFY_BASE_URL,
        timeout=config.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )


def get_phone_enrichment_service(config=Depends(get_config)) -> PhoneEnrichmentService:
    return ApolloPhoneEnrichmentService(
        api_key=config.APOLLO_API_KEY,
        base_url=config.APOLLO_BASE_URL,
        timeout=config.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )
