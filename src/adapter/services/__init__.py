from .unit_of_work import SqlAlchemyUnitOfWork
from .apify_lead_search_service import ApifyLeadSearchService
from .apollo_phone_enrichment_service import ApolloPhoneEnrichmentService

__all__ = [
    "SqlAlchemyUnitOfWork",
    "ApifyLeadSearchService",
    "ApolloPhoneEnrichmentService",
]
