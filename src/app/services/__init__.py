from .unit_of_work import UnitOfWork
from .external_action import ExternalActionResult, ExternalServiceError
from .lead_search_service import LeadSearchService
from .phone_enrichment_service import PhoneEnrichmentService
from .payload_parser import PayloadParseError, PayloadParser

__all__ = [
    "UnitOfWork",
    "ExternalActionResult",
    "ExternalServiceError",
    "LeadSearchService",
    "PhoneEnrichmentService",
    "PayloadParseError",
    "PayloadParser",
]
