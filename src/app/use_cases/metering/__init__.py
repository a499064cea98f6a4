"""Metered action use cases"""
from .run_metered_action import MeteredActionOrchestrator, MeteredActionOutcome
from .start_lead_search import StartLeadSearch
from .reveal_phone import RevealPhone
from .dtos import LeadSearchCommandDTO, PhoneRevealCommandDTO, MeteredActionResponseDTO

__all__ = [
    "MeteredActionOrchestrator",
    "MeteredActionOutcome",
    "StartLeadSearch",
    "RevealPhone",
    "LeadSearchCommandDTO",
    "PhoneRevealCommandDTO",
    "MeteredActionResponseDTO",
]
