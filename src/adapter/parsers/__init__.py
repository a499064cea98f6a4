"""Versioned provider payload parsers, keyed by provider name"""
from typing import Dict, Optional
from src.app.services.payload_parser import PayloadParser
from .unipile import parse_unipile_v1
from .apify import parse_apify_v1

PARSERS: Dict[str, PayloadParser] = {
    "unipile": parse_unipile_v1,
    "apify": parse_apify_v1,
}


def get_parser(provider: str) -> Optional[PayloadParser]:
    return PARSERS.get(provider)


__all__ = ["PARSERS", "get_parser", "parse_unipile_v1", "parse_apify_v1"]
