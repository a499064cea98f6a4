"""Helpers shared by the provider payload parsers"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from src.domain.base import to_naive_utc


def first_present(source: Mapping[str, Any], *keys: str) -> Optional[str]:
    """First non-empty scalar among keys, as a string."""
    for key in keys:
        value = source.get(key)
        if value is None or value == "" or isinstance(value, (dict, list, bool)):
            continue
        return str(value)
    return None


def first_text(source: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = source.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def fallback_event_id(provider: str, payload: Any) -> str:
    """
    Deterministic id for payloads that carry none.

    The same payload always hashes to the same id, so a redelivery is still
    caught by deduplication.
    """
    digest = hashlib.sha256(f"{provider}:{canonical_json(payload)}".encode("utf-8")).hexdigest()
    return f"{provider}:sha256:{digest}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 strings or epoch seconds/milliseconds; None when unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_naive_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None
