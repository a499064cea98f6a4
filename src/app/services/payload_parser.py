"""Provider payload parser contract

A parser turns one provider's untyped webhook JSON into an EventEnvelope.
Parsers are pure functions registered per provider name.
"""

from typing import Any, Callable
from src.domain.event_envelope import EventEnvelope


class PayloadParseError(Exception):
    """The payload cannot be interpreted as an event of this provider"""


PayloadParser = Callable[[Any], EventEnvelope]
