"""Outcome of a side-effecting call to an external system"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class ExternalServiceError(Exception):
    """Transport failure, non-2xx response or malformed body from a provider"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ExternalActionResult:
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, **data: Any) -> "ExternalActionResult":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error_code: str, error_message: str, **data: Any) -> "ExternalActionResult":
        return cls(success=False, data=data, error_code=error_code, error_message=error_message)
