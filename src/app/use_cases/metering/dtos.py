"""Data Transfer Objects for metered actions"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class LeadSearchCommandDTO(BaseModel):
    tenant_id: str = Field(..., description="Tenant identifier")
    filters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Search filters passed to the actor (job_title, company_domain, country, location)"
    )
    fetch_count: Optional[int] = Field(
        default=None,
        description="Number of leads requested; also the number of credits debited"
    )


class PhoneRevealCommandDTO(BaseModel):
    tenant_id: str = Field(..., description="Tenant identifier")
    email: str = Field(..., description="Contact email to look up")


class MeteredActionResponseDTO(BaseModel):
    """
    Response DTO for a successful metered action

    The idempotency_token identifies the debit in the ledger history.
    """

    state: str = Field(..., description="Final attempt state (external_ok)")
    idempotency_token: str
    credits_charged: int
    result: Dict[str, Any] = Field(
        default_factory=dict,
        description="External system result (run id, phone, ...)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "state": "external_ok",
                "idempotency_token": "3f1c7a52-0d7e-4b8f-9f44-1a2b3c4d5e6f",
                "credits_charged": 10,
                "result": {"run_id": "HG7ML7M8z78YcAPEB", "job_id": "a9b1..."}
            }
        }
