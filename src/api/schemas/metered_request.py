"""Request schemas for metered actions"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class LeadSearchRequestSchema(BaseModel):
    """
    Request schema for starting a paid lead search

    Used for POST /metered/lead-search endpoint.
    """

    tenant_id: str = Field(
        ...,
        min_length=1,
        description="Tenant identifier (required, non-empty)"
    )

    filters: Dict[str, Any] = Field(
        default_factory=dict,
        description="job_title, company_domain (or company), country, location"
    )

    fetch_count: Optional[int] = Field(
        default=None,
        description="Number of leads to fetch, one lead_search credit each (default 10)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "workspace_42",
                "filters": {"job_title": ["Head of Sales"], "country": ["Brazil"]},
                "fetch_count": 25
            }
        }


class PhoneRevealRequestSchema(BaseModel):
    """
    Request schema for a phone reveal

    Used for POST /metered/phone-reveal endpoint.
    """

    tenant_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, description="Contact email to look up")

    class Config:
        json_schema_extra = {
            "example": {"tenant_id": "workspace_42", "email": "jane@acme.com"}
        }
