"""Request schemas for Billing API

Pydantic models for validating incoming HTTP requests. Amount and token
checks live in the use cases so that they surface as INVALID_AMOUNT /
INVALID_TOKEN errors.
"""

from typing import Optional
from pydantic import BaseModel, Field
from src.domain.credit_balance import CreditKind


class TopUpRequestSchema(BaseModel):
    """
    Request schema for an administrative credit top-up

    Used for POST /billing/credits/top-up endpoint.
    """

    tenant_id: str = Field(
        ...,
        min_length=1,
        description="Tenant identifier (required, non-empty)"
    )

    kind: CreditKind = Field(
        ...,
        description="Credit kind to top up (lead_search, phone_reveal)"
    )

    amount: int = Field(
        ...,
        description="Credits to add (must be > 0)"
    )

    idempotency_token: str = Field(
        ...,
        description="Unique token; retrying with the same token is a no-op"
    )

    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Reason recorded on the ledger entry"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "workspace_42",
                "kind": "lead_search",
                "amount": 500,
                "idempotency_token": "topup:workspace_42:2024-06",
                "description": "Monthly plan allocation"
            }
        }
