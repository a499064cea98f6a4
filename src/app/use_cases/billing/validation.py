from typing import Optional
from libs.result import Error


def validate_mutation(amount: int, idempotency_token: str) -> Optional[Error]:
    """Shared argument checks for debit and credit; None when valid."""
    if amount is None or amount <= 0:
        return Error(
            code="INVALID_AMOUNT",
            message="Amount must be a positive integer",
            reason=f"amount={amount}",
        )
    if not idempotency_token or not idempotency_token.strip():
        return Error(
            code="INVALID_TOKEN",
            message="Idempotency token must be a non-empty string",
        )
    return None
