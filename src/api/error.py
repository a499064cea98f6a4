"""Client-facing errors

Routes translate use case errors into ClientError; the app factory renders
them as {"error": {"code", "message", "reason"}}.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from libs.result import Error


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code


async def client_error_handler(_request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error.to_dict()})


# Error codes that are not the client's fault
SERVER_ERROR_CODES = frozenset({
    "DEBIT_FAILED",
    "CREDIT_FAILED",
    "ROLLBACK_FAILED",
    "EXTERNAL_ACTION_FAILED",
    "RECONCILE_FAILED",
    "REPLAY_FAILED",
    "BALANCE_LOOKUP_FAILED",
    "RECONCILIATION_FAILED",
})


def raise_for_error(error: Error) -> None:
    """Map a use case error code onto its HTTP status"""
    if error.code == "INSUFFICIENT_CREDIT":
        raise ClientError(error, status_code=status.HTTP_402_PAYMENT_REQUIRED)
    if error.code in ("PHONE_NOT_FOUND", "EVENT_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code in SERVER_ERROR_CODES:
        raise ClientError(error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise ClientError(error)
