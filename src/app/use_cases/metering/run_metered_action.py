"""Metered action orchestrator

Wraps a paid external call in debit-before / rollback-on-failure:

1. Generate the idempotency token (before any side effect)
2. Debit the quota; an insufficient balance fails fast
3. Call the external system under a bounded timeout
4. On exception, timeout or a failed result, credit the same amount back
   with the same token, then surface the external error
   (a cancelled call is refunded too, then the cancellation propagates)

No balance lock is held during the external call: the debit commits before
the call and the rollback runs in its own transaction.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional
from libs.result import Error
from src.app.services.external_action import ExternalActionResult
from src.app.use_cases.billing.credit_quota import CreditQuota
from src.app.use_cases.billing.debit_quota import DebitQuota
from src.app.use_cases.billing.dtos import CreditCommandDTO, DebitCommandDTO
from src.domain.base import generate_uuid
from src.domain.credit_balance import CreditKind
from src.domain.metered_action import MeteredActionState

logger = logging.getLogger(__name__)

ExternalAction = Callable[[], Awaitable[ExternalActionResult]]


@dataclass
class MeteredActionOutcome:
    state: MeteredActionState
    idempotency_token: str
    amount: int
    external: Optional[ExternalActionResult] = None
    error: Optional[Error] = None

    @property
    def succeeded(self) -> bool:
        return self.state == MeteredActionState.EXTERNAL_OK


class MeteredActionOrchestrator:

    def __init__(
        self,
        debit_quota: DebitQuota,
        credit_quota: CreditQuota,
        timeout_seconds: float = 30.0,
    ):
        self.debit_quota = debit_quota
        self.credit_quota = credit_quota
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        tenant_id: str,
        kind: CreditKind,
        amount: int,
        action: ExternalAction,
        description: Optional[str] = None,
    ) -> MeteredActionOutcome:
        """
        Run one metered action attempt

        Args:
            action: Zero-argument coroutine factory performing the external call
        """
        token = generate_uuid()
        outcome = MeteredActionOutcome(
            state=MeteredActionState.INIT, idempotency_token=token, amount=amount
        )

        debit = await self.debit_quota.execute(
            DebitCommandDTO(
                tenant_id=tenant_id,
                kind=kind,
                amount=amount,
                idempotency_token=token,
                description=description,
            )
        )
        if debit.is_err():
            outcome.error = debit.error
            return outcome

        if not debit.value.applied:
            outcome.state = MeteredActionState.REJECTED
            outcome.error = Error(
                code="INSUFFICIENT_CREDIT",
                message=f"Insufficient {kind.value} credits. Required: {amount}, "
                        f"Available: {debit.value.balance_after}",
                reason=f"balance={debit.value.balance_after}, required={amount}",
            )
            return outcome

        outcome.state = MeteredActionState.DEBITED

        try:
            external = await asyncio.wait_for(action(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            # The call may still land remotely; the tenant is refunded regardless
            external_error = Error(
                code="EXTERNAL_ACTION_FAILED",
                message=f"External call timed out after {self.timeout_seconds}s",
            )
        except asyncio.CancelledError:
            # The refund must outlive the cancellation of the calling task
            await asyncio.shield(
                self._roll_back(
                    outcome, tenant_id, kind,
                    Error(code="EXTERNAL_ACTION_FAILED", message="External call cancelled"),
                )
            )
            raise
        except Exception as e:
            external_error = Error(code="EXTERNAL_ACTION_FAILED", message=str(e) or type(e).__name__)
        else:
            outcome.external = external
            if external.success:
                outcome.state = MeteredActionState.EXTERNAL_OK
                return outcome
            external_error = Error(
                code=external.error_code or "EXTERNAL_ACTION_FAILED",
                message=external.error_message or "External action failed",
            )

        return await self._roll_back(outcome, tenant_id, kind, external_error)

    async def _roll_back(
        self,
        outcome: MeteredActionOutcome,
        tenant_id: str,
        kind: CreditKind,
        external_error: Error,
    ) -> MeteredActionOutcome:
        """Credit the debited amount back under the debit's token"""
        token = outcome.idempotency_token
        amount = outcome.amount
        outcome.state = MeteredActionState.EXTERNAL_FAILED
        outcome.error = external_error
        logger.warning(
            f"External {kind.value} action failed for tenant {tenant_id} "
            f"(token={token}): {external_error.message}; rolling back"
        )

        refund = await self.credit_quota.execute(
            CreditCommandDTO(
                tenant_id=tenant_id,
                kind=kind,
                amount=amount,
                idempotency_token=token,
                description=f"Rollback: {external_error.message}"[:500],
            )
        )
        if refund.is_err():
            outcome.state = MeteredActionState.ROLLBACK_FAILED
            logger.critical(
                f"ROLLBACK FAILED - manual reconciliation required: tenant={tenant_id} "
                f"kind={kind.value} amount={amount} token={token} "
                f"reason={refund.error.reason or refund.error.message}"
            )
            outcome.error = Error(
                code="ROLLBACK_FAILED",
                message="External action failed and the debited credits could not be restored",
                reason=external_error.message,
            )
            return outcome

        outcome.state = MeteredActionState.ROLLED_BACK
        return outcome
