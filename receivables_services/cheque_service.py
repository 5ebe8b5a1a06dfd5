"""
receivables_services.cheque_service -- cheque banking events.

Responsibility:
    Record that a stored cheque cleared or was returned (bounced). The
    transition rules live on ``ChequeDetail``; this service loads the row,
    applies the transition and writes the result back.

Architecture position:
    Services -- stateful orchestration over kernel models. The caller owns
    the session and its transaction.

Failure modes:
    - ChequeNotFoundError for an unknown cheque id.
    - ChequeStateError when the cheque is already returned.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from receivables_config import get_active_policy
from receivables_config.schema import ReconciliationPolicy
from receivables_kernel.domain.clock import Clock, SystemClock
from receivables_kernel.domain.records import ChequeDetail
from receivables_kernel.domain.row_mapping import cheque_from_row
from receivables_kernel.exceptions import ChequeNotFoundError
from receivables_kernel.logging_config import LogContext, get_logger
from receivables_kernel.models import CollectionChequeModel
from receivables_kernel.selectors.base import BaseSelector

logger = get_logger("services.cheque")


class ChequeService:
    """Apply cheque lifecycle transitions to stored cheques."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: ReconciliationPolicy | None = None,
    ) -> None:
        self._session = session
        self._policy = policy or get_active_policy()
        self._clock = clock or SystemClock(self._policy.timezone)

    def _load(self, cheque_id: str) -> tuple[CollectionChequeModel, ChequeDetail]:
        model = self._session.get(CollectionChequeModel, cheque_id)
        if model is None:
            raise ChequeNotFoundError(cheque_id)
        cheque = cheque_from_row(
            BaseSelector.to_row(model),
            self._policy.currency,
            self._policy.cheque_status_aliases,
        )
        return model, cheque

    def _store(self, model: CollectionChequeModel, cheque: ChequeDetail) -> None:
        model.status = cheque.status.value
        model.cleared_at = cheque.cleared_at
        model.returned_at = cheque.returned_at
        model.return_reason = cheque.return_reason
        self._session.flush()

    def mark_cleared(self, cheque_id: str, cleared_at: datetime | None = None) -> ChequeDetail:
        with LogContext.bind(cheque_id=cheque_id):
            model, cheque = self._load(cheque_id)
            updated = cheque.mark_cleared(cleared_at or self._clock.now())
            self._store(model, updated)
            logger.info("cheque_cleared", extra={"cheque_number": updated.cheque_number})
            return updated

    def mark_returned(
        self,
        cheque_id: str,
        reason: str | None = None,
        returned_at: datetime | None = None,
    ) -> ChequeDetail:
        with LogContext.bind(cheque_id=cheque_id):
            model, cheque = self._load(cheque_id)
            updated = cheque.mark_returned(returned_at or self._clock.now(), reason)
            self._store(model, updated)
            logger.info("cheque_returned", extra={
                "cheque_number": updated.cheque_number,
                "amount": updated.amount.amount,
                "return_reason": reason,
            })
            return updated
