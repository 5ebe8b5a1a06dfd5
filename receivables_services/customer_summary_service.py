"""
receivables_services.customer_summary_service -- customer invoice summary.

Responsibility:
    Thin adapter between the data store and the pure Summary Builder: load
    a consistent snapshot of a customer's rows, pick the reference date from
    the injected clock, and call ``compute_customer_summary``.

Architecture position:
    Services -- orchestration over selectors + engines. All I/O happens
    here, before the engine runs; the engine itself never suspends or
    touches the database.

Failure modes:
    - CustomerNotFoundError / SnapshotFetchError from the selector.
    - Per-invoice allocation fetch failures are NOT errors: they come back
      as ``degraded_invoice_ids`` on the summary.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Session

from receivables_config import get_active_policy
from receivables_config.schema import ReconciliationPolicy
from receivables_engines.summary import CustomerInvoiceSummary, compute_customer_summary
from receivables_kernel.domain.clock import Clock, SystemClock
from receivables_kernel.logging_config import LogContext, get_logger
from receivables_kernel.selectors.customer_ledger import (
    CustomerLedgerSelector,
    CustomerLedgerSnapshot,
)

logger = get_logger("services.customer_summary")


def summarize_snapshot(
    snapshot: CustomerLedgerSnapshot,
    reference_date: date | datetime,
    policy: ReconciliationPolicy,
) -> CustomerInvoiceSummary:
    """Run the Summary Builder over an already-loaded snapshot."""
    return compute_customer_summary(
        snapshot.customer,
        snapshot.invoices,
        snapshot.collections,
        snapshot.returns,
        snapshot.return_items_by_invoice_item,
        reference_date=reference_date,
        allocations_by_invoice=snapshot.allocations_by_invoice,
        unavailable_allocation_invoice_ids=snapshot.unavailable_allocation_invoice_ids,
        currency=policy.currency,
        credit_statuses=policy.credit_return_statuses,
    )


class CustomerSummaryService:
    """
    Compute customer invoice summaries from the database.

    Contract:
        Receives Session and Clock via constructor injection. Read-only.
    Guarantees:
        - The reference date defaults to the clock's calendar day; cheques
          dated on that day are realized. Without an injected clock that
          is the day in the policy's timezone.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: ReconciliationPolicy | None = None,
    ) -> None:
        self._session = session
        self._policy = policy or get_active_policy()
        self._clock = clock or SystemClock(self._policy.timezone)
        self._selector = CustomerLedgerSelector(
            session,
            currency=self._policy.currency,
            cheque_status_aliases=self._policy.cheque_status_aliases,
            credit_statuses=self._policy.credit_return_statuses,
        )

    @property
    def policy(self) -> ReconciliationPolicy:
        return self._policy

    def reference_date(self) -> date:
        return self._clock.today()

    def load_snapshot(self, customer_id: str) -> CustomerLedgerSnapshot:
        return self._selector.load_snapshot(customer_id)

    def summarize(
        self,
        customer_id: str,
        reference_date: date | datetime | None = None,
    ) -> CustomerInvoiceSummary:
        with LogContext.bind(customer_id=str(customer_id)):
            ref = reference_date or self.reference_date()
            snapshot = self._selector.load_snapshot(customer_id)
            summary = summarize_snapshot(snapshot, ref, self._policy)
            if summary.is_degraded:
                logger.warning("customer_summary_partial", extra={
                    "degraded_invoice_ids": list(summary.degraded_invoice_ids),
                })
            return summary
