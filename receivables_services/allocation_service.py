"""
receivables_services.allocation_service -- record collection allocations.

Responsibility:
    Assign parts of a collection to invoices. Proposed allocations are
    checked against the invoices' current outstanding balances and the
    collection's unallocated remainder before anything is written.

Architecture position:
    Services -- orchestration over selectors, engines and kernel models.
    The caller owns the session and its transaction.

Invariants enforced:
    - Nothing is written when any proposed allocation is rejected.
    - Allocations already recorded for the collection reduce the amount
      still available to allocate.
    - Invoices whose existing allocations could not be read accept no new
      allocations.

Failure modes:
    - CollectionNotFoundError for an unknown collection id.
    - AllocationRejectedError carrying one reason per failed check.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from sqlalchemy.orm import Session

from receivables_config import get_active_policy
from receivables_config.schema import ReconciliationPolicy
from receivables_engines.allocation import AllocationResolver
from receivables_kernel.domain.clock import Clock, SystemClock
from receivables_kernel.domain.records import Allocation
from receivables_kernel.domain.row_mapping import collection_from_row
from receivables_kernel.domain.values import Money
from receivables_kernel.exceptions import AllocationRejectedError, CollectionNotFoundError
from receivables_kernel.logging_config import LogContext, get_logger
from receivables_kernel.models import CollectionAllocationModel, CollectionModel
from receivables_kernel.selectors.base import BaseSelector
from receivables_services.customer_summary_service import CustomerSummaryService

logger = get_logger("services.allocation")


class AllocationService:
    """Validate and record allocations of a collection to invoices."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: ReconciliationPolicy | None = None,
    ) -> None:
        self._session = session
        self._policy = policy or get_active_policy()
        self._clock = clock or SystemClock(self._policy.timezone)
        self._resolver = AllocationResolver()
        self._summaries = CustomerSummaryService(session, self._clock, self._policy)

    def _load_collection(self, collection_id: str) -> CollectionModel:
        model = self._session.get(CollectionModel, collection_id)
        if model is None:
            raise CollectionNotFoundError(collection_id)
        return model

    def unallocated_amount(self, collection_id: str) -> Money:
        """Collection total minus what is already allocated from it."""
        model = self._load_collection(collection_id)
        row = BaseSelector.to_row(model)
        row["collection_allocations"] = [BaseSelector.to_row(a) for a in model.allocations]
        collection = collection_from_row(row, self._policy.currency, self._policy.cheque_status_aliases)
        allocated = self._resolver.collected_amount(collection.allocations, self._policy.currency)
        return collection.total_amount - allocated

    def record_allocations(
        self,
        collection_id: str,
        proposed: Mapping[str, Money],
        reference_date: date | None = None,
    ) -> tuple[Allocation, ...]:
        """
        Record ``proposed`` (invoice id -> amount) against a collection.

        Outstanding balances come from the customer summary at
        ``reference_date`` (the clock's day by default).
        """
        model = self._load_collection(collection_id)
        with LogContext.bind(customer_id=str(model.customer_id), collection_id=collection_id):
            available = self.unallocated_amount(collection_id)
            summary = self._summaries.summarize(model.customer_id, reference_date)
            outstanding = {line.invoice_id: line.outstanding_amount for line in summary.invoices}
            degraded = set(summary.degraded_invoice_ids)

            reasons: list[str] = []
            for invoice_id in proposed:
                if invoice_id not in outstanding:
                    reasons.append(
                        f"Invoice {invoice_id} does not belong to customer {model.customer_id}"
                    )
                elif invoice_id in degraded:
                    reasons.append(
                        f"Allocations for invoice {invoice_id} could not be read; its outstanding is unknown"
                    )
            findings = self._resolver.validate_proposed(
                collection_id,
                available,
                proposed,
                {k: v for k, v in outstanding.items() if k not in degraded},
            )
            reasons.extend(f.message for f in findings)

            if reasons:
                logger.warning("allocations_rejected", extra={"reasons": reasons})
                raise AllocationRejectedError(collection_id, reasons)

            recorded = []
            for invoice_id, amount in proposed.items():
                rounded = amount.round()
                self._session.add(CollectionAllocationModel(
                    collection_id=collection_id,
                    invoice_id=invoice_id,
                    allocated_amount=rounded.amount,
                ))
                recorded.append(Allocation(
                    invoice_id=invoice_id,
                    collection_id=collection_id,
                    allocated_amount=rounded,
                ))
            self._session.flush()

            logger.info("allocations_recorded", extra={
                "allocation_count": len(recorded),
                "allocated_total": str(Money.sum((a.allocated_amount for a in recorded), self._policy.currency).amount),
            })
            return tuple(recorded)
