"""
Module: receivables_engines.summary
Responsibility:
    Build a customer's invoice summary from a consistent snapshot of
    invoices, collections (with cheques and allocations) and returns.

Architecture position:
    Engines -- pure calculation layer, zero I/O. Orchestrates
    PaymentAggregator, AllocationResolver, ReturnsAdjuster and
    IntegrityChecker.

Invariants enforced:
    - outstanding_amount = total_invoiced - realized payments - returns
      + returned cheques.
    - outstanding_with_unrealized = total_invoiced - all payments - returns
      + returned cheques.
    - Determinism: no clock, no hidden state. Identical inputs and the same
      reference date give equal summaries.
    - Graceful degradation: invoices whose allocations could not be fetched
      get a best-effort zero and are listed in ``degraded_invoice_ids``.

Usage:
    from receivables_engines.summary import compute_customer_summary

    summary = compute_customer_summary(
        customer, invoices, collections, returns, return_items_by_invoice_item,
        reference_date=date(2024, 6, 15),
    )
    summary.outstanding_amount
"""

from __future__ import annotations

import time
from collections.abc import Collection as AbstractCollection
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime

from receivables_engines.allocation import AllocationResolver, InvoiceSummary
from receivables_engines.cheque_ledger import as_reference_day
from receivables_engines.integrity import IntegrityChecker, IntegrityFinding
from receivables_engines.payments import PaymentAggregator
from receivables_engines.returns import ReturnsAdjuster
from receivables_engines.tracer import traced_engine
from receivables_kernel.domain.records import (
    CREDIT_RETURN_STATUSES,
    Allocation,
    Collection,
    Customer,
    CustomerReturn,
    Invoice,
    ReturnStatus,
)
from receivables_kernel.domain.row_mapping import DEFAULT_CURRENCY
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.logging_config import get_logger

logger = get_logger("engines.summary")


@dataclass(frozen=True)
class CustomerInvoiceSummary:
    """
    Derived, never persisted, view of a customer's receivables.

    ``total_collected`` is realized payments (cash + cash discount +
    cheques dated on or before the reference date). ``unrealized_payments``
    is future-dated cheques.
    """

    customer_id: str
    customer_name: str
    reference_date: date
    currency: Currency
    total_invoiced: Money
    total_collected: Money
    unrealized_payments: Money
    outstanding_amount: Money
    outstanding_with_unrealized: Money
    returned_cheques_amount: Money
    returned_cheques_count: int
    total_returns: Money
    total_cash_collected: Money
    total_cash_discounts: Money
    invoices: tuple[InvoiceSummary, ...]
    integrity_findings: tuple[IntegrityFinding, ...] = ()
    degraded_invoice_ids: tuple[str, ...] = ()

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_invoice_ids)

    @property
    def has_integrity_findings(self) -> bool:
        return bool(self.integrity_findings)

    def to_dict(self) -> dict[str, object]:
        """JSON-ready rendering; money as strings, dates as ISO."""

        def amount(m: Money) -> str:
            return str(m.amount)

        return {
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "reference_date": self.reference_date.isoformat(),
            "currency": self.currency.code,
            "total_invoiced": amount(self.total_invoiced),
            "total_collected": amount(self.total_collected),
            "unrealized_payments": amount(self.unrealized_payments),
            "outstanding_amount": amount(self.outstanding_amount),
            "outstanding_with_unrealized": amount(self.outstanding_with_unrealized),
            "returned_cheques_amount": amount(self.returned_cheques_amount),
            "returned_cheques_count": self.returned_cheques_count,
            "total_returns": amount(self.total_returns),
            "total_cash_collected": amount(self.total_cash_collected),
            "total_cash_discounts": amount(self.total_cash_discounts),
            "invoices": [inv.to_dict() for inv in self.invoices],
            "integrity_findings": [f.to_dict() for f in self.integrity_findings],
            "degraded_invoice_ids": list(self.degraded_invoice_ids),
        }


def _resolve_currency(
    currency: str | Currency | None,
    invoices: Sequence[Invoice],
    collections: Sequence[Collection],
) -> Currency:
    if isinstance(currency, Currency):
        return currency
    if currency is not None:
        return Currency(currency)
    if invoices:
        return invoices[0].total.currency
    if collections:
        return collections[0].total_amount.currency
    return Currency(DEFAULT_CURRENCY)


@traced_engine("customer_summary", "1.0", fingerprint_fields=("reference_date", "currency"))
def compute_customer_summary(
    customer: Customer,
    invoices: Sequence[Invoice],
    collections: Sequence[Collection],
    returns: Sequence[CustomerReturn],
    return_items_by_invoice_item: Mapping[str, Money],
    reference_date: date | datetime,
    *,
    allocations_by_invoice: Mapping[str, Sequence[Allocation]] | None = None,
    unavailable_allocation_invoice_ids: AbstractCollection[str] = frozenset(),
    currency: str | Currency | None = None,
    credit_statuses: AbstractCollection[ReturnStatus] = CREDIT_RETURN_STATUSES,
) -> CustomerInvoiceSummary:
    """
    Compute the customer invoice summary.

    Args:
        customer: The customer being reconciled.
        invoices: The customer's invoices; the output keeps this order.
        collections: The customer's collections with embedded cheques and
            allocations.
        returns: The customer's returns (any status; non-credit ones are
            ignored).
        return_items_by_invoice_item: Line-level return totals keyed by
            invoice item id.
        reference_date: Day against which cheques are realized.
        allocations_by_invoice: Allocations per invoice fetched separately
            from the collections (they may come from other customers'
            collections). Defaults to the allocations embedded in
            ``collections``.
        unavailable_allocation_invoice_ids: Invoices whose allocation fetch
            failed; they are reported as degraded.
        currency: Summary currency; inferred from the data when omitted.
        credit_statuses: Return statuses that count as credits.
    """
    t0 = time.monotonic()
    invoices = tuple(invoices)
    collections = tuple(collections)
    returns = tuple(returns)
    day = as_reference_day(reference_date)
    cur = _resolve_currency(currency, invoices, collections)

    logger.info("customer_summary_started", extra={
        "customer_id": customer.id,
        "reference_date": day.isoformat(),
        "invoice_count": len(invoices),
        "collection_count": len(collections),
        "return_count": len(returns),
    })

    resolver = AllocationResolver()
    adjuster = ReturnsAdjuster(credit_statuses)

    # 1. Payments under the realized/unrealized split
    payments = PaymentAggregator().aggregate(collections, reference_date=day, currency=cur)

    # 2-3. Invoiced and returned totals
    total_invoiced = Money.sum((inv.total for inv in invoices), cur)
    total_returns = adjuster.total_returns(returns, cur)

    # 4-5. Outstanding under each policy
    outstanding = (
        total_invoiced
        - payments.total_realized_payments
        - total_returns
        + payments.returned_cheque_amount
    )
    outstanding_with_unrealized = (
        total_invoiced
        - payments.total_all_payments
        - total_returns
        + payments.returned_cheque_amount
    )

    # 6. Per-invoice breakdown
    if allocations_by_invoice is None:
        allocations_by_invoice = resolver.allocations_by_invoice(collections)
    unavailable = frozenset(unavailable_allocation_invoice_ids)
    invoice_returns = adjuster.invoice_returns(invoices, returns, return_items_by_invoice_item)

    lines = tuple(
        resolver.resolve_invoice(
            invoice,
            allocations_by_invoice.get(invoice.id, ()),
            invoice_returns[invoice.id],
            allocations_available=invoice.id not in unavailable,
        )
        for invoice in invoices
    )
    degraded = tuple(line.invoice_id for line in lines if line.allocations_degraded)

    findings = IntegrityChecker().check(
        invoices,
        collections,
        {k: v for k, v in allocations_by_invoice.items() if k not in unavailable},
    )

    # 7. Assemble
    summary = CustomerInvoiceSummary(
        customer_id=customer.id,
        customer_name=customer.name,
        reference_date=day,
        currency=cur,
        total_invoiced=total_invoiced,
        total_collected=payments.total_realized_payments,
        unrealized_payments=payments.total_unrealized_cheque,
        outstanding_amount=outstanding,
        outstanding_with_unrealized=outstanding_with_unrealized,
        returned_cheques_amount=payments.returned_cheque_amount,
        returned_cheques_count=payments.returned_cheque_count,
        total_returns=total_returns,
        total_cash_collected=payments.total_cash_collected,
        total_cash_discounts=payments.total_cash_discounts,
        invoices=lines,
        integrity_findings=findings,
        degraded_invoice_ids=degraded,
    )

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    log_extra = {
        "customer_id": customer.id,
        "total_invoiced": str(total_invoiced.amount),
        "outstanding_amount": str(outstanding.amount),
        "outstanding_with_unrealized": str(outstanding_with_unrealized.amount),
        "integrity_finding_count": len(findings),
        "degraded_invoice_count": len(degraded),
        "duration_ms": duration_ms,
    }
    if degraded:
        logger.warning("customer_summary_degraded", extra={
            **log_extra,
            "degraded_invoice_ids": list(degraded),
        })
    else:
        logger.info("customer_summary_completed", extra=log_extra)
    return summary
