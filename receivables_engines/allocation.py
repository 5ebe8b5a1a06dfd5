"""
Module: receivables_engines.allocation
Responsibility:
    Resolve explicit collection-to-invoice allocations into per-invoice
    collected and outstanding amounts and a payment status, and validate
    proposed allocations before they are recorded.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - No clamping: an invoice with more allocated than its total shows the
      raw collected figure and a negative outstanding amount. Flagging that
      is the job of ``IntegrityChecker`` and the caller.
    - outstanding = total - collected - invoice returns.
    - Status: PAID when outstanding is exactly zero at minor-unit precision,
      PARTIALLY_PAID when something was collected and a balance remains,
      PENDING otherwise.
    - When allocations could not be fetched the collected amount is a
      best-effort zero and the summary says so (``allocations_degraded``),
      so callers can tell "truly zero" from "could not compute".

Usage:
    resolver = AllocationResolver()
    by_invoice = resolver.allocations_by_invoice(collections)
    summary = resolver.resolve_invoice(invoice, by_invoice.get(invoice.id, ()), returns)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from receivables_engines.integrity import IntegrityCode, IntegrityFinding
from receivables_kernel.domain.records import Allocation, Collection, Invoice, InvoiceStatus
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


@dataclass(frozen=True)
class InvoiceSummary:
    """
    Per-invoice reconciliation line.

    Guarantees:
        - ``outstanding_amount == total - collected_amount - returns_amount``.
        - ``allocations_degraded`` is True only when the collected amount is
          a fallback zero rather than a computed sum.
    """

    invoice_id: str
    invoice_number: str
    total: Money
    collected_amount: Money
    returns_amount: Money
    outstanding_amount: Money
    status: InvoiceStatus
    created_at: datetime | None = None
    allocations_degraded: bool = False

    @property
    def is_over_allocated(self) -> bool:
        return self.collected_amount.round() > self.total.round()

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.invoice_id,
            "invoice_number": self.invoice_number,
            "total": str(self.total.amount),
            "collected_amount": str(self.collected_amount.amount),
            "returns_amount": str(self.returns_amount.amount),
            "outstanding_amount": str(self.outstanding_amount.amount),
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "allocations_degraded": self.allocations_degraded,
        }


def derive_status(collected: Money, outstanding: Money) -> InvoiceStatus:
    rounded = outstanding.round()
    if rounded.is_zero:
        return InvoiceStatus.PAID
    # An overpaid invoice (negative outstanding) stays PENDING; it is
    # surfaced through INVOICE_OVER_ALLOCATED instead of a status.
    if collected.round().is_positive and rounded.is_positive:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.PENDING


class AllocationResolver:
    """Resolve allocations to invoice figures."""

    def collected_amount(self, allocations: Iterable[Allocation], currency: str | Currency) -> Money:
        """Raw sum of allocated amounts."""
        return Money.sum((a.allocated_amount for a in allocations), currency)

    def allocations_by_invoice(self, collections: Iterable[Collection]) -> dict[str, tuple[Allocation, ...]]:
        """Group the allocations embedded in collections by invoice id."""
        grouped: dict[str, list[Allocation]] = {}
        for collection in collections:
            for allocation in collection.allocations:
                grouped.setdefault(allocation.invoice_id, []).append(allocation)
        return {invoice_id: tuple(items) for invoice_id, items in grouped.items()}

    def resolve_invoice(
        self,
        invoice: Invoice,
        allocations: Sequence[Allocation],
        invoice_returns: Money | None = None,
        allocations_available: bool = True,
    ) -> InvoiceSummary:
        currency = invoice.total.currency
        returns_amount = invoice_returns if invoice_returns is not None else Money.zero(currency)

        if allocations_available:
            collected = self.collected_amount(allocations, currency)
        else:
            collected = Money.zero(currency)
            logger.warning("invoice_allocations_unavailable", extra={
                "invoice_id": invoice.id,
            })

        outstanding = invoice.total - collected - returns_amount
        return InvoiceSummary(
            invoice_id=invoice.id,
            invoice_number=invoice.display_number,
            total=invoice.total,
            collected_amount=collected,
            returns_amount=returns_amount,
            outstanding_amount=outstanding,
            status=derive_status(collected, outstanding),
            created_at=invoice.created_at,
            allocations_degraded=not allocations_available,
        )

    def validate_proposed(
        self,
        collection_id: str,
        collection_total: Money,
        proposed: Mapping[str, Money],
        outstanding_by_invoice: Mapping[str, Money],
    ) -> tuple[IntegrityFinding, ...]:
        """
        Check allocations about to be recorded for a collection.

        Flags non-positive amounts, amounts above an invoice's current
        outstanding balance, and a total above the collection amount.
        Invoices missing from ``outstanding_by_invoice`` are not limited.
        """
        findings: list[IntegrityFinding] = []
        zero = Money.zero(collection_total.currency)

        for invoice_id, amount in proposed.items():
            if not amount.round().is_positive:
                findings.append(IntegrityFinding(
                    code=IntegrityCode.ALLOCATION_NOT_POSITIVE,
                    subject_id=invoice_id,
                    expected=zero,
                    actual=amount,
                    message=f"Allocation to invoice {invoice_id} must be positive, got {amount.amount}",
                ))
                continue
            outstanding = outstanding_by_invoice.get(invoice_id)
            if outstanding is not None and amount.round() > outstanding.round():
                findings.append(IntegrityFinding(
                    code=IntegrityCode.ALLOCATION_EXCEEDS_OUTSTANDING,
                    subject_id=invoice_id,
                    expected=outstanding,
                    actual=amount,
                    message=(
                        f"Allocation {amount.amount} exceeds outstanding "
                        f"{outstanding.amount} on invoice {invoice_id}"
                    ),
                ))

        total = Money.sum(proposed.values(), collection_total.currency)
        if total.round() > collection_total.round():
            findings.append(IntegrityFinding(
                code=IntegrityCode.COLLECTION_OVER_ALLOCATED,
                subject_id=collection_id,
                expected=collection_total,
                actual=total,
                message=(
                    f"Allocations total {total.amount} exceeds collection amount "
                    f"{collection_total.amount}"
                ),
            ))
        return tuple(findings)
