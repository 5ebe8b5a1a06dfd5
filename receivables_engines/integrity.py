"""
Module: receivables_engines.integrity
Responsibility:
    Detect integrity violations in a customer's receivables snapshot
    without altering any figure: over-allocated invoices, over-allocated
    collections, cheque totals that disagree with their cheques, and
    collections whose components do not add up to their total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Report, never clamp: the reconciliation figures keep the raw
      (possibly over-100%) numbers; findings sit alongside them.
    - Never raises for malformed-but-present data.
    - Comparisons are exact at the currency's minor unit.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from receivables_kernel.domain.records import Allocation, Collection, Invoice
from receivables_kernel.domain.values import Money
from receivables_kernel.logging_config import get_logger

logger = get_logger("engines.integrity")


class IntegrityCode(str, Enum):
    """Kinds of integrity violation."""

    INVOICE_OVER_ALLOCATED = "INVOICE_OVER_ALLOCATED"
    COLLECTION_OVER_ALLOCATED = "COLLECTION_OVER_ALLOCATED"
    CHEQUE_TOTAL_MISMATCH = "CHEQUE_TOTAL_MISMATCH"
    COLLECTION_TOTAL_MISMATCH = "COLLECTION_TOTAL_MISMATCH"
    ALLOCATION_EXCEEDS_OUTSTANDING = "ALLOCATION_EXCEEDS_OUTSTANDING"
    ALLOCATION_NOT_POSITIVE = "ALLOCATION_NOT_POSITIVE"


@dataclass(frozen=True)
class IntegrityFinding:
    """
    One integrity violation.

    ``expected`` is the limit or reference figure, ``actual`` the figure
    that breaks it.
    """

    code: IntegrityCode
    subject_id: str
    expected: Money
    actual: Money
    message: str

    @property
    def excess(self) -> Money:
        return self.actual - self.expected

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code.value,
            "subject_id": self.subject_id,
            "expected": str(self.expected.amount),
            "actual": str(self.actual.amount),
            "message": self.message,
        }


def _exceeds(actual: Money, limit: Money) -> bool:
    return actual.round() > limit.round()


def _differs(a: Money, b: Money) -> bool:
    return a.round() != b.round()


class IntegrityChecker:
    """
    Check a snapshot for integrity violations.

    Contract:
        Pure; returns findings in a deterministic order (collections in
        input order, then invoices in input order).
    """

    def check_collection(self, collection: Collection) -> list[IntegrityFinding]:
        findings: list[IntegrityFinding] = []
        currency = collection.total_amount.currency

        cheque_sum = Money.sum((c.amount for c in collection.cheques), currency)
        if collection.cheques and _differs(collection.cheque_amount, cheque_sum):
            findings.append(IntegrityFinding(
                code=IntegrityCode.CHEQUE_TOTAL_MISMATCH,
                subject_id=collection.id,
                expected=collection.cheque_amount,
                actual=cheque_sum,
                message=(
                    f"Collection {collection.id} records cheque amount "
                    f"{collection.cheque_amount.amount} but its cheques sum to {cheque_sum.amount}"
                ),
            ))

        components = collection.cash_amount + collection.cash_discount + collection.cheque_amount
        if _differs(components, collection.total_amount):
            findings.append(IntegrityFinding(
                code=IntegrityCode.COLLECTION_TOTAL_MISMATCH,
                subject_id=collection.id,
                expected=collection.total_amount,
                actual=components,
                message=(
                    f"Collection {collection.id} total {collection.total_amount.amount} "
                    f"differs from cash + discount + cheques {components.amount}"
                ),
            ))

        allocated = Money.sum((a.allocated_amount for a in collection.allocations), currency)
        if _exceeds(allocated, collection.total_amount):
            findings.append(IntegrityFinding(
                code=IntegrityCode.COLLECTION_OVER_ALLOCATED,
                subject_id=collection.id,
                expected=collection.total_amount,
                actual=allocated,
                message=(
                    f"Collection {collection.id} allocates {allocated.amount} "
                    f"of {collection.total_amount.amount}"
                ),
            ))
        return findings

    def check_invoice(self, invoice: Invoice, allocations: Sequence[Allocation]) -> list[IntegrityFinding]:
        allocated = Money.sum((a.allocated_amount for a in allocations), invoice.total.currency)
        if not _exceeds(allocated, invoice.total):
            return []
        return [IntegrityFinding(
            code=IntegrityCode.INVOICE_OVER_ALLOCATED,
            subject_id=invoice.id,
            expected=invoice.total,
            actual=allocated,
            message=(
                f"Invoice {invoice.display_number} has {allocated.amount} allocated "
                f"against a total of {invoice.total.amount}"
            ),
        )]

    def check(
        self,
        invoices: Iterable[Invoice],
        collections: Iterable[Collection],
        allocations_by_invoice: Mapping[str, Sequence[Allocation]],
    ) -> tuple[IntegrityFinding, ...]:
        findings: list[IntegrityFinding] = []
        for collection in collections:
            findings.extend(self.check_collection(collection))
        for invoice in invoices:
            findings.extend(self.check_invoice(invoice, allocations_by_invoice.get(invoice.id, ())))

        if findings:
            logger.warning("integrity_violations_found", extra={
                "finding_count": len(findings),
                "codes": sorted({f.code.value for f in findings}),
            })
        return tuple(findings)
