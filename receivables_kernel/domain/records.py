"""
Records -- Typed, immutable snapshots of the rows reconciliation consumes.

Responsibility:
    Defines the customer, invoice, collection, cheque, allocation and return
    records that cross the boundary between the data store and the pure
    engines. Rows are converted into these records once (see
    ``receivables_kernel.domain.row_mapping``) and never passed around as
    loose dicts.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Records are frozen; a banking event on a cheque produces a new
      ChequeDetail via ``mark_cleared`` / ``mark_returned``.
    - A returned cheque cannot be cleared or returned again.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from receivables_kernel.domain.values import Money
from receivables_kernel.exceptions import ChequeStateError


class ChequeStatus(str, Enum):
    """Banking status of a cheque."""

    PENDING = "pending"
    CLEARED = "cleared"
    RETURNED = "returned"


class CollectionStatus(str, Enum):
    PENDING = "pending"
    ALLOCATED = "allocated"
    COMPLETED = "completed"


class ReturnStatus(str, Enum):
    """Approval status of a customer return.

    Only APPROVED and PROCESSED returns are credits against outstanding.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"


CREDIT_RETURN_STATUSES: frozenset[ReturnStatus] = frozenset(
    {ReturnStatus.APPROVED, ReturnStatus.PROCESSED}
)


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


@dataclass(frozen=True)
class Customer:
    id: str
    name: str


@dataclass(frozen=True)
class Invoice:
    """
    A customer invoice.

    ``item_ids`` lists the invoice's line item ids so that line-level
    returns can be traced back to their parent invoice.
    """

    id: str
    customer_id: str
    total: Money
    created_at: datetime | None = None
    invoice_number: str | None = None
    item_ids: tuple[str, ...] = ()

    @property
    def display_number(self) -> str:
        return self.invoice_number or self.id


@dataclass(frozen=True)
class ChequeDetail:
    """
    A cheque tendered as part of a collection.

    Contract:
        ``status`` moves PENDING -> CLEARED or PENDING/CLEARED -> RETURNED.
        RETURNED is terminal.
    """

    id: str
    cheque_number: str
    bank_name: str
    amount: Money
    cheque_date: date
    status: ChequeStatus = ChequeStatus.PENDING
    cleared_at: datetime | None = None
    returned_at: datetime | None = None
    return_reason: str | None = None

    @property
    def is_returned(self) -> bool:
        return self.status is ChequeStatus.RETURNED

    def mark_cleared(self, cleared_at: datetime) -> ChequeDetail:
        """Record that the bank honoured the cheque."""
        if self.is_returned:
            raise ChequeStateError(self.id, self.status.value, "clear")
        return replace(self, status=ChequeStatus.CLEARED, cleared_at=cleared_at)

    def mark_returned(self, returned_at: datetime, reason: str | None = None) -> ChequeDetail:
        """Record that the cheque bounced."""
        if self.is_returned:
            raise ChequeStateError(self.id, self.status.value, "return")
        return replace(
            self,
            status=ChequeStatus.RETURNED,
            returned_at=returned_at,
            return_reason=reason,
        )


@dataclass(frozen=True)
class Allocation:
    """Assignment of part of a collection to one invoice."""

    invoice_id: str
    collection_id: str
    allocated_amount: Money


@dataclass(frozen=True)
class Collection:
    """
    A payment event: cash, a cash discount and any number of cheques.

    ``cheque_amount`` is the amount keyed in on the form; the per-cheque
    amounts in ``cheques`` are what reconciliation classifies.
    """

    id: str
    customer_id: str
    total_amount: Money
    cash_amount: Money
    cash_discount: Money
    cheque_amount: Money
    cash_date: date | None = None
    status: CollectionStatus = CollectionStatus.PENDING
    cheques: tuple[ChequeDetail, ...] = field(default_factory=tuple)
    allocations: tuple[Allocation, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CustomerReturn:
    """Header-level return; ``invoice_id`` may be absent."""

    id: str
    total: Money
    status: ReturnStatus
    invoice_id: str | None = None

    @property
    def is_credit(self) -> bool:
        return self.status in CREDIT_RETURN_STATUSES


@dataclass(frozen=True)
class ReturnItem:
    """Line-level return referencing an invoice line item."""

    id: str
    invoice_item_id: str | None
    total: Money
    return_id: str | None = None
