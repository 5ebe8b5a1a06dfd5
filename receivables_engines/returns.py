"""
Module: receivables_engines.returns
Responsibility:
    Fold approved/processed customer returns into customer-level and
    per-invoice credit figures.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only returns whose status is a credit status (APPROVED, PROCESSED by
      default) count.
    - Customer level: sum of header totals only.
    - Invoice level: header returns linked to the invoice PLUS line-level
      returns whose invoice item belongs to the invoice. Header and line
      totals are treated as non-overlapping sources, so both are added.
"""

from __future__ import annotations

from collections.abc import Collection as AbstractCollection
from collections.abc import Iterable, Mapping

from receivables_kernel.domain.records import (
    CREDIT_RETURN_STATUSES,
    CustomerReturn,
    Invoice,
    ReturnStatus,
)
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.logging_config import get_logger

logger = get_logger("engines.returns")


class ReturnsAdjuster:
    """
    Compute return credits.

    Args:
        credit_statuses: Return statuses that count as a credit against
            outstanding.
    """

    def __init__(self, credit_statuses: AbstractCollection[ReturnStatus] = CREDIT_RETURN_STATUSES):
        self._credit_statuses = frozenset(credit_statuses)

    def credit_returns(self, returns: Iterable[CustomerReturn]) -> tuple[CustomerReturn, ...]:
        return tuple(r for r in returns if r.status in self._credit_statuses)

    def total_returns(self, returns: Iterable[CustomerReturn], currency: str | Currency) -> Money:
        """Customer-level credit: header totals of credit returns."""
        return Money.sum((r.total for r in self.credit_returns(returns)), currency)

    def invoice_returns(
        self,
        invoices: Iterable[Invoice],
        returns: Iterable[CustomerReturn],
        return_items_by_invoice_item: Mapping[str, Money],
    ) -> dict[str, Money]:
        """
        Return credit per invoice id, for every invoice given.

        ``return_items_by_invoice_item`` maps invoice item id to the total
        returned against that line.
        """
        invoices = tuple(invoices)
        credits = self.credit_returns(returns)

        header_by_invoice: dict[str, Money] = {}
        for ret in credits:
            if ret.invoice_id is None:
                continue
            current = header_by_invoice.get(ret.invoice_id)
            header_by_invoice[ret.invoice_id] = ret.total if current is None else current + ret.total

        result: dict[str, Money] = {}
        unmatched_items = set(return_items_by_invoice_item)
        for invoice in invoices:
            total = header_by_invoice.get(invoice.id, Money.zero(invoice.total.currency))
            for item_id in invoice.item_ids:
                item_total = return_items_by_invoice_item.get(item_id)
                if item_total is not None:
                    total = total + item_total
                    unmatched_items.discard(item_id)
            result[invoice.id] = total

        if unmatched_items:
            logger.debug("return_items_without_invoice", extra={
                "invoice_item_ids": sorted(unmatched_items),
            })
        return result
