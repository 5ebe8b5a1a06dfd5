"""
Module: receivables_engines.payments
Responsibility:
    Aggregate the cash, cash discount and cheque components of a customer's
    collections into realized, unrealized and returned totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import receivables_kernel.domain and sibling engines.

Invariants enforced:
    - Cash and cash discount are always realized.
    - Cheques are bucketed by ``ChequeLedger`` (status first, then date).
    - Returned cheques never enter a collected bucket; they are tracked as an
      amount to add back to outstanding and a count for reporting.
    - Conservation: realized + unrealized == cash + discount + every
      non-returned cheque.

Usage:
    totals = PaymentAggregator().aggregate(
        collections, reference_date=date(2024, 6, 15), currency="LKR",
    )
    totals.total_realized_payments
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from receivables_engines.cheque_ledger import ChequeLedger, as_reference_day
from receivables_engines.tracer import traced_engine
from receivables_kernel.domain.records import Collection
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.logging_config import get_logger

logger = get_logger("engines.payments")


@dataclass(frozen=True)
class PaymentTotals:
    """
    Payment components for a set of collections.

    Guarantees:
        - ``total_realized_payments`` = cash + discount + realized cheques.
        - ``total_all_payments`` = realized payments + unrealized cheques.
    """

    total_cash_collected: Money
    total_cash_discounts: Money
    total_realized_cheque: Money
    total_unrealized_cheque: Money
    returned_cheque_amount: Money
    returned_cheque_count: int

    @property
    def total_realized_payments(self) -> Money:
        return self.total_cash_collected + self.total_cash_discounts + self.total_realized_cheque

    @property
    def total_all_payments(self) -> Money:
        return self.total_realized_payments + self.total_unrealized_cheque

    @classmethod
    def empty(cls, currency: str | Currency) -> PaymentTotals:
        zero = Money.zero(currency)
        return cls(zero, zero, zero, zero, zero, 0)


class PaymentAggregator:
    """
    Sum collection payments under the realized/unrealized split.

    Contract:
        Pure function of (collections, reference_date, currency).
    Non-goals:
        - Does not look at allocations; per-invoice figures come from
          ``AllocationResolver``.
    """

    def __init__(self, ledger: ChequeLedger | None = None):
        self._ledger = ledger or ChequeLedger()

    @traced_engine("payments", "1.0", fingerprint_fields=("reference_date", "currency"))
    def aggregate(
        self,
        collections: Iterable[Collection],
        reference_date: date | datetime,
        currency: str | Currency,
    ) -> PaymentTotals:
        t0 = time.monotonic()
        collections = tuple(collections)
        day = as_reference_day(reference_date)
        logger.info("payment_aggregation_started", extra={
            "collection_count": len(collections),
            "reference_date": day.isoformat(),
        })

        totals = PaymentTotals.empty(currency)
        cash = totals.total_cash_collected
        discounts = totals.total_cash_discounts
        realized = totals.total_realized_cheque
        unrealized = totals.total_unrealized_cheque
        returned = totals.returned_cheque_amount
        returned_count = 0

        for collection in collections:
            cash = cash + collection.cash_amount
            discounts = discounts + collection.cash_discount

            partition = self._ledger.classify(collection.cheques, day)
            realized = realized + partition.realized_total(currency)
            unrealized = unrealized + partition.unrealized_total(currency)
            returned = returned + partition.returned_total(currency)
            returned_count += partition.returned_count

        result = PaymentTotals(
            total_cash_collected=cash,
            total_cash_discounts=discounts,
            total_realized_cheque=realized,
            total_unrealized_cheque=unrealized,
            returned_cheque_amount=returned,
            returned_cheque_count=returned_count,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("payment_aggregation_completed", extra={
            "realized_payments": str(result.total_realized_payments.amount),
            "unrealized_cheques": str(unrealized.amount),
            "returned_cheques": str(returned.amount),
            "returned_cheque_count": returned_count,
            "duration_ms": duration_ms,
        })
        return result
