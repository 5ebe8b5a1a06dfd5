"""
Module: receivables_engines.cheque_ledger
Responsibility:
    Partition cheques into realized, unrealized and returned as of a
    reference date.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import receivables_kernel.domain.

Invariants enforced:
    - Status first, then date: a RETURNED cheque is returned regardless of
      its date; any other cheque is realized when ``cheque_date <=
      reference_date`` and unrealized otherwise.
    - CLEARED plays no part in classification. A cleared cheque dated in
      the future is still unrealized.
    - Comparison is by calendar day (end-of-day semantics): a cheque dated
      on the reference day is realized.
    - Purity: the reference date is always passed in; no clock access.

Usage:
    from receivables_engines.cheque_ledger import ChequeLedger

    partition = ChequeLedger().classify(cheques, reference_date=date(2024, 6, 15))
    partition.realized_total(currency="LKR")
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from receivables_kernel.domain.records import ChequeDetail
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.logging_config import get_logger

logger = get_logger("engines.cheque_ledger")


def as_reference_day(reference_date: date | datetime) -> date:
    """Reduce a reference date or timestamp to its calendar day."""
    if isinstance(reference_date, datetime):
        return reference_date.date()
    return reference_date


@dataclass(frozen=True)
class ChequePartition:
    """
    Cheques split by realization state.

    Guarantees:
        - Every input cheque appears in exactly one of the three tuples.
        - Input order is preserved within each tuple.
    """

    reference_date: date
    realized: tuple[ChequeDetail, ...] = ()
    unrealized: tuple[ChequeDetail, ...] = ()
    returned: tuple[ChequeDetail, ...] = ()

    def realized_total(self, currency: str | Currency) -> Money:
        return Money.sum((c.amount for c in self.realized), currency)

    def unrealized_total(self, currency: str | Currency) -> Money:
        return Money.sum((c.amount for c in self.unrealized), currency)

    def returned_total(self, currency: str | Currency) -> Money:
        return Money.sum((c.amount for c in self.returned), currency)

    @property
    def returned_count(self) -> int:
        return len(self.returned)


class ChequeLedger:
    """
    Classify cheques for reconciliation.

    Contract:
        Pure function of (cheques, reference_date).
    Non-goals:
        - Does not validate cheque totals against their collection; see
          ``receivables_engines.integrity``.
    """

    def is_realized(self, cheque: ChequeDetail, reference_date: date | datetime) -> bool:
        """True if the cheque counts as collected on the reference day."""
        if cheque.is_returned:
            return False
        return cheque.cheque_date <= as_reference_day(reference_date)

    def classify(
        self,
        cheques: Iterable[ChequeDetail],
        reference_date: date | datetime,
    ) -> ChequePartition:
        day = as_reference_day(reference_date)
        realized: list[ChequeDetail] = []
        unrealized: list[ChequeDetail] = []
        returned: list[ChequeDetail] = []

        for cheque in cheques:
            if cheque.is_returned:
                returned.append(cheque)
            elif cheque.cheque_date <= day:
                realized.append(cheque)
            else:
                unrealized.append(cheque)

        logger.debug("cheques_classified", extra={
            "reference_date": day.isoformat(),
            "realized_count": len(realized),
            "unrealized_count": len(unrealized),
            "returned_count": len(returned),
        })

        return ChequePartition(
            reference_date=day,
            realized=tuple(realized),
            unrealized=tuple(unrealized),
            returned=tuple(returned),
        )
