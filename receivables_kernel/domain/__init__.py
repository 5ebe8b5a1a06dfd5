"""
Pure domain layer.

Value objects, typed records and row conversion with NO dependencies on
the ORM, the database, the clock or any other I/O (the Clock abstraction
lives here so services can inject it; only SystemClock reads real time).
"""

from receivables_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from receivables_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from receivables_kernel.domain.records import (
    CREDIT_RETURN_STATUSES,
    Allocation,
    ChequeDetail,
    ChequeStatus,
    Collection,
    CollectionStatus,
    Customer,
    CustomerReturn,
    Invoice,
    InvoiceStatus,
    ReturnItem,
    ReturnStatus,
)
from receivables_kernel.domain.values import Currency, Money
