"""
Module: receivables_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    reconciliation engines. This is the canonical import surface for
    ``receivables_services`` and for callers that already hold a snapshot
    of rows.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import receivables_kernel.domain and
    receivables_kernel.logging_config. MUST NOT import receivables_services
    or receivables_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      The reference date is always an explicit parameter.
    - Decimal-only arithmetic through ``Money``.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from receivables_engines import compute_customer_summary, ChequeLedger
"""

from receivables_engines.allocation import (
    AllocationResolver,
    InvoiceSummary,
    derive_status,
)
from receivables_engines.cheque_ledger import (
    ChequeLedger,
    ChequePartition,
    as_reference_day,
)
from receivables_engines.integrity import (
    IntegrityChecker,
    IntegrityCode,
    IntegrityFinding,
)
from receivables_engines.payments import PaymentAggregator, PaymentTotals
from receivables_engines.returns import ReturnsAdjuster
from receivables_engines.summary import (
    CustomerInvoiceSummary,
    compute_customer_summary,
)
from receivables_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "AllocationResolver",
    "ChequeLedger",
    "ChequePartition",
    "CustomerInvoiceSummary",
    "IntegrityChecker",
    "IntegrityCode",
    "IntegrityFinding",
    "InvoiceSummary",
    "PaymentAggregator",
    "PaymentTotals",
    "ReturnsAdjuster",
    "as_reference_day",
    "compute_customer_summary",
    "compute_input_fingerprint",
    "derive_status",
    "traced_engine",
]
