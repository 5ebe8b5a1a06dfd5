"""
receivables_services -- stateful orchestration over the kernel and engines.

Services own a Session, a Clock and the active ReconciliationPolicy. They
load rows through selectors, hand typed records to the pure engines, and
write the few state changes the receivables workflow has (cheque banking
events and allocations).
"""

from receivables_services.allocation_service import AllocationService
from receivables_services.cheque_service import ChequeService
from receivables_services.customer_summary_service import (
    CustomerSummaryService,
    summarize_snapshot,
)

__all__ = [
    "AllocationService",
    "ChequeService",
    "CustomerSummaryService",
    "summarize_snapshot",
]
