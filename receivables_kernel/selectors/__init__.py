"""Read-only selectors returning typed domain records."""

from receivables_kernel.selectors.base import BaseSelector
from receivables_kernel.selectors.customer_ledger import (
    CustomerLedgerSelector,
    CustomerLedgerSnapshot,
)
