"""
Receivables Kernel

Shared foundation for customer receivables reconciliation:
- Decimal Money and ISO 4217 currencies
- Typed, immutable records for invoices, collections, cheques and returns
- Typed exceptions and structured JSON logging
- SQLAlchemy persistence and read-only selectors
"""

__version__ = "0.1.0"
