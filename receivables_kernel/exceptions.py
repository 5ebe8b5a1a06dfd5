"""
Typed exception hierarchy for the receivables packages.

Every error carries a machine-readable ``code`` class attribute and the
structured data needed to act on it, so callers catch by type rather than
by parsing messages::

    try:
        service.mark_returned(cheque_id, reason="insufficient funds")
    except ChequeStateError as e:
        api_response(code=e.code, cheque=e.cheque_id, status=e.status)

Hierarchy::

    ReceivablesError (base)
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- RecordError
    |   +-- RowMappingError
    |   +-- ChequeStateError
    |   +-- ChequeNotFoundError
    |   +-- CollectionNotFoundError
    |   +-- AllocationRejectedError
    |
    +-- ConfigError
    |   +-- PolicyValidationError
    |
    +-- SnapshotError
        +-- CustomerNotFoundError
        +-- SnapshotFetchError

The reconciliation engines never raise for malformed-but-present data
(null amounts, over-allocation, cheque totals that do not add up). Those
conditions are reported as integrity findings or degraded flags on the
summary. Exceptions are reserved for data that cannot be interpreted at all
and for invalid state transitions.
"""


class ReceivablesError(Exception):
    """
    Base exception for all receivables errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "RECEIVABLES_ERROR"


# Currency-related exceptions


class CurrencyError(ReceivablesError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


class CurrencyMismatchError(CurrencyError):
    """Attempted arithmetic on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


# Record-related exceptions


class RecordError(ReceivablesError):
    """Base exception for typed record errors."""

    code: str = "RECORD_ERROR"


class RowMappingError(RecordError):
    """A data-store row could not be converted into a typed record."""

    code: str = "ROW_MAPPING_ERROR"

    def __init__(self, record_type: str, field: str, reason: str):
        self.record_type = record_type
        self.field = field
        self.reason = reason
        super().__init__(f"Cannot map {record_type} row: field '{field}' {reason}")


class ChequeStateError(RecordError):
    """Cheque lifecycle transition is not allowed from its current status."""

    code: str = "CHEQUE_STATE_INVALID"

    def __init__(self, cheque_id: str, status: str, action: str):
        self.cheque_id = cheque_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} cheque {cheque_id}: status is '{status}'"
        )


class ChequeNotFoundError(RecordError):
    """Cheque with the given ID was not found."""

    code: str = "CHEQUE_NOT_FOUND"

    def __init__(self, cheque_id: str):
        self.cheque_id = cheque_id
        super().__init__(f"Cheque not found: {cheque_id}")


class CollectionNotFoundError(RecordError):
    """Collection with the given ID was not found."""

    code: str = "COLLECTION_NOT_FOUND"

    def __init__(self, collection_id: str):
        self.collection_id = collection_id
        super().__init__(f"Collection not found: {collection_id}")


class AllocationRejectedError(RecordError):
    """Proposed allocations failed validation and were not recorded."""

    code: str = "ALLOCATION_REJECTED"

    def __init__(self, collection_id: str, reasons: list[str]):
        self.collection_id = collection_id
        self.reasons = reasons
        super().__init__(
            f"Allocations for collection {collection_id} rejected: " + "; ".join(reasons)
        )


# Configuration exceptions


class ConfigError(ReceivablesError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class PolicyValidationError(ConfigError):
    """Reconciliation policy document failed validation."""

    code: str = "POLICY_INVALID"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid reconciliation policy: " + "; ".join(errors))


# Snapshot (data access) exceptions


class SnapshotError(ReceivablesError):
    """Base exception for customer ledger snapshot loading."""

    code: str = "SNAPSHOT_ERROR"


class CustomerNotFoundError(SnapshotError):
    """Customer with the given ID was not found."""

    code: str = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


class SnapshotFetchError(SnapshotError):
    """A required part of the customer snapshot could not be fetched."""

    code: str = "SNAPSHOT_FETCH_FAILED"

    def __init__(self, customer_id: str, source: str, detail: str):
        self.customer_id = customer_id
        self.source = source
        self.detail = detail
        super().__init__(
            f"Failed to fetch {source} for customer {customer_id}: {detail}"
        )
