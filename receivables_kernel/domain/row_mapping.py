"""
Row mapping -- convert snake_case data-store rows into typed records.

Responsibility:
    The single place where loosely-typed rows (PostgREST JSON, SQLAlchemy
    ``RowMapping``) become ``receivables_kernel.domain.records`` instances.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Missing or null numeric fields read as zero; amounts are quantized to
      the currency's minor unit.
    - Floats coming out of JSON are read through ``str()`` so that 0.1 stays
      Decimal("0.1").
    - Legacy cheque statuses are translated through ``cheque_status_aliases``
      (``bounced`` reads as ``returned``).

Failure modes:
    - RowMappingError when a row lacks its id, or carries a status or date
      that cannot be interpreted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from receivables_kernel.domain.records import (
    Allocation,
    ChequeDetail,
    ChequeStatus,
    Collection,
    CollectionStatus,
    Customer,
    CustomerReturn,
    Invoice,
    ReturnItem,
    ReturnStatus,
)
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.exceptions import RowMappingError

DEFAULT_CURRENCY = "LKR"
DEFAULT_CHEQUE_STATUS_ALIASES: Mapping[str, str] = {"bounced": "returned"}

Row = Mapping[str, Any]


def _require_id(row: Row, record_type: str, key: str = "id") -> str:
    value = row.get(key)
    if value is None or str(value).strip() == "":
        raise RowMappingError(record_type, key, "is missing")
    return str(value)


def _optional_id(row: Row, key: str) -> str | None:
    value = row.get(key)
    return None if value is None else str(value)


def money_from_value(value: Any, currency: str | Currency, record_type: str = "row", field: str = "amount") -> Money:
    """Read an amount column, treating null/blank as zero."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Money.zero(currency)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise RowMappingError(record_type, field, f"is not a number: {value!r}") from e
    return Money(amount=amount, currency=currency).round()


def _parse_date(value: Any, record_type: str, field: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            # Full timestamps ("2024-06-15T00:00:00+05:30") keep their calendar day.
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise RowMappingError(record_type, field, f"is not an ISO date: {value!r}") from e
    raise RowMappingError(record_type, field, f"has unsupported type {type(value).__name__}")


def _parse_datetime(value: Any, record_type: str, field: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise RowMappingError(record_type, field, f"is not an ISO timestamp: {value!r}") from e
    raise RowMappingError(record_type, field, f"has unsupported type {type(value).__name__}")


def _parse_status(value: Any, enum_type: type, default: Any, record_type: str, aliases: Mapping[str, str] | None = None) -> Any:
    if value is None or value == "":
        return default
    raw = str(value).strip().lower()
    if aliases:
        raw = aliases.get(raw, raw)
    try:
        return enum_type(raw)
    except ValueError as e:
        raise RowMappingError(record_type, "status", f"has unknown value {value!r}") from e


def customer_from_row(row: Row) -> Customer:
    return Customer(id=_require_id(row, "customer"), name=str(row.get("name") or ""))


def invoice_from_row(
    row: Row,
    currency: str | Currency = DEFAULT_CURRENCY,
    item_ids: Iterable[str] = (),
) -> Invoice:
    """Map an ``invoices`` row. Line item ids may be nested as ``invoice_items``."""
    nested = row.get("invoice_items") or ()
    ids = tuple(str(i) for i in item_ids) or tuple(
        str(item["id"]) for item in nested if item.get("id") is not None
    )
    return Invoice(
        id=_require_id(row, "invoice"),
        customer_id=str(row.get("customer_id") or ""),
        total=money_from_value(row.get("total"), currency, "invoice", "total"),
        created_at=_parse_datetime(row.get("created_at"), "invoice", "created_at"),
        invoice_number=_optional_id(row, "invoice_number"),
        item_ids=ids,
    )


def cheque_from_row(
    row: Row,
    currency: str | Currency = DEFAULT_CURRENCY,
    status_aliases: Mapping[str, str] = DEFAULT_CHEQUE_STATUS_ALIASES,
) -> ChequeDetail:
    cheque_date = _parse_date(row.get("cheque_date"), "cheque", "cheque_date")
    if cheque_date is None:
        raise RowMappingError("cheque", "cheque_date", "is missing")
    return ChequeDetail(
        id=_require_id(row, "cheque"),
        cheque_number=str(row.get("cheque_number") or ""),
        bank_name=str(row.get("bank_name") or ""),
        amount=money_from_value(row.get("amount"), currency, "cheque", "amount"),
        cheque_date=cheque_date,
        status=_parse_status(row.get("status"), ChequeStatus, ChequeStatus.PENDING, "cheque", status_aliases),
        cleared_at=_parse_datetime(row.get("cleared_at"), "cheque", "cleared_at"),
        returned_at=_parse_datetime(row.get("returned_at"), "cheque", "returned_at"),
        return_reason=row.get("return_reason"),
    )


def allocation_from_row(row: Row, currency: str | Currency = DEFAULT_CURRENCY) -> Allocation:
    return Allocation(
        invoice_id=_require_id(row, "allocation", "invoice_id"),
        collection_id=str(row.get("collection_id") or ""),
        allocated_amount=money_from_value(
            row.get("allocated_amount"), currency, "allocation", "allocated_amount"
        ),
    )


def collection_from_row(
    row: Row,
    currency: str | Currency = DEFAULT_CURRENCY,
    status_aliases: Mapping[str, str] = DEFAULT_CHEQUE_STATUS_ALIASES,
) -> Collection:
    """
    Map a ``collections`` row together with its embedded
    ``collection_cheques`` and ``collection_allocations`` lists.
    """
    collection_id = _require_id(row, "collection")
    cheques = tuple(
        cheque_from_row(c, currency, status_aliases)
        for c in (row.get("collection_cheques") or ())
    )
    allocations = tuple(
        allocation_from_row({"collection_id": collection_id, **a}, currency)
        for a in (row.get("collection_allocations") or ())
    )
    return Collection(
        id=collection_id,
        customer_id=str(row.get("customer_id") or ""),
        total_amount=money_from_value(row.get("total_amount"), currency, "collection", "total_amount"),
        cash_amount=money_from_value(row.get("cash_amount"), currency, "collection", "cash_amount"),
        cash_discount=money_from_value(row.get("cash_discount"), currency, "collection", "cash_discount"),
        cheque_amount=money_from_value(row.get("cheque_amount"), currency, "collection", "cheque_amount"),
        cash_date=_parse_date(row.get("cash_date"), "collection", "cash_date"),
        status=_parse_status(row.get("status"), CollectionStatus, CollectionStatus.PENDING, "collection"),
        cheques=cheques,
        allocations=allocations,
    )


def return_from_row(row: Row, currency: str | Currency = DEFAULT_CURRENCY) -> CustomerReturn:
    return CustomerReturn(
        id=_require_id(row, "return"),
        total=money_from_value(row.get("total"), currency, "return", "total"),
        status=_parse_status(row.get("status"), ReturnStatus, ReturnStatus.PENDING, "return"),
        invoice_id=_optional_id(row, "invoice_id"),
    )


def return_item_from_row(row: Row, currency: str | Currency = DEFAULT_CURRENCY) -> ReturnItem:
    return ReturnItem(
        id=_require_id(row, "return_item"),
        invoice_item_id=_optional_id(row, "invoice_item_id"),
        total=money_from_value(row.get("total"), currency, "return_item", "total"),
        return_id=_optional_id(row, "return_id"),
    )


def return_items_by_invoice_item(items: Iterable[ReturnItem]) -> dict[str, Money]:
    """Sum line-level return totals per invoice item; items without a link are skipped."""
    totals: dict[str, Money] = {}
    for item in items:
        if item.invoice_item_id is None:
            continue
        current = totals.get(item.invoice_item_id)
        totals[item.invoice_item_id] = item.total if current is None else current + item.total
    return totals
