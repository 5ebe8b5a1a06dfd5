"""
Module: receivables_kernel.selectors.customer_ledger
Responsibility: Load a consistent snapshot of everything reconciliation
    needs for one customer: invoices (with line item ids), collections
    (with cheques and allocations), returns, line-level return totals, and
    per-invoice allocations.
Architecture position: Kernel > Selectors. Read-only.

Failure modes:
    - CustomerNotFoundError if the customer does not exist.
    - SnapshotFetchError if invoices, collections or returns cannot be read.
    - A failed per-invoice allocation fetch does NOT abort the snapshot: it
      is logged and the invoice id is recorded in
      ``unavailable_allocation_invoice_ids`` so the summary can mark it
      degraded.
"""

from __future__ import annotations

from collections.abc import Collection as AbstractCollection
from collections.abc import Mapping
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from receivables_kernel.domain.records import (
    CREDIT_RETURN_STATUSES,
    Allocation,
    Collection,
    Customer,
    CustomerReturn,
    Invoice,
    ReturnStatus,
)
from receivables_kernel.domain.row_mapping import (
    DEFAULT_CHEQUE_STATUS_ALIASES,
    DEFAULT_CURRENCY,
    allocation_from_row,
    collection_from_row,
    customer_from_row,
    invoice_from_row,
    return_from_row,
    return_item_from_row,
    return_items_by_invoice_item,
)
from receivables_kernel.domain.values import Currency, Money
from receivables_kernel.exceptions import CustomerNotFoundError, SnapshotFetchError
from receivables_kernel.logging_config import get_logger
from receivables_kernel.models import (
    CollectionAllocationModel,
    CollectionModel,
    CustomerModel,
    InvoiceModel,
    ReturnItemModel,
    ReturnModel,
)
from receivables_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.customer_ledger")


@dataclass(frozen=True)
class CustomerLedgerSnapshot:
    """Typed rows for one customer, read in one session."""

    customer: Customer
    invoices: tuple[Invoice, ...]
    collections: tuple[Collection, ...]
    returns: tuple[CustomerReturn, ...]
    return_items_by_invoice_item: Mapping[str, Money]
    allocations_by_invoice: Mapping[str, tuple[Allocation, ...]]
    unavailable_allocation_invoice_ids: frozenset[str] = field(default_factory=frozenset)


class CustomerLedgerSelector(BaseSelector):
    """
    Read a customer's receivables snapshot.

    Args:
        session: Caller-owned SQLAlchemy session.
        currency: Currency amounts are recorded in.
        cheque_status_aliases: Legacy cheque status translations.
        credit_statuses: Return statuses whose line items count as credits.
    """

    def __init__(
        self,
        session: Session,
        currency: str | Currency = DEFAULT_CURRENCY,
        cheque_status_aliases: Mapping[str, str] = DEFAULT_CHEQUE_STATUS_ALIASES,
        credit_statuses: AbstractCollection[ReturnStatus] = CREDIT_RETURN_STATUSES,
    ):
        super().__init__(session)
        self.currency = currency
        self.cheque_status_aliases = cheque_status_aliases
        self.credit_statuses = frozenset(credit_statuses)

    def get_customer(self, customer_id: str) -> Customer:
        customer = self.session.get(CustomerModel, customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer_from_row(self.to_row(customer))

    def load_snapshot(self, customer_id: str) -> CustomerLedgerSnapshot:
        customer = self.get_customer(customer_id)
        invoices = self._fetch("invoices", customer_id, self._fetch_invoices)
        collections = self._fetch("collections", customer_id, self._fetch_collections)
        returns = self._fetch("returns", customer_id, self._fetch_returns)

        item_ids = [item_id for inv in invoices for item_id in inv.item_ids]
        return_items = self._fetch(
            "return_items", customer_id, lambda _: self._fetch_return_item_totals(item_ids)
        )

        allocations: dict[str, tuple[Allocation, ...]] = {}
        unavailable: set[str] = set()
        for invoice in invoices:
            try:
                with self.session.begin_nested():
                    allocations[invoice.id] = self._fetch_invoice_allocations(invoice.id)
            except SQLAlchemyError as e:
                logger.error("invoice_allocations_fetch_failed", extra={
                    "customer_id": customer_id,
                    "invoice_id": invoice.id,
                    "error": str(e),
                })
                unavailable.add(invoice.id)

        logger.info("customer_snapshot_loaded", extra={
            "customer_id": customer_id,
            "invoice_count": len(invoices),
            "collection_count": len(collections),
            "return_count": len(returns),
            "unavailable_allocation_count": len(unavailable),
        })

        return CustomerLedgerSnapshot(
            customer=customer,
            invoices=invoices,
            collections=collections,
            returns=returns,
            return_items_by_invoice_item=return_items,
            allocations_by_invoice=allocations,
            unavailable_allocation_invoice_ids=frozenset(unavailable),
        )

    def _fetch(self, source: str, customer_id: str, fetch):
        try:
            return fetch(customer_id)
        except SQLAlchemyError as e:
            logger.error("customer_snapshot_fetch_failed", extra={
                "customer_id": customer_id,
                "source": source,
                "error": str(e),
            })
            raise SnapshotFetchError(customer_id, source, str(e)) from e

    def _fetch_invoices(self, customer_id: str) -> tuple[Invoice, ...]:
        stmt = (
            select(InvoiceModel)
            .where(InvoiceModel.customer_id == customer_id)
            .options(selectinload(InvoiceModel.items))
            .order_by(InvoiceModel.created_at.desc(), InvoiceModel.id)
        )
        return tuple(
            invoice_from_row(
                self.to_row(model),
                self.currency,
                item_ids=[item.id for item in model.items],
            )
            for model in self.session.scalars(stmt)
        )

    def _fetch_collections(self, customer_id: str) -> tuple[Collection, ...]:
        stmt = (
            select(CollectionModel)
            .where(CollectionModel.customer_id == customer_id)
            .options(
                selectinload(CollectionModel.cheques),
                selectinload(CollectionModel.allocations),
            )
            .order_by(CollectionModel.created_at.desc(), CollectionModel.id)
        )
        collections = []
        for model in self.session.scalars(stmt):
            row = self.to_row(model)
            row["collection_cheques"] = [self.to_row(c) for c in model.cheques]
            row["collection_allocations"] = [self.to_row(a) for a in model.allocations]
            collections.append(
                collection_from_row(row, self.currency, self.cheque_status_aliases)
            )
        return tuple(collections)

    def _fetch_returns(self, customer_id: str) -> tuple[CustomerReturn, ...]:
        stmt = (
            select(ReturnModel)
            .where(ReturnModel.customer_id == customer_id)
            .order_by(ReturnModel.created_at, ReturnModel.id)
        )
        return tuple(return_from_row(self.to_row(m), self.currency) for m in self.session.scalars(stmt))

    def _fetch_return_item_totals(self, invoice_item_ids: list[str]) -> dict[str, Money]:
        if not invoice_item_ids:
            return {}
        stmt = (
            select(ReturnItemModel)
            .join(ReturnModel, ReturnItemModel.return_id == ReturnModel.id)
            .where(ReturnItemModel.invoice_item_id.in_(invoice_item_ids))
            .where(ReturnModel.status.in_([s.value for s in self.credit_statuses]))
            .order_by(ReturnItemModel.id)
        )
        items = [return_item_from_row(self.to_row(m), self.currency) for m in self.session.scalars(stmt)]
        return return_items_by_invoice_item(items)

    def _fetch_invoice_allocations(self, invoice_id: str) -> tuple[Allocation, ...]:
        stmt = (
            select(CollectionAllocationModel)
            .where(CollectionAllocationModel.invoice_id == invoice_id)
            .order_by(CollectionAllocationModel.id)
        )
        return tuple(
            allocation_from_row(self.to_row(m), self.currency)
            for m in self.session.scalars(stmt)
        )
