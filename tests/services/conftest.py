"""
Fixtures for the persistence and service tests.

``seeded_ledger`` writes one customer with the following rows:

    inv-1  total 1000, item item-1a            created 2024-06-01
    inv-2  total 2000, items item-2a, item-2b  created 2024-06-05

    col-1  cash 1000                       -> allocated 1000 to inv-1
    col-2  cheques 500 (2024-06-10, pending)
                   1000 (2024-07-10, pending)  -> allocated 1500 to inv-2
    col-3  cheque 300 (2024-06-01, legacy status "bounced")

    ret-1  approved, total 200, line on item-2a for 200
    ret-2  pending,  total 999, line on item-2b for 999

Reconciled at 2024-06-15: realized 1500, unrealized 1000, returned
cheques 300, return credit 200, outstanding 1600.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from receivables_kernel.models import (
    CollectionAllocationModel,
    CollectionChequeModel,
    CollectionModel,
    CustomerModel,
    InvoiceItemModel,
    InvoiceModel,
    ReturnItemModel,
    ReturnModel,
)


@dataclass(frozen=True)
class SeededLedger:
    customer_id: str = "cust-1"
    past_cheque_id: str = "chq-past"
    future_cheque_id: str = "chq-future"
    bounced_cheque_id: str = "chq-bounced"


def _ts(day: int) -> datetime:
    return datetime(2024, 6, day, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded_ledger(session) -> SeededLedger:
    ledger = SeededLedger()
    cid = ledger.customer_id

    session.add(CustomerModel(id=cid, name="Perera Stores", created_at=_ts(1)))
    session.add(CustomerModel(id="cust-other", name="Silva Traders", created_at=_ts(1)))
    session.flush()

    session.add_all([
        InvoiceModel(
            id="inv-1", customer_id=cid, invoice_number="INV-0001", total=Decimal("1000.00"),
            created_at=_ts(1),
            items=[InvoiceItemModel(id="item-1a", product_name="Soap", total=Decimal("1000.00"))],
        ),
        InvoiceModel(
            id="inv-2", customer_id=cid, invoice_number="INV-0002", total=Decimal("2000.00"),
            created_at=_ts(5),
            items=[
                InvoiceItemModel(id="item-2a", product_name="Rice", total=Decimal("1200.00")),
                InvoiceItemModel(id="item-2b", product_name="Tea", total=Decimal("800.00")),
            ],
        ),
        InvoiceModel(
            id="inv-other", customer_id="cust-other", total=Decimal("5000.00"), created_at=_ts(2),
        ),
    ])
    session.flush()

    session.add_all([
        CollectionModel(
            id="col-1", customer_id=cid, total_amount=Decimal("1000.00"), payment_method="cash",
            cash_amount=Decimal("1000.00"), cheque_amount=Decimal("0"), created_at=_ts(2),
            allocations=[CollectionAllocationModel(
                id="alloc-1", invoice_id="inv-1", allocated_amount=Decimal("1000.00"), allocated_at=_ts(2),
            )],
        ),
        CollectionModel(
            id="col-2", customer_id=cid, total_amount=Decimal("1500.00"), payment_method="cheque",
            cash_amount=Decimal("0"), cheque_amount=Decimal("1500.00"), created_at=_ts(6),
            cheques=[
                CollectionChequeModel(
                    id=ledger.past_cheque_id, cheque_number="100001", bank_name="BOC",
                    amount=Decimal("500.00"), cheque_date=date(2024, 6, 10), status="pending",
                ),
                CollectionChequeModel(
                    id=ledger.future_cheque_id, cheque_number="100002", bank_name="BOC",
                    amount=Decimal("1000.00"), cheque_date=date(2024, 7, 10), status="pending",
                ),
            ],
            allocations=[CollectionAllocationModel(
                id="alloc-2", invoice_id="inv-2", allocated_amount=Decimal("1500.00"), allocated_at=_ts(6),
            )],
        ),
        CollectionModel(
            id="col-3", customer_id=cid, total_amount=Decimal("300.00"), payment_method="cheque",
            cash_amount=None, cash_discount=None, cheque_amount=Decimal("300.00"), created_at=_ts(3),
            cheques=[CollectionChequeModel(
                id=ledger.bounced_cheque_id, cheque_number="200001", bank_name="HNB",
                amount=Decimal("300.00"), cheque_date=date(2024, 6, 1), status="bounced",
                returned_at=_ts(4), return_reason="Insufficient funds",
            )],
        ),
    ])
    session.flush()

    session.add_all([
        ReturnModel(
            id="ret-1", customer_id=cid, total=Decimal("200.00"), status="approved", created_at=_ts(7),
            items=[ReturnItemModel(id="ri-1", invoice_item_id="item-2a", total=Decimal("200.00"))],
        ),
        ReturnModel(
            id="ret-2", customer_id=cid, total=Decimal("999.00"), status="pending", created_at=_ts(8),
            items=[ReturnItemModel(id="ri-2", invoice_item_id="item-2b", total=Decimal("999.00"))],
        ),
    ])
    session.flush()
    session.expire_all()
    return ledger
