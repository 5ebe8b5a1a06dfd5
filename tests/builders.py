"""
Record builders shared by the engine and property tests.

Collections built here are internally consistent by default: the recorded
cheque amount equals the sum of the cheques and the total equals cash +
cash discount + cheques.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from receivables_kernel.domain.records import (
    Allocation,
    ChequeDetail,
    ChequeStatus,
    Collection,
    Customer,
    CustomerReturn,
    Invoice,
    ReturnStatus,
)
from receivables_kernel.domain.values import Money

CURRENCY = "LKR"
REFERENCE_DATE = date(2024, 6, 15)


def lkr(amount) -> Money:
    return Money.of(Decimal(str(amount)), CURRENCY)


def make_customer(name: str = "Perera Stores") -> Customer:
    return Customer(id=str(uuid4()), name=name)


def make_invoice(total, customer_id: str = "cust-1", invoice_id: str | None = None,
                 item_ids: tuple[str, ...] = (), invoice_number: str | None = None) -> Invoice:
    return Invoice(
        id=invoice_id or str(uuid4()),
        customer_id=customer_id,
        total=lkr(total),
        invoice_number=invoice_number,
        item_ids=item_ids,
    )


def make_cheque(amount, cheque_date: date = REFERENCE_DATE,
                status: ChequeStatus = ChequeStatus.PENDING, number: str = "000123") -> ChequeDetail:
    return ChequeDetail(
        id=str(uuid4()),
        cheque_number=number,
        bank_name="Commercial Bank",
        amount=lkr(amount),
        cheque_date=cheque_date,
        status=status,
    )


def make_collection(cash=0, discount=0, cheques: tuple[ChequeDetail, ...] = (),
                    allocations: dict | None = None, customer_id: str = "cust-1",
                    collection_id: str | None = None, total=None, cheque_amount=None) -> Collection:
    """
    Build a collection. ``allocations`` maps invoice id to amount.
    """
    cid = collection_id or str(uuid4())
    cheque_sum = sum((c.amount.amount for c in cheques), Decimal("0"))
    recorded_cheques = lkr(cheque_amount) if cheque_amount is not None else lkr(cheque_sum)
    computed_total = lkr(cash) + lkr(discount) + recorded_cheques
    return Collection(
        id=cid,
        customer_id=customer_id,
        total_amount=lkr(total) if total is not None else computed_total,
        cash_amount=lkr(cash),
        cash_discount=lkr(discount),
        cheque_amount=recorded_cheques,
        cheques=tuple(cheques),
        allocations=tuple(
            Allocation(invoice_id=inv_id, collection_id=cid, allocated_amount=lkr(amount))
            for inv_id, amount in (allocations or {}).items()
        ),
    )


def make_return(total, status: ReturnStatus = ReturnStatus.APPROVED,
                invoice_id: str | None = None) -> CustomerReturn:
    return CustomerReturn(id=str(uuid4()), total=lkr(total), status=status, invoice_id=invoice_id)
