"""
Module: receivables_kernel.models.collection
Responsibility: ORM persistence for collections (payment events), the
    cheques tendered with them, and their allocations to invoices.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced (by consumers, not the store):
    - Allocations of a collection should not exceed its total_amount.
    - Allocations against an invoice should not exceed its total.
    Both are reported by receivables_engines.integrity, never enforced here.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from receivables_kernel.db.base import Base


class CollectionModel(Base):
    __tablename__ = "collections"

    __table_args__ = (
        Index("idx_collections_customer_id", "customer_id"),
        Index("idx_collections_created_at", "created_at"),
    )

    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False,
    )
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, default="cash")
    cash_amount: Mapped[Decimal | None] = mapped_column(nullable=True, default=Decimal("0"))
    cash_discount: Mapped[Decimal | None] = mapped_column(nullable=True, default=Decimal("0"))
    cheque_amount: Mapped[Decimal | None] = mapped_column(nullable=True, default=Decimal("0"))
    cash_date: Mapped[date | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    cheques: Mapped[list["CollectionChequeModel"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="CollectionChequeModel.cheque_date",
    )
    allocations: Mapped[list["CollectionAllocationModel"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
    )


class CollectionChequeModel(Base):
    __tablename__ = "collection_cheques"

    __table_args__ = (
        Index("idx_collection_cheques_collection_id", "collection_id"),
        Index("idx_collection_cheques_status", "status"),
    )

    collection_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("collections.id", ondelete="CASCADE"), nullable=False,
    )
    cheque_number: Mapped[str] = mapped_column(String(50), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    cheque_date: Mapped[date] = mapped_column(nullable=False)
    # pending | cleared | returned (legacy rows may hold "bounced")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    cleared_at: Mapped[datetime | None] = mapped_column(nullable=True)
    returned_at: Mapped[datetime | None] = mapped_column(nullable=True)
    return_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    collection: Mapped[CollectionModel] = relationship(back_populates="cheques")


class CollectionAllocationModel(Base):
    __tablename__ = "collection_allocations"

    __table_args__ = (
        Index("idx_collection_allocations_collection_id", "collection_id"),
        Index("idx_collection_allocations_invoice_id", "invoice_id"),
    )

    collection_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("collections.id", ondelete="CASCADE"), nullable=False,
    )
    invoice_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False,
    )
    allocated_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    allocated_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    collection: Mapped[CollectionModel] = relationship(back_populates="allocations")
