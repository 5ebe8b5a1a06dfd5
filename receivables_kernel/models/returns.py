"""
Module: receivables_kernel.models.returns
Responsibility: ORM persistence for customer returns (header) and their
    line items.
Architecture position: Kernel > Models. May import from db/base.py only.

A return may carry an ``invoice_id`` on the header, reference invoice
lines through its items, or both.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from receivables_kernel.db.base import Base


class ReturnModel(Base):
    __tablename__ = "returns"

    __table_args__ = (
        Index("idx_returns_customer_id", "customer_id"),
        Index("idx_returns_status", "status"),
    )

    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False,
    )
    invoice_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True,
    )
    total: Mapped[Decimal | None] = mapped_column(nullable=True)
    # pending | approved | rejected | processed
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    items: Mapped[list["ReturnItemModel"]] = relationship(
        back_populates="parent",
        cascade="all, delete-orphan",
    )


class ReturnItemModel(Base):
    __tablename__ = "return_items"

    __table_args__ = (
        Index("idx_return_items_invoice_item_id", "invoice_item_id"),
    )

    return_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("returns.id", ondelete="CASCADE"), nullable=False,
    )
    invoice_item_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("invoice_items.id", ondelete="SET NULL"), nullable=True,
    )
    quantity: Mapped[Decimal | None] = mapped_column(nullable=True)
    total: Mapped[Decimal | None] = mapped_column(nullable=True)

    parent: Mapped[ReturnModel] = relationship(back_populates="items")
