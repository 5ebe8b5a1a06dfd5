"""
Module: receivables_kernel.models.customer
Responsibility: ORM persistence for the agency's customers (shops).
Architecture position: Kernel > Models. May import from db/base.py only.
"""

from datetime import datetime

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from receivables_kernel.db.base import Base


class CustomerModel(Base):
    """A customer the agency invoices and collects from."""

    __tablename__ = "customers"

    __table_args__ = (
        Index("idx_customers_agency_id", "agency_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    agency_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
