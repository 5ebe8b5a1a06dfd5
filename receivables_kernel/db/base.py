"""
Module: receivables_kernel.db.base
Responsibility: Declarative base for all SQLAlchemy ORM models, with the
    string primary key convention and the type annotation map that keeps
    money columns Decimal.
Architecture position: Kernel > DB. The lowest-level import target in the
    kernel's persistence side. MUST NOT import from models/, selectors/ or
    outer layers.
Invariants enforced:
    - Decimal maps to Numeric(12, 2): the store keeps amounts at the minor
      unit, and NEVER as float.
    - Primary keys are uuid4 strings, matching the ids the hosted data
      store hands out.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import Date, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """
    Declarative base for all receivables models.

    Guarantees:
        - id is a uuid4 string stored as String(36).
        - Decimal maps to Numeric(12, 2) with asdecimal=True.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(12, 2, asdecimal=True),
        datetime: DateTime(timezone=True),
        date: Date(),
        str: String(255),
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
    )
