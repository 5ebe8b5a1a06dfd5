"""
Module: receivables_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.
Architecture position: Kernel > Selectors. May import from db/ and models/.

Invariants enforced:
    - Read-only: selectors never add, delete, flush or commit.
    - Selectors return typed records from ``receivables_kernel.domain``,
      never ORM instances.
    - Session ownership stays with the caller.
"""

from abc import ABC
from typing import Any

from sqlalchemy.orm import Session

from receivables_kernel.db.base import Base


class BaseSelector(ABC):
    """Base class holding the caller's session."""

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def to_row(instance: Base) -> dict[str, Any]:
        """Column values of an ORM instance as a snake_case row dict."""
        return {column.key: getattr(instance, column.key) for column in instance.__table__.columns}
