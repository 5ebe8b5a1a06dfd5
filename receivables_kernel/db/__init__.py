"""Database infrastructure: declarative base, engine and session scope."""

from receivables_kernel.db.base import Base
from receivables_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
