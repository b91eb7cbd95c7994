"""
Infrastructure module: Database sessions and operation correlation.

Provides:
- Database sessions and transactions (db.py)
- Operation-scoped correlation IDs for logging (correlation.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db_context,
    safe_commit,
)
from shared.infrastructure.correlation import (
    operation_scope,
    CorrelationIdFilter,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db_context",
    "safe_commit",
    "operation_scope",
    "CorrelationIdFilter",
]
