"""
Operation correlation.

Every branch availability change runs inside an operation scope. Log lines
emitted during the scope carry its operation ID and the branch it acts on,
so one cascade walk can be followed through the logs.
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Iterator

operation_id_var: ContextVar[str] = ContextVar("operation_id", default="")
branch_id_var: ContextVar[int | None] = ContextVar("branch_id", default=None)


@contextmanager
def operation_scope(
    branch_id: int | None = None, operation_id: str | None = None
) -> Iterator[str]:
    """
    Bind an operation ID, and the branch being changed, for the block.

    Usage:
        with operation_scope(branch_id) as op_id:
            ...
    """
    op_id = operation_id or uuid.uuid4().hex[:12]
    op_token = operation_id_var.set(op_id)
    branch_token = branch_id_var.set(branch_id)
    try:
        yield op_id
    finally:
        branch_id_var.reset(branch_token)
        operation_id_var.reset(op_token)


class CorrelationIdFilter(logging.Filter):
    """Copies the current operation ID and branch onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.operation_id = operation_id_var.get() or None
        record.branch_id = branch_id_var.get()
        return True
