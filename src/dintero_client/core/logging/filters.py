"""
Log filters adding correlation ids and static fields to records.

The correlation id lives in a ``ContextVar``: every asyncio task gets a copy
of the context it was created in, so concurrent requests keep their own ids.
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar(
    "dintero_correlation_id", default=None
)


def set_correlation_id(correlation_id: str) -> None:
    """
    Set correlation id for the current context.

    Example:
        >>> set_correlation_id("order-1234")
        >>> logger.info("Capturing")  # record carries correlation_id=order-1234
    """
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the current context, or None."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Remove the correlation id from the current context."""
    _correlation_id.set(None)


def new_correlation_id() -> str:
    """Random correlation id."""
    return uuid.uuid4().hex


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation id for the duration of a block.

    Reuses the id already bound to the context when none is given, else
    generates a fresh one. The previous value is restored on exit.

    Example:
        >>> with correlation_scope() as cid:
        ...     await client.checkout.get_session("T123.abc")
    """
    value = correlation_id or get_correlation_id() or new_correlation_id()
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to records when one is bound."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields to every record without overriding existing ones.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"service": "webshop"}))
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
