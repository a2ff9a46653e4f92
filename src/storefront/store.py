"""Bounded store access.

Store calls are capped by the provider's own timeouts (``connect_timeout`` and
``statement_timeout`` in the production connection string). This module turns
the driver errors those limits produce into the engine's retryable errors and
flags operations that ran past the configured budget.
"""

import time
from contextlib import contextmanager

import structlog
from protean.exceptions import TransactionError
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from storefront.config import setting
from storefront.errors import StoreTimeout, StoreUnavailable

logger = structlog.get_logger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out", "canceling statement")


def _is_timeout(exc: OperationalError) -> bool:
    text = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in text for marker in _TIMEOUT_MARKERS)


def _translate(exc: BaseException, operation: str, context: dict) -> Exception | None:
    """Map a driver failure to ``StoreTimeout``/``StoreUnavailable``; None when it is not one."""
    if isinstance(exc, TransactionError):
        # Commit failures arrive wrapped; the driver error is the cause
        return _translate(exc.__cause__, operation, context) if exc.__cause__ is not None else None

    if isinstance(exc, TimeoutError | PoolTimeoutError) or (isinstance(exc, OperationalError) and _is_timeout(exc)):
        logger.error("store.timeout", operation=operation, **context)
        return StoreTimeout(f"Store operation '{operation}' timed out", operation=operation)

    if isinstance(exc, OperationalError):
        logger.error("store.unavailable", operation=operation, error=str(exc.orig), **context)
        return StoreUnavailable(f"Store unavailable during '{operation}'", operation=operation)

    return None


@contextmanager
def store_operation(operation: str, **context):
    """Run a block of store calls, translating driver failures.

    Raises ``StoreTimeout`` when the store gave up waiting and
    ``StoreUnavailable`` for other connectivity failures. Failures raised
    while a unit of work commits are classified by their underlying cause.
    """
    budget = float(setting("store_timeout_seconds"))
    started = time.monotonic()
    try:
        yield
    except (TimeoutError, PoolTimeoutError, OperationalError, TransactionError) as exc:
        translated = _translate(exc, operation, context)
        if translated is None:
            raise
        raise translated from exc
    finally:
        elapsed = time.monotonic() - started
        if elapsed > budget:
            logger.warning(
                "store.slow_operation",
                operation=operation,
                elapsed_seconds=round(elapsed, 3),
                budget_seconds=budget,
                **context,
            )
