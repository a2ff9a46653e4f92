"""Error-monitoring factory and reporting helper.

Provides get_monitor() / set_monitor() to swap implementations:
- LoggingMonitor by default, writing failures to the structured log
- FakeMonitor for tests

``report_failure`` is the single entry point the engine uses. It forwards
only failures classified as system errors.
"""

from storefront.errors import ErrorKind, classify
from storefront.monitoring.port import ErrorMonitor

_SECRET_MARKERS = ("account_number", "password", "token", "secret", "card")

_current_monitor: ErrorMonitor | None = None


def get_monitor() -> ErrorMonitor:
    """Return the current monitor. Defaults to LoggingMonitor."""
    global _current_monitor
    if _current_monitor is None:
        # Imported here: discovery may load the adapter module before this package
        from storefront.monitoring.logging_adapter import LoggingMonitor

        _current_monitor = LoggingMonitor()
    return _current_monitor


def set_monitor(monitor: ErrorMonitor) -> None:
    """Override the active monitor (useful for tests)."""
    global _current_monitor
    _current_monitor = monitor


def reset_monitor() -> None:
    """Reset to default monitor."""
    global _current_monitor
    _current_monitor = None


def scrub(context: dict) -> dict:
    """Drop secret-looking keys and stringify the rest."""
    return {
        key: str(value)
        for key, value in context.items()
        if not any(marker in key.lower() for marker in _SECRET_MARKERS)
    }


def report_failure(exc: BaseException, component: str, operation: str, force: bool = False, **context) -> bool:
    """Send ``exc`` to the monitor if it is a system error.

    ``force`` forwards the failure whatever its kind, for operations where
    any failure needs follow-up. Returns True when the failure was forwarded.
    """
    kind = classify(exc)
    if kind is not ErrorKind.SYSTEM and not force:
        return False

    get_monitor().capture(
        {
            "kind": kind.value,
            "error_type": type(exc).__name__,
            "message": str(exc),
            "component": component,
            "operation": operation,
            "context": scrub(context),
        }
    )
    return True
