"""Monitoring port: where classified system failures are sent.

The engine programs against this interface; adapters decide whether a
failure ends up in a log stream, an error tracker or a test recorder.
"""

from abc import ABC, abstractmethod


class ErrorMonitor(ABC):
    """Abstract interface for error-monitoring adapters."""

    @abstractmethod
    def capture(self, failure: dict) -> None:
        """Record one failure.

        ``failure`` carries the keys: kind, error_type, message, component,
        operation and context (already scrubbed of secrets).
        """
        ...
