"""Monitoring adapter that writes failures to the structured log."""

import structlog

from storefront.monitoring.port import ErrorMonitor

logger = structlog.get_logger(__name__)


class LoggingMonitor(ErrorMonitor):
    def capture(self, failure: dict) -> None:
        logger.error(
            "monitoring.failure_captured",
            kind=failure["kind"],
            error_type=failure["error_type"],
            component=failure["component"],
            operation=failure["operation"],
            message=failure["message"],
            **failure["context"],
        )
