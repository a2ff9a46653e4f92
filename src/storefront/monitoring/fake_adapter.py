"""Fake monitoring adapter: keeps captured failures in memory for assertions."""

from storefront.monitoring.port import ErrorMonitor


class FakeMonitor(ErrorMonitor):
    """Records every captured failure instead of shipping it anywhere."""

    def __init__(self):
        self.captured: list[dict] = []

    def capture(self, failure: dict) -> None:
        self.captured.append(failure)

    def clear(self) -> None:
        self.captured = []

    def for_operation(self, operation: str) -> list[dict]:
        return [f for f in self.captured if f["operation"] == operation]
