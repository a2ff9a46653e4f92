"""Order number generation.

Numbers look like ``ORD-YYYYMMDD-NNNNN``: the UTC date plus a zero-padded
sequence that restarts every day. The next sequence is one past the highest
already stored for today. That read-then-write can hand the same number to
two concurrent checkouts; the assembler checks for that before writing and
the ``order_number`` field is unique in the store.

When the look-up fails or the stored number cannot be parsed, a number is
derived from the millisecond clock instead (``ORD-{t[:8]}-{t[8:]}``), so a
store hiccup never blocks a checkout.
"""

import re
import time
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from storefront.monitoring import report_failure
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)

PREFIX = "ORD"
SEQUENCE_WIDTH = 5
ORDER_NUMBER_PATTERN = re.compile(r"^ORD-(\d{8})-(\d{5,})$")

_last_fallback_ms = 0


def format_order_number(order_date: str, sequence: int) -> str:
    return f"{PREFIX}-{order_date}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_order_number(order_number: str | None) -> tuple[str, int] | None:
    """Split a number into (date segment, sequence); None if it does not match."""
    match = ORDER_NUMBER_PATTERN.match(order_number or "")
    if match is None:
        return None
    return match.group(1), int(match.group(2))


class OrderNumberGenerator:
    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now(UTC))

    def today(self) -> str:
        return self._clock().astimezone(UTC).strftime("%Y%m%d")

    def next(self) -> str:
        """Return the next number for today, or a timestamp fallback."""
        today = self.today()

        try:
            latest = current_domain.repository_for(Order).latest_for_date(today)
        except Exception as exc:
            logger.warning("order_number.lookup_failed", order_date=today, error=str(exc))
            report_failure(exc, component="order-number-generator", operation="next-sequence", order_date=today)
            return self.fallback()

        if latest is None:
            return format_order_number(today, 1)

        parsed = parse_order_number(latest.order_number)
        if parsed is None or parsed[0] != today:
            logger.warning(
                "order_number.unparseable",
                order_date=today,
                order_number=latest.order_number,
            )
            return self.fallback()

        return format_order_number(today, parsed[1] + 1)

    def fallback(self) -> str:
        """A number built from the millisecond clock, increasing within this process."""
        global _last_fallback_ms
        stamp = max(time.time_ns() // 1_000_000, _last_fallback_ms + 1)
        _last_fallback_ms = stamp

        digits = str(stamp)
        number = f"{PREFIX}-{digits[:8]}-{digits[8:]}"
        logger.info("order_number.fallback_issued", order_number=number)
        return number
