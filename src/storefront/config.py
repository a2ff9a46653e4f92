"""Engine tunables read from the ``[custom]`` table of ``domain.toml``."""

from typing import Any

from storefront.domain import storefront

DEFAULTS: dict[str, Any] = {
    "cart_line_ttl_days": 7,
    "max_line_quantity": 99,
    "max_addresses": 10,
    "total_tolerance": 0.01,
    "store_timeout_seconds": 5,
}


def setting(key: str) -> Any:
    """Return a configured value, falling back to the built-in default."""
    if key not in DEFAULTS:
        raise KeyError(f"Unknown storefront setting: {key}")

    custom = storefront.config.get("custom") or {}
    value = custom.get(key)
    return DEFAULTS[key] if value is None else value
