"""Owner scoping shared by cart lines, address books and orders."""

import structlog

from storefront.errors import Unauthorized

logger = structlog.get_logger(__name__)


def deny(resource: str, resource_id, caller_id):
    """Log a security event and raise ``Unauthorized``."""
    logger.warning(
        "security.unauthorized_access",
        resource=resource,
        resource_id=str(resource_id),
        caller_id=str(caller_id),
    )
    raise Unauthorized(f"You are not allowed to access this {resource}", resource=resource)


def ensure_owner(resource: str, resource_id, owner_id, caller_id) -> None:
    """Raise ``Unauthorized`` unless ``caller_id`` owns the resource."""
    if str(owner_id) != str(caller_id):
        deny(resource, resource_id, caller_id)
