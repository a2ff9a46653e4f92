"""AddressBook aggregate: every shipping address of one owner.

Keeping all of an owner's addresses inside one aggregate makes the "at most
one default address" rule an aggregate invariant: clearing the old default
and setting the new one is a single write of a single document, so no reader
ever sees two defaults.
"""

import re
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String

from storefront.addresses.events import (
    AddressAdded,
    AddressRemoved,
    AddressUpdated,
    DefaultAddressChanged,
)
from storefront.config import setting
from storefront.domain import storefront

_POSTAL_CODE = re.compile(r"^[0-9A-Z]{2,10}$")

EDITABLE_FIELDS = ("street", "additional_info", "city", "state", "postal_code", "country")


def normalize_postal_code(value: str) -> str:
    """Strip spaces, upper-case and validate a postal code."""
    normalized = re.sub(r"\s+", "", value or "").upper()
    if not _POSTAL_CODE.match(normalized):
        raise ValidationError({"postal_code": ["Postal code must be 2-10 letters or digits"]})
    return normalized


def _created_ts(address) -> float:
    return address.created_at.timestamp() if address.created_at else 0.0


@storefront.entity(part_of="AddressBook")
class Address:
    """One shipping address. ``created_at`` decides who inherits the default."""

    street: String(required=True, max_length=100)
    additional_info: String(max_length=100)
    city: String(required=True, max_length=50)
    state: String(required=True, max_length=50)
    postal_code: String(required=True, max_length=10)
    country: String(required=True, max_length=50)
    is_default: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()


@storefront.aggregate
class AddressBook:
    owner_id: Identifier(required=True, unique=True)
    addresses: HasMany(Address)
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        maximum = setting("max_addresses")
        if len(self.addresses) > maximum:
            raise ValidationError({"addresses": [f"Maximum {maximum} addresses allowed"]})

    @invariant.post
    def at_most_one_default_address(self):
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) > 1:
            raise ValidationError({"addresses": ["Only one address can be the default"]})

    @classmethod
    def open(cls, owner_id):
        return cls(owner_id=owner_id)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_address(self, address_id):
        return next((a for a in self.addresses if str(a.id) == str(address_id)), None)

    @property
    def default_address(self):
        return next((a for a in self.addresses if a.is_default), None)

    def listing(self):
        """Addresses with the default first, then newest first."""
        return sorted(
            self.addresses,
            key=lambda a: (not a.is_default, -_created_ts(a)),
        )

    # -------------------------------------------------------------------
    # Default flag
    # -------------------------------------------------------------------
    def _clear_defaults(self, keep=None):
        for addr in self.addresses:
            if addr.is_default and addr is not keep:
                addr.is_default = False

    def _announce_default_change(self, previous, new):
        self.raise_(
            DefaultAddressChanged(
                owner_id=str(self.owner_id),
                previous_address_id=str(previous.id) if previous else None,
                new_address_id=str(new.id) if new else None,
            )
        )

    def set_default_address(self, address_id):
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"address_id": [f"Address {address_id} not found"]})

        previous = self.default_address

        with atomic_change(self):
            self._clear_defaults(keep=address)
            address.is_default = True
            address.updated_at = datetime.now(UTC)

        if previous is not address:
            self._announce_default_change(previous, address)
        return address

    # -------------------------------------------------------------------
    # Address lifecycle
    # -------------------------------------------------------------------
    def add_address(
        self,
        street,
        city,
        state,
        postal_code,
        country,
        additional_info=None,
        is_default=False,
    ):
        maximum = setting("max_addresses")
        if len(self.addresses) >= maximum:
            raise ValidationError({"addresses": [f"Maximum {maximum} addresses allowed"]})

        previous = self.default_address
        now = datetime.now(UTC)

        with atomic_change(self):
            if is_default:
                self._clear_defaults()

            address = Address(
                street=street,
                additional_info=additional_info,
                city=city,
                state=state,
                postal_code=normalize_postal_code(postal_code),
                country=country,
                is_default=bool(is_default),
                created_at=now,
                updated_at=now,
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                owner_id=str(self.owner_id),
                address_id=str(address.id),
                city=city,
                country=country,
                is_default=bool(is_default),
            )
        )
        if is_default:
            self._announce_default_change(previous, address)
        return address

    def update_address(self, address_id, is_default=None, **fields):
        """Edit an address in place.

        Other defaults are only cleared when this address goes from
        non-default to default; re-sending ``is_default=True`` for the current
        default leaves every other address untouched.
        """
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"address_id": [f"Address {address_id} not found"]})

        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}
        if "postal_code" in changes:
            changes["postal_code"] = normalize_postal_code(changes["postal_code"])

        previous = self.default_address
        becomes_default = is_default is True and not address.is_default
        loses_default = is_default is False and address.is_default

        with atomic_change(self):
            if becomes_default:
                self._clear_defaults(keep=address)
                address.is_default = True
            elif loses_default:
                address.is_default = False

            for field, value in changes.items():
                setattr(address, field, value)
            address.updated_at = datetime.now(UTC)

        self.raise_(
            AddressUpdated(
                owner_id=str(self.owner_id),
                address_id=str(address.id),
                changed_fields=",".join(sorted(changes)),
            )
        )
        if becomes_default or loses_default:
            self._announce_default_change(previous, self.default_address)
        return address

    def remove_address(self, address_id):
        """Delete an address. Returns the promoted default, if one was promoted.

        When the default goes and others remain, the most recently created
        remaining address becomes the default.
        """
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"address_id": [f"Address {address_id} not found"]})

        was_default = bool(address.is_default)
        promoted = None

        with atomic_change(self):
            self.remove_addresses(address)

            if was_default and self.addresses:
                promoted = max(
                    enumerate(self.addresses),
                    key=lambda pair: (_created_ts(pair[1]), pair[0]),
                )[1]
                promoted.is_default = True
                promoted.updated_at = datetime.now(UTC)

        self.raise_(
            AddressRemoved(
                owner_id=str(self.owner_id),
                address_id=str(address_id),
                was_default=was_default,
            )
        )
        if was_default:
            self._announce_default_change(address, promoted)
        return promoted
