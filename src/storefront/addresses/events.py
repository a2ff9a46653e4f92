"""Domain events for the AddressBook aggregate."""

from protean.fields import Boolean, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="AddressBook")
class AddressAdded:
    """A new address was added to an owner's address book."""

    __version__ = 1

    owner_id: Identifier(required=True)
    address_id: Identifier(required=True)
    city: String(required=True)
    country: String(required=True)
    is_default: Boolean(required=True)


@storefront.event(part_of="AddressBook")
class AddressUpdated:
    """An existing address was edited in place."""

    __version__ = 1

    owner_id: Identifier(required=True)
    address_id: Identifier(required=True)
    changed_fields: String()  # comma separated


@storefront.event(part_of="AddressBook")
class AddressRemoved:
    __version__ = 1

    owner_id: Identifier(required=True)
    address_id: Identifier(required=True)
    was_default: Boolean(required=True)


@storefront.event(part_of="AddressBook")
class DefaultAddressChanged:
    """A different address (or none) became the owner's default."""

    __version__ = 1

    owner_id: Identifier(required=True)
    previous_address_id: Identifier()
    new_address_id: Identifier()
