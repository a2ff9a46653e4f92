"""Address book management: commands and handler.

Every command is scoped to the calling owner. An address id that is not in
the caller's own book is refused with ``Unauthorized`` whether or not it
exists elsewhere, so nothing about other owners' data is touched or revealed.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.addresses.address_book import AddressBook
from storefront.domain import storefront
from storefront.ownership import deny

logger = structlog.get_logger(__name__)


@storefront.command(part_of="AddressBook")
class AddAddress:
    owner_id: Identifier(required=True)
    street: String(required=True, max_length=100)
    additional_info: String(max_length=100)
    city: String(required=True, max_length=50)
    state: String(required=True, max_length=50)
    postal_code: String(required=True, max_length=20)
    country: String(required=True, max_length=50)
    is_default: Boolean(default=False)


@storefront.command(part_of="AddressBook")
class UpdateAddress:
    owner_id: Identifier(required=True)
    address_id: Identifier(required=True)
    street: String(max_length=100)
    additional_info: String(max_length=100)
    city: String(max_length=50)
    state: String(max_length=50)
    postal_code: String(max_length=20)
    country: String(max_length=50)
    is_default: Boolean()


@storefront.command(part_of="AddressBook")
class RemoveAddress:
    owner_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command(part_of="AddressBook")
class SetDefaultAddress:
    owner_id: Identifier(required=True)
    address_id: Identifier(required=True)


def owned_book(repo, owner_id, address_id) -> AddressBook:
    """The owner's book holding ``address_id``.

    Raises ``ObjectNotFoundError`` when no book holds the address and
    ``Unauthorized`` when it belongs to another owner.
    """
    book = repo.for_owner(owner_id)
    if book is not None and book.find_address(address_id) is not None:
        return book
    if not repo.address_exists(address_id):
        raise ObjectNotFoundError("Address not found")
    deny("address", address_id, owner_id)


@storefront.command_handler(part_of=AddressBook)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        """Returns the new address id."""
        repo = current_domain.repository_for(AddressBook)
        book = repo.for_owner(command.owner_id) or AddressBook.open(command.owner_id)

        address = book.add_address(
            street=command.street,
            additional_info=command.additional_info,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            country=command.country,
            is_default=bool(command.is_default),
        )
        repo.add(book)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(AddressBook)
        book = owned_book(repo, command.owner_id, command.address_id)

        book.update_address(
            command.address_id,
            is_default=command.is_default,
            street=command.street,
            additional_info=command.additional_info,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            country=command.country,
        )
        repo.add(book)

    @handle(RemoveAddress)
    def remove_address(self, command):
        """Returns ``{"new_default_set": bool, "new_default_id": str | None}``."""
        repo = current_domain.repository_for(AddressBook)
        book = owned_book(repo, command.owner_id, command.address_id)

        promoted = book.remove_address(command.address_id)
        repo.add(book)

        if promoted is not None:
            logger.info(
                "address.default_promoted",
                owner_id=str(command.owner_id),
                address_id=str(promoted.id),
            )
        return {
            "new_default_set": promoted is not None,
            "new_default_id": str(promoted.id) if promoted else None,
        }

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(AddressBook)
        book = owned_book(repo, command.owner_id, command.address_id)
        book.set_default_address(command.address_id)
        repo.add(book)


def list_addresses(owner_id) -> list:
    """The owner's addresses, default first."""
    book = current_domain.repository_for(AddressBook).for_owner(owner_id)
    return book.listing() if book else []
