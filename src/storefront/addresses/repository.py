"""Address book look-ups."""

from protean.utils.globals import current_domain

from storefront.addresses.address_book import Address, AddressBook
from storefront.domain import storefront
from storefront.store import store_operation


@storefront.repository(part_of=AddressBook)
class AddressBookRepository:
    def for_owner(self, owner_id) -> AddressBook | None:
        with store_operation("address_book.for_owner", owner_id=str(owner_id)):
            return self._dao.query.filter(owner_id=str(owner_id)).all().first

    def address_exists(self, address_id) -> bool:
        """True when any owner's book holds ``address_id``."""
        with store_operation("address_book.address_exists", address_id=str(address_id)):
            addresses = current_domain.repository_for(Address)._dao
            return addresses.query.filter(id=str(address_id)).all().total > 0
