"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductRegistered:
    """A product became known to the storefront."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    category = String()
    price = Float(required=True)
    stock = Integer(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Available stock was set to a counted level."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@storefront.event(part_of="Product")
class StockDecremented:
    """Units left the shelf because an order was placed."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_number = String()
    quantity = Integer(required=True)
    stock = Integer(required=True)
    sold = Integer(required=True)


@storefront.event(part_of="Product")
class ProductSoldOut:
    __version__ = 1

    product_id = Identifier(required=True)
    stock = Integer(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductActivated:
    __version__ = 1

    product_id = Identifier(required=True)
    activated_at = DateTime(required=True)
