"""Stock ledger look-ups over the Product aggregate."""

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import ProductUnavailable
from storefront.store import store_operation


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id) -> Product | None:
        """Return the product, or None when it does not exist."""
        with store_operation("product.find", product_id=str(product_id)):
            return self._dao.query.filter(id=str(product_id)).all().first

    def get_for_sale(self, product_id) -> Product:
        """Return a product that can currently be sold.

        Raises ``ProductUnavailable`` when the product is unknown, inactive or
        out of stock.
        """
        product = self.find(product_id)
        if product is None:
            raise ProductUnavailable("Product not found", product_id=str(product_id))
        if not product.is_active:
            raise ProductUnavailable("Product is not available", product_id=str(product_id))
        if product.available_stock <= 0:
            raise ProductUnavailable("Product is out of stock", product_id=str(product_id))
        return product

    def find_many(self, product_ids) -> dict[str, Product]:
        """Return the products for ``product_ids`` keyed by id; unknown ids are skipped."""
        ids = list({str(pid) for pid in product_ids})
        if not ids:
            return {}
        with store_operation("product.find_many", count=len(ids)):
            products = self._dao.query.filter(id__in=ids).all().items
        return {str(p.id): p for p in products}
