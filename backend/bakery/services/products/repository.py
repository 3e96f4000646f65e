"""Product data access."""

from bakery.database.models import Product
from bakery.services.repository import CrudRepository


class ProductRepository(CrudRepository[Product]):
    model = Product

    def search_columns(self):
        return (Product.name,)

    def order_by(self):
        return (Product.name, Product.id)
