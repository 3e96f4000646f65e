"""
Product management.

Product names are unique. A duplicate name is reported with a message that
tells the user what to change instead of the generic integrity error.
"""

from bakery.core.exceptions import DataIntegrityError, UserFriendlyDataError
from bakery.database.models import Product, User
from bakery.services.crud import FilterableCrudService
from bakery.services.products.repository import ProductRepository

UNIQUE_NAME_CONSTRAINT = "uq_products_name"
DUPLICATE_NAME_MESSAGE = (
    "There is already a product with that name. "
    "Please select a unique name for the product."
)


class ProductService(FilterableCrudService[Product]):
    repository_class = ProductRepository

    def create_new(self, current_user: User) -> Product:
        return Product(price=0)

    async def save(self, current_user: User, entity: Product) -> Product:
        """
        Save a product.

        Raises:
            UserFriendlyDataError: If another product already has the name
            DataIntegrityError: If any other constraint rejected the row
        """
        try:
            return await super().save(current_user, entity)
        except DataIntegrityError as e:
            if e.context.get("constraint") != UNIQUE_NAME_CONSTRAINT:
                raise
            self.logger.info("Duplicate product name rejected", name=entity.name)
            raise UserFriendlyDataError(DUPLICATE_NAME_MESSAGE, **e.context) from e
