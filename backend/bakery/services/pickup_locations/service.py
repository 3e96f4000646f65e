"""Pickup location management."""

from bakery.core.exceptions import EntityNotFoundError
from bakery.database.models import PickupLocation, User
from bakery.services.crud import FilterableCrudService
from bakery.services.pickup_locations.repository import PickupLocationRepository


class PickupLocationService(FilterableCrudService[PickupLocation]):
    repository_class = PickupLocationRepository

    def create_new(self, current_user: User) -> PickupLocation:
        return PickupLocation()

    async def get_default(self) -> PickupLocation:
        """
        Location preselected for new orders.

        Raises:
            EntityNotFoundError: If no location has been set up yet
        """
        location = await self.repository.first()
        if location is None:
            raise EntityNotFoundError(model="PickupLocation")
        return location
