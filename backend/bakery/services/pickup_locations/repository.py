"""Pickup location data access."""

from typing import Optional

from sqlalchemy import select

from bakery.database.models import PickupLocation
from bakery.services.repository import CrudRepository


class PickupLocationRepository(CrudRepository[PickupLocation]):
    model = PickupLocation

    def search_columns(self):
        return (PickupLocation.name,)

    def order_by(self):
        return (PickupLocation.name, PickupLocation.id)

    async def first(self) -> Optional[PickupLocation]:
        """Location listed first, by name."""
        result = await self.session.execute(
            select(PickupLocation).order_by(*self.order_by()).limit(1)
        )
        return result.scalars().first()
