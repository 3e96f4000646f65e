"""Version 1 of the bakery API."""

from bakery.api.v1.auth import router as auth_router
from bakery.api.v1.dashboard import router as dashboard_router
from bakery.api.v1.orders import router as orders_router
from bakery.api.v1.pickup_locations import router as pickup_locations_router
from bakery.api.v1.products import router as products_router
from bakery.api.v1.users import router as users_router

routers = [
    auth_router,
    orders_router,
    dashboard_router,
    products_router,
    pickup_locations_router,
    users_router,
]

__all__ = ["routers"]
