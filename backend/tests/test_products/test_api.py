"""API tests for products and pickup locations, logged in as an admin."""

import pytest
from fastapi import status

from bakery.core.exceptions import (
    ConcurrentUpdateError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    UserFriendlyDataError,
)
from bakery.database.models import PickupLocation, Product
from bakery.services.products.service import DUPLICATE_NAME_MESSAGE
from tests.factories import make_location, make_product


@pytest.fixture
def current_user(admin):
    return admin


class TestProductEndpoints:
    def test_create(self, client, product_service, admin):
        product_service.create_new.return_value = Product(price=0)
        product_service.save.side_effect = lambda user, product: make_product(product.name, product.price)

        response = client.post("/api/v1/products", json={"name": "Pie", "price": 1250})

        assert response.status_code == status.HTTP_201_CREATED
        saved = product_service.save.await_args.args[1]
        assert saved.name == "Pie"
        assert saved.price == 1250

    @pytest.mark.parametrize("price", [-1, 100001])
    def test_price_out_of_range(self, client, price):
        response = client.post("/api/v1/products", json={"name": "Pie", "price": price})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "price" in response.json()["fields"]

    def test_duplicate_name(self, client, product_service):
        product_service.create_new.return_value = Product(price=0)
        product_service.save.side_effect = UserFriendlyDataError(DUPLICATE_NAME_MESSAGE)

        response = client.post("/api/v1/products", json={"name": "Pie", "price": 1})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == DUPLICATE_NAME_MESSAGE
        assert response.json()["persistent"] is True

    def test_update_checks_version(self, client, product_service):
        product = make_product()
        product_service.load.return_value = product
        product_service.check_version.side_effect = ConcurrentUpdateError()

        response = client.put(
            f"/api/v1/products/{product.id}", json={"name": "Pie", "price": 1, "version": 0}
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        product_service.check_version.assert_called_once_with(product, 0)
        product_service.save.assert_not_called()

    def test_delete_referenced_product(self, client, product_service):
        product_service.delete_by_id.side_effect = ReferentialIntegrityError()

        response = client.delete(f"/api/v1/products/{make_product().id}")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "referential_integrity"


class TestPickupLocationEndpoints:
    def test_default(self, client, pickup_location_service):
        pickup_location_service.get_default.return_value = make_location("Bakery")

        response = client.get("/api/v1/pickup-locations/default")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Bakery"

    def test_no_default(self, client, pickup_location_service):
        pickup_location_service.get_default.side_effect = EntityNotFoundError()

        response = client.get("/api/v1/pickup-locations/default")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_list(self, client, pickup_location_service):
        pickup_location_service.find_any_matching.return_value = [make_location("Store")]
        pickup_location_service.count_any_matching.return_value = 1

        response = client.get("/api/v1/pickup-locations", params={"filter": "sto"})

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["name"] == "Store"

    def test_create(self, client, pickup_location_service):
        pickup_location_service.create_new.return_value = PickupLocation()
        pickup_location_service.save.side_effect = lambda user, location: make_location(location.name)

        response = client.post("/api/v1/pickup-locations", json={"name": "Kiosk"})

        assert response.status_code == status.HTTP_201_CREATED
