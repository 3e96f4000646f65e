"""
Integration tests for the order API endpoints.

The order service is a mock (see ``conftest.client``); these tests cover
routing, request validation, response shapes and the error notifications.
"""

import uuid
from datetime import timedelta

import pytest
from fastapi import status

from bakery.core.exceptions import (
    ConcurrentUpdateError,
    CrudErrorMessage,
    DataValidationError,
    EntityNotFoundError,
)
from bakery.database.models import OrderState
from bakery.services.orders.dashboard import DashboardData, DeliveryStats, fill
from bakery.services.orders.headers import OrderHeaderGenerator
from bakery.services.orders.service import StorefrontPage
from tests.factories import TODAY, make_order

ORDERS_URL = "/api/v1/orders"


# ============================================================================
# Test Data Factories
# ============================================================================


def order_payload(**overrides) -> dict:
    payload = {
        "due_date": str(TODAY),
        "due_time": "16:00:00",
        "pickup_location_id": str(uuid.uuid4()),
        "customer": {"full_name": "Jessica Grant", "phone_number": "+358 40 1234567"},
        "items": [{"product_id": str(uuid.uuid4()), "quantity": 2}],
    }
    payload.update(overrides)
    return payload


# ============================================================================
# Storefront Listing
# ============================================================================


class TestListOrders:
    def test_cards_carry_band_headers(self, client, order_service):
        today, later, upcoming = (
            make_order(TODAY),
            make_order(TODAY),
            make_order(TODAY + timedelta(days=14)),
        )
        headers = OrderHeaderGenerator(clock=lambda: TODAY)
        headers.reset(False)
        headers.assign([today, later, upcoming])
        order_service.storefront.return_value = StorefrontPage(
            orders=[today, later, upcoming], total=3, headers=headers
        )

        response = client.get(ORDERS_URL, params={"filter": "jess", "page": 0, "size": 10})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["total"] == 3
        assert body["size"] == 10
        cards = body["items"]
        assert cards[0]["header"] == {"main": "Today", "secondary": "Wed, Mar 6"}
        assert cards[0]["starts_band"] is True
        assert cards[1]["starts_band"] is False
        assert cards[2]["header"]["main"] == "Upcoming"
        assert cards[0]["customer_name"] == "Jessica Grant"
        assert cards[0]["items"] == [{"product_name": "Strawberry Bun", "quantity": 2}]
        assert cards[0]["total_price"] == 1590

        args = order_service.storefront.await_args.args
        assert args[0] == "jess"
        assert args[1] is False

    def test_page_size_is_capped(self, client, order_service):
        order_service.storefront.return_value = StorefrontPage(
            orders=[], total=0, headers=OrderHeaderGenerator()
        )

        response = client.get(ORDERS_URL, params={"size": 10_000})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["size"] == 200

    def test_requires_authentication(self, anonymous_client):
        response = anonymous_client.get(ORDERS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# ============================================================================
# Single Orders
# ============================================================================


class TestOrderEndpoints:
    def test_new_order_template(self, client, order_service, barista):
        template = make_order()
        template.id = None
        template.version = None
        order_service.create_new.return_value = template

        response = client.get(f"{ORDERS_URL}/new")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] is None
        assert response.json()["state"] == "new"

    def test_get_order_includes_history(self, client, order_service):
        order = make_order()
        order_service.load.return_value = order

        response = client.get(f"{ORDERS_URL}/{order.id}")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["id"] == str(order.id)
        assert body["history"][0]["message"] == "Order placed"
        assert body["history"][0]["created_by"]["first_name"] == "Malin"
        assert body["items"][0]["total_price"] == 1590

    def test_create_order(self, client, order_service):
        order = make_order()
        order_service.save_order.return_value = order

        response = client.post(ORDERS_URL, json=order_payload())

        assert response.status_code == status.HTTP_201_CREATED
        args = order_service.save_order.await_args.args
        assert args[1] is None
        assert args[2].customer.full_name == "Jessica Grant"

    def test_update_passes_version(self, client, order_service):
        order = make_order()
        order_service.save_order.return_value = order

        response = client.put(f"{ORDERS_URL}/{order.id}", json=order_payload(version=4))

        assert response.status_code == status.HTTP_200_OK
        assert order_service.save_order.await_args.args[2].version == 4

    def test_delete_order(self, client, order_service, barista):
        order_id = uuid.uuid4()

        response = client.delete(f"{ORDERS_URL}/{order_id}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        order_service.delete_by_id.assert_awaited_once_with(barista, order_id)

    def test_add_comment(self, client, order_service, barista):
        order = make_order()
        order_service.add_comment.return_value = order

        response = client.post(f"{ORDERS_URL}/{order.id}/comments", json={"message": "Call first"})

        assert response.status_code == status.HTTP_200_OK
        order_service.add_comment.assert_awaited_once_with(barista, order.id, "Call first")

    def test_change_state(self, client, order_service, barista):
        order = make_order(state=OrderState.READY)
        order_service.change_state.return_value = order

        response = client.post(
            f"{ORDERS_URL}/{order.id}/state", json={"state": "ready", "version": 1}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["state"] == "ready"
        order_service.change_state.assert_awaited_once_with(
            barista, order.id, OrderState.READY, 1
        )


# ============================================================================
# Error Notifications
# ============================================================================


class TestErrorNotifications:
    def test_not_found(self, client, order_service):
        order_service.load.side_effect = EntityNotFoundError(model="Order")

        response = client.get(f"{ORDERS_URL}/{uuid.uuid4()}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == CrudErrorMessage.ENTITY_NOT_FOUND
        assert body["persistent"] is False

    def test_concurrent_update_is_persistent(self, client, order_service):
        order_service.save_order.side_effect = ConcurrentUpdateError()

        response = client.put(f"{ORDERS_URL}/{uuid.uuid4()}", json=order_payload(version=1))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["persistent"] is True
        assert response.json()["message"] == CrudErrorMessage.CONCURRENT_UPDATE

    def test_service_validation_error_lists_fields(self, client, order_service):
        order_service.save_order.side_effect = DataValidationError(fields=["items.0"])

        response = client.post(ORDERS_URL, json=order_payload())

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["fields"] == ["items.0"]

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"items": []}, "items"),
            ({"customer": {"full_name": "Jessica Grant", "phone_number": "abc"}}, "customer.phone_number"),
            ({"items": [{"product_id": str(uuid.uuid4()), "quantity": 0}]}, "items.0.quantity"),
        ],
    )
    def test_request_validation(self, client, order_service, overrides, field):
        response = client.post(ORDERS_URL, json=order_payload(**overrides))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["message"] == CrudErrorMessage.REQUIRED_FIELDS_MISSING
        assert field in body["fields"]
        order_service.save_order.assert_not_called()

    def test_state_change_requires_version(self, client, order_service):
        response = client.post(f"{ORDERS_URL}/{uuid.uuid4()}/state", json={"state": "ready"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["fields"] == ["version"]
        order_service.change_state.assert_not_called()

    def test_response_carries_request_id(self, client, order_service):
        order_service.load.side_effect = EntityNotFoundError()

        response = client.get(
            f"{ORDERS_URL}/{uuid.uuid4()}", headers={"X-Request-ID": "req-42"}
        )

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["request_id"] == "req-42"


# ============================================================================
# Dashboard
# ============================================================================


class TestDashboardEndpoint:
    def test_defaults_to_current_month(self, client, order_service):
        order_service.get_dashboard_data.return_value = DashboardData(
            delivery_stats=DeliveryStats(),
            deliveries_this_month=fill(31, []),
            deliveries_this_year=fill(12, []),
            sales_per_month=[[None] * 12 for _ in range(3)],
        )

        response = client.get("/api/v1/dashboard")

        assert response.status_code == status.HTTP_200_OK
        order_service.get_dashboard_data.assert_awaited_once_with(TODAY.month, TODAY.year)

    def test_rejects_invalid_month(self, client, order_service):
        response = client.get("/api/v1/dashboard", params={"month": 13})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "month" in response.json()["fields"]
