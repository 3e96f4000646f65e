"""Tests for the order aggregate: history entries and price totals."""

from bakery.database.models import (
    Customer,
    NOT_AVAILABLE_STATES,
    Order,
    OrderItem,
    OrderState,
    Product,
)
from bakery.database.models.customer import is_valid_phone_number
from bakery.database.models.order import ORDER_PLACED_MESSAGE
from tests.factories import make_order, make_product, make_user


class TestOrderCreate:
    def test_new_order_defaults(self):
        baker = make_user()

        order = Order.create(baker)

        assert order.state == OrderState.NEW
        assert order.items == []
        assert isinstance(order.customer, Customer)
        assert len(order.history) == 1
        entry = order.history[0]
        assert entry.message == ORDER_PLACED_MESSAGE
        assert entry.new_state == OrderState.NEW
        assert entry.created_by is baker
        assert entry.timestamp is not None


class TestOrderHistory:
    def test_state_change_is_recorded(self):
        baker = make_user()
        order = Order.create(baker)

        order.change_state(baker, OrderState.CONFIRMED)

        assert order.state == OrderState.CONFIRMED
        assert [entry.message for entry in order.history] == [
            "Order placed",
            "Order CONFIRMED",
        ]
        assert order.history[-1].new_state == OrderState.CONFIRMED

    def test_same_state_is_not_recorded(self):
        baker = make_user()
        order = Order.create(baker)

        order.change_state(baker, OrderState.NEW)

        assert len(order.history) == 1

    def test_state_from_none_is_not_recorded(self):
        baker = make_user()
        order = Order.create(baker)
        order.state = None

        order.change_state(baker, OrderState.READY)

        assert order.state == OrderState.READY
        assert len(order.history) == 1

    def test_state_to_none_is_not_recorded(self):
        baker = make_user()
        order = Order.create(baker)

        order.change_state(baker, None)

        assert order.state is None
        assert len(order.history) == 1

    def test_one_entry_per_actual_change(self):
        baker = make_user()
        order = Order.create(baker)
        steps = [
            (OrderState.CONFIRMED, 2),
            (OrderState.CONFIRMED, 2),
            (OrderState.READY, 3),
            (OrderState.PROBLEM, 4),
            (OrderState.PROBLEM, 4),
            (None, 4),
            (OrderState.READY, 4),
            (OrderState.DELIVERED, 5),
            (OrderState.NEW, 6),
        ]

        for state, expected_length in steps:
            order.change_state(baker, state)
            assert order.state == state
            assert len(order.history) == expected_length

        assert [entry.new_state for entry in order.history] == [
            OrderState.NEW,
            OrderState.CONFIRMED,
            OrderState.READY,
            OrderState.PROBLEM,
            OrderState.DELIVERED,
            OrderState.NEW,
        ]

    def test_comment_keeps_current_state(self):
        baker = make_user()
        order = make_order(state=OrderState.READY)

        entry = order.add_history_item(baker, "Customer called")

        assert entry.new_state == OrderState.READY
        assert order.state == OrderState.READY
        assert order.history[-1] is entry

    def test_history_positions_follow_insertion_order(self):
        baker = make_user()
        order = Order.create(baker)
        order.add_history_item(baker, "first")
        order.add_history_item(baker, "second")

        assert [entry.position for entry in order.history] == [0, 1, 2]


class TestTotalPrice:
    def test_item_total(self):
        assert OrderItem(product=make_product(price=795), quantity=3).total_price == 2385

    def test_item_without_product_is_free(self):
        assert OrderItem(quantity=3).total_price == 0

    def test_item_without_quantity_is_free(self):
        assert OrderItem(product=make_product(), quantity=None).total_price == 0

    def test_item_with_unpriced_product_is_free(self):
        assert OrderItem(product=Product(name="Sample"), quantity=3).total_price == 0

    def test_order_total_sums_items(self):
        order = make_order(
            items=[
                OrderItem(product=make_product("Bun", 795), quantity=2),
                OrderItem(product=make_product("Pie", 1250), quantity=1),
                OrderItem(quantity=4),
            ]
        )

        assert order.total_price == 2840

    def test_empty_order_total_is_zero(self):
        assert Order.create(make_user()).total_price == 0


class TestOrderState:
    def test_display_name(self):
        assert OrderState.PROBLEM.display_name == "Problem"

    def test_not_available_states(self):
        assert NOT_AVAILABLE_STATES == {
            OrderState.NEW,
            OrderState.CONFIRMED,
            OrderState.PROBLEM,
        }


class TestPhoneNumber:
    def test_accepts_common_formats(self):
        for number in ("+358 40 1234567", "040-123-4567", "0401234567"):
            assert is_valid_phone_number(number), number

    def test_rejects_bad_numbers(self):
        for number in (None, "", "call me", "+358 40 1234567 1234567 12"):
            assert not is_valid_phone_number(number), number
