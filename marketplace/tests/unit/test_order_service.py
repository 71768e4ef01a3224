from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core.cache import cache
from django.test import override_settings

from infrastructure.container import container
from marketplace.models import CartItem, Order, Product, SubOrder
from marketplace.services.base import ErrorCodes, service_err
from marketplace.tests.factories import (
    SHIPPING_ADDRESS,
    AdminFactory,
    CartItemFactory,
    ProductFactory,
    SellerFactory,
    UserFactory,
)


PRICING_SETTINGS = {
    "TAX_RATES": {"default": Decimal("0.10")},
    "SHIPPING_FLAT_RATE": Decimal("5.00"),
    "FREE_SHIPPING_THRESHOLD": Decimal("100.00"),
    "MARKETPLACE_COUPONS": {"SAVE10": "0.10"},
}


@pytest.mark.django_db
class TestOrderService:
    @pytest.fixture(autouse=True)
    def setup(self, db):
        cache.clear()
        container.reset()
        with override_settings(**PRICING_SETTINGS):
            self.service = container.order_service()
        self.customer = UserFactory()
        self.seller_a = SellerFactory()
        self.seller_b = SellerFactory()
        self.product_a = ProductFactory(seller=self.seller_a, price=Decimal("10.00"), stock_quantity=5)
        self.product_b = ProductFactory(seller=self.seller_b, price=Decimal("20.00"), stock_quantity=5)
        yield
        container.reset()

    def fill_cart(self):
        CartItemFactory(cart__user=self.customer, product=self.product_a, quantity=2)
        CartItemFactory(cart__user=self.customer, product=self.product_b, quantity=1)

    def place_order(self, **kwargs):
        return self.service.create_order(self.customer, dict(SHIPPING_ADDRESS), **kwargs)

    def test_create_order_splits_by_seller(self):
        self.fill_cart()

        result = self.place_order(payment_method="cod")

        assert result.ok
        order = result.value
        assert order.order_number.startswith("ORD-")
        assert order.payment_method == "cod"
        assert order.overall_status == "pending"
        sub_orders = {s.seller_id: s for s in order.sub_orders.all()}
        assert set(sub_orders) == {self.seller_a.id, self.seller_b.id}
        assert sub_orders[self.seller_a.id].subtotal == Decimal("20.00")
        assert sub_orders[self.seller_b.id].subtotal == Decimal("20.00")

    def test_create_order_totals_server_side(self):
        self.fill_cart()

        order = self.place_order(coupon_code="SAVE10").value

        # subtotal 40, discount 4, shipping 5, tax 10% of 36
        assert order.subtotal == Decimal("40.00")
        assert order.discount == Decimal("4.00")
        assert order.shipping == Decimal("5.00")
        assert order.tax == Decimal("3.60")
        assert order.total == Decimal("44.60")
        assert order.coupon_code == "SAVE10"

    def test_create_order_reserves_stock_and_clears_cart(self):
        self.fill_cart()

        self.place_order()

        assert Product.objects.get(id=self.product_a.id).stock_quantity == 3
        assert Product.objects.get(id=self.product_b.id).stock_quantity == 4
        assert not CartItem.objects.filter(cart__user=self.customer).exists()

    def test_order_items_snapshot_cart_price(self):
        self.fill_cart()
        Product.objects.filter(id=self.product_a.id).update(price=Decimal("99.00"))

        order = self.place_order().value

        item = order.sub_orders.get(seller=self.seller_a).items.get()
        assert item.price == Decimal("10.00")
        assert item.total == Decimal("20.00")
        assert item.title == self.product_a.title

    def test_empty_cart(self):
        assert self.place_order().error == ErrorCodes.CART_EMPTY

    def test_missing_address_field(self):
        self.fill_cart()
        address = dict(SHIPPING_ADDRESS, city="")

        result = self.service.create_order(self.customer, address)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert "city" in result.error_detail

    def test_invalid_coupon_leaves_stock_untouched(self):
        self.fill_cart()

        result = self.place_order(coupon_code="NOPE")

        assert result.error == ErrorCodes.INVALID_COUPON
        assert Product.objects.get(id=self.product_a.id).stock_quantity == 5
        assert not Order.objects.exists()

    def test_cart_with_insufficient_stock_is_rejected(self):
        CartItemFactory(cart__user=self.customer, product=self.product_a, quantity=2)
        Product.objects.filter(id=self.product_a.id).update(stock_quantity=1)

        result = self.place_order()

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert not Order.objects.exists()

    def test_reservation_failure_rolls_back_earlier_reservations(self):
        self.fill_cart()
        inventory = self.service.inventory_service
        real_reserve = inventory.reserve_stock

        def reserve(product_id, quantity, order_number=""):
            if product_id == str(self.product_b.id):
                return service_err(ErrorCodes.INSUFFICIENT_STOCK, "gone")
            return real_reserve(product_id, quantity, order_number)

        with patch.object(inventory, "reserve_stock", side_effect=reserve):
            result = self.place_order()

        assert result.error == ErrorCodes.INSUFFICIENT_STOCK
        assert Product.objects.get(id=self.product_a.id).stock_quantity == 5
        assert CartItem.objects.filter(cart__user=self.customer).count() == 2

    def test_order_visibility(self):
        self.fill_cart()
        order = self.place_order().value

        assert self.service.get_order(order.id, self.customer).ok
        assert self.service.get_order(order.id, self.seller_a).ok
        assert self.service.get_order(order.id, AdminFactory()).ok
        assert self.service.get_order(order.id, UserFactory()).error == ErrorCodes.NOT_ORDER_OWNER

    def test_sub_order_updates_roll_up(self):
        self.fill_cart()
        order = self.place_order().value
        sub_a = order.sub_orders.get(seller=self.seller_a)
        sub_b = order.sub_orders.get(seller=self.seller_b)

        shipped = self.service.update_sub_order_status(
            order.id, sub_a.id, self.seller_a, "shipped", tracking_number="1Z999"
        )
        assert shipped.value.overall_status == "partially_shipped"
        sub_a.refresh_from_db()
        assert sub_a.tracking_number == "1Z999"
        assert sub_a.shipped_at is not None

        delivered = self.service.update_sub_order_status(order.id, sub_b.id, self.seller_b, "delivered")
        assert delivered.value.overall_status == "partially_shipped"

        done = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "delivered")
        assert done.value.overall_status == "delivered"

    def test_delivered_next_to_pending_stays_pending(self):
        self.fill_cart()
        order = self.place_order().value
        sub_b = order.sub_orders.get(seller=self.seller_b)

        result = self.service.update_sub_order_status(order.id, sub_b.id, self.seller_b, "delivered")

        assert result.value.overall_status == "pending"
        assert result.value.can_cancel

    def test_confirmed_sub_order_leaves_order_pending(self):
        self.fill_cart()
        order = self.place_order().value
        sub_a = order.sub_orders.get(seller=self.seller_a)

        confirmed = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "confirmed")
        assert confirmed.value.overall_status == "pending"

        processing = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "processing")
        assert processing.value.overall_status == "processing"

    def test_sub_order_update_checks_seller_and_final_state(self):
        self.fill_cart()
        order = self.place_order().value
        sub_a = order.sub_orders.get(seller=self.seller_a)

        wrong_seller = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_b, "shipped")
        invalid = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "lost")
        self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "delivered")
        final = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "shipped")

        assert wrong_seller.error == ErrorCodes.PERMISSION_DENIED
        assert invalid.error == ErrorCodes.INVALID_STATUS
        assert final.error == ErrorCodes.INVALID_ORDER_STATE

    def test_cancelling_sub_order_releases_its_stock(self):
        self.fill_cart()
        order = self.place_order().value
        sub_a = order.sub_orders.get(seller=self.seller_a)

        result = self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "cancelled")

        assert result.value.overall_status == "pending"
        assert Product.objects.get(id=self.product_a.id).stock_quantity == 5

    def test_cancel_order(self):
        self.fill_cart()
        order = self.place_order().value

        result = self.service.cancel_order(order.id, self.customer)

        assert result.ok
        assert result.value.overall_status == "cancelled"
        assert result.value.cancelled_at is not None
        assert set(SubOrder.objects.filter(order=order).values_list("status", flat=True)) == {"cancelled"}
        assert Product.objects.get(id=self.product_a.id).stock_quantity == 5
        assert Product.objects.get(id=self.product_b.id).stock_quantity == 5

    def test_cancel_after_shipping_is_refused(self):
        self.fill_cart()
        order = self.place_order().value
        sub_a = order.sub_orders.get(seller=self.seller_a)
        self.service.update_sub_order_status(order.id, sub_a.id, self.seller_a, "shipped")

        result = self.service.cancel_order(order.id, self.customer)

        assert result.error == ErrorCodes.ORDER_CANNOT_CANCEL

    def test_cancel_someone_elses_order(self):
        self.fill_cart()
        order = self.place_order().value

        assert self.service.cancel_order(order.id, self.seller_a).error == ErrorCodes.NOT_ORDER_OWNER

    def test_render_invoice(self):
        self.fill_cart()
        order = self.place_order().value

        result = self.service.render_invoice(order.id, self.customer)

        assert result.ok
        assert result.value["filename"] == f"invoice-{order.order_number}.html"
        assert order.order_number in result.value["content"]
        assert self.service.render_invoice(order.id, self.seller_a).error == ErrorCodes.NOT_ORDER_OWNER

    def test_seller_orders_only_show_own_sub_orders(self):
        self.fill_cart()
        self.place_order()

        page = self.service.list_seller_orders(self.seller_a).value

        assert page["count"] == 1
        assert page["results"][0].seller_id == self.seller_a.id
