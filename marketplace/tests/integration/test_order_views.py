from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.catalog.domain.models import Product
from marketplace.tests.factories import (
    SHIPPING_ADDRESS,
    CartItemFactory,
    ProductFactory,
    SellerFactory,
    UserFactory,
)


class OrderViewsIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.customer = UserFactory()
        self.seller = SellerFactory()
        self.other_seller = SellerFactory()
        self.lamp = ProductFactory(seller=self.seller, price=Decimal("30.00"), stock_quantity=4)
        self.chair = ProductFactory(seller=self.other_seller, price=Decimal("45.00"), stock_quantity=2)
        self.list_url = reverse("marketplace:order-list")

    def place_order(self, **extra):
        CartItemFactory(cart__user=self.customer, product=self.lamp, quantity=1)
        CartItemFactory(cart__user=self.customer, product=self.chair, quantity=1)
        self.client.force_authenticate(user=self.customer)
        payload = {"shipping_address": SHIPPING_ADDRESS, "payment_method": "cod", **extra}
        return self.client.post(self.list_url, payload, format="json")

    def test_create_order(self):
        response = self.place_order(coupon_code="SAVE10")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["overall_status"], "pending")
        self.assertEqual(len(response.data["sub_orders"]), 2)
        self.assertEqual(response.data["subtotal"], "75.00")
        self.assertEqual(response.data["discount"], "7.50")
        self.assertEqual(response.data["shipping"], "0.00")
        self.assertEqual(response.data["tax"], "5.40")
        self.assertEqual(response.data["total"], "72.90")
        self.assertTrue(response.data["can_cancel"])
        self.assertEqual(Product.objects.get(id=self.chair.id).stock_quantity, 1)

    def test_create_order_with_empty_cart(self):
        self.client.force_authenticate(user=self.customer)

        response = self.client.post(
            self.list_url, {"shipping_address": SHIPPING_ADDRESS, "payment_method": "card"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_order_rejects_incomplete_address(self):
        CartItemFactory(cart__user=self.customer, product=self.lamp)
        self.client.force_authenticate(user=self.customer)
        address = {key: value for key, value in SHIPPING_ADDRESS.items() if key != "zip_code"}

        response = self.client.post(self.list_url, {"shipping_address": address}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("shipping_address", response.data)

    def test_list_and_retrieve(self):
        order_id = self.place_order().data["id"]

        listing = self.client.get(self.list_url)
        detail = self.client.get(reverse("marketplace:order-detail", args=[order_id]))

        self.assertEqual(listing.data["count"], 1)
        self.assertEqual(detail.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=UserFactory())
        stranger = self.client.get(reverse("marketplace:order-detail", args=[order_id]))
        self.assertEqual(stranger.status_code, status.HTTP_403_FORBIDDEN)

    def test_seller_queue(self):
        self.place_order()

        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.get(reverse("marketplace:order-seller")).status_code, 403)

        self.client.force_authenticate(user=self.seller)
        response = self.client.get(reverse("marketplace:order-seller"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["items"][0]["title"], self.lamp.title)
        self.assertEqual(response.data["results"][0]["shipping_address"]["city"], SHIPPING_ADDRESS["city"])

    def test_seller_updates_sub_order(self):
        order = self.place_order().data
        sub_order = next(s for s in order["sub_orders"] if s["seller"]["id"] == str(self.seller.id))
        url = reverse("marketplace:order-suborders", kwargs={"pk": order["id"], "sub_order_id": sub_order["id"]})

        self.client.force_authenticate(user=self.other_seller)
        self.assertEqual(self.client.patch(url, {"status": "shipped"}, format="json").status_code, 403)

        self.client.force_authenticate(user=self.seller)
        response = self.client.patch(url, {"status": "shipped", "tracking_number": "1Z999"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["overall_status"], "partially_shipped")
        self.assertFalse(response.data["can_cancel"])

    def test_cancel(self):
        order_id = self.place_order().data["id"]

        response = self.client.post(reverse("marketplace:order-cancel", args=[order_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["overall_status"], "cancelled")
        self.assertEqual(Product.objects.get(id=self.lamp.id).stock_quantity, 4)

        again = self.client.post(reverse("marketplace:order-cancel", args=[order_id]))
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invoice(self):
        order = self.place_order().data

        response = self.client.get(reverse("marketplace:order-invoice", args=[order["id"]]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response["Content-Type"].startswith("text/html"))
        self.assertIn(f'invoice-{order["order_number"]}.html', response["Content-Disposition"])
        self.assertIn(order["order_number"], response.content.decode())
