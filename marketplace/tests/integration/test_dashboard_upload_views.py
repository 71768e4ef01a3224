from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.tests.factories import (
    AdminFactory,
    OrderFactory,
    ProductFactory,
    SellerFactory,
    SubOrderFactory,
    UserFactory,
)

User = get_user_model()

# 1x1 transparent GIF
PIXEL_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00"
    b",\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


class AdminDashboardViewsIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.admin = AdminFactory()
        self.client.force_authenticate(user=self.admin)

    def test_stats(self):
        OrderFactory(total=Decimal("12.34"))

        response = self.client.get(reverse("marketplace:admin-dashboard-stats"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_orders"], 1)
        self.assertEqual(response.data["total_revenue"], "12.34")

    def test_admin_only(self):
        self.client.force_authenticate(user=SellerFactory())

        response = self.client.get(reverse("marketplace:admin-dashboard-stats"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_users_search(self):
        UserFactory(username="searchable_user")

        response = self.client.get(reverse("marketplace:admin-dashboard-users"), {"search": "searchable"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u["username"] for u in response.data["results"]], ["searchable_user"])

    def test_deactivate_and_delete_user(self):
        user = UserFactory()

        deactivated = self.client.patch(
            reverse("marketplace:admin-dashboard-user-status", kwargs={"user_id": user.id}),
            {"is_active": False},
            format="json",
        )
        deleted = self.client.delete(reverse("marketplace:admin-dashboard-delete-user", kwargs={"user_id": user.id}))

        self.assertEqual(deactivated.status_code, status.HTTP_200_OK)
        self.assertFalse(deactivated.data["is_active"])
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(id=user.id).exists())

    def test_admin_accounts_are_protected(self):
        other_admin = AdminFactory()

        response = self.client.delete(
            reverse("marketplace:admin-dashboard-delete-user", kwargs={"user_id": other_admin.id})
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_orders(self):
        OrderFactory.create_batch(2)

        response = self.client.get(reverse("marketplace:admin-dashboard-orders"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)


class SellerDashboardViewsIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.seller = SellerFactory()

    def test_stats(self):
        ProductFactory(seller=self.seller)
        SubOrderFactory(seller=self.seller, subtotal=Decimal("18.00"))
        self.client.force_authenticate(user=self.seller)

        response = self.client.get(reverse("marketplace:seller-dashboard-stats"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_listings"], 1)
        self.assertEqual(response.data["revenue"], "18.00")

    def test_buyers_are_refused(self):
        self.client.force_authenticate(user=UserFactory())

        response = self.client.get(reverse("marketplace:seller-dashboard-stats"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UploadViewsIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.url = reverse("marketplace:upload-image")

    def test_upload_image(self):
        self.client.force_authenticate(user=SellerFactory())
        image = SimpleUploadedFile("pixel.gif", PIXEL_GIF, content_type="image/gif")

        response = self.client.post(self.url, {"image": image}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["key"].startswith("markethub/products/"))
        self.assertEqual(response.data["size"], len(PIXEL_GIF))
        self.assertTrue(container.storage().exists(response.data["key"]))

    def test_upload_rejects_other_types(self):
        self.client.force_authenticate(user=SellerFactory())
        document = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")

        response = self.client.post(self.url, {"image": document}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_without_file(self):
        self.client.force_authenticate(user=SellerFactory())

        response = self.client.post(self.url, {}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_requires_authentication(self):
        response = self.client.post(self.url, {}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class MetricsViewIntegrationTest(TestCase):
    def test_prometheus_metrics(self):
        response = APIClient().get(reverse("marketplace:marketplace-metrics"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(b"marketplace_orders_placed_total", response.content)
