from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.catalog.domain.models import Category
from marketplace.tests.factories import (
    AdminFactory,
    CategoryFactory,
    SecondhandProductFactory,
    SellerFactory,
)


class CategoryViewsIntegrationTest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = AdminFactory()
        self.parent = CategoryFactory(
            name="Secondhand",
            slug="secondhand",
            listing_type="secondhand",
            sort_order=1,
            filters={
                "conditions": [{"id": "new", "label": "New"}, {"id": "good", "label": "Good"}],
                "priceRanges": [
                    {"id": "under-50", "label": "Under $50", "min": 0, "max": 50},
                    {"id": "50-plus", "label": "$50+", "min": 50, "max": None},
                ],
            },
        )
        self.child = CategoryFactory(name="Phones", slug="secondhand-phones", parent=self.parent, sort_order=2)
        self.list_url = reverse("marketplace:category-list")

    def test_list_and_main(self):
        listing = self.client.get(self.list_url)
        main = self.client.get(reverse("marketplace:category-main"))

        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual([c["slug"] for c in listing.data], ["secondhand", "secondhand-phones"])
        self.assertEqual([c["slug"] for c in main.data], ["secondhand"])
        self.assertEqual(main.data[0]["subcategories"][0]["slug"], "secondhand-phones")

    def test_retrieve_by_slug(self):
        response = self.client.get(reverse("marketplace:category-detail", args=["secondhand-phones"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["parent"], "secondhand")

    def test_retrieve_unknown_slug(self):
        response = self.client.get(reverse("marketplace:category-detail", args=["nothing-here"]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_filter_counts(self):
        seller = SellerFactory()
        SecondhandProductFactory(seller=seller, category=self.parent, condition="new", price="20.00")
        SecondhandProductFactory(seller=seller, category=self.child, condition="good", price="50.00")

        response = self.client.get(reverse("marketplace:category-filters", args=["secondhand"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total"], 2)
        conditions = {option["id"]: option["count"] for option in response.data["filters"]["conditions"]}
        prices = {option["id"]: option["count"] for option in response.data["filters"]["priceRanges"]}
        self.assertEqual(conditions, {"new": 1, "good": 1})
        self.assertEqual(prices, {"under-50": 1, "50-plus": 1})

    def test_writes_are_admin_only(self):
        payload = {"name": "Vinyl Records", "listing_type": "secondhand", "parent": "secondhand"}

        self.client.force_authenticate(user=SellerFactory())
        self.assertEqual(self.client.post(self.list_url, payload, format="json").status_code, 403)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["slug"], "vinyl-records")
        self.assertEqual(response.data["parent"], "secondhand")

    def test_duplicate_slug(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(self.list_url, {"name": "Secondhand"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        self.client.force_authenticate(user=self.admin)
        detail_url = reverse("marketplace:category-detail", args=["secondhand-phones"])

        updated = self.client.patch(detail_url, {"description": "Used phones"}, format="json")
        deleted = self.client.delete(detail_url)

        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(updated.data["description"], "Used phones")
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Category.objects.filter(slug="secondhand-phones").exists())

    def test_delete_category_in_use(self):
        SecondhandProductFactory(category=self.child)
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(reverse("marketplace:category-detail", args=["secondhand-phones"]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
