from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.catalog.domain.models import Product, ProductComment
from marketplace.tests.factories import (
    AdminFactory,
    CategoryFactory,
    JobFactory,
    ProductCommentFactory,
    ProductFactory,
    SellerFactory,
    UserFactory,
)


class ProductViewsIntegrationTest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.seller = SellerFactory()
        self.buyer = UserFactory()
        self.category = CategoryFactory(name="Electronics", slug="electronics")
        self.list_url = reverse("marketplace:product-list")

    def detail_url(self, product):
        return reverse("marketplace:product-detail", args=[product.id])

    def test_list_is_public_and_paginated(self):
        ProductFactory.create_batch(3, seller=self.seller)
        ProductFactory(seller=self.seller, status="inactive")

        response = self.client.get(self.list_url, {"limit": 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 3)
        self.assertEqual(response.data["page_size"], 2)
        self.assertEqual(len(response.data["results"]), 2)
        self.assertTrue(response.data["has_next"])
        self.assertIn("seller", response.data["results"][0])

    def test_list_filters(self):
        cheap = ProductFactory(seller=self.seller, price=Decimal("5.00"), category=self.category)
        ProductFactory(seller=self.seller, price=Decimal("500.00"))
        JobFactory(seller=self.seller)

        by_price = self.client.get(self.list_url, {"max_price": "10", "listing_type": "marketplace"})
        by_category = self.client.get(self.list_url, {"category": "electronics"})

        self.assertEqual([p["id"] for p in by_price.data["results"]], [str(cheap.id)])
        self.assertEqual([p["id"] for p in by_category.data["results"]], [str(cheap.id)])

    def test_create_requires_seller(self):
        payload = {"title": "Desk lamp", "price": "$1,200", "category": "electronics", "stock_quantity": 2}

        self.assertEqual(self.client.post(self.list_url, payload, format="json").status_code, 401)

        self.client.force_authenticate(user=self.buyer)
        self.assertEqual(self.client.post(self.list_url, payload, format="json").status_code, 403)

        self.client.force_authenticate(user=self.seller)
        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["price"], "1200.00")
        self.assertEqual(response.data["category"]["slug"], "electronics")
        self.assertEqual(response.data["seller"]["id"], str(self.seller.id))
        self.assertTrue(response.data["slug"])

    def test_create_validates_type_fields(self):
        self.client.force_authenticate(user=self.seller)

        response = self.client.post(
            self.list_url, {"title": "Backend developer", "listing_type": "jobs"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("job_type", response.data)
        self.assertIn("salary", response.data)

    def test_retrieve(self):
        product = ProductFactory(seller=self.seller)

        response = self.client.get(self.detail_url(product))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["title"], product.title)
        self.assertTrue(response.data["is_purchasable"])

    def test_retrieve_unknown(self):
        response = self.client.get(reverse("marketplace:product-detail", args=["0" * 32]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn("detail", response.data)

    def test_owner_updates_and_others_cannot(self):
        product = ProductFactory(seller=self.seller)

        self.client.force_authenticate(user=SellerFactory())
        forbidden = self.client.patch(self.detail_url(product), {"title": "Hijacked"}, format="json")
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.seller)
        response = self.client.patch(self.detail_url(product), {"title": "Renamed lamp"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["title"], "Renamed lamp")

    def test_admin_can_delete_any_listing(self):
        product = ProductFactory(seller=self.seller)
        self.client.force_authenticate(user=AdminFactory())

        response = self.client.delete(self.detail_url(product))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(id=product.id).exists())

    def test_featured(self):
        featured = ProductFactory(seller=self.seller, featured=True)
        ProductFactory(seller=self.seller)

        response = self.client.get(reverse("marketplace:product-featured"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["id"] for p in response.data], [str(featured.id)])

    def test_mine_includes_every_status(self):
        ProductFactory(seller=self.seller)
        ProductFactory(seller=self.seller, status="sold")
        ProductFactory()
        self.client.force_authenticate(user=self.seller)

        response = self.client.get(reverse("marketplace:product-mine"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)

    def test_view_counter(self):
        product = ProductFactory(seller=self.seller)

        response = self.client.post(reverse("marketplace:product-view", args=[product.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["view_count"], 1)

    def test_like_toggle(self):
        product = ProductFactory(seller=self.seller)
        url = reverse("marketplace:product-like", args=[product.id])

        self.assertEqual(self.client.post(url).status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.buyer)
        liked = self.client.post(url)
        unliked = self.client.post(url)

        self.assertEqual(liked.data, {"likes": 1, "is_liked": True})
        self.assertEqual(unliked.data, {"likes": 0, "is_liked": False})

        self.client.post(url)
        detail = self.client.get(self.detail_url(product))
        self.assertTrue(detail.data["is_liked"])


class ProductInteractionViewsIntegrationTest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.buyer = UserFactory()
        self.product = ProductFactory()
        self.ratings_url = reverse("marketplace:product-ratings", args=[self.product.id])
        self.comments_url = reverse("marketplace:product-comments", args=[self.product.id])

    def test_rate_then_update(self):
        self.client.force_authenticate(user=self.buyer)

        created = self.client.post(self.ratings_url, {"rating": 4, "review": "Solid"}, format="json")
        updated = self.client.post(self.ratings_url, {"rating": 2}, format="json")

        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual(created.data["review"]["comment"], "Solid")
        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(updated.data["rating"], "2.0")
        self.assertEqual(updated.data["review_count"], 1)

    def test_rating_out_of_range(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(self.ratings_url, {"rating": 6}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_ratings_is_public(self):
        self.client.force_authenticate(user=self.buyer)
        self.client.post(self.ratings_url, {"rating": 5}, format="json")
        self.client.force_authenticate(user=None)

        response = self.client.get(self.ratings_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

    def test_comment_and_reply(self):
        self.client.force_authenticate(user=self.buyer)
        create_url = reverse("marketplace:comment-list")

        top = self.client.post(create_url, {"product_id": str(self.product.id), "text": "Still available?"})
        reply = self.client.post(
            create_url, {"product_id": str(self.product.id), "text": "Yes", "parent_id": top.data["id"]}
        )

        self.assertEqual(top.status_code, status.HTTP_201_CREATED)
        self.assertEqual(reply.status_code, status.HTTP_201_CREATED)
        self.assertEqual(reply.data["parent"], top.data["id"])

        listing = self.client.get(self.comments_url)
        self.assertEqual(len(listing.data), 1)
        self.assertEqual(listing.data[0]["replies"][0]["content"], "Yes")

    def test_comment_requires_auth_and_text(self):
        create_url = reverse("marketplace:comment-list")

        anonymous = self.client.post(create_url, {"product_id": str(self.product.id), "text": "Hi"})
        self.client.force_authenticate(user=self.buyer)
        empty = self.client.post(create_url, {"product_id": str(self.product.id), "text": ""})

        self.assertEqual(anonymous.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(empty.status_code, status.HTTP_400_BAD_REQUEST)

    def test_comment_like(self):
        comment = ProductCommentFactory(product=self.product)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(reverse("marketplace:comment-like", args=[comment.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["likes"], 1)
        self.assertEqual(ProductComment.objects.get(id=comment.id).like_count, 1)
