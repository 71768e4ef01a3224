import uuid
from decimal import Decimal

import pytest

from marketplace.catalog.domain.services import ReviewService
from marketplace.models import ProductReview
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import ProductFactory, ProductReviewFactory, UserFactory


@pytest.mark.django_db
class TestReviewService:
    @pytest.fixture(autouse=True)
    def setup(self, db):
        self.service = ReviewService()
        self.product = ProductFactory()

    def test_rate_product_creates_review_and_updates_aggregate(self):
        result = self.service.rate_product(UserFactory(), self.product.id, 4, "Solid")

        assert result.ok
        assert result.value["created"] is True
        assert result.value["rating"] == Decimal("4.0")
        assert result.value["review_count"] == 1

    def test_rating_again_replaces_previous(self):
        user = UserFactory()
        self.service.rate_product(user, self.product.id, 2)

        result = self.service.rate_product(user, self.product.id, 5, "Changed my mind")

        assert result.value["created"] is False
        assert ProductReview.objects.filter(product=self.product, reviewer=user).count() == 1
        self.product.refresh_from_db()
        assert self.product.rating == Decimal("5.0")
        assert self.product.review_count == 1

    def test_average_rounds_half_up_to_one_decimal(self):
        ProductReviewFactory(product=self.product, rating=4)
        ProductReviewFactory(product=self.product, rating=4)
        ProductReviewFactory(product=self.product, rating=5)
        ProductReviewFactory(product=self.product, rating=4)

        self.service.update_product_rating(self.product)

        # 17 / 4 = 4.25
        assert self.product.rating == Decimal("4.3")
        assert self.product.review_count == 4

    @pytest.mark.parametrize("rating", [0, 6, "abc"])
    def test_rejects_out_of_range_rating(self, rating):
        result = self.service.rate_product(UserFactory(), self.product.id, rating)
        assert result.error == ErrorCodes.INVALID_INPUT

    def test_rate_unknown_product(self):
        result = self.service.rate_product(UserFactory(), uuid.uuid4(), 3)
        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_list_product_ratings_paginated(self):
        ProductReviewFactory.create_batch(3, product=self.product)

        page = self.service.list_product_ratings(self.product.id, page=1, page_size=2).value

        assert page["count"] == 3
        assert len(page["results"]) == 2
