from decimal import Decimal

import pytest
from django.core.cache import cache

from marketplace.catalog.domain.services import CategoryService
from marketplace.models import Category
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import (
    AdminFactory,
    CategoryFactory,
    ProductFactory,
    SecondhandProductFactory,
    UserFactory,
)

SECONDHAND_FILTERS = {
    "priceRanges": [
        {"id": "under-50", "label": "Under $50", "min": 0, "max": 50},
        {"id": "50-100", "label": "$50 - $100", "min": 50, "max": 100},
        {"id": "over-100", "label": "Over $100", "min": 100, "max": None},
    ],
    "conditions": [
        {"id": "like-new", "label": "Like New"},
        {"id": "good", "label": "Good"},
        {"id": "fair", "label": "Fair"},
    ],
}


@pytest.mark.django_db
class TestCategoryService:
    @pytest.fixture(autouse=True)
    def setup(self, db):
        cache.clear()
        self.service = CategoryService()
        self.admin = AdminFactory()

    def test_list_categories_active_only_and_ordered(self):
        CategoryFactory(name="Travel", sort_order=2)
        CategoryFactory(name="Jobs", sort_order=1)
        CategoryFactory(name="Hidden", is_active=False)

        names = [c.name for c in self.service.list_categories().value]

        assert names == ["Jobs", "Travel"]

    def test_main_categories_exclude_children(self):
        parent = CategoryFactory(name="Marketplace")
        CategoryFactory(name="Phones", parent=parent)

        names = [c.name for c in self.service.list_main_categories().value]

        assert names == ["Marketplace"]

    def test_list_cache_is_invalidated_by_writes(self):
        CategoryFactory(name="Jobs")
        assert len(self.service.list_categories().value) == 1

        self.service.create_category({"name": "Travel"}, self.admin)

        assert len(self.service.list_categories().value) == 2

    def test_get_category_counts_active_listings(self):
        category = CategoryFactory(slug="phones", name="Phones")
        ProductFactory(category=category)
        ProductFactory(category=category, status="sold")

        result = self.service.get_category("phones")

        assert result.value.product_count == 1

    def test_product_count_matches_filter_total(self):
        parent = CategoryFactory(slug="secondhand", name="Secondhand", listing_type="secondhand")
        child = CategoryFactory(slug="secondhand-phones", name="Phones", parent=parent, listing_type="")
        SecondhandProductFactory(category=parent)
        SecondhandProductFactory(category=child)
        SecondhandProductFactory(category=None)

        category = self.service.get_category("secondhand").value
        options = self.service.get_filter_options("secondhand").value

        assert category.product_count == 3
        assert category.product_count == options["total"]

    def test_cached_list_reports_current_product_count(self):
        category = CategoryFactory(slug="phones", name="Phones", listing_type="")
        assert self.service.list_categories().value[0].product_count == 0

        ProductFactory(category=category)

        cached = self.service.list_categories().value
        assert cached[0].product_count == 1

    def test_get_category_not_found(self):
        assert self.service.get_category("nope").error == ErrorCodes.CATEGORY_NOT_FOUND

    def test_filter_options_counts(self):
        category = CategoryFactory(
            slug="secondhand", name="Secondhand", listing_type="secondhand", filters=SECONDHAND_FILTERS
        )
        SecondhandProductFactory(category=None, price=Decimal("20.00"), condition="good")
        SecondhandProductFactory(category=None, price=Decimal("50.00"), condition="good")
        SecondhandProductFactory(category=None, price=Decimal("150.00"), condition="fair")
        SecondhandProductFactory(category=None, price=Decimal("10.00"), condition="fair", status="sold")
        ProductFactory(category=None, price=Decimal("10.00"))

        result = self.service.get_filter_options(category.slug)

        assert result.ok
        data = result.value
        assert data["total"] == 3
        price_counts = {option["id"]: option["count"] for option in data["filters"]["priceRanges"]}
        # min inclusive, max exclusive, null max open ended
        assert price_counts == {"under-50": 1, "50-100": 1, "over-100": 1}
        condition_counts = {option["id"]: option["count"] for option in data["filters"]["conditions"]}
        assert condition_counts == {"like-new": 0, "good": 2, "fair": 1}

    def test_filter_options_include_child_category_listings(self):
        parent = CategoryFactory(
            slug="marketplace", listing_type="", filters={"conditions": [{"id": "new", "label": "New"}]}
        )
        child = CategoryFactory(slug="phones", parent=parent)
        ProductFactory(category=child, condition="new")

        data = self.service.get_filter_options("marketplace").value

        assert data["total"] == 1
        assert data["filters"]["conditions"][0]["count"] == 1

    def test_create_category_admin_only(self):
        result = self.service.create_category({"name": "Garden"}, UserFactory())
        assert result.error == ErrorCodes.PERMISSION_DENIED

    def test_create_category_generates_slug_and_rejects_duplicates(self):
        first = self.service.create_category({"name": "Home Garden"}, self.admin)
        second = self.service.create_category({"name": "Home Garden"}, self.admin)

        assert first.value.slug == "home-garden"
        assert second.error == ErrorCodes.DUPLICATE_SLUG

    def test_update_category_cannot_be_own_parent(self):
        category = CategoryFactory(slug="books")

        result = self.service.update_category("books", {"parent": category}, self.admin)

        assert result.error == ErrorCodes.INVALID_INPUT

    def test_delete_category_in_use(self):
        category = CategoryFactory(slug="books")
        ProductFactory(category=category)

        result = self.service.delete_category("books", self.admin)

        assert result.error == ErrorCodes.CATEGORY_IN_USE
        assert Category.objects.filter(slug="books").exists()

    def test_delete_empty_category(self):
        CategoryFactory(slug="books")

        assert self.service.delete_category("books", self.admin).ok
        assert not Category.objects.filter(slug="books").exists()
