from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from marketplace.models import Category, Product


User = get_user_model()


class SeedMarketplaceCommandTest(TestCase):
    def run_seed(self, *args):
        out = StringIO()
        call_command("seed_marketplace", *args, stdout=out)
        return out.getvalue()

    def test_seed_creates_tree_users_and_listings(self):
        output = self.run_seed()

        self.assertIn("Seeding complete. Created 12 categories and 10 listings.", output)
        self.assertEqual(Category.objects.filter(parent__isnull=True).count(), 5)
        self.assertEqual(Category.objects.get(slug="marketplace-home-living").parent.slug, "marketplace")
        self.assertEqual(User.objects.get(email="seller1@markethub.com").role, "seller")
        self.assertTrue(User.objects.get(email="admin@markethub.com").check_password("password123"))
        self.assertEqual(Product.objects.count(), 10)
        self.assertFalse(Product.objects.filter(listing_type="jobs", price__isnull=False).exists())

    def test_seed_is_idempotent(self):
        self.run_seed()

        output = self.run_seed()

        self.assertIn("Created 0 categories and 0 listings.", output)
        self.assertEqual(Category.objects.count(), 12)
        self.assertEqual(Product.objects.count(), 10)
        self.assertEqual(User.objects.count(), 3)

    def test_categories_only(self):
        output = self.run_seed("--categories-only")

        self.assertIn("Created 12 categories.", output)
        self.assertFalse(User.objects.exists())
        self.assertFalse(Product.objects.exists())
