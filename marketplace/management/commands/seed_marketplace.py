import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from marketplace.models import Category, Product


logger = logging.getLogger(__name__)

User = get_user_model()

PRICE_RANGES = [
    {"id": "under-50", "label": "Under $50", "min": 0, "max": 50},
    {"id": "50-100", "label": "$50 - $100", "min": 50, "max": 100},
    {"id": "100-500", "label": "$100 - $500", "min": 100, "max": 500},
    {"id": "over-500", "label": "Over $500", "min": 500, "max": None},
]

CATEGORIES = [
    {
        "name": "Marketplace",
        "slug": "marketplace",
        "listing_type": "marketplace",
        "description": "New products and services from verified sellers",
        "icon": "shopping-bag",
        "gradient": "bg-gradient-to-r from-blue-500 to-purple-600",
        "sort_order": 1,
        "filters": {
            "priceRanges": PRICE_RANGES,
            "conditions": [
                {"id": "new", "label": "New"},
                {"id": "like-new", "label": "Like New"},
                {"id": "good", "label": "Good"},
            ],
        },
        "children": ["Electronics", "Home & Living", "Fashion"],
    },
    {
        "name": "Secondhand",
        "slug": "secondhand",
        "listing_type": "secondhand",
        "description": "Quality used items at great prices",
        "icon": "recycle",
        "gradient": "bg-gradient-to-r from-green-500 to-teal-600",
        "sort_order": 2,
        "filters": {
            "priceRanges": PRICE_RANGES,
            "conditions": [
                {"id": "like-new", "label": "Like New"},
                {"id": "good", "label": "Good"},
                {"id": "fair", "label": "Fair"},
            ],
        },
        "children": ["Used Electronics", "Furniture"],
    },
    {
        "name": "Jobs",
        "slug": "jobs",
        "listing_type": "jobs",
        "description": "Find your next career opportunity",
        "icon": "briefcase",
        "gradient": "bg-gradient-to-r from-purple-500 to-pink-600",
        "sort_order": 3,
        "filters": {
            "jobTypes": [
                {"id": "full-time", "label": "Full-time"},
                {"id": "part-time", "label": "Part-time"},
                {"id": "contract", "label": "Contract"},
                {"id": "remote", "label": "Remote"},
            ],
            "experienceLevels": [
                {"id": "entry", "label": "Entry Level"},
                {"id": "mid", "label": "Mid Level"},
                {"id": "senior", "label": "Senior Level"},
            ],
        },
        "children": ["Technology", "Design"],
    },
    {
        "name": "Services",
        "slug": "services",
        "listing_type": "services",
        "description": "Hire local professionals",
        "icon": "wrench",
        "gradient": "bg-gradient-to-r from-yellow-500 to-orange-600",
        "sort_order": 4,
        "filters": {"priceRanges": PRICE_RANGES},
        "children": [],
    },
    {
        "name": "Travel",
        "slug": "travel",
        "listing_type": "travel",
        "description": "Plan your next adventure",
        "icon": "plane",
        "gradient": "bg-gradient-to-r from-orange-500 to-red-600",
        "sort_order": 5,
        "filters": {
            "priceRanges": PRICE_RANGES,
            "tripTypes": [
                {"id": "flights", "label": "Flights"},
                {"id": "hotels", "label": "Hotels"},
                {"id": "packages", "label": "Packages"},
                {"id": "activities", "label": "Activities"},
            ],
        },
        "children": [],
    },
]

# (category slug, owner, listing fields)
LISTINGS = [
    (
        "marketplace",
        "seller",
        {
            "title": "iPhone 15 Pro Max - 256GB",
            "price": Decimal("1199.00"),
            "stock_quantity": 10,
            "location": "Yangon, Myanmar",
            "image": "https://images.unsplash.com/photo-1592750475338-74b7b21085ab?w=500",
            "featured": True,
            "description": "Brand new iPhone 15 Pro Max with 256GB storage.",
            "condition": "new",
            "tags": ["electronics", "smartphone", "apple", "iphone"],
        },
    ),
    (
        "marketplace",
        "seller",
        {
            "title": "MacBook Air M2 - 13 inch",
            "price": Decimal("1099.00"),
            "stock_quantity": 5,
            "location": "Yangon, Myanmar",
            "image": "https://images.unsplash.com/photo-1517336714731-489689fd1ca8?w=500",
            "featured": True,
            "description": "MacBook Air with M2 chip, 8GB RAM and 256GB SSD.",
            "condition": "new",
            "tags": ["electronics", "laptop", "apple", "macbook"],
        },
    ),
    (
        "marketplace",
        "seller",
        {
            "title": "Samsung 4K Smart TV - 55 inch",
            "price": Decimal("699.00"),
            "stock_quantity": 3,
            "location": "Mandalay, Myanmar",
            "image": "https://images.unsplash.com/photo-1593359677879-a4bb92f829d1?w=500",
            "description": "Samsung 4K Ultra HD Smart TV with HDR and built-in streaming apps.",
            "condition": "new",
            "tags": ["electronics", "tv", "samsung", "4k"],
        },
    ),
    (
        "secondhand",
        "seller",
        {
            "title": "Used iPhone 13 - 128GB",
            "price": Decimal("599.00"),
            "location": "Yangon, Myanmar",
            "image": "https://images.unsplash.com/photo-1592750475338-74b7b21085ab?w=500",
            "description": "Good condition iPhone 13. Minor scratches on screen protector.",
            "condition": "good",
            "tags": ["electronics", "smartphone", "apple", "used"],
        },
    ),
    (
        "secondhand",
        "seller",
        {
            "title": "Pre-owned Gaming Laptop",
            "price": Decimal("450.00"),
            "location": "Yangon, Myanmar",
            "image": "https://images.unsplash.com/photo-1603302576837-37561b2e2302?w=500",
            "description": "Gaming laptop with RTX 3060, 16GB RAM, 512GB SSD.",
            "condition": "like-new",
            "tags": ["electronics", "laptop", "gaming", "used"],
        },
    ),
    (
        "jobs",
        "admin",
        {
            "title": "Senior Frontend Developer",
            "location": "Yangon, Myanmar",
            "image": "https://images.unsplash.com/photo-1522202176988-66273c2fd55f?w=500",
            "description": "Senior Frontend Developer with 5+ years of React and TypeScript.",
            "job_type": "full-time",
            "experience": "senior",
            "salary": "$3,500 - $5,000/month",
            "tags": ["frontend", "react", "typescript"],
        },
    ),
    (
        "jobs",
        "admin",
        {
            "title": "UX/UI Designer - Remote",
            "location": "Remote",
            "image": "https://images.unsplash.com/photo-1561070791-2526d30994b5?w=500",
            "description": "Creative UX/UI Designer needed for a fast-growing tech company.",
            "job_type": "remote",
            "experience": "mid",
            "salary": "$2,500 - $4,000/month",
            "tags": ["ux", "ui", "designer", "remote"],
        },
    ),
    (
        "services",
        "seller",
        {
            "title": "Home Cleaning - Half Day",
            "price": Decimal("45.00"),
            "stock_quantity": 20,
            "location": "Yangon, Myanmar",
            "description": "Four hours of professional home cleaning.",
            "service_type": "Cleaning",
            "tags": ["cleaning", "home"],
        },
    ),
    (
        "travel",
        "admin",
        {
            "title": "Bagan Temple Tour Package",
            "price": Decimal("299.00"),
            "stock_quantity": 15,
            "location": "Bagan, Myanmar",
            "image": "https://images.unsplash.com/photo-1548013146-79deddfb9cd4?w=500",
            "description": "3-day temple tour in Bagan including accommodation, guide and transport.",
            "trip_type": "packages",
            "duration": "3 days",
            "tags": ["travel", "bagan", "temples"],
        },
    ),
    (
        "travel",
        "admin",
        {
            "title": "Inle Lake Adventure",
            "price": Decimal("199.00"),
            "stock_quantity": 15,
            "location": "Inle Lake, Myanmar",
            "image": "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=500",
            "description": "2-day adventure at Inle Lake with boat tours and fishing villages.",
            "trip_type": "activities",
            "duration": "2 days",
            "tags": ["travel", "inle", "lake"],
        },
    ),
]

DEMO_USERS = {
    "admin": {"username": "admin", "email": "admin@markethub.com", "first_name": "Admin", "last_name": "User"},
    "seller": {"username": "seller1", "email": "seller1@markethub.com", "first_name": "John", "last_name": "Doe"},
    "user": {"username": "user1", "email": "user1@markethub.com", "first_name": "Jane", "last_name": "Smith"},
}


class Command(BaseCommand):
    help = "Seeds categories, demo accounts and sample listings. Safe to run more than once."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            default="password123",
            help="Password given to newly created demo accounts",
        )
        parser.add_argument(
            "--categories-only",
            action="store_true",
            help="Only seed the category tree",
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            created_categories = self.seed_categories()
            if options["categories_only"]:
                self.stdout.write(self.style.SUCCESS(f"Created {created_categories} categories."))
                return

            users = self.seed_users(options["password"])
            created_listings = self.seed_listings(users)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeding complete. Created {created_categories} categories and {created_listings} listings."
            )
        )

    def seed_categories(self):
        created_count = 0
        for data in CATEGORIES:
            fields = {k: v for k, v in data.items() if k not in ("slug", "children")}
            parent, created = Category.objects.get_or_create(slug=data["slug"], defaults=fields)
            created_count += int(created)
            self._report("category", parent.name, created)

            for child_order, child_name in enumerate(data["children"], start=1):
                child, created = Category.objects.get_or_create(
                    slug=f"{data['slug']}-{child_name.lower().replace(' & ', '-').replace(' ', '-')}",
                    defaults={
                        "name": child_name,
                        "parent": parent,
                        "listing_type": data["listing_type"],
                        "sort_order": child_order,
                        "filters": data["filters"],
                    },
                )
                created_count += int(created)
                self._report("category", child.name, created)
        return created_count

    def seed_users(self, password):
        users = {}
        for role, data in DEMO_USERS.items():
            user = User.objects.filter(email=data["email"]).first()
            if user is None:
                user = User.objects.create_user(
                    username=data["username"],
                    email=data["email"],
                    password=password,
                    first_name=data["first_name"],
                    last_name=data["last_name"],
                    role=role,
                    is_verified=True,
                    is_staff=role == "admin",
                    location="Yangon, Myanmar",
                )
                self._report("user", user.username, True)
            else:
                self._report("user", user.username, False)
            users[role] = user
        return users

    def seed_listings(self, users):
        created_count = 0
        for category_slug, owner, fields in LISTINGS:
            category = Category.objects.get(slug=category_slug)
            seller = users[owner]
            if Product.objects.filter(seller=seller, title=fields["title"]).exists():
                self._report("listing", fields["title"], False)
                continue

            product = Product(seller=seller, category=category, listing_type=category.listing_type, **fields)
            product.full_clean(exclude=["slug"])
            product.save()
            created_count += 1
            self._report("listing", product.title, True)
        return created_count

    def _report(self, kind, name, created):
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {kind}: {name}"))
        else:
            self.stdout.write(self.style.WARNING(f"{kind.capitalize()} already exists: {name}"))
