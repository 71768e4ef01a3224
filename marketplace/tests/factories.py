from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils.text import slugify
from faker import Faker

from marketplace.models import (
    Cart,
    CartItem,
    Category,
    JobApplication,
    Order,
    OrderItem,
    Product,
    ProductComment,
    ProductReview,
    SubOrder,
)

User = get_user_model()
fake = Faker()

SHIPPING_ADDRESS = {
    "first_name": "Jane",
    "last_name": "Smith",
    "email": "jane@example.com",
    "phone": "+959123456789",
    "address": "12 Pansodan Street",
    "city": "Yangon",
    "zip_code": "11181",
}


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    password = factory.django.Password("password123")
    first_name = factory.LazyFunction(lambda: fake.first_name()[:50])
    last_name = factory.LazyFunction(lambda: fake.last_name()[:50])
    is_active = True
    is_verified = True
    role = "user"


class SellerFactory(UserFactory):
    role = "seller"
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")


class AdminFactory(UserFactory):
    role = "admin"
    is_staff = True
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.LazyFunction(lambda: fake.sentence()[:500])
    listing_type = "marketplace"
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    title = factory.LazyFunction(lambda: fake.catch_phrase()[:100])
    description = factory.Sequence(lambda n: f"Listing description {n}")
    listing_type = "marketplace"
    seller = factory.SubFactory(SellerFactory)
    category = factory.SubFactory(CategoryFactory)
    price = Decimal("25.00")
    stock_quantity = 10
    location = "Yangon, Myanmar"
    status = "active"
    tags = factory.LazyFunction(lambda: ["demo"])


class SecondhandProductFactory(ProductFactory):
    listing_type = "secondhand"
    condition = "good"


class JobFactory(ProductFactory):
    listing_type = "jobs"
    price = None
    job_type = "full-time"
    experience = "mid"
    salary = "$2,000 - $3,000/month"


class TravelProductFactory(ProductFactory):
    listing_type = "travel"
    trip_type = "packages"
    duration = "3 days"


class ProductReviewFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductReview

    product = factory.SubFactory(ProductFactory)
    reviewer = factory.SubFactory(UserFactory)
    rating = 4
    comment = factory.LazyFunction(lambda: fake.sentence())


class ProductCommentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductComment

    product = factory.SubFactory(ProductFactory)
    author = factory.SubFactory(UserFactory)
    content = factory.LazyFunction(lambda: fake.sentence())


class CartFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Cart
        django_get_or_create = ("user",)

    user = factory.SubFactory(UserFactory)


class CartItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CartItem

    cart = factory.SubFactory(CartFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1
    unit_price = factory.LazyAttribute(lambda o: o.product.price)


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    customer = factory.SubFactory(UserFactory)
    subtotal = Decimal("50.00")
    shipping = Decimal("5.99")
    tax = Decimal("4.00")
    total = Decimal("59.99")
    shipping_address = factory.LazyFunction(lambda: dict(SHIPPING_ADDRESS))


class SubOrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SubOrder

    order = factory.SubFactory(OrderFactory)
    seller = factory.SubFactory(SellerFactory)
    subtotal = Decimal("50.00")
    status = "pending"


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    sub_order = factory.SubFactory(SubOrderFactory)
    product = factory.SubFactory(ProductFactory, seller=factory.SelfAttribute("..seller"))
    seller = factory.SelfAttribute("sub_order.seller")
    quantity = 2
    price = Decimal("25.00")
    total = factory.LazyAttribute(lambda o: o.price * o.quantity)
    title = factory.LazyAttribute(lambda o: o.product.title)


class JobApplicationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = JobApplication

    job = factory.SubFactory(JobFactory)
    applicant = factory.SubFactory(UserFactory)
    employer = factory.SelfAttribute("job.seller")
    cover_letter = factory.LazyFunction(lambda: fake.paragraph())
