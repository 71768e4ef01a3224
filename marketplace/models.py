from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import (
    Category,
    CommentLike,
    Product,
    ProductComment,
    ProductLike,
    ProductReview,
)
from marketplace.jobs.domain.models import JobApplication
from marketplace.ordering.domain.models import Order, OrderItem, SubOrder


__all__ = [
    "Category",
    "Product",
    "ProductReview",
    "ProductLike",
    "ProductComment",
    "CommentLike",
    "Cart",
    "CartItem",
    "Order",
    "SubOrder",
    "OrderItem",
    "JobApplication",
]
