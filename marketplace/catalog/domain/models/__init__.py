from .catalog import Product
from .category import LISTING_TYPE_CHOICES, Category
from .interaction import CommentLike, ProductComment, ProductLike, ProductReview


__all__ = [
    "LISTING_TYPE_CHOICES",
    "Product",
    "Category",
    "ProductReview",
    "ProductLike",
    "ProductComment",
    "CommentLike",
]
