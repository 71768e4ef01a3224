from .catalog_service import CatalogService
from .category_service import CategoryService
from .interaction_service import InteractionService
from .review_service import ReviewService


__all__ = [
    "CatalogService",
    "CategoryService",
    "InteractionService",
    "ReviewService",
]
