"""
Marketplace Service Layer

Business logic lives in domain services grouped by bounded context
(catalog, cart, ordering, jobs, dashboard, uploads). This package holds the
shared building blocks; services are obtained through the container.

Services:
- CatalogService: Listing browse and CRUD
- CategoryService: Categories and their filter options
- ReviewService: Ratings
- InteractionService: Likes and comments
- CartService: Shopping cart operations
- InventoryService: Stock checks and movements
- PricingService: Checkout arithmetic
- OrderService: Order and sub-order lifecycle
- JobApplicationService: Job applications
- DashboardService: Admin and seller dashboards
- UploadService: Validated file uploads

Usage:
    from infrastructure.container import container

    result = container.catalog_service().list_products({"listing_type": "jobs"})
    if result.ok:
        page = result.value
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, paginate, service_err, service_ok

__all__ = [
    "BaseService",
    "ServiceResult",
    "service_ok",
    "service_err",
    "paginate",
    "ErrorCodes",
]
