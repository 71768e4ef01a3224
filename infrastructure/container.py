"""
Dependency Injection Container
================================

Service locator for infrastructure backends and marketplace domain services.
Views ask the container for a service instead of constructing it, so tests
can swap a backend (e.g. storage) in one place.

Usage:
    from infrastructure.container import container

    storage = container.storage()
    result = container.cart_service().get_cart(request.user)
"""

import logging
from typing import Optional

from .storage import StorageFactory, StorageInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Lazily builds and caches one instance of each service.

    Singleton: every ``ServiceContainer()`` call returns the same object.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._services = {}
            self._initialized = True
            logger.info("Service container initialized")

    def _get(self, name, builder):
        if name not in self._services:
            self._services[name] = builder()
            logger.debug(f"Created {type(self._services[name]).__name__}")
        return self._services[name]

    def register(self, name: str, instance) -> None:
        """Override a service, mostly for tests (e.g. ``register("storage", fake)``)."""
        self._services[name] = instance

    # Infrastructure

    def storage(self) -> StorageInterface:
        """Storage backend selected by settings.INFRASTRUCTURE["STORAGE_BACKEND"]."""
        return self._get("storage", StorageFactory.create)

    # Domain services

    def inventory_service(self):
        from marketplace.cart.domain.services import InventoryService

        return self._get("inventory_service", InventoryService)

    def pricing_service(self):
        from marketplace.cart.domain.services import PricingService

        return self._get("pricing_service", PricingService)

    def cart_service(self):
        from marketplace.cart.domain.services import CartService

        return self._get(
            "cart_service",
            lambda: CartService(inventory_service=self.inventory_service(), pricing_service=self.pricing_service()),
        )

    def catalog_service(self):
        from marketplace.catalog.domain.services import CatalogService

        return self._get("catalog_service", CatalogService)

    def category_service(self):
        from marketplace.catalog.domain.services import CategoryService

        return self._get("category_service", CategoryService)

    def review_service(self):
        from marketplace.catalog.domain.services import ReviewService

        return self._get("review_service", ReviewService)

    def interaction_service(self):
        from marketplace.catalog.domain.services import InteractionService

        return self._get("interaction_service", InteractionService)

    def order_service(self):
        from marketplace.ordering.domain.services import OrderService

        return self._get(
            "order_service",
            lambda: OrderService(
                cart_service=self.cart_service(),
                inventory_service=self.inventory_service(),
                pricing_service=self.pricing_service(),
            ),
        )

    def upload_service(self):
        from marketplace.uploads.domain.services import UploadService

        return self._get("upload_service", lambda: UploadService(storage=self.storage()))

    def job_application_service(self):
        from marketplace.jobs.domain.services import JobApplicationService

        return self._get(
            "job_application_service", lambda: JobApplicationService(upload_service=self.upload_service())
        )

    def dashboard_service(self):
        from marketplace.dashboard.domain.services import DashboardService

        return self._get("dashboard_service", DashboardService)

    def reset(self):
        """
        Drop every cached instance.

        Useful for testing or after changing settings that services read at
        construction time (tax rates, storage backend).
        """
        self._services = {}
        logger.info("Service container reset")


# Global singleton instance
container = ServiceContainer()


def get_storage() -> StorageInterface:
    """Get storage service from global container."""
    return container.storage()
