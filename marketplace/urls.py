from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views.metrics_views import prometheus_metrics
from .cart.api.views.cart_views import CartViewSet
from .catalog.api.views.category_views import CategoryViewSet
from .catalog.api.views.comment_views import CommentViewSet
from .catalog.api.views.product_views import ProductViewSet
from .dashboard.api.views.dashboard_views import AdminDashboardViewSet, SellerDashboardViewSet
from .jobs.api.views.job_views import JobApplicationViewSet
from .ordering.api.views.order_views import OrderViewSet
from .uploads.api.views.upload_views import upload_image

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"comments", CommentViewSet, basename="comment")
router.register(r"cart", CartViewSet, basename="cart")
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"jobs", JobApplicationViewSet, basename="job")
router.register(r"admin", AdminDashboardViewSet, basename="admin-dashboard")
router.register(r"seller", SellerDashboardViewSet, basename="seller-dashboard")

app_name = "marketplace"

urlpatterns = [
    path("uploads/image/", upload_image, name="upload-image"),
    # Prometheus metrics endpoint
    path("metrics/", prometheus_metrics, name="marketplace-metrics"),
    path("", include(router.urls)),
]
