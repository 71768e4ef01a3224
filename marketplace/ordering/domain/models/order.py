import string
import time
import uuid

from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.crypto import get_random_string

from marketplace.catalog.domain.models.catalog import Product

User = get_user_model()


def generate_order_number():
    """ORD-<epoch milliseconds>-<5 random uppercase alphanumerics>."""
    suffix = get_random_string(5, allowed_chars=string.ascii_uppercase + string.digits)
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def derive_overall_status(statuses):
    """
    Reduce sub-order statuses to the order's overall status.

    Rules are evaluated in order, first match wins:
      no sub-orders      -> pending
      all delivered      -> delivered
      all cancelled      -> cancelled
      any shipped        -> partially_shipped
      any processing     -> processing
      otherwise          -> pending

    Only the exact statuses count: ``confirmed`` stays pending and a mix of
    ``delivered`` with anything else is not "shipped".
    """
    statuses = list(statuses)
    # all() over an empty list would say delivered
    if not statuses:
        return "pending"

    if all(s == "delivered" for s in statuses):
        return "delivered"
    if all(s == "cancelled" for s in statuses):
        return "cancelled"
    if any(s == "shipped" for s in statuses):
        return "partially_shipped"
    if any(s == "processing" for s in statuses):
        return "processing"
    return "pending"

    if all(s == "cancelled" for s in statuses):
        return "cancelled"

    live = [s for s in statuses if s != "cancelled"]
    if all(s == "delivered" for s in live):
        return "delivered"
    if all(s in ("shipped", "delivered") for s in live):
        return "shipped"
    if any(s in ("shipped", "delivered") for s in live):
        return "partially_shipped"
    if any(s in ("processing", "confirmed") for s in live):
        return "processing"
    return "pending"


class Order(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("processing", "Processing"),
        ("partially_shipped", "Partially Shipped"),
        ("shipped", "Shipped"),
        ("delivered", "Delivered"),
        ("cancelled", "Cancelled"),
    ]
    PAYMENT_METHOD_CHOICES = [
        ("card", "Credit / Debit Card"),
        ("paypal", "PayPal"),
        ("cod", "Cash on Delivery"),
    ]
    # Customers may cancel only before anything has shipped
    CANCELLABLE_STATUSES = ("pending", "processing")
    SHIPPING_ADDRESS_FIELDS = ("first_name", "last_name", "email", "phone", "address", "city", "zip_code")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=40, unique=True, editable=False)
    customer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="orders")

    overall_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default="card")
    coupon_code = models.CharField(max_length=50, blank=True)

    # Pricing
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    shipping = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # Shipping Information
    shipping_address = models.JSONField()

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="order_customer_created_idx"),
            models.Index(fields=["overall_status"], name="order_overall_status_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = generate_order_number()
        super().save(*args, **kwargs)

    def update_overall_status(self, save=True):
        """Recompute ``overall_status`` from the current sub-orders."""
        self.overall_status = derive_overall_status(self.sub_orders.values_list("status", flat=True))
        if save:
            self.save(update_fields=["overall_status", "updated_at"])
        return self.overall_status

    @property
    def can_cancel(self):
        return self.overall_status in self.CANCELLABLE_STATUSES

    def __str__(self):
        return f"Order {self.order_number} by {self.customer.username}"


class SubOrder(models.Model):
    """The part of an order fulfilled by a single seller."""

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("confirmed", "Confirmed"),
        ("processing", "Processing"),
        ("shipped", "Shipped"),
        ("delivered", "Delivered"),
        ("cancelled", "Cancelled"),
    ]
    FINAL_STATUSES = ("delivered", "cancelled")
    CANCELLABLE_STATUSES = ("pending", "confirmed", "processing")

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="sub_orders")
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sub_orders")
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    # Tracking Information
    tracking_number = models.CharField(max_length=100, blank=True)
    estimated_delivery = models.DateField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ["order", "seller"]  # One sub-order per seller per order
        ordering = ["created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["seller", "status"], name="suborder_seller_status_idx"),
        ]

    def __str__(self):
        return f"Sub-order for {self.seller.username} in {self.order.order_number}"


class OrderItem(models.Model):
    sub_order = models.ForeignKey(SubOrder, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, related_name="order_items")
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sold_items")

    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2)
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # Listing snapshot at time of purchase
    title = models.CharField(max_length=100)
    image = models.URLField(max_length=2000, blank=True)

    class Meta:
        app_label = "marketplace"

    def __str__(self):
        return f"{self.quantity}x {self.title} in {self.sub_order.order.order_number}"
