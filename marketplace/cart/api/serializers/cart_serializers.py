from rest_framework import serializers

from marketplace.catalog.api.serializers.product_serializers import ProductListSerializer


# ===== Requests =====


class AddToCartRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(help_text="New quantity; zero or less removes the line")


class RemoveFromCartRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


class CouponRequestSerializer(serializers.Serializer):
    coupon_code = serializers.CharField(required=False, allow_blank=True, max_length=50, default="")


# ===== Service output =====


class CheckoutBreakdownSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    coupon_code = serializers.CharField(allow_blank=True)
    shipping = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=4)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    items_count = serializers.IntegerField()
    units_count = serializers.IntegerField()
    currency = serializers.CharField()


class CartItemOutputSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    product = ProductListSerializer(read_only=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    added_at = serializers.DateTimeField(read_only=True)


class CartOutputSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    items = CartItemOutputSerializer(many=True, read_only=True)
    items_count = serializers.IntegerField(read_only=True)
    totals = CheckoutBreakdownSerializer(read_only=True)
    coupon_error = serializers.CharField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class CartIssueSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    product_title = serializers.CharField()
    issue = serializers.ChoiceField(choices=["product_inactive", "not_purchasable", "insufficient_stock"])
    message = serializers.CharField()
    requested = serializers.IntegerField(required=False)
    available = serializers.IntegerField(required=False)


class CartValidationItemSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    product_title = serializers.CharField()
    quantity = serializers.IntegerField()
    available = serializers.IntegerField()
    issues = serializers.ListField(child=serializers.CharField())


class CartValidationSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    issues = CartIssueSerializer(many=True)
    items = CartValidationItemSerializer(many=True)
    items_count = serializers.IntegerField()
