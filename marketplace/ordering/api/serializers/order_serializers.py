from rest_framework import serializers

from authentication.api.serializers import PublicUserSerializer
from marketplace.ordering.domain.models import Order, OrderItem, SubOrder


class ShippingAddressSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=20)


class CreateOrderRequestSerializer(serializers.Serializer):
    """Totals are always computed server-side; any sent by the client are ignored."""

    shipping_address = ShippingAddressSerializer()
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES, default="card")
    coupon_code = serializers.CharField(required=False, allow_blank=True, max_length=50, default="")


class SubOrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SubOrder.STATUS_CHOICES)
    tracking_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    estimated_delivery = serializers.DateField(required=False, allow_null=True)


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "title", "image", "quantity", "price", "total"]
        read_only_fields = fields


class SubOrderSerializer(serializers.ModelSerializer):
    seller = PublicUserSerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = SubOrder
        fields = [
            "id",
            "seller",
            "subtotal",
            "status",
            "tracking_number",
            "estimated_delivery",
            "shipped_at",
            "delivered_at",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    customer = PublicUserSerializer(read_only=True)
    sub_orders = SubOrderSerializer(many=True, read_only=True)
    can_cancel = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer",
            "overall_status",
            "payment_method",
            "coupon_code",
            "subtotal",
            "shipping",
            "tax",
            "discount",
            "total",
            "shipping_address",
            "sub_orders",
            "can_cancel",
            "created_at",
            "updated_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class SellerSubOrderSerializer(serializers.ModelSerializer):
    """A seller's own slice of an order with what they need to ship it."""

    order_id = serializers.UUIDField(source="order.id", read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    overall_status = serializers.CharField(source="order.overall_status", read_only=True)
    payment_method = serializers.CharField(source="order.payment_method", read_only=True)
    shipping_address = serializers.JSONField(source="order.shipping_address", read_only=True)
    customer = serializers.SerializerMethodField()
    items = OrderItemSerializer(many=True, read_only=True)
    ordered_at = serializers.DateTimeField(source="order.created_at", read_only=True)

    class Meta:
        model = SubOrder
        fields = [
            "id",
            "order_id",
            "order_number",
            "overall_status",
            "payment_method",
            "status",
            "subtotal",
            "tracking_number",
            "estimated_delivery",
            "customer",
            "shipping_address",
            "items",
            "ordered_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_customer(self, obj):
        customer = obj.order.customer
        address = obj.order.shipping_address or {}
        return {
            "id": str(customer.id),
            "username": customer.username,
            "name": f"{address.get('first_name', '')} {address.get('last_name', '')}".strip(),
            "email": address.get("email") or customer.email,
            "phone": address.get("phone", ""),
        }
