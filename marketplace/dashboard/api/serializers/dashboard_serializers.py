from rest_framework import serializers

from authentication.domain.models import CustomUser
from marketplace.ordering.domain.models import Order


class AdminStatsSerializer(serializers.Serializer):
    total_users = serializers.IntegerField()
    total_products = serializers.IntegerField()
    total_orders = serializers.IntegerField()
    total_revenue = serializers.CharField(help_text="Sum of all order totals, 2 decimals")


class SellerStatsSerializer(serializers.Serializer):
    total_listings = serializers.IntegerField()
    active_listings = serializers.IntegerField()
    total_sub_orders = serializers.IntegerField()
    pending_sub_orders = serializers.IntegerField()
    revenue = serializers.CharField(help_text="Subtotal of non-cancelled sub-orders, 2 decimals")
    average_rating = serializers.FloatField()


class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "role",
            "is_active",
            "is_verified",
            "date_joined",
            "last_login",
        ]
        read_only_fields = fields


class UserStatusUpdateSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class AdminOrderSerializer(serializers.ModelSerializer):
    customer = serializers.SerializerMethodField()
    sellers_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer",
            "overall_status",
            "payment_method",
            "total",
            "sellers_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_customer(self, obj):
        return {"id": str(obj.customer_id), "username": obj.customer.username, "email": obj.customer.email}

    def get_sellers_count(self, obj):
        return len(obj.sub_orders.all())
