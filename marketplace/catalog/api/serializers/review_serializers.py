from rest_framework import serializers

from authentication.api.serializers import PublicUserSerializer
from marketplace.catalog.domain.models import ProductReview


class ProductReviewSerializer(serializers.ModelSerializer):
    reviewer = PublicUserSerializer(read_only=True)

    class Meta:
        model = ProductReview
        fields = ["id", "reviewer", "rating", "comment", "created_at", "updated_at"]
        read_only_fields = fields


class RatingRequestSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    review = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")


class RatingResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    review = ProductReviewSerializer()
    rating = serializers.DecimalField(max_digits=2, decimal_places=1, help_text="Listing average after the change")
    review_count = serializers.IntegerField()
