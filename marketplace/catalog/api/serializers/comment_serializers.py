from rest_framework import serializers

from authentication.api.serializers import PublicUserSerializer
from marketplace.catalog.domain.models import ProductComment


class CommentReplySerializer(serializers.ModelSerializer):
    author = PublicUserSerializer(read_only=True)
    is_liked = serializers.SerializerMethodField()

    class Meta:
        model = ProductComment
        fields = ["id", "product", "parent", "author", "content", "like_count", "is_liked", "created_at"]
        read_only_fields = fields

    def get_is_liked(self, obj):
        return bool(getattr(obj, "is_liked", False))


class CommentSerializer(CommentReplySerializer):
    """Top-level comment with its replies"""

    replies = CommentReplySerializer(many=True, read_only=True)

    class Meta(CommentReplySerializer.Meta):
        fields = CommentReplySerializer.Meta.fields + ["replies"]
        read_only_fields = fields


class CommentCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    text = serializers.CharField(max_length=1000)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
