from django.contrib.auth import get_user_model
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .catalog import Product


User = get_user_model()


class ProductReview(models.Model):
    """Star rating (plus optional review text) left by a user on a listing."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="reviews")
    reviewer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(max_length=1000, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ["product", "reviewer"]
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"{self.rating}* by {self.reviewer.username} for {self.product.title}"


class ProductLike(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="liked_products")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="likes")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ["user", "product"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["product"], name="productlike_product_idx"),
        ]

    def __str__(self):
        return f"{self.user.username} likes {self.product.title}"


class ProductComment(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name="product_comments")
    # Replies always hang off a top-level comment (one level deep)
    parent = models.ForeignKey("self", on_delete=models.CASCADE, null=True, blank=True, related_name="replies")
    content = models.TextField(max_length=1000)
    like_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["product", "parent", "-created_at"], name="comment_product_parent_idx"),
        ]

    def __str__(self):
        return f"Comment by {self.author.username} on {self.product.title}"


class CommentLike(models.Model):
    comment = models.ForeignKey(ProductComment, on_delete=models.CASCADE, related_name="likes")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="liked_comments")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ["comment", "user"]
        app_label = "marketplace"

    def __str__(self):
        return f"{self.user.username} likes comment {self.comment_id}"
