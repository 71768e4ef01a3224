from django.contrib import admin

from .models import (
    Cart,
    CartItem,
    Category,
    JobApplication,
    Order,
    OrderItem,
    Product,
    ProductComment,
    ProductReview,
    SubOrder,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "listing_type", "parent", "is_active", "sort_order")
    list_filter = ("is_active", "listing_type")
    search_fields = ("name", "description")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("created_at", "updated_at")


class ProductReviewInline(admin.TabularInline):
    model = ProductReview
    extra = 0
    fields = ("reviewer", "rating", "comment", "created_at")
    readonly_fields = ("reviewer", "rating", "comment", "created_at")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "listing_type", "seller", "category", "price", "stock_quantity", "status", "featured")
    list_filter = ("listing_type", "status", "featured", "category")
    search_fields = ("title", "description", "seller__username")
    readonly_fields = ("id", "slug", "view_count", "like_count", "rating", "review_count", "created_at", "updated_at")
    list_select_related = ("seller", "category")
    inlines = [ProductReviewInline]

    fieldsets = (
        ("Basic Information", {"fields": ("id", "title", "slug", "description", "listing_type")}),
        ("Seller & Category", {"fields": ("seller", "category")}),
        ("Pricing & Inventory", {"fields": ("price", "stock_quantity", "status", "featured")}),
        ("Presentation", {"fields": ("location", "image", "tags")}),
        (
            "Type Specific",
            {
                "fields": ("condition", "job_type", "experience", "salary", "trip_type", "duration", "service_type"),
                "classes": ("collapse",),
            },
        ),
        ("Metrics", {"fields": ("view_count", "like_count", "rating", "review_count"), "classes": ("collapse",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    actions = ["make_featured", "remove_featured"]

    @admin.action(description="Mark selected listings as featured")
    def make_featured(self, request, queryset):
        updated = queryset.update(featured=True)
        self.message_user(request, f"{updated} listings marked as featured.")

    @admin.action(description="Remove featured status from selected listings")
    def remove_featured(self, request, queryset):
        updated = queryset.update(featured=False)
        self.message_user(request, f"{updated} listings unmarked as featured.")


@admin.register(ProductComment)
class ProductCommentAdmin(admin.ModelAdmin):
    list_display = ("product", "author", "parent", "like_count", "created_at")
    search_fields = ("product__title", "author__username", "content")
    raw_id_fields = ("product", "author", "parent")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "seller", "title", "quantity", "price", "total")


@admin.register(SubOrder)
class SubOrderAdmin(admin.ModelAdmin):
    list_display = ("order", "seller", "status", "subtotal", "tracking_number", "updated_at")
    list_filter = ("status",)
    search_fields = ("order__order_number", "seller__username", "tracking_number")
    inlines = [OrderItemInline]


class SubOrderInline(admin.TabularInline):
    model = SubOrder
    extra = 0
    fields = ("seller", "status", "subtotal", "tracking_number", "estimated_delivery")
    readonly_fields = ("seller", "subtotal")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer", "overall_status", "payment_method", "total", "created_at")
    list_filter = ("overall_status", "payment_method", "created_at")
    search_fields = ("order_number", "customer__username", "customer__email")
    readonly_fields = ("id", "order_number", "created_at", "updated_at", "cancelled_at")
    inlines = [SubOrderInline]


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ("unit_price", "added_at")


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("user", "created_at", "updated_at")
    search_fields = ("user__username", "user__email")
    inlines = [CartItemInline]


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ("job", "applicant", "employer", "status", "applied_at")
    list_filter = ("status",)
    search_fields = ("job__title", "applicant__username", "employer__username")
    readonly_fields = ("applied_at", "updated_at")
