from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total orders placed", ["payment_method"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
orders_cancelled_total = Counter("marketplace_orders_cancelled_total", "Orders cancelled by customers")
sub_order_status_changes_total = Counter(
    "marketplace_sub_order_status_changes_total", "Sub-order status transitions", ["status"]
)

# Stock Metrics
stock_reservation_failures = Counter("marketplace_stock_reservation_failure", "Stock reservation failures")

# Listing Metrics
listings_created_total = Counter("marketplace_listings_created_total", "Listings created", ["listing_type"])

# Jobs
job_applications_total = Counter("marketplace_job_applications_total", "Job applications submitted")
resume_upload_failures = Counter("marketplace_resume_upload_failures_total", "Resume uploads that failed")
