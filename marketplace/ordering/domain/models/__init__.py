from .order import Order, OrderItem, SubOrder, derive_overall_status, generate_order_number


__all__ = [
    "Order",
    "SubOrder",
    "OrderItem",
    "derive_overall_status",
    "generate_order_number",
]
