# Domain Layer
# ============
# Pure business types (reviews, orders, pricing). No external dependencies.

from .models import (
    ANONYMOUS_REVIEWER,
    Order,
    OrderStatus,
    Review,
    calculate_total_price,
    format_price,
    generate_order_id,
)

__all__ = [
    "ANONYMOUS_REVIEWER",
    "Order",
    "OrderStatus",
    "Review",
    "calculate_total_price",
    "format_price",
    "generate_order_id",
]
