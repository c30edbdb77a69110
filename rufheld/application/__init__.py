# Application Layer
# =================
# Use cases composed from domain types and infrastructure services:
# - order_recorder: validate, price and record a review removal order
# - order_reporting: admin views on stored orders

from .order_recorder import OrderRecorder, OrderValidationError, VALIDATION_MESSAGE
from .order_reporting import (
    DETAILED_HINT,
    OrderNotFoundError,
    OrderReporting,
    StorageUnavailableError,
    format_order_detail,
)

__all__ = [
    "DETAILED_HINT",
    "OrderNotFoundError",
    "OrderRecorder",
    "OrderReporting",
    "OrderValidationError",
    "StorageUnavailableError",
    "VALIDATION_MESSAGE",
    "format_order_detail",
]
