"""
Domain Models - Reviews and Orders
===================================

Pure data types with no infrastructure dependencies.

- Review: one Google review as returned to the frontend
- Order:  a customer's request to remove a set of negative reviews
"""

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional

ANONYMOUS_REVIEWER = "Anonymer Nutzer"
ORDER_ID_PREFIX = "RH"

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_CENT = Decimal("0.01")


class OrderStatus(Enum):
    """Processing status for an order. Orders are created as PENDING."""
    PENDING = "pending"


@dataclass
class Review:
    """Google review normalized from the upstream API."""
    id: Any
    rating: Optional[int]
    text: str = ""
    reviewer: str = ANONYMOUS_REVIEWER
    reviewer_id: Any = None
    datetime: Optional[str] = None
    url: Optional[str] = None
    likes: int = 0

    @classmethod
    def from_upstream(cls, raw: Dict[str, Any]) -> "Review":
        """Build a Review from one entry of the upstream `reviews` array."""
        return cls(
            id=raw.get("id"),
            rating=raw.get("rating"),
            text=raw.get("text") or "",
            reviewer=raw.get("reviewer") or ANONYMOUS_REVIEWER,
            reviewer_id=raw.get("reviewer_id"),
            datetime=raw.get("datetime"),
            url=raw.get("url"),
            likes=raw.get("likes") or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rating": self.rating,
            "text": self.text,
            "reviewer": self.reviewer,
            "datetime": self.datetime,
            "reviewer_id": self.reviewer_id,
            "url": self.url,
            "likes": self.likes,
        }


@dataclass
class Order:
    """Review removal order."""
    order_id: str
    business_name: str
    business_place_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    selected_reviews: List[Dict[str, Any]] = field(default_factory=list)
    total_price: Decimal = Decimal("0.00")
    review_count: int = 0
    status: str = OrderStatus.PENDING.value
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_record(self) -> Dict[str, Any]:
        """Stored columns as a JSON-ready dict."""
        return {
            "id": self.id,
            "order_id": self.order_id,
            "business_name": self.business_name,
            "business_place_id": self.business_place_id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "selected_reviews": self.selected_reviews,
            "total_price": format_price(self.total_price),
            "review_count": self.review_count,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def generate_order_id(now_ms: Optional[int] = None, suffix_length: int = 9) -> str:
    """Return a new order id of the form RH-<epoch millis>-<base36 suffix>."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(suffix_length))
    return f"{ORDER_ID_PREFIX}-{now_ms}-{suffix}"


def calculate_total_price(review_count: int, price_per_review: Decimal) -> Decimal:
    return (price_per_review * review_count).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_price(price: Decimal) -> str:
    """Two-decimal string, the way a DECIMAL(10,2) column reads back."""
    return str(Decimal(price).quantize(_CENT, rounding=ROUND_HALF_UP))
