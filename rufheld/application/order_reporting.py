"""
Order Reporting - Admin Read Models
===================================

Read-only views on stored orders for the admin panel:

- list_orders:          stored columns as-is
- get_order:            one order, German-labeled nested structure
- list_orders_detailed: every order in the get_order shape

All operations need storage; without it they raise StorageUnavailableError.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..domain import Order, format_price
from ..infrastructure.email import review_text, reviewer_name, stars_label
from ..infrastructure.persistence import DEFAULT_LIST_LIMIT, Database

logger = logging.getLogger(__name__)

DETAILED_HINT = "Alle Review-Details sind hier vollständig sichtbar"


class StorageUnavailableError(Exception):
    """No database is configured."""
    pass


class OrderNotFoundError(Exception):
    """No order with the requested order id."""

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


def format_german_datetime(value: Optional[datetime]) -> str:
    """
    '18.10.2026, 14:03:05', the way de-DE renders a timestamp.
    Timezone-aware values are shown in the server's local time.
    """
    if value is None:
        return "Unbekannt"
    if value.tzinfo is not None:
        value = value.astimezone()
    return f"{value.day}.{value.month}.{value.year}, {value:%H:%M:%S}"


def format_review_detail(index: int, review: Dict[str, Any]) -> Dict[str, Any]:
    text = review_text(review)
    return {
        "nummer": index + 1,
        "details": {
            "id": review.get("id") or "Keine ID",
            "url": review.get("url") or "Keine URL",
            "bewertung": review.get("rating"),
            "sterne": stars_label(review.get("rating")),
            "datum": review.get("datetime") or "Unbekannt",
        },
        "bewerter": {
            "name": reviewer_name(review),
            "id": review.get("reviewer_id") or "Keine ID",
        },
        "inhalt": {
            "text": text or "Kein Text",
            "likes": review.get("likes") or 0,
            "länge": len(text),
        },
    }


def format_order_detail(order: Order, price_per_review: str = "39.99") -> Dict[str, Any]:
    """Nested, German-labeled view of one order."""
    return {
        "auftrag": {
            "id": order.id,
            "auftragId": order.order_id,
            "unternehmen": order.business_name,
            "placeId": order.business_place_id,
            "kunde": {
                "name": order.customer_name,
                "email": order.customer_email,
                "telefon": order.customer_phone,
            },
            "preis": {
                "gesamt": f"€{format_price(order.total_price)}",
                "proReview": f"€{price_per_review}",
                "anzahl": order.review_count,
            },
            "status": order.status,
            "erstellt": format_german_datetime(order.created_at),
            "aktualisiert": format_german_datetime(order.updated_at),
        },
        "reviews": [
            format_review_detail(i, review) for i, review in enumerate(order.selected_reviews)
        ],
    }


class OrderReporting:
    """
    USAGE:
        reporting = OrderReporting(database)
        reporting.list_orders()
        reporting.get_order("RH-...")   # raises OrderNotFoundError
    """

    def __init__(self, database: Optional[Database], price_per_review: Any = "39.99"):
        self._database = database
        self._price_per_review = format_price(price_per_review)

    @property
    def available(self) -> bool:
        return self._database is not None

    def _require_database(self) -> Database:
        if self._database is None:
            raise StorageUnavailableError("Database not available")
        return self._database

    def list_orders(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        orders = self._require_database().list_orders(limit)
        return [order.to_record() for order in orders]

    def get_order(self, order_id: str) -> Dict[str, Any]:
        order = self._require_database().get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return format_order_detail(order, self._price_per_review)

    def list_orders_detailed(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        orders = self._require_database().list_orders(limit)
        return [format_order_detail(order, self._price_per_review) for order in orders]

    def raw_review_dump(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Stored selected_reviews column with its type, for diagnostics."""
        rows = self._require_database().list_raw_reviews(limit)
        debug = []
        for row in rows:
            raw = row["selected_reviews"]
            debug.append({
                "id": row["id"],
                "order_id": row["order_id"],
                "selected_reviews_type": type(raw).__name__,
                "selected_reviews_raw": raw,
                "is_string": isinstance(raw, str),
                "is_object": isinstance(raw, (dict, list)),
                "preview": str(raw)[:200] if raw is not None else "NULL",
            })
        return debug
