"""
Order Recorder - Submit Order Use Case
======================================

Validates an order, prices it and hands back the confirmation. Storing the
order and sending the emails are separate best-effort steps: the web layer
runs them as background tasks after the confirmation is computed, and their
failures are logged, never returned to the customer.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..domain import Order, calculate_total_price, generate_order_id
from ..infrastructure.config import EmailSettings, PricingSettings
from ..infrastructure.email import (
    Mailer,
    MailerError,
    admin_notification_message,
    customer_confirmation_message,
)
from ..infrastructure.persistence import Database

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Ungültige Anfrage. PlaceID und ausgewählte Bewertungen sind erforderlich."
SUCCESS_MESSAGE = "Anfrage erfolgreich eingereicht."


def _text(value: Any) -> str:
    """Free-form payload value as stored text; missing values become ''."""
    if value is None:
        return ""
    return str(value)


class OrderValidationError(Exception):
    """Order payload is missing required fields."""

    def __init__(self, message: str = VALIDATION_MESSAGE):
        super().__init__(message)
        self.message = message


class OrderRecorder:
    """
    USAGE:
        recorder = OrderRecorder(database, mailer, settings.email, settings.pricing)
        order = recorder.create_order(payload)     # raises OrderValidationError
        recorder.persist(order)                    # best-effort
        recorder.notify(order)                     # best-effort
        return recorder.confirmation(order)
    """

    def __init__(
        self,
        database: Optional[Database],
        mailer: Optional[Mailer],
        email_settings: EmailSettings,
        pricing: PricingSettings,
    ):
        self._database = database
        self._mailer = mailer
        self._email_settings = email_settings
        self._pricing = pricing

    @staticmethod
    def validate(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Return the selected reviews, or raise OrderValidationError."""
        selected_reviews = payload.get("selectedReviews")
        if not payload.get("businessPlaceId") or not selected_reviews:
            raise OrderValidationError()
        return list(selected_reviews)

    def create_order(self, payload: Dict[str, Any]) -> Order:
        """
        Build a priced order from the request payload.

        Any client-supplied `totalPrice` is ignored; the price is always
        review count times the per-review price.
        """
        selected_reviews = self.validate(payload)
        review_count = len(selected_reviews)

        order = Order(
            order_id=generate_order_id(),
            business_name=_text(payload.get("businessName")),
            business_place_id=_text(payload["businessPlaceId"]),
            customer_name=_text(payload.get("customerName")),
            customer_email=_text(payload.get("customerEmail")),
            customer_phone=_text(payload.get("customerPhone")),
            selected_reviews=selected_reviews,
            total_price=calculate_total_price(review_count, self._pricing.price_per_review),
            review_count=review_count,
        )

        logger.info(
            f"Order submitted: {order.order_id} place={order.business_place_id} "
            f"business={order.business_name!r} reviews={review_count} total={order.total_price}"
        )
        return order

    def confirmation(self, order: Order) -> Dict[str, Any]:
        return {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "orderId": order.order_id,
            "totalPrice": float(order.total_price),
            "reviewCount": order.review_count,
            "estimatedProcessingTime": self._pricing.estimated_processing_time,
        }

    # ── Best-effort side effects ───────────────────────────────────

    def persist(self, order: Order) -> bool:
        """Store the order. Returns False (and logs) instead of raising."""
        if self._database is None:
            logger.info(f"No database configured - order {order.order_id} not stored")
            return False

        try:
            self._database.add_order(order)
            logger.info(f"Order saved to database: {order.order_id}")
            return True
        except sqlite3.Error as e:
            logger.exception(f"Database save failed for {order.order_id}: {e}")
            return False
        except Exception as e:
            logger.exception(f"Unexpected error saving order {order.order_id}: {e}")
            return False

    def notify(self, order: Order) -> bool:
        """
        Send the customer confirmation and the admin alert.
        Each send fails independently. Returns True only if every attempted send succeeded.
        """
        if self._mailer is None:
            logger.info(f"Email not configured - no notifications for {order.order_id}")
            return False

        reply_to = self._email_settings.sender_address
        ok = True

        if order.customer_email:
            ok = self._send(customer_confirmation_message(order, reply_to), "Customer confirmation") and ok
        else:
            logger.warning(f"Order {order.order_id} has no customer email - confirmation skipped")
            ok = False

        admin_address = self._email_settings.notification_email
        if admin_address:
            ok = self._send(admin_notification_message(order, admin_address, reply_to), "Admin notification") and ok

        return ok

    def _send(self, message, label: str) -> bool:
        try:
            self._mailer.send(message)
            logger.info(f"{label} email sent to: {message.to}")
            return True
        except MailerError as e:
            logger.error(f"{label} email failed: {e}")
            return False
        except Exception as e:
            logger.exception(f"Unexpected error sending {label.lower()} email: {e}")
            return False
