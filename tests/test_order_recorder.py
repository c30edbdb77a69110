"""Tests for order submission - validation, pricing and best-effort side effects."""

import sqlite3
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from rufheld.application import OrderRecorder, OrderValidationError, VALIDATION_MESSAGE
from rufheld.infrastructure.config import EmailSettings, PricingSettings
from rufheld.infrastructure.persistence import Database

from factories import FakeMailer, order_payload


@pytest.fixture()
def email_settings() -> EmailSettings:
    return EmailSettings(
        user="",
        password="",
        sender_address="info@rufheld.de",
        notification_email="admin@rufheld.de",
    )


@pytest.fixture()
def database(db_path) -> Database:
    db = Database(db_path)
    db.init()
    return db


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def recorder(database, mailer, email_settings) -> OrderRecorder:
    return OrderRecorder(database, mailer, email_settings, PricingSettings())


class TestValidation:

    @pytest.mark.parametrize(
        "overrides",
        [
            {"businessPlaceId": None},
            {"businessPlaceId": ""},
            {"selectedReviews": None},
            {"selectedReviews": []},
        ],
    )
    def test_missing_place_or_reviews_is_rejected(self, recorder, overrides):
        with pytest.raises(OrderValidationError) as exc_info:
            recorder.create_order(order_payload(**overrides))
        assert exc_info.value.message == VALIDATION_MESSAGE

    def test_customer_fields_are_optional(self, recorder):
        payload = {"businessPlaceId": "ChIJ-x", "selectedReviews": [{"id": "r1"}]}

        order = recorder.create_order(payload)

        assert order.customer_name == ""
        assert order.customer_email == ""
        assert order.customer_phone == ""
        assert order.business_name == ""


    def test_non_string_values_are_stored_as_text(self, recorder):
        order = recorder.create_order(
            order_payload(businessPlaceId=12345, customerPhone=4915112345678, customerName=None)
        )

        assert order.business_place_id == "12345"
        assert order.customer_phone == "4915112345678"
        assert order.customer_name == ""


class TestPricing:

    def test_price_is_computed_server_side(self, recorder):
        order = recorder.create_order(order_payload(review_count=3, totalPrice=1.0))

        assert order.total_price == Decimal("119.97")
        assert order.review_count == 3

    def test_confirmation(self, recorder):
        order = recorder.create_order(order_payload(review_count=2))

        confirmation = recorder.confirmation(order)

        assert confirmation == {
            "success": True,
            "message": "Anfrage erfolgreich eingereicht.",
            "orderId": order.order_id,
            "totalPrice": 79.98,
            "reviewCount": 2,
            "estimatedProcessingTime": "24 Stunden",
        }


class TestPersist:

    def test_stores_order(self, recorder, database):
        order = recorder.create_order(order_payload())

        assert recorder.persist(order) is True
        assert database.get_order(order.order_id) is not None

    def test_no_database(self, mailer, email_settings):
        recorder = OrderRecorder(None, mailer, email_settings, PricingSettings())
        order = recorder.create_order(order_payload())

        assert recorder.persist(order) is False

    def test_database_error_is_swallowed(self, mailer, email_settings):
        broken = MagicMock(spec=Database)
        broken.add_order.side_effect = sqlite3.OperationalError("disk I/O error")
        recorder = OrderRecorder(broken, mailer, email_settings, PricingSettings())

        assert recorder.persist(recorder.create_order(order_payload())) is False


class TestNotify:

    def test_sends_customer_and_admin_email(self, recorder, mailer):
        order = recorder.create_order(order_payload(review_count=2))

        assert recorder.notify(order) is True
        assert mailer.recipients == ["anna@example.de", "admin@rufheld.de"]

        customer, admin = mailer.sent
        assert order.order_id in customer.subject
        assert customer.reply_to == "info@rufheld.de"
        assert customer.sender_name == "Rufheld"
        assert admin.subject.startswith("🚨 NEUER AUFTRAG: Anna Müller - 2 Reviews")
        assert "€79.98" in admin.subject
        assert admin.headers["X-Priority"] == "1"

    def test_admin_alert_skipped_without_notification_address(self, database, mailer):
        settings = EmailSettings(user="", password="", notification_email="")
        recorder = OrderRecorder(database, mailer, settings, PricingSettings())

        recorder.notify(recorder.create_order(order_payload()))

        assert mailer.recipients == ["anna@example.de"]

    def test_customer_email_skipped_without_address(self, recorder, mailer):
        order = recorder.create_order(order_payload(customerEmail=""))

        assert recorder.notify(order) is False
        assert mailer.recipients == ["admin@rufheld.de"]

    def test_customer_failure_does_not_block_admin_alert(self, recorder, mailer):
        mailer.failing_recipients.add("anna@example.de")

        assert recorder.notify(recorder.create_order(order_payload())) is False
        assert mailer.recipients == ["admin@rufheld.de"]

    def test_admin_failure_keeps_customer_confirmation(self, recorder, mailer):
        mailer.failing_recipients.add("admin@rufheld.de")

        assert recorder.notify(recorder.create_order(order_payload())) is False
        assert mailer.recipients == ["anna@example.de"]

    def test_no_mailer(self, database, email_settings):
        recorder = OrderRecorder(database, None, email_settings, PricingSettings())

        assert recorder.notify(recorder.create_order(order_payload())) is False

    def test_unexpected_mailer_exception_is_swallowed(self, database, email_settings):
        mailer = MagicMock()
        mailer.send.side_effect = RuntimeError("boom")
        recorder = OrderRecorder(database, mailer, email_settings, PricingSettings())

        assert recorder.notify(recorder.create_order(order_payload())) is False
        assert mailer.send.call_count == 2
