"""Test doubles and payload builders shared by the test modules."""

import json
from typing import Any, Dict, List, Optional

import requests

from rufheld.infrastructure.email import EmailMessageSpec, Mailer, MailerError


# ── Fakes ──────────────────────────────────────────────────────────

class FakeMailer(Mailer):
    """Records messages instead of sending them."""

    def __init__(self):
        self.sent: List[EmailMessageSpec] = []
        self.failing_recipients = set()
        self.closed = False

    def verify(self) -> bool:
        return True

    def send(self, message: EmailMessageSpec) -> None:
        if message.to in self.failing_recipients:
            raise MailerError(f"Sending to {message.to} failed")
        self.sent.append(message)

    def close(self) -> None:
        self.closed = True

    @property
    def recipients(self) -> List[str]:
        return [m.to for m in self.sent]


def make_response(status_code: int = 200, payload: Optional[Any] = None) -> requests.Response:
    """Real requests.Response so raise_for_status behaves as in production."""
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    response.url = "https://wextractor.test/api/v1/reviews/google"
    return response


def make_upstream_review(index: int, **overrides) -> Dict[str, Any]:
    review = {
        "id": f"review-{index}",
        "rating": 1,
        "text": f"Schlechter Service {index}",
        "reviewer": f"Kunde {index}",
        "reviewer_id": f"reviewer-{index}",
        "datetime": "2024-05-01T10:00:00Z",
        "url": f"https://maps.google.com/review/{index}",
        "likes": index,
    }
    review.update(overrides)
    return review


def make_upstream_page(count: int, review_count: int = 57, average_rating: float = 3.4) -> Dict[str, Any]:
    return {
        "reviews": [make_upstream_review(i) for i in range(count)],
        "totals": {"review_count": review_count, "average_rating": average_rating},
        "place_details": {"name": "Café Sonne", "address": "Hauptstraße 1, Berlin"},
    }


def selected_reviews(count: int) -> List[Dict[str, Any]]:
    return [
        {
            "id": f"review-{i}",
            "rating": 1 if i % 2 == 0 else 2,
            "text": f"Unfreundliches Personal {i}",
            "reviewer": f"Kunde {i}",
            "reviewer_id": f"reviewer-{i}",
            "datetime": "2024-05-01T10:00:00Z",
            "url": f"https://maps.google.com/review/{i}",
            "likes": 0,
        }
        for i in range(count)
    ]


def order_payload(review_count: int = 2, **overrides) -> Dict[str, Any]:
    payload = {
        "businessPlaceId": "ChIJ-test-place",
        "businessName": "Café Sonne",
        "selectedReviews": selected_reviews(review_count),
        "customerName": "Anna Müller",
        "customerEmail": "anna@example.de",
        "customerPhone": "+49 30 1234567",
    }
    payload.update(overrides)
    return payload


