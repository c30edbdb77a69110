"""
Review Fetcher - Wextractor Google Reviews Integration
=======================================================

ARCHITECTURAL DECISION:
- One GET per page against the Wextractor Google reviews endpoint
- Responses are cached per (place id, offset, sort) in the injected ReviewCache
- Upstream failures are mapped to a small set of German user-facing messages

PAGINATION:
- Wextractor returns 10 reviews per page and exposes no cursor, so
  `hasMore` is true exactly when a full page came back
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..cache import ReviewCache
from ..config import ReviewApiSettings
from ...domain import Review

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Fehler beim Laden der Bewertungen."

# Upstream HTTP status -> message shown to the customer
ERROR_MESSAGES = {
    401: "API-Authentifizierung fehlgeschlagen.",
    403: "API-Limit erreicht. Bitte versuchen Sie es später erneut.",
    429: "Zu viele Anfragen. Bitte warten Sie einen Moment.",
}


class ReviewFetchError(Exception):
    """
    Review API call failed.

    `message` is safe to show to customers; `detail` carries the technical
    cause for logs and non-production responses.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


def error_message_for_status(status_code: Optional[int]) -> str:
    return ERROR_MESSAGES.get(status_code, GENERIC_ERROR_MESSAGE)


class ReviewFetcher:
    """
    Fetches one page of Google reviews for a place.

    USAGE:
        fetcher = ReviewFetcher(settings.review_api, ReviewCache())
        page = fetcher.fetch_reviews("ChIJ...", offset=0, sort="lowest_rating")
        print(page["reviews"], page["hasMore"])
    """

    def __init__(
        self,
        settings: ReviewApiSettings,
        cache: ReviewCache,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = settings.api_key
        self._api_url = settings.api_url
        self._language = settings.language
        self._page_size = settings.page_size
        self._timeout = settings.timeout_seconds
        self._cache = cache
        self._session = session or requests.Session()

    def fetch_reviews(self, place_id: str, offset: int = 0, sort: str = "lowest_rating") -> Dict[str, Any]:
        """
        Return the review envelope for one page.

        Raises:
            ReviewFetchError: upstream returned an error or could not be reached.
        """
        cache_key = ReviewCache.make_key(place_id, offset, sort)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info(f"Returning cached reviews for {cache_key}")
            return cached

        logger.info(f"Fetching reviews for place: {place_id}, offset: {offset}, sort: {sort}")
        data = self._request_page(place_id, offset, sort)
        result = self._build_envelope(data, offset)

        self._cache.put(cache_key, result)
        return result

    def _request_page(self, place_id: str, offset: int, sort: str) -> Dict[str, Any]:
        params = {
            "id": place_id,
            "auth_token": self._api_key,
            "offset": offset,
            "sort": sort,
            "language": self._language,
        }

        try:
            response = self._session.get(self._api_url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.json()

        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            body = e.response.text[:200] if e.response is not None else ""
            logger.error(f"Review API returned {status}: {body}")
            raise ReviewFetchError(error_message_for_status(status), status, str(e)) from e

        except requests.Timeout as e:
            logger.error(f"Review API timeout after {self._timeout}s")
            raise ReviewFetchError(GENERIC_ERROR_MESSAGE, None, str(e)) from e

        except requests.RequestException as e:
            logger.error(f"Review API request failed: {e}")
            raise ReviewFetchError(GENERIC_ERROR_MESSAGE, None, str(e)) from e

        except ValueError as e:
            logger.error(f"Review API returned invalid JSON: {e}")
            raise ReviewFetchError(GENERIC_ERROR_MESSAGE, None, str(e)) from e

    def _build_envelope(self, data: Dict[str, Any], offset: int) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ReviewFetchError(GENERIC_ERROR_MESSAGE, None, "Unexpected response shape")

        try:
            reviews = [Review.from_upstream(raw).to_dict() for raw in data.get("reviews") or []]
            totals = data.get("totals") or {}
            total_reviews = totals.get("review_count") or 0
            average_rating = totals.get("average_rating") or 0
        except (AttributeError, TypeError) as e:
            logger.error(f"Review API returned malformed data: {e}")
            raise ReviewFetchError(GENERIC_ERROR_MESSAGE, None, f"Malformed response: {e}") from e

        return {
            "success": True,
            "reviews": reviews,
            "hasMore": len(reviews) == self._page_size,
            "totalReviews": total_reviews,
            "averageRating": average_rating,
            "placeDetails": data.get("place_details") or {},
            "offset": offset,
        }

    def close(self) -> None:
        self._session.close()
