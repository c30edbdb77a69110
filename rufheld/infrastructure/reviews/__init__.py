from .review_fetcher import (
    ERROR_MESSAGES,
    GENERIC_ERROR_MESSAGE,
    ReviewFetchError,
    ReviewFetcher,
    error_message_for_status,
)

__all__ = [
    "ERROR_MESSAGES",
    "GENERIC_ERROR_MESSAGE",
    "ReviewFetchError",
    "ReviewFetcher",
    "error_message_for_status",
]
