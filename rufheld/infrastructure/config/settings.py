"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses grouped per integration
- Single source of truth for all configurable values

REQUIRED:
- WEXTRACTOR_API_KEY: the server refuses to start without it

OPTIONAL:
- DATABASE_URL enables order persistence and the admin endpoints
- EMAIL_USER / EMAIL_PASS enable order confirmation emails
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()


class ConfigurationError(Exception):
    """Raised when a required setting is missing."""
    pass


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _email_secure_default() -> bool:
    flag = os.getenv("EMAIL_SECURE")
    if flag is not None:
        return flag.lower() == "true"
    return os.getenv("EMAIL_PORT", "465") == "465"


@dataclass(frozen=True)
class ReviewApiSettings:
    """Wextractor review API settings."""

    api_key: str = field(default_factory=lambda: os.getenv("WEXTRACTOR_API_KEY", ""))
    api_url: str = field(
        default_factory=lambda: os.getenv(
            "WEXTRACTOR_API_URL", "https://wextractor.com/api/v1/reviews/google"
        )
    )

    # Reviews are shown to German customers
    language: str = field(default_factory=lambda: os.getenv("REVIEW_LANGUAGE", "de"))
    default_sort: str = "lowest_rating"

    # Wextractor returns 10 reviews per page
    page_size: int = 10
    timeout_seconds: float = field(default_factory=lambda: _env_float("REVIEW_API_TIMEOUT", 15.0))


@dataclass(frozen=True)
class CacheSettings:
    """In-process review cache settings."""

    ttl_seconds: float = field(default_factory=lambda: _env_float("CACHE_TTL_SECONDS", 300.0))

    # 0 disables the size cap
    max_entries: int = field(default_factory=lambda: _env_int("CACHE_MAX_ENTRIES", 1000))


@dataclass(frozen=True)
class DatabaseSettings:
    """Order storage settings."""

    url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", ""))

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @property
    def path(self) -> Optional[str]:
        """Filesystem path of the sqlite database, or None when storage is disabled."""
        if not self.url:
            return None
        if self.url.startswith("sqlite:///"):
            return self.url[len("sqlite:///"):]
        return self.url


@dataclass(frozen=True)
class EmailSettings:
    """SMTP settings for order notifications."""

    host: str = field(default_factory=lambda: os.getenv("EMAIL_HOST", "smtppro.zoho.eu"))
    port: int = field(default_factory=lambda: _env_int("EMAIL_PORT", 465))
    secure: bool = field(default_factory=_email_secure_default)
    user: str = field(default_factory=lambda: os.getenv("EMAIL_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("EMAIL_PASS", ""))

    sender_address: str = field(default_factory=lambda: os.getenv("EMAIL_FROM", "info@rufheld.de"))
    sender_name: str = "Rufheld"
    notification_email: str = field(default_factory=lambda: os.getenv("NOTIFICATION_EMAIL", ""))
    test_recipient: str = field(
        default_factory=lambda: os.getenv("TEST_EMAIL_RECIPIENT", "business@rufheld.de")
    )

    # Connection pool limits
    max_connections: int = 5
    max_messages_per_connection: int = 100
    rate_limit: int = 10  # messages per rate_window_seconds
    rate_window_seconds: float = 1.0
    timeout_seconds: float = field(default_factory=lambda: _env_float("EMAIL_TIMEOUT", 20.0))

    @property
    def enabled(self) -> bool:
        return bool(self.user and self.password)


@dataclass(frozen=True)
class PricingSettings:
    """Order pricing."""

    price_per_review: Decimal = Decimal("39.99")
    estimated_processing_time: str = "24 Stunden"


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from rufheld.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.review_api.api_key)
    """

    review_api: ReviewApiSettings = field(default_factory=ReviewApiSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    email: EmailSettings = field(default_factory=EmailSettings)
    pricing: PricingSettings = field(default_factory=PricingSettings)

    environment: str = field(
        default_factory=lambda: os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development"
    )
    port: int = field(default_factory=lambda: _env_int("PORT", 3000))
    static_dir: Path = field(default_factory=lambda: Path(os.getenv("STATIC_DIR", "public")))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def require(self) -> None:
        """Raise ConfigurationError if a setting the server cannot run without is missing."""
        if not self.review_api.api_key:
            raise ConfigurationError("Missing required environment variable: WEXTRACTOR_API_KEY")

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings/errors.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.review_api.api_key:
            issues.append("ERROR: WEXTRACTOR_API_KEY not set. Reviews cannot be fetched.")

        if not self.database.enabled:
            issues.append(
                "WARNING: No DATABASE_URL found. Orders will not be stored "
                "and admin endpoints return 503."
            )

        if not self.email.enabled:
            issues.append("WARNING: Email credentials not found. Email features disabled.")
        elif not self.email.notification_email:
            issues.append("WARNING: NOTIFICATION_EMAIL not set. Admin order alerts are skipped.")

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
