from .settings import (
    CacheSettings,
    ConfigurationError,
    DatabaseSettings,
    EmailSettings,
    PricingSettings,
    ReviewApiSettings,
    Settings,
    get_settings,
)

__all__ = [
    "CacheSettings",
    "ConfigurationError",
    "DatabaseSettings",
    "EmailSettings",
    "PricingSettings",
    "ReviewApiSettings",
    "Settings",
    "get_settings",
]
