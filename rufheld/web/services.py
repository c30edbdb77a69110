"""
Service wiring for the web application.

One Services object is built at startup and stored on `app.state`; routes
receive it through the `get_services` dependency.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from ..application import OrderRecorder, OrderReporting
from ..infrastructure.cache import ReviewCache
from ..infrastructure.config import Settings
from ..infrastructure.email import Mailer, create_mailer
from ..infrastructure.persistence import Database, create_database
from ..infrastructure.reviews import ReviewFetcher

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    cache: ReviewCache
    fetcher: ReviewFetcher
    database: Optional[Database]
    mailer: Optional[Mailer]
    recorder: OrderRecorder
    reporting: OrderReporting

    def close(self) -> None:
        self.fetcher.close()
        if self.mailer is not None:
            self.mailer.close()


def build_services(
    settings: Settings,
    session: Optional[requests.Session] = None,
    mailer: Optional[Mailer] = None,
) -> Services:
    """Create every collaborator from settings. `session` and `mailer` override the defaults."""
    cache = ReviewCache(
        ttl_seconds=settings.cache.ttl_seconds,
        max_entries=settings.cache.max_entries,
    )
    fetcher = ReviewFetcher(settings.review_api, cache, session=session)
    database = create_database(settings.database.path)
    if mailer is None:
        mailer = create_mailer(settings.email, verify_tls=settings.is_production)

    return Services(
        settings=settings,
        cache=cache,
        fetcher=fetcher,
        database=database,
        mailer=mailer,
        recorder=OrderRecorder(database, mailer, settings.email, settings.pricing),
        reporting=OrderReporting(database, settings.pricing.price_per_review),
    )
