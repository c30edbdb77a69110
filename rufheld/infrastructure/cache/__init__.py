from .review_cache import CacheBackend, CacheEntry, InMemoryBackend, ReviewCache

__all__ = ["CacheBackend", "CacheEntry", "InMemoryBackend", "ReviewCache"]
