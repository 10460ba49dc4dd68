"""Thread-safe in-memory cache with sliding expiration and lazy sweeps."""

from .cache import SlidingExpirationCache
from .errors import DisposalError, SlidingCacheError, ValidationError
from .models import CacheEntry, CacheOptions
from .sweeper import BackgroundSweeper

__all__ = [
    "BackgroundSweeper",
    "CacheEntry",
    "CacheOptions",
    "DisposalError",
    "SlidingCacheError",
    "SlidingExpirationCache",
    "ValidationError",
]
