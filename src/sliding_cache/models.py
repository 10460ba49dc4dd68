"""Immutable records used by the cache.

CacheEntry pairs a cached value with its monotonic deadline; renewal
produces a new record rather than mutating the stored one. CacheOptions
groups the construction options so they can be built and passed around
explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Generic, Optional, TypeVar

from .config import SWEEP_INTERVAL_NS
from .interfaces import DisposeItem, ShouldDispose

V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    # Stores value + monotonic deadline
    value: V
    expires_at_ns: int  # time.monotonic_ns()

    def is_expired(self, now_ns: int) -> bool:
        return now_ns > self.expires_at_ns

    def renewed(self, now_ns: int, ttl_ns: int) -> "CacheEntry[V]":
        return replace(self, expires_at_ns=now_ns + ttl_ns)


@dataclass(frozen=True)
class CacheOptions:
    """Construction options for SlidingExpirationCache.

    Field groups:
    - Sweep gating: sweep_interval_ns
    - Disposal policy: should_dispose (None approves every expired value),
      dispose_item (None does nothing)
    """

    sweep_interval_ns: int = SWEEP_INTERVAL_NS

    should_dispose: Optional[ShouldDispose[Any]] = None
    dispose_item: Optional[DisposeItem[Any]] = None
