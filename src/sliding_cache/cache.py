"""Thread-safe in-memory cache with sliding expiration.

Every successful access pushes an entry's deadline forward. Expired entries
are not removed eagerly: a sweep runs at most once per sweep interval,
piggy-backed on regular calls, and removes entries that are past their own
deadline and approved by the optional disposal predicate. Removed values are
handed to the optional disposal action exactly once.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

from .config import SWEEP_INTERVAL_NS
from .errors import DisposalError
from .interfaces import DisposeItem, ShouldDispose, Supplier
from .models import CacheEntry, CacheOptions

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)


class _Creation:
    # One in-flight computation of an absent key.
    __slots__ = ("lock", "owner")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.owner: Optional[int] = None


class SlidingExpirationCache(Generic[K, V]):
    """Cache whose entries expire after a period of disuse.

    Parameters
    ----------
    sweep_interval_ns: int
        Minimum time between two sweeps of expired entries.
    should_dispose: Optional[Callable[[V], bool]]
        Checked for expired entries at sweep time; an entry is only removed
        when it returns True. None approves every expired entry.
    dispose_item: Optional[Callable[[V], None]]
        Called once on every value that leaves the cache (sweep, remove or
        clear). None does nothing.
    """

    def __init__(
        self,
        *,
        sweep_interval_ns: int = SWEEP_INTERVAL_NS,
        should_dispose: Optional[ShouldDispose[V]] = None,
        dispose_item: Optional[DisposeItem[V]] = None,
    ) -> None:
        self._sweep_interval_ns = int(sweep_interval_ns)
        self._should_dispose = should_dispose
        self._dispose_item = dispose_item

        self._store: Dict[K, CacheEntry[V]] = {}

        # Guards single map operations only. Never held while calling
        # supplier, predicate or disposal action.
        self._lock = threading.Lock()

        # In-flight creations, one per absent key being computed.
        self._pending: Dict[K, _Creation] = {}

        # Guards the deadline advance; acquired without blocking so that
        # contending callers skip the sweep instead of waiting.
        self._sweep_lock = threading.Lock()
        self._next_sweep_ns = time.monotonic_ns() + self._sweep_interval_ns

    @classmethod
    def from_options(cls, options: CacheOptions) -> "SlidingExpirationCache[K, V]":
        return cls(
            sweep_interval_ns=options.sweep_interval_ns,
            should_dispose=options.should_dispose,
            dispose_item=options.dispose_item,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compute_if_absent(self, key: K, supplier: Supplier[K, V], ttl_ns: int) -> V:
        """Return the value for `key`, computing it with `supplier` if missing.

        The entry's deadline is renewed to now + ttl_ns on every call, also
        for entries that already expired but were not swept yet. `supplier`
        runs at most once per key across concurrent callers; if it raises,
        the exception propagates and nothing is stored.
        """
        ttl_ns = int(ttl_ns)
        self.clean_up()

        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                entry = entry.renewed(time.monotonic_ns(), ttl_ns)
                self._store[key] = entry
                return entry.value

        return self._create(key, supplier, ttl_ns).value

    def remove(self, key: K) -> None:
        """Remove `key` and dispose its value, then run the gated sweep.

        The disposal predicate is not consulted. Missing keys are ignored.
        """
        with self._lock:
            entry = self._store.pop(key, None)
        if entry is not None:
            self._dispose(entry.value)
        self.clean_up()

    def clear(self) -> None:
        """Remove and dispose every entry.

        Each removal is atomic for its key. A failing disposal action does
        not stop the others; the failures are raised together as a
        DisposalError once the store is empty.
        """
        failures: List[Tuple[K, BaseException]] = []
        for key in self._keys():
            with self._lock:
                entry = self._store.pop(key, None)
            if entry is None:
                continue
            try:
                self._dispose(entry.value)
            except Exception as e:
                failures.append((key, e))

        if failures:
            raise DisposalError(failures)

    def get_entries(self) -> Dict[K, V]:
        """Return a copy of all key/value pairs, including expired entries."""
        with self._lock:
            return {key: entry.value for key, entry in self._store.items()}

    def size(self) -> int:
        """Return the number of entries, including expired entries."""
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.size()

    @property
    def sweep_interval_ns(self) -> int:
        return self._sweep_interval_ns

    def set_sweep_interval_ns(self, sweep_interval_ns: int) -> None:
        """Change the sweep interval and restart the countdown from now."""
        self._sweep_interval_ns = int(sweep_interval_ns)
        self._next_sweep_ns = time.monotonic_ns() + self._sweep_interval_ns

    def clean_up(self) -> int:
        """Sweep expired entries if the sweep deadline has passed.

        Returns the number of entries removed; 0 when the deadline has not
        been reached or another caller is already advancing it.
        """
        now = time.monotonic_ns()
        if now < self._next_sweep_ns:
            return 0

        if not self._sweep_lock.acquire(blocking=False):
            return 0
        try:
            # Another caller may have swept between our check and the acquire.
            if now < self._next_sweep_ns:
                return 0
            self._next_sweep_ns = now + self._sweep_interval_ns
        finally:
            self._sweep_lock.release()

        removed = 0
        for key in self._keys():
            if self._remove_if_expired(key):
                removed += 1

        if removed:
            logger.debug("Swept %d expired cache entries", removed)
        return removed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _keys(self) -> List[K]:
        with self._lock:
            return list(self._store)

    def _create(self, key: K, supplier: Supplier[K, V], ttl_ns: int) -> CacheEntry[V]:
        while True:
            with self._lock:
                entry = self._store.get(key)
                if entry is not None:
                    entry = entry.renewed(time.monotonic_ns(), ttl_ns)
                    self._store[key] = entry
                    return entry
                creation = self._pending.setdefault(key, _Creation())
                if creation.owner == threading.get_ident():
                    raise RuntimeError(f"Recursive compute_if_absent for key {key!r}")

            with creation.lock:
                with self._lock:
                    # Released by a finished creator: re-read the store.
                    if self._pending.get(key) is not creation:
                        continue
                    creation.owner = threading.get_ident()

                try:
                    value = supplier(key)
                    entry = CacheEntry(value=value, expires_at_ns=time.monotonic_ns() + ttl_ns)
                    with self._lock:
                        self._store[key] = entry
                    return entry
                finally:
                    with self._lock:
                        if self._pending.get(key) is creation:
                            del self._pending[key]

    def _remove_if_expired(self, key: K) -> bool:
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            return False

        if not self._should_clean_up(entry):
            return False

        with self._lock:
            # Renewed or removed while we were checking.
            if self._store.get(key) is not entry:
                return False
            del self._store[key]

        try:
            self._dispose(entry.value)
        except Exception:
            logger.exception("Disposal of swept cache entry %r failed", key)
        return True

    def _should_clean_up(self, entry: CacheEntry[V]) -> bool:
        if not entry.is_expired(time.monotonic_ns()):
            return False
        if self._should_dispose is None:
            return True
        return bool(self._should_dispose(entry.value))

    def _dispose(self, value: V) -> None:
        if self._dispose_item is not None:
            self._dispose_item(value)
