from __future__ import annotations

from typing import Hashable, List, Sequence, Tuple


class SlidingCacheError(Exception):
    """Base error for the sliding expiration cache."""


class ValidationError(SlidingCacheError):
    """Raised when a configuration value or argument is invalid."""


class DisposalError(SlidingCacheError):
    """Raised by clear() when one or more disposal actions failed.

    Every entry has already been removed when this is raised; `failures`
    holds the (key, exception) pairs in the order they happened.
    """

    def __init__(self, failures: Sequence[Tuple[Hashable, BaseException]]) -> None:
        self.failures: List[Tuple[Hashable, BaseException]] = list(failures)
        keys = ", ".join(repr(key) for key, _ in self.failures)
        super().__init__(f"Disposal failed for {len(self.failures)} cache entries: {keys}")
