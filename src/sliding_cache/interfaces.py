"""Callable contracts supplied by cache users.

Defines the supplier, disposal-predicate and disposal-action protocols
the cache calls into. Plain functions and lambdas satisfy them.
"""

from __future__ import annotations

from typing import Protocol, TypeVar

K_contra = TypeVar("K_contra", contravariant=True)
V_co = TypeVar("V_co", covariant=True)
V_contra = TypeVar("V_contra", contravariant=True)


class Supplier(Protocol[K_contra, V_co]):
    """Computes the value for a missing key. May raise; nothing is stored then."""
    def __call__(self, key: K_contra) -> V_co:
        ...


class ShouldDispose(Protocol[V_contra]):
    """Decides whether an expired value may be removed at sweep time."""
    def __call__(self, value: V_contra) -> bool:
        ...


class DisposeItem(Protocol[V_contra]):
    """Side-effecting cleanup run once on a value leaving the cache."""
    def __call__(self, value: V_contra) -> None:
        ...
