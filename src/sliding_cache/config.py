"""Default sweep settings, overridable from the environment.

SWEEP_INTERVAL_NS gates how often caller traffic may trigger a sweep;
BACKGROUND_SWEEP_SECONDS is the tick of the opt-in asyncio sweeper.
Malformed or missing variables fall back to the built-in defaults.
"""

from __future__ import annotations

import os
from typing import Callable, TypeVar

N = TypeVar("N", int, float)

NANOS_PER_SECOND = 1_000_000_000


def _env_number(name: str, default: N, parse: Callable[[str], N]) -> N:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        return default


SWEEP_INTERVAL_NS = _env_number(
    "SLIDING_CACHE_SWEEP_INTERVAL_NS", 10 * 60 * NANOS_PER_SECOND, int
)

BACKGROUND_SWEEP_SECONDS = _env_number("SLIDING_CACHE_BACKGROUND_SWEEP_SECONDS", 60.0, float)
