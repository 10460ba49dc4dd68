import pytest

import sliding_cache.cache as cache_mod

MS = 1_000_000


class FakeClock:
    """Manually advanced stand-in for time.monotonic_ns."""

    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms * MS


class Disposals:
    """Records every value handed to the disposal action."""

    def __init__(self) -> None:
        self.values = []

    def __call__(self, value) -> None:
        self.values.append(value)


@pytest.fixture
def clock(monkeypatch):
    c = FakeClock()
    monkeypatch.setattr(cache_mod.time, "monotonic_ns", c)
    return c


@pytest.fixture
def disposed():
    return Disposals()
