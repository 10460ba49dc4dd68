import dataclasses

import pytest

from sliding_cache.config import SWEEP_INTERVAL_NS
from sliding_cache.models import CacheEntry, CacheOptions


def test_cache_entry_expires_strictly_after_deadline():
    e = CacheEntry(value="v", expires_at_ns=100)

    assert not e.is_expired(99)
    assert not e.is_expired(100)
    assert e.is_expired(101)


def test_cache_entry_renewed_returns_new_record():
    e = CacheEntry(value="v", expires_at_ns=100)
    r = e.renewed(now_ns=500, ttl_ns=50)

    assert r is not e
    assert r.value == "v"
    assert r.expires_at_ns == 550
    assert e.expires_at_ns == 100

    with pytest.raises(dataclasses.FrozenInstanceError):
        e.expires_at_ns = 1


def test_cache_options_defaults():
    o = CacheOptions()

    assert o.sweep_interval_ns == SWEEP_INTERVAL_NS
    assert o.should_dispose is None
    assert o.dispose_item is None
