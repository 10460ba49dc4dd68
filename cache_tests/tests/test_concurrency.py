import threading
import time

from sliding_cache.cache import SlidingExpirationCache

SECOND = 1_000_000_000


def _run_threads(n, target):
    start = threading.Barrier(n)
    results = [None] * n
    errors = []

    def worker(i):
        try:
            start.wait()
            results[i] = target(i)
        except Exception as e:  # surfaced through `errors`
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    return results


def test_concurrent_creation_calls_supplier_once():
    calls = []
    lock = threading.Lock()

    def slow_supplier(key):
        with lock:
            calls.append(key)
        time.sleep(0.05)
        return object()

    c = SlidingExpirationCache()
    results = _run_threads(16, lambda i: c.compute_if_absent("k", slow_supplier, 60 * SECOND))

    assert calls == ["k"]
    assert all(r is results[0] for r in results)
    assert c.size() == 1


def test_concurrent_creation_of_distinct_keys_does_not_serialize_on_one_key():
    c = SlidingExpirationCache()
    results = _run_threads(8, lambda i: c.compute_if_absent(i, lambda k: k * 10, 60 * SECOND))

    assert results == [i * 10 for i in range(8)]
    assert c.get_entries() == {i: i * 10 for i in range(8)}


def test_failed_creation_lets_a_waiter_retry_once():
    attempts = []
    lock = threading.Lock()

    def flaky(key):
        with lock:
            attempts.append(key)
            first = len(attempts) == 1
        time.sleep(0.02)
        if first:
            raise RuntimeError("first attempt fails")
        return "ok"

    c = SlidingExpirationCache()
    outcomes = []

    def call(i):
        try:
            return c.compute_if_absent("k", flaky, 60 * SECOND)
        except RuntimeError:
            outcomes.append("failed")
            return None

    results = _run_threads(6, call)

    assert outcomes == ["failed"]
    assert len(attempts) == 2
    assert sorted(r for r in results if r is not None) == ["ok"] * 5
    assert c.get_entries() == {"k": "ok"}


def test_concurrent_sweeps_dispose_each_value_once():
    disposed = []
    lock = threading.Lock()

    def dispose(value):
        with lock:
            disposed.append(value)

    c = SlidingExpirationCache(sweep_interval_ns=0, dispose_item=dispose)
    for i in range(200):
        c.compute_if_absent(i, lambda k: k, 0)
    time.sleep(0.01)

    _run_threads(8, lambda i: c.clean_up())

    assert sorted(disposed) == list(range(200))
    assert c.size() == 0


def test_supplier_reentering_its_own_key_fails_fast():
    c = SlidingExpirationCache()
    outcome = {}

    def reentrant(key):
        return c.compute_if_absent(key, lambda k: "inner", 60 * SECOND)

    def worker():
        try:
            outcome["value"] = c.compute_if_absent("k", reentrant, 60 * SECOND)
        except RuntimeError as e:
            outcome["error"] = e

    t = threading.Thread(target=worker, daemon=True)
    t.start()
    t.join(timeout=2)

    assert not t.is_alive()
    assert "Recursive compute_if_absent" in str(outcome["error"])
    assert c.size() == 0

    # The failed creation leaves the key usable
    assert c.compute_if_absent("k", lambda k: "outer", 60 * SECOND) == "outer"


def test_supplier_may_compute_other_keys():
    c = SlidingExpirationCache()

    def outer(key):
        return c.compute_if_absent("inner", lambda k: "I", 60 * SECOND) + "O"

    assert c.compute_if_absent("outer", outer, 60 * SECOND) == "IO"
    assert c.get_entries() == {"inner": "I", "outer": "IO"}
