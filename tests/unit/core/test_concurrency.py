"""Unit tests for first-read materialization under concurrent access."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext

from lazy_mapper import Model, one
from lazy_mapper.config import MapperConfig, config_scope

_WORKERS = 8


class _SlowCounter:
    def __init__(self) -> None:
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, raw: object) -> str:
        with self._lock:
            self.calls += 1
        time.sleep(0.01)
        return f"mapped:{raw}"


def test_concurrent_first_reads_run_the_coercion_once() -> None:
    counter = _SlowCounter()

    class Slow(Model):
        value = one(str, coercion=counter)

    instance = Slow.from_record({"value": "x"})
    barrier = threading.Barrier(_WORKERS)

    def read() -> str:
        barrier.wait()
        return instance.value

    with ThreadPoolExecutor(max_workers=_WORKERS) as pool:
        results = list(pool.map(lambda _: read(), range(_WORKERS)))

    assert results == ["mapped:x"] * _WORKERS
    assert counter.calls == 1


def test_distinct_instances_materialize_independently() -> None:
    counter = _SlowCounter()

    class Slow(Model):
        value = one(str, coercion=counter)

    instances = [Slow.from_record({"value": index}) for index in range(_WORKERS)]

    with ThreadPoolExecutor(max_workers=_WORKERS) as pool:
        results = list(pool.map(lambda item: item.value, instances))

    assert results == [f"mapped:{index}" for index in range(_WORKERS)]
    assert counter.calls == _WORKERS


def test_thread_safe_setting_controls_the_instance_lock() -> None:
    class Plain(Model):
        value = one(str)

    with config_scope(MapperConfig(thread_safe=False)):
        unlocked = Plain.from_record({"value": "a"})
    locked = Plain.from_record({"value": "a"})

    assert isinstance(unlocked._lock, nullcontext)
    assert not isinstance(locked._lock, nullcontext)
    assert unlocked.value == locked.value == "a"
