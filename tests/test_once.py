from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from flowbundle.program.once import OnceCell


def test_factory_runs_once_under_contention() -> None:
    cell: OnceCell[object] = OnceCell()
    calls = []
    barrier = threading.Barrier(8)

    def factory() -> object:
        calls.append(1)
        time.sleep(0.05)
        return object()

    def worker() -> object:
        barrier.wait()
        return cell.get(factory)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: worker(), range(8)))

    assert len(calls) == 1
    assert all(result is results[0] for result in results)


def test_failure_cached_and_reraised() -> None:
    cell: OnceCell[int] = OnceCell()
    calls = []

    def factory() -> int:
        calls.append(1)
        raise ValueError("boom")

    with pytest.raises(ValueError) as first:
        cell.get(factory)
    with pytest.raises(ValueError) as second:
        cell.get(lambda: 42)

    assert first.value is second.value
    assert len(calls) == 1
    assert cell.is_resolved
    assert cell.peek() is None


def test_resolved_cell_never_calls_factory() -> None:
    cell = OnceCell.resolved("ready")

    def factory() -> str:
        raise AssertionError("must not run")

    assert cell.get(factory) == "ready"
    assert cell.peek() == "ready"


def test_failure_shared_by_concurrent_first_callers() -> None:
    cell: OnceCell[int] = OnceCell()
    calls = []
    callers = 8
    barrier = threading.Barrier(callers)

    def factory() -> int:
        calls.append(1)
        time.sleep(0.05)
        raise RuntimeError("resolution failed")

    def worker() -> BaseException | None:
        barrier.wait()
        try:
            cell.get(factory)
        except RuntimeError as exc:
            return exc
        return None

    with ThreadPoolExecutor(max_workers=callers) as pool:
        errors = list(pool.map(lambda _: worker(), range(callers)))

    assert len(calls) == 1
    assert errors[0] is not None
    assert all(error is errors[0] for error in errors)
