"""Tests for nxquery.scheduler."""

from __future__ import annotations

import logging
import threading

import pytest

from nxquery.scheduler import ChangeScheduler, SchedulerState


@pytest.fixture
def gate():
    started = threading.Event()
    release = threading.Event()
    return started, release


def test_requests_during_a_pass_collapse_into_one_trailing_pass(gate) -> None:
    started, release = gate
    calls = []

    def task() -> None:
        calls.append(len(calls))
        if len(calls) == 1:
            started.set()
            assert release.wait(5)

    scheduler = ChangeScheduler(task)
    try:
        assert scheduler.schedule() is not None
        assert started.wait(5)
        assert scheduler.state is SchedulerState.RUNNING

        assert scheduler.schedule() is not None
        for _ in range(5):
            assert scheduler.schedule() is None
        assert scheduler.state is SchedulerState.RUNNING

        release.set()
        assert scheduler.flush(timeout=5)
    finally:
        scheduler.close()

    assert calls == [0, 1]
    assert scheduler.pass_count == 2
    assert scheduler.state is SchedulerState.IDLE


def test_passes_never_overlap() -> None:
    active = []
    overlaps = []
    lock = threading.Lock()

    def task() -> None:
        with lock:
            active.append(1)
            if len(active) > 1:
                overlaps.append(len(active))
        threading.Event().wait(0.01)
        with lock:
            active.pop()

    scheduler = ChangeScheduler(task)
    try:
        for _ in range(20):
            scheduler.schedule()
        assert scheduler.flush(timeout=5)
    finally:
        scheduler.close()

    assert overlaps == []
    assert 1 <= scheduler.pass_count <= 20


def test_failed_pass_is_logged_and_later_passes_still_run(caplog) -> None:
    outcomes = iter([RuntimeError("boom"), None])
    completed = []

    def task() -> None:
        outcome = next(outcomes)
        if outcome is not None:
            raise outcome
        completed.append(True)

    scheduler = ChangeScheduler(task)
    try:
        with caplog.at_level(logging.ERROR, logger="nxquery"):
            scheduler.schedule()
            assert scheduler.flush(timeout=5)
        scheduler.schedule()
        assert scheduler.flush(timeout=5)
    finally:
        scheduler.close()

    assert completed == [True]
    assert scheduler.failure_count == 1
    assert scheduler.pass_count == 2
    errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert "Sync pass failed" in errors[0].getMessage()
    assert "nxquery sync --verbose" in errors[0].getMessage()
    assert errors[0].exc_info is not None


def test_flush_without_passes_returns_immediately() -> None:
    scheduler = ChangeScheduler(lambda: None)
    try:
        assert scheduler.flush(timeout=0) is True
        assert scheduler.state is SchedulerState.IDLE
    finally:
        scheduler.close()


def test_flush_times_out_while_pass_is_blocked(gate) -> None:
    started, release = gate

    def task() -> None:
        started.set()
        release.wait(5)

    scheduler = ChangeScheduler(task)
    try:
        scheduler.schedule()
        assert started.wait(5)
        assert scheduler.flush(timeout=0.05) is False
        release.set()
        assert scheduler.flush(timeout=5) is True
    finally:
        release.set()
        scheduler.close()


def test_closed_scheduler_ignores_requests() -> None:
    calls = []
    scheduler = ChangeScheduler(lambda: calls.append(1))
    scheduler.close()

    assert scheduler.schedule() is None
    assert calls == []
