"""Tests for the navigation lock."""

import logging

import pytest

from mesita.config import EditorConfig, editor_config_context
from mesita.editor.navigation import NavigationLock


class TestAcquireRelease:
    """Basic mutual exclusion."""

    def test_second_acquire_fails(self, scheduler) -> None:
        lock = NavigationLock(scheduler)
        assert lock.acquire()
        assert not lock.acquire()
        assert lock.locked

    def test_release_unlocks(self, scheduler) -> None:
        lock = NavigationLock(scheduler)
        lock.acquire()
        lock.release()
        assert not lock.locked
        assert lock.acquire()

    def test_release_cancels_timeout(self, scheduler) -> None:
        lock = NavigationLock(scheduler)
        lock.acquire()
        lock.release()
        assert scheduler.pending == []


class TestPendingCallback:
    """Completion callbacks."""

    def test_release_invokes_callback_once(self, scheduler) -> None:
        calls: list[int] = []
        lock = NavigationLock(scheduler)
        lock.acquire()
        lock.set_pending_callback(lambda: calls.append(1))
        lock.release()
        lock.release()
        assert calls == [1]

    def test_callback_runs_after_unlock(self, scheduler) -> None:
        lock = NavigationLock(scheduler)
        observed: list[bool] = []
        lock.acquire()
        lock.set_pending_callback(lambda: observed.append(lock.locked))
        lock.release()
        assert observed == [False]

    def test_reset_discards_callback(self, scheduler) -> None:
        calls: list[int] = []
        lock = NavigationLock(scheduler)
        lock.acquire()
        lock.set_pending_callback(lambda: calls.append(1))
        lock.reset()
        assert not lock.locked
        assert calls == []
        assert scheduler.pending == []

    def test_consume_pending_callback(self, scheduler) -> None:
        lock = NavigationLock(scheduler)
        callback = lambda: None  # noqa: E731
        lock.set_pending_callback(callback)
        assert lock.consume_pending_callback() is callback
        assert lock.consume_pending_callback() is None


class TestTimeout:
    """Forced release after the safety timeout."""

    def test_timeout_forces_release(self, scheduler, caplog: pytest.LogCaptureFixture) -> None:
        calls: list[int] = []
        lock = NavigationLock(scheduler)
        lock.acquire()
        lock.set_pending_callback(lambda: calls.append(1))

        with caplog.at_level(logging.WARNING, logger="mesita"):
            scheduler.fire_all()

        assert not lock.locked
        assert calls == []
        assert "forcing release" in caplog.text

    def test_stale_timeout_is_ignored(self, scheduler) -> None:
        lock = NavigationLock(scheduler)
        lock.acquire()
        stale = scheduler.timers[0]
        lock.release()
        lock.acquire()
        stale.callback()
        assert lock.locked

    def test_timeout_from_config(self, scheduler) -> None:
        with editor_config_context(EditorConfig(navigation_lock_timeout=2.5)):
            lock = NavigationLock(scheduler)
            lock.acquire()
        assert scheduler.timers[0].delay == 2.5

    def test_explicit_timeout(self, scheduler) -> None:
        lock = NavigationLock(scheduler, timeout=0.1)
        lock.acquire()
        assert lock.timeout == 0.1
        assert scheduler.timers[0].delay == 0.1


class TestThreadingScheduler:
    """The default scheduler."""

    def test_default_scheduler_timer_is_cancelled(self) -> None:
        lock = NavigationLock(timeout=30.0)
        assert lock.acquire()
        lock.release()
        assert not lock.locked
