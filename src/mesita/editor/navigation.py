"""Navigation lock.

Moving the active cell is a multi-step process (set state, open the cell
editor, focus it). Rapid repeated navigation requests are serialized by a
lock owned by the editor session:

- ``acquire()`` returns False while held; the duplicate request is dropped
  by the caller
- ``release()`` unlocks, then invokes the pending completion callback once
- ``reset()`` unlocks, discards the pending callback and cancels the
  timeout, invoking nothing (document switch)
- a held lock is force-released after ``navigation_lock_timeout`` seconds
  with a warning; the pending callback is discarded

Thread Safety:
The default scheduler fires the timeout on a timer thread, so lock state is
guarded by an internal ``threading.Lock``. Callbacks run outside it.

"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol

from mesita.config import get_editor_config
from mesita.utils.logger import get_logger

logger = get_logger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules a cancellable callback after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Scheduler backed by daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class NavigationLock:
    """Boolean mutex with a safety timeout and a completion callback.

    Example:
        >>> lock = NavigationLock()
        >>> lock.acquire(), lock.acquire()
        (True, False)
        >>> lock.release()
        >>> lock.locked
        False

    """

    def __init__(self, scheduler: Scheduler | None = None, timeout: float | None = None) -> None:
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._timeout = timeout
        self._mutex = threading.Lock()
        self._locked = False
        self._pending: Callable[[], None] | None = None
        self._timer: TimerHandle | None = None
        # Incremented per acquire; a timeout only fires for its own generation
        self._generation = 0

    @property
    def locked(self) -> bool:
        with self._mutex:
            return self._locked

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return get_editor_config().navigation_lock_timeout

    def acquire(self) -> bool:
        """Take the lock. Returns False if navigation is already in progress."""
        with self._mutex:
            if self._locked:
                return False
            self._locked = True
            self._generation += 1
            generation = self._generation
            self._timer = self._scheduler.call_later(
                self.timeout, lambda: self._on_timeout(generation)
            )
            return True

    def release(self) -> None:
        """Release the lock and invoke the pending callback, if any."""
        with self._mutex:
            self._unlock()
            callback = self._pending
            self._pending = None
        if callback is not None:
            callback()

    def reset(self) -> None:
        """Release the lock and discard the pending callback."""
        with self._mutex:
            self._unlock()
            self._pending = None

    def set_pending_callback(self, callback: Callable[[], None]) -> None:
        """Attach the callback to invoke on the next release."""
        with self._mutex:
            self._pending = callback

    def consume_pending_callback(self) -> Callable[[], None] | None:
        """Take the pending callback without invoking it."""
        with self._mutex:
            callback = self._pending
            self._pending = None
            return callback

    def _unlock(self) -> None:
        self._locked = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self, generation: int) -> None:
        with self._mutex:
            if not self._locked or generation != self._generation:
                return
            logger.warning("Navigation lock timed out - forcing release")
            self._timer = None
            self._locked = False
            self._pending = None


__all__ = ["NavigationLock", "Scheduler", "ThreadingScheduler", "TimerHandle"]
