"""Shared fixtures for Mesita tests."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass

import pytest

from mesita.config import reset_editor_config


@dataclass
class ManualTimer:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers only fire when a test fires them."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def fire_all(self) -> None:
        for timer in self.pending:
            timer.cancelled = True
            timer.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture(autouse=True)
def _reset_editor_config() -> Iterator[None]:
    yield
    reset_editor_config()


# Two columns, one body row. Cell "2" spans offsets [30, 31).
SIMPLE_TABLE = "| A | B |\n| --- | --- |\n| 1 | 2 |"


@pytest.fixture
def simple_table() -> str:
    return SIMPLE_TABLE
