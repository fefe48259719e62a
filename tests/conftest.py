from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest


@dataclass
class FakeTimer:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Scheduler driven by a virtual clock; timers fire only on ``advance``."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(due=self.now + delay_seconds, callback=callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((t for t in self.timers if t.due <= self.now and not t.cancelled), key=lambda t: t.due)
        for timer in due:
            self.timers.remove(timer)
            timer.callback()

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("neonatal_iwl")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
