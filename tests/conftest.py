import sys
from pathlib import Path
from typing import Callable, List

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


class ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Timer factory whose clock only moves when a test calls advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[ManualTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> int:
        self.now += seconds
        fired = 0
        for timer in sorted(self.live, key=lambda t: t.due):
            if timer.due <= self.now and not timer.cancelled:
                timer.fired = True
                timer.callback()
                fired += 1
        return fired


@pytest.fixture()
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture(autouse=True)
def _reset_default_toast_store():
    from smartcity.ui.toast import reset_default_store

    reset_default_store()
    yield
    reset_default_store()
