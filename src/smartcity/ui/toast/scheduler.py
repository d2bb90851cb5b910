from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, FrozenSet, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def threading_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Start a daemon ``threading.Timer`` so pending removals never block exit."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class RemovalScheduler:
    """Per-toast removal timers.

    At most one timer is pending per toast id; scheduling an id that already
    has one is a no-op. When a timer fires its id leaves the pending set and
    ``on_expire`` is called with the id. The internal lock is released before
    ``on_expire`` runs, so the callback may take other locks freely.
    """

    def __init__(
        self,
        delay: float,
        on_expire: Callable[[str], None],
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self.delay = delay
        self._on_expire = on_expire
        self._timer_factory = timer_factory or threading_timer
        self._pending: Dict[str, TimerHandle] = {}
        self._lock = threading.RLock()

    def schedule(self, toast_id: str) -> bool:
        with self._lock:
            if toast_id in self._pending:
                return False
            self._pending[toast_id] = self._timer_factory(self.delay, lambda: self._fire(toast_id))
            logger.debug("Scheduled removal of toast %s in %.1fs", toast_id, self.delay)
            return True

    def _fire(self, toast_id: str) -> None:
        with self._lock:
            if self._pending.pop(toast_id, None) is None:
                # cancelled after the timer had already started running
                return
        logger.debug("Removal timer fired for toast %s", toast_id)
        self._on_expire(toast_id)

    def cancel(self, toast_id: str) -> bool:
        with self._lock:
            handle = self._pending.pop(toast_id, None)
        if handle is None:
            return False
        handle.cancel()
        logger.debug("Cancelled removal of toast %s", toast_id)
        return True

    def cancel_all(self) -> int:
        with self._lock:
            handles = list(self._pending.values())
            self._pending.clear()
        for handle in handles:
            handle.cancel()
        return len(handles)

    def is_pending(self, toast_id: str) -> bool:
        with self._lock:
            return toast_id in self._pending

    @property
    def pending_ids(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
