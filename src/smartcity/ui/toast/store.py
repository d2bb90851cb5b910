from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union

from .models import (
    AddToast,
    DismissToast,
    RemoveToast,
    Toast,
    ToastState,
    ToastVariant,
    UpdateToast,
)
from .reducer import TOAST_LIMIT, Action, reduce
from .scheduler import RemovalScheduler, TimerFactory

logger = logging.getLogger(__name__)

# Reference delay is 1_000_000 ms: long enough that only an explicit dismissal
# takes a toast off screen before it is purged from memory.
TOAST_REMOVE_DELAY = 1000.0
MAX_TOAST_ID = 2**53 - 1

Listener = Callable[[ToastState], None]


class ToastIdGenerator:
    """Monotonic counter producing string ids, wrapping at MAX_TOAST_ID."""

    def __init__(self, start: int = 0, bound: int = MAX_TOAST_ID) -> None:
        self._count = start
        self._bound = bound
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            self._count = (self._count + 1) % self._bound
            return str(self._count)


class Subscription:
    """Registration token returned by :meth:`ToastStore.subscribe`."""

    def __init__(self, store: "ToastStore", callback: Listener) -> None:
        self._store = store
        self.callback = callback

    @property
    def active(self) -> bool:
        return self._store._is_registered(self)

    def unsubscribe(self) -> None:
        self._store._unregister(self)

    __call__ = unsubscribe


@dataclass(frozen=True)
class ToastHandle:
    """What a caller gets back from :meth:`ToastStore.toast`."""

    id: str
    _store: "ToastStore" = field(repr=False, compare=False)

    def update(self, **changes: Any) -> None:
        self._store.update(self.id, **changes)

    def dismiss(self) -> None:
        self._store.dismiss(self.id)


class ToastStore:
    """Holds the visible toasts and notifies subscribers of every change.

    All state transitions go through :meth:`dispatch`, which runs the pure
    reducer, swaps in the new state and calls listeners synchronously in
    registration order. Removal timers may fire on other threads; a re-entrant
    lock keeps dispatches from interleaving.
    """

    def __init__(
        self,
        limit: int = TOAST_LIMIT,
        remove_delay: float = TOAST_REMOVE_DELAY,
        timer_factory: Optional[TimerFactory] = None,
        id_generator: Optional[Callable[[], str]] = None,
    ) -> None:
        self.limit = max(1, int(limit))
        self._state = ToastState()
        self._subscriptions: List[Subscription] = []
        self._lock = threading.RLock()
        self._next_id = id_generator or ToastIdGenerator()
        self.scheduler = RemovalScheduler(
            delay=remove_delay,
            on_expire=lambda toast_id: self.dispatch(RemoveToast(toast_id)),
            timer_factory=timer_factory,
        )

    @classmethod
    def from_settings(cls, settings, timer_factory: Optional[TimerFactory] = None) -> "ToastStore":
        return cls(
            limit=settings.limit,
            remove_delay=settings.remove_delay_seconds,
            timer_factory=timer_factory,
        )

    @property
    def state(self) -> ToastState:
        with self._lock:
            return self._state

    @property
    def toasts(self):
        return self.state.toasts

    # -- listeners -------------------------------------------------------

    def subscribe(self, listener: Union[Listener, Any]) -> Subscription:
        """Register ``listener`` for state snapshots.

        Accepts a callable or an object with an ``on_state_change(state)``
        method. Each call yields a distinct registration.
        """
        callback = getattr(listener, "on_state_change", listener)
        if not callable(callback):
            raise TypeError(f"Toast listener must be callable: {listener!r}")
        sub = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(sub)
            logger.debug("Subscribed toast listener %s", callback)
        return sub

    def _is_registered(self, sub: Subscription) -> bool:
        with self._lock:
            return any(s is sub for s in self._subscriptions)

    def _unregister(self, sub: Subscription) -> None:
        with self._lock:
            for i, s in enumerate(self._subscriptions):
                if s is sub:
                    del self._subscriptions[i]
                    logger.debug("Unsubscribed toast listener %s", sub.callback)
                    return

    # -- dispatch --------------------------------------------------------

    def dispatch(self, action: Action) -> ToastState:
        with self._lock:
            if isinstance(action, DismissToast):
                self._schedule_removals(action.toast_id)
            elif isinstance(action, RemoveToast):
                if action.toast_id is None:
                    self.scheduler.cancel_all()
                else:
                    self.scheduler.cancel(action.toast_id)

            self._state = reduce(self._state, action, self.limit)
            state = self._state
            subscriptions = list(self._subscriptions)
            logger.debug(
                "Dispatched %s -> %d toast(s), notifying %d listener(s)",
                action.type.value,
                len(state),
                len(subscriptions),
            )
            for sub in subscriptions:
                try:
                    sub.callback(state)
                except Exception as exc:
                    logger.exception("Error in toast listener %s: %s", sub.callback, exc)
        return state

    def _schedule_removals(self, toast_id: Optional[str]) -> None:
        if toast_id is None:
            for t in self._state.toasts:
                self.scheduler.schedule(t.id)
        elif self._state.get(toast_id) is not None:
            self.scheduler.schedule(toast_id)

    # -- public API ------------------------------------------------------

    def toast(
        self,
        title: Any = None,
        description: Any = None,
        variant: Union[ToastVariant, str] = ToastVariant.DEFAULT,
        action: Any = None,
        **props: Any,
    ) -> ToastHandle:
        """Show a new toast and return its handle.

        ``variant`` is checked before anything is dispatched; an unknown value
        raises ``ValueError`` and leaves the store untouched.
        """
        variant = ToastVariant(variant)
        toast_id = self._next_id()
        handle = ToastHandle(id=toast_id, _store=self)

        def on_open_change(is_open: bool) -> None:
            if not is_open:
                handle.dismiss()

        self.dispatch(
            AddToast(
                Toast(
                    id=toast_id,
                    title=title,
                    description=description,
                    open=True,
                    variant=variant,
                    action=action,
                    on_open_change=on_open_change,
                    extra=dict(props),
                )
            )
        )
        return handle

    def update(self, toast_id: str, **changes: Any) -> None:
        """Merge ``changes`` into a toast; an unknown ``variant`` raises ValueError before dispatch."""
        if "variant" in changes:
            changes["variant"] = ToastVariant(changes["variant"])
        self.dispatch(UpdateToast(toast_id, changes))

    def dismiss(self, toast_id: Optional[str] = None) -> None:
        self.dispatch(DismissToast(toast_id))

    def close(self) -> int:
        """Cancel every pending removal timer; returns how many were pending."""
        cancelled = self.scheduler.cancel_all()
        if cancelled:
            logger.info("Cancelled %d pending toast removal(s)", cancelled)
        return cancelled
