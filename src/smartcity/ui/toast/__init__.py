"""
Toast notifications.

A :class:`ToastStore` owns the visible toasts and is normally created once by
the service host and passed to whatever needs it. The module-level
:func:`toast`, :func:`dismiss` and :func:`subscribe` helpers act on a default
store for code that has no store at hand.
"""
from __future__ import annotations

import threading
from typing import Any, Optional

from .models import Toast, ToastState, ToastVariant
from .scheduler import RemovalScheduler
from .store import Subscription, ToastHandle, ToastStore

_default_store: Optional[ToastStore] = None
_default_lock = threading.Lock()


def get_default_store() -> ToastStore:
    """Return the process default store, creating one if necessary."""
    global _default_store
    with _default_lock:
        if _default_store is None:
            _default_store = ToastStore()
        return _default_store


def set_default_store(store: ToastStore) -> None:
    global _default_store
    with _default_lock:
        _default_store = store


def reset_default_store() -> None:
    """Close and forget the default store (useful in tests)."""
    global _default_store
    with _default_lock:
        store, _default_store = _default_store, None
    if store is not None:
        store.close()


def toast(title: Any = None, description: Any = None, **props: Any) -> ToastHandle:
    return get_default_store().toast(title, description, **props)


def dismiss(toast_id: Optional[str] = None) -> None:
    get_default_store().dismiss(toast_id)


def subscribe(listener) -> Subscription:
    return get_default_store().subscribe(listener)


__all__ = [
    "RemovalScheduler",
    "Subscription",
    "Toast",
    "ToastHandle",
    "ToastState",
    "ToastStore",
    "ToastVariant",
    "dismiss",
    "get_default_store",
    "reset_default_store",
    "set_default_store",
    "subscribe",
    "toast",
]
