"""Pure state transitions for the toast store.

Every function here returns a new :class:`ToastState` and never touches timers
or listeners; the store performs those side effects around :func:`reduce`.
Unknown ids are no-ops and hand back the incoming state object.
"""
from __future__ import annotations

from typing import Union

from .models import AddToast, DismissToast, RemoveToast, ToastState, UpdateToast

TOAST_LIMIT = 1

Action = Union[AddToast, UpdateToast, DismissToast, RemoveToast]


def reduce(state: ToastState, action: Action, limit: int = TOAST_LIMIT) -> ToastState:
    if isinstance(action, AddToast):
        return ToastState(toasts=((action.toast,) + state.toasts)[: max(1, limit)])

    if isinstance(action, UpdateToast):
        if state.get(action.toast_id) is None:
            return state
        return ToastState(
            toasts=tuple(
                t.merged(action.changes) if t.id == action.toast_id else t
                for t in state.toasts
            )
        )

    if isinstance(action, DismissToast):
        if action.toast_id is not None and state.get(action.toast_id) is None:
            return state
        return ToastState(
            toasts=tuple(
                t.closed() if action.toast_id is None or t.id == action.toast_id else t
                for t in state.toasts
            )
        )

    if isinstance(action, RemoveToast):
        if action.toast_id is None:
            return ToastState()
        if state.get(action.toast_id) is None:
            return state
        return ToastState(toasts=tuple(t for t in state.toasts if t.id != action.toast_id))

    raise TypeError(f"Unsupported toast action: {action!r}")
