from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

OpenChangeCallback = Callable[[bool], None]


class ToastVariant(Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


# Fields a caller may change with an update; everything else lands in ``extra``.
_UPDATABLE = ("title", "description", "variant", "action", "open", "on_open_change")


@dataclass(frozen=True)
class Toast:
    """A single notification as held by the store.

    ``title``, ``description`` and ``action`` are opaque to the store and are
    handed to the rendering layer untouched, as is everything in ``extra``.
    """

    id: str
    title: Any = field(default=None, hash=False)
    description: Any = field(default=None, hash=False)
    open: bool = True
    variant: ToastVariant = ToastVariant.DEFAULT
    action: Any = field(default=None, hash=False)
    on_open_change: Optional[OpenChangeCallback] = field(default=None, compare=False, repr=False)
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def merged(self, changes: Mapping[str, Any]) -> "Toast":
        """Return a copy with ``changes`` shallow-merged in. The id never changes."""
        known: Dict[str, Any] = {}
        extra = dict(self.extra)
        for key, value in changes.items():
            if key == "id":
                continue
            if key == "open" and value and not self.open:
                # dismissed toasts stay closed
                continue
            if key in _UPDATABLE:
                known[key] = value
            else:
                extra[key] = value
        if "variant" in known:
            known["variant"] = ToastVariant(known["variant"])
        return dataclasses.replace(self, extra=extra, **known)

    def closed(self) -> "Toast":
        return dataclasses.replace(self, open=False)


@dataclass(frozen=True)
class ToastState:
    toasts: Tuple[Toast, ...] = ()

    def get(self, toast_id: str) -> Optional[Toast]:
        for t in self.toasts:
            if t.id == toast_id:
                return t
        return None

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self.toasts)

    def __len__(self) -> int:
        return len(self.toasts)


class ActionType(Enum):
    ADD = "ADD_TOAST"
    UPDATE = "UPDATE_TOAST"
    DISMISS = "DISMISS_TOAST"
    REMOVE = "REMOVE_TOAST"


@dataclass(frozen=True)
class AddToast:
    toast: Toast
    type: ActionType = field(default=ActionType.ADD, init=False)


@dataclass(frozen=True)
class UpdateToast:
    toast_id: str
    changes: Mapping[str, Any] = field(default_factory=dict)
    type: ActionType = field(default=ActionType.UPDATE, init=False)


@dataclass(frozen=True)
class DismissToast:
    """Close one toast, or every toast when ``toast_id`` is None."""

    toast_id: Optional[str] = None
    type: ActionType = field(default=ActionType.DISMISS, init=False)


@dataclass(frozen=True)
class RemoveToast:
    """Drop one toast, or every toast when ``toast_id`` is None."""

    toast_id: Optional[str] = None
    type: ActionType = field(default=ActionType.REMOVE, init=False)
