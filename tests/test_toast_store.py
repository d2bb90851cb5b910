from __future__ import annotations

import threading

import pytest

from smartcity.core.settings import ToastSettings
from smartcity.ui import toast as toast_module
from smartcity.ui.toast import ToastState, ToastStore, ToastVariant
from smartcity.ui.toast.models import DismissToast, RemoveToast, UpdateToast
from smartcity.ui.toast.store import MAX_TOAST_ID, ToastIdGenerator

DELAY = 1000.0


@pytest.fixture()
def store(timers) -> ToastStore:
    return ToastStore(limit=1, remove_delay=DELAY, timer_factory=timers)


def test_toast_then_dismiss_then_delay_removes(store: ToastStore, timers):
    handle = store.toast(title="Saved")
    assert [(t.id, t.open) for t in store.toasts] == [(handle.id, True)]

    handle.dismiss()
    assert [(t.id, t.open) for t in store.toasts] == [(handle.id, False)]

    timers.advance(DELAY)
    assert store.toasts == ()


def test_limit_one_keeps_only_newest(store: ToastStore, timers):
    a = store.toast(title="A")
    a.dismiss()
    b = store.toast(title="B")

    assert [t.title for t in store.toasts] == ["B"]
    # A's timer still fires and its REMOVE is harmless
    timers.advance(DELAY)
    assert [t.id for t in store.toasts] == [b.id]


def test_double_dismiss_schedules_one_timer(store: ToastStore, timers):
    handle = store.toast(title="Complaint filed")
    handle.dismiss()
    handle.dismiss()
    assert store.scheduler.pending_ids == frozenset({handle.id})
    assert len(timers.live) == 1


def test_dismiss_all_schedules_one_timer_per_toast(timers):
    store = ToastStore(limit=3, remove_delay=DELAY, timer_factory=timers)
    ids = {store.toast(title=str(n)).id for n in range(3)}

    store.dismiss()

    assert all(t.open is False for t in store.toasts)
    assert store.scheduler.pending_ids == frozenset(ids)
    assert len(timers.live) == 3


def test_dismiss_unknown_id_schedules_nothing(store: ToastStore, timers):
    store.toast(title="x")
    store.dismiss("does-not-exist")
    assert len(store.scheduler) == 0


def test_update_via_handle(store: ToastStore):
    handle = store.toast(title="Uploading", description="0%")
    handle.update(description="100%", variant="destructive")
    t = store.state.get(handle.id)
    assert t.title == "Uploading"
    assert t.description == "100%"
    assert t.variant is ToastVariant.DESTRUCTIVE


def test_extra_props_pass_through(store: ToastStore):
    handle = store.toast(title="Hi", duration=5000, action={"label": "Undo"})
    t = store.state.get(handle.id)
    assert t.extra == {"duration": 5000}
    assert t.action == {"label": "Undo"}


def test_on_open_change_false_dismisses(store: ToastStore):
    handle = store.toast(title="x")
    t = store.state.get(handle.id)
    t.on_open_change(True)
    assert store.state.get(handle.id).open is True
    t.on_open_change(False)
    assert store.state.get(handle.id).open is False
    assert store.scheduler.is_pending(handle.id)


def test_listeners_called_in_order_with_new_state(store: ToastStore):
    calls = []
    store.subscribe(lambda s: calls.append(("first", s)))
    store.subscribe(lambda s: calls.append(("second", s)))

    store.toast(title="x")

    assert [name for name, _ in calls] == ["first", "second"]
    assert calls[0][1] is store.state


def test_unsubscribe_stops_notifications(store: ToastStore):
    seen = []
    sub = store.subscribe(seen.append)
    h = store.toast(title="one")
    snapshot = store.state

    sub.unsubscribe()
    sub.unsubscribe()
    h.dismiss()

    assert seen == [snapshot]
    assert sub.active is False


def test_same_callable_twice_is_two_registrations(store: ToastStore):
    seen = []
    first = store.subscribe(seen.append)
    store.subscribe(seen.append)
    first.unsubscribe()
    store.toast(title="x")
    assert len(seen) == 1


def test_object_listener_with_on_state_change(store: ToastStore):
    class Renderer:
        def __init__(self) -> None:
            self.states = []

        def on_state_change(self, state: ToastState) -> None:
            self.states.append(state)

    renderer = Renderer()
    store.subscribe(renderer)
    store.toast(title="x")
    assert renderer.states == [store.state]


def test_failing_listener_does_not_block_others(store: ToastStore):
    seen = []

    def boom(state):
        raise RuntimeError("render failed")

    store.subscribe(boom)
    store.subscribe(seen.append)
    store.toast(title="x")
    assert len(seen) == 1


def test_non_callable_listener_rejected(store: ToastStore):
    with pytest.raises(TypeError):
        store.subscribe(42)


def test_stale_ids_are_noops(store: ToastStore):
    before = store.state
    store.dispatch(UpdateToast("7", {"title": "x"}))
    store.dispatch(DismissToast("7"))
    store.dispatch(RemoveToast("7"))
    assert store.state is before


def test_remove_cancels_pending_timer(store: ToastStore, timers):
    handle = store.toast(title="x")
    handle.dismiss()
    store.dispatch(RemoveToast(handle.id))
    assert len(store.scheduler) == 0
    assert timers.live == []


def test_remove_all_cancels_every_timer(timers):
    store = ToastStore(limit=2, remove_delay=DELAY, timer_factory=timers)
    store.toast(title="a")
    store.toast(title="b")
    store.dismiss()
    store.dispatch(RemoveToast())
    assert store.toasts == ()
    assert timers.live == []


def test_close_cancels_pending(store: ToastStore, timers):
    store.toast(title="x").dismiss()
    assert store.close() == 1
    timers.advance(DELAY)
    assert len(store.toasts) == 1


def test_from_settings(timers):
    store = ToastStore.from_settings(ToastSettings(limit=2, remove_delay_seconds=3.0), timer_factory=timers)
    assert store.limit == 2
    assert store.scheduler.delay == 3.0


def test_id_generator_is_monotonic_and_wraps():
    gen = ToastIdGenerator()
    assert [gen(), gen(), gen()] == ["1", "2", "3"]
    wrap = ToastIdGenerator(start=MAX_TOAST_ID - 1)
    assert wrap() == "0"
    assert wrap() == "1"


def test_timer_thread_dispatch_removes_toast():
    store = ToastStore(remove_delay=0.01)
    removed = threading.Event()
    store.subscribe(lambda s: removed.set() if not s.toasts else None)
    store.toast(title="x").dismiss()
    assert removed.wait(2.0)
    assert store.toasts == ()


def test_module_level_facade_uses_default_store():
    seen = []
    toast_module.subscribe(seen.append)
    handle = toast_module.toast("Hello", "world")
    assert toast_module.get_default_store().state.get(handle.id).title == "Hello"
    toast_module.dismiss()
    assert seen[-1].get(handle.id).open is False


def test_set_default_store(store: ToastStore):
    toast_module.set_default_store(store)
    handle = toast_module.toast(title="via default")
    assert store.state.get(handle.id) is not None


def test_unknown_variant_rejected_before_dispatch(store: ToastStore):
    seen = []
    store.subscribe(seen.append)
    handle = store.toast(title="ok")
    seen.clear()

    with pytest.raises(ValueError):
        store.toast(title="bad", variant="bogus")
    with pytest.raises(ValueError):
        handle.update(variant="bogus")

    assert seen == []
    assert [t.id for t in store.toasts] == [handle.id]
    assert store.state.get(handle.id).variant is ToastVariant.DEFAULT
    # the rejected toast did not consume an id
    assert int(store.toast(title="next").id) == int(handle.id) + 1
