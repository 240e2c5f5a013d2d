import asyncio

import pytest

from app.services.toast_queue import ToastQueue


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def test_toast_lives_for_ttl(clock):
    queue = ToastQueue(ttl=5.0, clock=clock)
    toast = queue.add_toast("Saved", "success")

    clock.advance(0.001)
    assert [t.id for t in queue.toasts] == [toast.id]

    clock.advance(5.0)
    assert queue.toasts == []


def test_explicit_dismiss_is_immediate_and_idempotent(clock):
    queue = ToastQueue(clock=clock)
    toast = queue.add_toast("Oops", "error")

    queue.dismiss(toast.id)
    queue.dismiss(toast.id)

    assert queue.toasts == []


def test_insertion_order_and_payload(clock):
    queue = ToastQueue(clock=clock)
    queue.success("one")
    clock.advance(0.5)
    queue.error("two")
    queue.info("three")

    toasts = queue.toasts
    assert [t.message for t in toasts] == ["one", "two", "three"]
    assert [t.type for t in toasts] == ["success", "error", "info"]


def test_ids_are_timestamps_and_unique_within_a_tick(clock):
    queue = ToastQueue(clock=clock)
    a = queue.add_toast("a")
    b = queue.add_toast("b")

    assert a.id == int(clock.now * 1000)
    assert b.id > a.id

    queue.dismiss(a.id)
    assert [t.message for t in queue.toasts] == ["b"]


@pytest.mark.asyncio
async def test_timer_removes_toast_when_loop_runs():
    queue = ToastQueue(ttl=0.01)
    queue.add_toast("bye")

    await asyncio.sleep(0.05)

    assert queue._toasts == []
