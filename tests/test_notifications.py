import asyncio

import pytest

from cancorpus.notifications import NotificationTimer
from cancorpus.types import Notification


@pytest.mark.asyncio
async def test_notification_clears_itself() -> None:
    timer = NotificationTimer()
    seen: list[Notification | None] = []
    timer.subscribe(seen.append)

    shown = timer.show("Entry added", "success", timeout=0.05)
    assert timer.current is shown
    await asyncio.sleep(0.15)

    assert timer.current is None
    assert seen == [shown, None]


@pytest.mark.asyncio
async def test_new_notification_reschedules_expiry() -> None:
    timer = NotificationTimer()

    timer.show("first", timeout=0.05)
    await asyncio.sleep(0.03)
    second = timer.show("second", "error", timeout=0.2)
    await asyncio.sleep(0.07)

    assert timer.current is second
    await asyncio.sleep(0.2)
    assert timer.current is None


@pytest.mark.asyncio
async def test_clear_cancels_pending_timer() -> None:
    timer = NotificationTimer(default_timeout=0.05)
    seen: list[Notification | None] = []
    timer.subscribe(seen.append)

    timer.show("bye")
    timer.clear()
    await asyncio.sleep(0.1)

    assert timer.current is None
    assert seen[-1] is None
    assert len(seen) == 2


def test_show_without_loop_keeps_message() -> None:
    timer = NotificationTimer()

    shown = timer.show("offline")

    assert timer.current is shown
    assert shown.kind == "info"
