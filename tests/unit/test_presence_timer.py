import asyncio

import pytest

from saju_client.services.presence_timer import PresencePhase, PresenceTimer


def test_open_is_immediate(presence, timeline):
    timeline.advance(500)
    presence.set_requested_open(True)

    assert presence.visible is True
    assert presence.opened_at_ms == 500
    assert presence.phase is PresencePhase.VISIBLE


@pytest.mark.parametrize("busy_for_ms", [0, 1, 300, 1199])
def test_quick_close_waits_for_dwell_floor(presence, timeline, busy_for_ms):
    presence.set_requested_open(True)
    timeline.advance(busy_for_ms)
    presence.set_requested_open(False)

    assert presence.visible is True
    assert presence.phase is PresencePhase.VISIBLE_PENDING_HIDE

    timeline.advance(1200 - busy_for_ms - 1)
    assert presence.visible is True

    timeline.advance(1)
    assert presence.visible is False
    assert presence.phase is PresencePhase.HIDDEN


def test_close_after_dwell_hides_synchronously(presence, timeline):
    presence.set_requested_open(True)
    timeline.advance(1500)
    presence.set_requested_open(False)

    assert presence.visible is False
    assert timeline.scheduled == 0


def test_close_exactly_at_dwell_hides_synchronously(presence, timeline):
    presence.set_requested_open(True)
    timeline.advance(1200)
    presence.set_requested_open(False)

    assert presence.visible is False


def test_reopen_cancels_pending_hide_and_restamps(presence, timeline):
    presence.set_requested_open(True)
    timeline.advance(200)
    presence.set_requested_open(False)
    timeline.advance(100)
    presence.set_requested_open(True)

    assert timeline.cancel_calls == 1
    assert presence.opened_at_ms == 300
    assert presence.phase is PresencePhase.VISIBLE

    # the original hide would have fired at 1200
    timeline.advance(1000)
    assert presence.visible is True

    presence.set_requested_open(False)
    timeline.advance(199)
    assert presence.visible is True
    timeline.advance(1)
    assert presence.visible is False


def test_second_close_does_not_reschedule(presence, timeline):
    presence.set_requested_open(True)
    timeline.advance(100)
    presence.set_requested_open(False)
    timeline.advance(400)
    presence.set_requested_open(False)

    assert timeline.scheduled == 1
    timeline.advance(700)
    assert presence.visible is False


def test_close_while_hidden_is_noop(presence, timeline):
    presence.set_requested_open(False)

    assert presence.visible is False
    assert timeline.scheduled == 0


def test_repeated_open_keeps_original_stamp(presence, timeline):
    presence.set_requested_open(True)
    timeline.advance(400)
    presence.set_requested_open(True)

    assert presence.opened_at_ms == 0


def test_on_change_reports_edges_only(timeline):
    changes = []
    timer = PresenceTimer(
        1000, clock=timeline.clock, scheduler=timeline.schedule, on_change=changes.append
    )

    timer.set_requested_open(True)
    timer.set_requested_open(False)
    timer.set_requested_open(True)
    timer.set_requested_open(False)
    timeline.advance(1000)

    assert changes == [True, False]


def test_reset_drops_pending_hide(presence, timeline):
    presence.set_requested_open(True)
    presence.set_requested_open(False)
    presence.reset()

    assert presence.visible is False
    assert timeline.cancel_calls == 1


def test_negative_dwell_rejected(timeline):
    with pytest.raises(ValueError):
        PresenceTimer(-1, clock=timeline.clock, scheduler=timeline.schedule)


@pytest.mark.asyncio
async def test_default_scheduler_hides_on_event_loop():
    timer = PresenceTimer(20)
    timer.set_requested_open(True)
    timer.set_requested_open(False)
    assert timer.visible is True

    await asyncio.sleep(0.1)
    assert timer.visible is False
