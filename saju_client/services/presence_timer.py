"""
Minimum-dwell presence timer for the busy overlay.

Once shown, the overlay stays visible for at least `min_dwell_ms` even if the
work it covers finishes sooner, so a fast response doesn't read as a flicker.

States:
    HIDDEN                 initial; the only resting state between cycles
    VISIBLE                opened_at_ms stamped
    VISIBLE_PENDING_HIDE   close requested before the dwell elapsed
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from saju_client.config import settings
from saju_client.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

Cancel = Callable[[], None]
Clock = Callable[[], float]
Scheduler = Callable[[float, Callable[[], None]], Cancel]


class PresencePhase(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"
    VISIBLE_PENDING_HIDE = "visible_pending_hide"


@dataclass(slots=True)
class PresenceState:
    visible: bool = False
    opened_at_ms: float | None = None
    pending_hide: Cancel | None = None

    @property
    def phase(self) -> PresencePhase:
        if not self.visible:
            return PresencePhase.HIDDEN
        if self.pending_hide is not None:
            return PresencePhase.VISIBLE_PENDING_HIDE
        return PresencePhase.VISIBLE


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def asyncio_scheduler(delay_ms: float, callback: Callable[[], None]) -> Cancel:
    """Run `callback` on the running event loop after `delay_ms`; returns its cancel token."""
    handle = asyncio.get_running_loop().call_later(delay_ms / 1000, callback)
    return handle.cancel


class PresenceTimer:
    """
    Busy-indicator visibility with a minimum on-screen time.

    Call `set_requested_open()` whenever the caller's busy flag changes and
    render from `visible`. The clock and scheduler are injectable; the
    scheduler must return a cancellation token for the scheduled callback.
    """

    def __init__(
        self,
        min_dwell_ms: float | None = None,
        *,
        clock: Clock = monotonic_ms,
        scheduler: Scheduler = asyncio_scheduler,
        on_change: Callable[[bool], None] | None = None,
    ):
        self.min_dwell_ms = (
            settings.PRESENCE_MIN_DWELL_MS if min_dwell_ms is None else min_dwell_ms
        )
        if self.min_dwell_ms < 0:
            raise ValueError("min_dwell_ms must be >= 0")
        self._clock = clock
        self._scheduler = scheduler
        self._on_change = on_change
        self._state = PresenceState()

    @property
    def visible(self) -> bool:
        return self._state.visible

    @property
    def phase(self) -> PresencePhase:
        return self._state.phase

    @property
    def opened_at_ms(self) -> float | None:
        return self._state.opened_at_ms

    def set_requested_open(self, open: bool) -> None:
        if open:
            self._open()
        else:
            self._close()

    def _open(self) -> None:
        state = self._state
        if state.visible and state.pending_hide is None:
            return  # already open

        was_visible = state.visible
        self._cancel_pending_hide()
        state.opened_at_ms = self._clock()
        state.visible = True
        if not was_visible:
            self._notify()

    def _close(self) -> None:
        state = self._state
        if not state.visible or state.pending_hide is not None:
            return  # already hidden, or a hide is on its way

        elapsed = self._clock() - (state.opened_at_ms or 0)
        remaining = self.min_dwell_ms - elapsed
        if remaining <= 0:
            self._hide()
            return

        logger.debug("Deferring overlay hide", remaining_ms=remaining)
        state.pending_hide = self._scheduler(remaining, self._on_pending_hide)

    def _on_pending_hide(self) -> None:
        self._state.pending_hide = None
        self._hide()

    def _cancel_pending_hide(self) -> None:
        cancel = self._state.pending_hide
        if cancel is not None:
            self._state.pending_hide = None
            cancel()

    def _hide(self) -> None:
        self._state.visible = False
        self._state.opened_at_ms = None
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._state.visible)

    def reset(self) -> None:
        """Hide immediately, dropping any pending hide (e.g. on screen teardown)."""
        self._cancel_pending_hide()
        if self._state.visible:
            self._hide()
