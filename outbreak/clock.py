"""Frame clock.

``FrameScheduler`` plays the role of a browser's ``requestAnimationFrame``
for the pygame loop: callers request a callback for the next frame and
the main loop calls ``pump()`` once per frame, which fires every request
made before the pump started with the frame timestamp in milliseconds.

``FrameClock`` sits on top of it and turns raw timestamps into ticks
carrying ``dt`` seconds. It holds exactly one tick handler for its whole
life; the handler is expected to read whatever it needs from a mutable
state cell (the SimulationCore) instead of being re-registered as state
changes. Re-registration is what used to deliver the same frame twice.

Usage (see ``app.py``)::

    scheduler = FrameScheduler()
    clock = FrameClock(scheduler)
    clock.on_tick(core.advance)
    with clock:
        while running:
            scheduler.pump()
"""

from __future__ import annotations

import itertools
from typing import Callable, Dict

import pygame

from outbreak.logger import get_logger

log = get_logger("clock")

TickHandler = Callable[[float], None]
FrameCallback = Callable[[int], None]


class FrameScheduler:
    def __init__(self) -> None:
        self._pending: Dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def pump(self, now_ms: int | None = None) -> int:
        """Fire callbacks requested before this call. Returns how many ran.

        Callbacks requested while pumping wait for the next pump, and a
        callback cancelled by an earlier one in the same pump is skipped.
        """
        if now_ms is None:
            now_ms = pygame.time.get_ticks()
        batch = list(self._pending.items())
        fired = 0
        for handle, callback in batch:
            if self._pending.pop(handle, None) is None:
                continue
            callback(now_ms)
            fired += 1
        return fired


class FrameClock:
    def __init__(self, scheduler: FrameScheduler) -> None:
        self.scheduler = scheduler
        self._handler: TickHandler | None = None
        self._handle: int | None = None
        self._last_timestamp: int | None = None
        self._active = False
        self.dropped = 0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def pending(self) -> bool:
        return self._handle is not None

    # Subscription -----------------------------------------------------
    def on_tick(self, handler: TickHandler) -> Callable[[], None]:
        """Register the tick handler and return a function that removes it."""
        if self._handler is not None:
            raise RuntimeError("FrameClock already has a tick handler; unsubscribe it first")
        self._handler = handler

        def unsubscribe() -> None:
            if self._handler is handler:
                self._handler = None

        return unsubscribe

    # Lifecycle --------------------------------------------------------
    def activate(self) -> None:
        if self._active:
            return
        self._active = True
        self._last_timestamp = None
        self._schedule()
        log.debug("clock activated")

    def deactivate(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel_frame(self._handle)
            self._handle = None
        if self._active:
            log.debug("clock deactivated")
        self._active = False

    def __enter__(self) -> "FrameClock":
        self.activate()
        return self

    def __exit__(self, *exc) -> None:
        self.deactivate()

    # Raw signal -------------------------------------------------------
    def _schedule(self) -> None:
        self._handle = self.scheduler.request_frame(self._on_frame)

    def _on_frame(self, now_ms: int) -> None:
        self._handle = None
        if not self._active:
            return
        try:
            self._process(now_ms)
        finally:
            # The handler may have deactivated the clock.
            if self._active and self._handle is None:
                self._schedule()

    def _process(self, now_ms: int) -> None:
        if self._last_timestamp is None:
            self._last_timestamp = now_ms
            return
        dt = (now_ms - self._last_timestamp) / 1000
        if dt <= 0:
            self.dropped += 1
            log.error(f"got a {dt * 1000:g}ms animation frame at t={now_ms}; dropped")
            return
        self._last_timestamp = now_ms
        if self._handler is not None:
            self._handler(dt)


__all__ = ["FrameScheduler", "FrameClock", "TickHandler"]
