"""GameSession: one running simulation with its clock and input routing.

The session owns the lifecycle pieces around the core: it subscribes
``SimulationCore.advance`` to the frame clock while started (one
subscription per start/stop cycle), maps routed actions to pause /
restart / quit and forwards click points to ``apply_hit``. Everything
here runs on the main loop's thread; events are handled before the
frame is pumped, so a click and a tick never interleave.
"""

from __future__ import annotations

from typing import Callable, Sequence, Tuple

import pygame

from outbreak.clock import FrameClock, FrameScheduler
from outbreak.input_router import InputRouter
from outbreak.logger import get_logger
from outbreak.rng_service import RNGService
from outbreak.settings import Settings
from outbreak.simulation import SimulationCore
from outbreak.snapshot import SimulationSnapshot

_log = get_logger("session")


class GameSession:
    def __init__(
        self,
        settings: Settings | None = None,
        rng: RNGService | None = None,
        window_size: Tuple[int, int] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        cfg = self.settings.config
        self.core = SimulationCore(cfg, rng)
        self.scheduler = FrameScheduler()
        self.clock = FrameClock(self.scheduler)
        self._unsubscribe: Callable[[], None] | None = None
        self.router = InputRouter(self.settings.key_bindings, (cfg.width, cfg.height), window_size)
        self.paused = False
        self.quit_requested = False

    # Lifecycle ---------------------------------------------------------
    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.clock.on_tick(self.core.advance)
        self.clock.activate()

    def stop(self) -> None:
        self.clock.deactivate()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "GameSession":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    # Loop hooks --------------------------------------------------------
    def handle(self, events: Sequence[pygame.event.Event]) -> None:
        self.handle_actions(self.router.process(events))
        if self.paused:
            return
        for point in self.router.clicks(events):
            self.core.apply_hit(point)

    def handle_actions(self, actions: Sequence[str]) -> None:
        for act in actions:
            if act == "quit":
                self.quit_requested = True
            elif act == "pause_toggle":
                self.toggle_pause()
            elif act == "restart":
                self.restart()

    def toggle_pause(self) -> None:
        self.paused = not self.paused
        if self.paused:
            self.clock.deactivate()
        else:
            # Reactivation reseeds the clock, so the pause is not one giant tick.
            self.clock.activate()
        _log.info("paused" if self.paused else "resumed")

    def restart(self) -> None:
        self.core.reset()
        _log.info("restarted")

    def update(self, now_ms: int | None = None) -> None:
        self.scheduler.pump(now_ms)

    def snapshot(self) -> SimulationSnapshot:
        return self.core.snapshot()


__all__ = ["GameSession"]
