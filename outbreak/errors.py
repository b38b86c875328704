"""Error taxonomy for the simulation core.

Only ``InvalidConfiguration`` ever escapes to callers (at construction
time). ``MalformedTick`` is raised internally by dt validation and
caught by the core, which logs it and skips the tick.
"""

from __future__ import annotations


class OutbreakError(Exception):
    """Base class for simulation errors."""


class InvalidConfiguration(OutbreakError, ValueError):
    """Authoring error in a SimulationConfig (bad arena, speeds, kinds...)."""


class MalformedTick(OutbreakError):
    """Elapsed time that is zero, negative or not finite."""

    def __init__(self, dt: float):
        super().__init__(f"malformed tick dt={dt!r}")
        self.dt = dt


__all__ = ["OutbreakError", "InvalidConfiguration", "MalformedTick"]
