"""Entity value types.

Entities are immutable once created. The simulation replaces an entity
with a fresh instance (``dataclasses.replace``) whenever one of its
fields changes, so untouched entities can be shared between successive
states and the renderer can rely on identity for change detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum


class Kind(str, Enum):
    FLU = "flu"
    COVID = "covid"


@dataclass(frozen=True)
class Position:
    """Pixels from the arena's top-left corner (y grows downwards)."""

    x: float
    y: float


@dataclass(frozen=True)
class Velocity:
    """Polar velocity: angle in radians (0 = +x), speed in pixels per second."""

    angle: float
    speed: float

    def __post_init__(self):
        if not math.isfinite(self.angle):
            raise ValueError(f"velocity angle must be finite, got {self.angle!r}")
        if not (math.isfinite(self.speed) and self.speed >= 0):
            raise ValueError(f"velocity speed must be finite and >= 0, got {self.speed!r}")

    def components(self) -> tuple[float, float]:
        return self.speed * math.cos(self.angle), self.speed * math.sin(self.angle)


@dataclass(frozen=True)
class Entity:
    id: int
    position: Position
    velocity: Velocity
    kind: Kind
    health: int = 1
    points: int = 0
    age: float = 0.0
    split_count: int = 0
    visible: bool = True

    def with_speed(self, speed: float) -> "Entity":
        return replace(self, velocity=Velocity(self.velocity.angle, speed))


__all__ = ["Kind", "Position", "Velocity", "Entity"]
