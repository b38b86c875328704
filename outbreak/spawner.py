"""Initial batch and split-child creation."""

from __future__ import annotations

import itertools
import math
from typing import Iterator, List

from outbreak.constants import FULL_TURN
from outbreak.entities import Entity, Kind, Position, Velocity
from outbreak.logger import get_logger
from outbreak.rng_service import RNGService
from outbreak.settings import SimulationConfig

log = get_logger("spawner")


class Spawner:
    """Creates entities with ids that are unique for one simulation run."""

    def __init__(self, config: SimulationConfig, rng: RNGService | None = None, first_id: int = 0):
        self.config = config
        self.rng = rng if rng is not None else RNGService.get()
        self._ids: Iterator[int] = itertools.count(first_id)

    def next_id(self) -> int:
        return next(self._ids)

    def random_angle(self) -> float:
        return self.rng.random() * FULL_TURN

    def random_kind(self) -> Kind:
        return self.rng.weighted_choice(list(self.config.kinds), self.config.kind_weights)

    def random_speed(self, kind: Kind) -> int:
        lo, hi = self.config.profile(kind).speed_range
        return self.rng.randint(int(lo), int(hi))

    def spawn(self, kind: Kind | None = None) -> Entity:
        """One entity at an integer position in [1, width] x [1, height].

        The spawn area is wider than the reflective band
        ``[0, width - diameter] x [0, height - diameter]``: an entity placed
        in the far edge strip is out of bounds from its first tick and turns
        until it drifts back inside.
        """
        kind = kind if kind is not None else self.random_kind()
        profile = self.config.profile(kind)
        x = math.floor(self.rng.random() * self.config.width + 1)
        y = math.floor(self.rng.random() * self.config.height + 1)
        return Entity(
            id=self.next_id(),
            position=Position(x, y),
            velocity=Velocity(self.random_angle(), self.random_speed(kind)),
            kind=kind,
            health=profile.health,
            points=profile.points,
        )

    def spawn_initial(self) -> List[Entity]:
        entities = [self.spawn() for _ in range(self.config.count)]
        log.info(f"Initial entities ({len(entities)}):", [(e.id, e.kind.value, e.position.x, e.position.y) for e in entities])
        return entities

    def split(self, parent: Entity, position: Position) -> Entity:
        """Child of ``parent``: same kind and speed, fresh angle, kind defaults."""
        profile = self.config.profile(parent.kind)
        return Entity(
            id=self.next_id(),
            position=position,
            velocity=Velocity(self.random_angle(), parent.velocity.speed),
            kind=parent.kind,
            health=profile.health,
            points=profile.points,
        )


__all__ = ["Spawner"]
