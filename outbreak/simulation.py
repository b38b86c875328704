"""SimulationCore: authoritative entity state, per-tick update and hits.

Per tick, every visible entity is moved along its velocity, the boundary
policy is applied, its age grows and, for kinds with a doubling time,
it may split. Hidden entities are out of play and carried over as-is.

State is replaced, never edited: ``advance`` and ``apply_hit`` build a
new ``SimulationState`` whose tuple shares untouched entities with the
previous one. Readers holding an older state or snapshot therefore never
observe a half-applied frame.

Boundary policies:
  * ``unbounded``  - no correction, entities may drift away for good.
  * ``reflective`` - when the new position leaves
    ``[0, width - d] x [0, height - d]`` the angle is reduced by pi/2,
    whichever edge was crossed. This is not a mirror bounce; keep it
    that way.

Hit policies:
  * ``remove`` - eliminated entities leave the collection.
  * ``hide``   - eliminated entities stay with ``visible=False`` and any
    successful click speeds up every surviving visible entity.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, Iterable, List, Sequence, Tuple

from outbreak.constants import BOUNDARY_REFLECTIVE, HIT_POLICY_HIDE, REFLECT_TURN
from outbreak.entities import Entity, Position, Velocity
from outbreak.errors import MalformedTick
from outbreak.hit_test import HitResult, find_hits
from outbreak.logger import get_logger
from outbreak.rng_service import RNGService
from outbreak.settings import SimulationConfig
from outbreak.snapshot import SimulationSnapshot, SnapshotService
from outbreak.spawner import Spawner

log = get_logger("simulation")

PointLike = Position | Tuple[float, float]


@dataclass(frozen=True)
class SimulationState:
    entities: Tuple[Entity, ...] = field(default_factory=tuple)
    score: int = 0
    tick: int = 0
    elapsed: float = 0.0

    @property
    def visible_count(self) -> int:
        return sum(1 for e in self.entities if e.visible)

    @property
    def is_complete(self) -> bool:
        return self.visible_count == 0


def validate_dt(dt: float) -> float:
    if isinstance(dt, bool) or not isinstance(dt, (int, float)):
        raise MalformedTick(dt)
    if not math.isfinite(dt) or dt <= 0:
        raise MalformedTick(dt)
    return float(dt)


def out_of_bounds(x: float, y: float, config: SimulationConfig) -> bool:
    max_x = config.width - config.entity_diameter
    max_y = config.height - config.entity_diameter
    return x < 0 or x > max_x or y < 0 or y > max_y


def move(entity: Entity, dt: float, config: SimulationConfig) -> Entity:
    """Kinematic step plus boundary policy and aging for one entity."""
    vx, vy = entity.velocity.components()
    x = entity.position.x + vx * dt
    y = entity.position.y + vy * dt
    velocity = entity.velocity
    if config.boundary == BOUNDARY_REFLECTIVE and out_of_bounds(x, y, config):
        velocity = Velocity(velocity.angle - REFLECT_TURN, velocity.speed)
    return replace(entity, position=Position(x, y), velocity=velocity, age=entity.age + dt)


def advance_entities(
    entities: Sequence[Entity], dt: float, config: SimulationConfig, spawner: Spawner
) -> Tuple[Entity, ...]:
    """Return the collection one tick later; children go after all parents.

    ``dt`` must already be validated.
    """
    updated: List[Entity] = []
    children: List[Entity] = []
    for entity in entities:
        if not entity.visible:
            updated.append(entity)
            continue
        moved = move(entity, dt, config)
        doubling_time = config.profile(entity.kind).doubling_time
        if doubling_time is not None and moved.age >= doubling_time:
            children.append(spawner.split(entity, entity.position))
            moved = replace(moved, age=0.0, split_count=moved.split_count + 1)
        updated.append(moved)
    if children:
        log.debug(f"{len(children)} split(s):", [c.kind.value for c in children])
    return tuple(updated) + tuple(children)


def resolve_hit(
    point: Position, entities: Sequence[Entity], config: SimulationConfig
) -> Tuple[Tuple[Entity, ...], HitResult, int]:
    """Apply one click. Returns (new entities, hit result, points awarded)."""
    result = find_hits(point, entities, config.radius, config.strict_hit)
    if not result:
        return tuple(entities), result, 0

    hit_ids = {e.id for e in result.matched}
    hide = config.hit_policy == HIT_POLICY_HIDE
    awarded = 0
    out: List[Entity] = []
    for entity in entities:
        if entity.id not in hit_ids:
            out.append(entity)
            continue
        health = entity.health - config.hit_damage
        if health > 0:
            out.append(replace(entity, health=health))
            continue
        awarded += entity.points
        if hide:
            out.append(replace(entity, health=0, visible=False))

    if hide:
        # Difficulty ramp: one pass over the survivors after the hit pass.
        out = [
            e.with_speed(e.velocity.speed + config.speed_increment) if e.visible and e.id not in hit_ids else e
            for e in out
        ]
    return tuple(out), result, awarded


class SimulationCore:
    """Owner and sole writer of the simulation state.

    ``advance`` is meant to be the long-lived tick handler of a
    ``FrameClock``; ``apply_hit`` receives arena-local click points from
    the input layer. A hit submitted while a tick is being processed is
    queued and applied right after that tick.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: RNGService | None = None,
        entities: Iterable[Entity] | None = None,
    ):
        self.config = config if config is not None else SimulationConfig()
        self.rng = rng if rng is not None else RNGService.get()
        self._pending_hits: Deque[Position] = deque()
        self._busy = False
        self.reset(entities)

    def reset(self, entities: Iterable[Entity] | None = None) -> None:
        """Start over with ``entities`` or a freshly spawned batch."""
        if entities is None:
            self.spawner = Spawner(self.config, self.rng)
            initial = self.spawner.spawn_initial()
        else:
            initial = list(entities)
            first_id = max((e.id for e in initial), default=-1) + 1
            self.spawner = Spawner(self.config, self.rng, first_id=first_id)
        self._state = SimulationState(entities=tuple(initial))
        self._pending_hits.clear()
        self._completion_logged = self._state.is_complete

    # Read accessors ---------------------------------------------------
    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def entities(self) -> Tuple[Entity, ...]:
        return self._state.entities

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    def snapshot(self) -> SimulationSnapshot:
        return SnapshotService.capture(self._state)

    # Updates ----------------------------------------------------------
    def advance(self, dt: float) -> SimulationState:
        """Advance one tick. Malformed ``dt`` is logged and ignored."""
        try:
            dt = validate_dt(dt)
        except MalformedTick as e:
            log.warn(f"{e}; tick skipped")
            return self._state
        self._busy = True
        try:
            state = self._state
            entities = advance_entities(state.entities, dt, self.config, self.spawner)
            self._state = replace(state, entities=entities, tick=state.tick + 1, elapsed=state.elapsed + dt)
        finally:
            self._busy = False
        self._drain_pending_hits()
        return self._state

    def apply_hit(self, point: PointLike) -> HitResult | None:
        """Apply a click at an arena-local point.

        Returns the hit result, or ``None`` when the click was queued
        behind a tick in progress.
        """
        point = point if isinstance(point, Position) else Position(*point)
        if self._busy:
            self._pending_hits.append(point)
            return None
        self._busy = True
        try:
            state = self._state
            entities, result, awarded = resolve_hit(point, state.entities, self.config)
            if result:
                self._state = replace(state, entities=entities, score=state.score + awarded)
                log.debug(f"hit at ({point.x:.0f}, {point.y:.0f}): {len(result.matched)} matched, +{awarded}")
        finally:
            self._busy = False
        if self._state.is_complete and not self._completion_logged:
            self._completion_logged = True
            log.info(f"Arena cleared after {self._state.elapsed:.2f}s with score {self._state.score}")
        return result

    def _drain_pending_hits(self) -> None:
        while self._pending_hits:
            self.apply_hit(self._pending_hits.popleft())


__all__ = [
    "SimulationState",
    "SimulationCore",
    "validate_dt",
    "out_of_bounds",
    "move",
    "advance_entities",
    "resolve_hit",
]
