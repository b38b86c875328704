"""Render-facing snapshots of the simulation state.

The renderer never sees live ``Entity`` objects or the core itself: it
gets a frozen ``SimulationSnapshot`` per frame. Snapshots are plain data
and convert to and from dicts for debugging dumps and tests.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

from outbreak.entities import Entity


@dataclass(frozen=True)
class EntitySnapshot:
    id: int
    x: float
    y: float
    angle: float
    kind: str
    visible: bool = True

    @classmethod
    def of(cls, entity: Entity) -> "EntitySnapshot":
        return cls(
            id=entity.id,
            x=entity.position.x,
            y=entity.position.y,
            angle=entity.velocity.angle,
            kind=entity.kind.value,
            visible=entity.visible,
        )


@dataclass(frozen=True)
class SimulationSnapshot:
    tick: int
    score: int
    complete: bool
    entities: Tuple[EntitySnapshot, ...] = field(default_factory=tuple)

    @property
    def visible_count(self) -> int:
        return sum(1 for e in self.entities if e.visible)


class SnapshotService:
    @staticmethod
    def capture(state) -> SimulationSnapshot:
        """Build a snapshot from a ``SimulationState``."""
        return SimulationSnapshot(
            tick=state.tick,
            score=state.score,
            complete=state.is_complete,
            entities=tuple(EntitySnapshot.of(e) for e in state.entities),
        )

    @staticmethod
    def serialize(snapshot: SimulationSnapshot) -> Dict[str, Any]:
        data = asdict(snapshot)
        data["entities"] = list(data["entities"])
        return data

    @staticmethod
    def deserialize(data: Dict[str, Any]) -> SimulationSnapshot:
        entities = tuple(EntitySnapshot(**e) for e in data.get("entities", []))
        return SimulationSnapshot(
            tick=data.get("tick", 0),
            score=data.get("score", 0),
            complete=data.get("complete", not any(e.visible for e in entities)),
            entities=entities,
        )


__all__ = ["EntitySnapshot", "SimulationSnapshot", "SnapshotService"]
