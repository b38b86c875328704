"""Simulation configuration.

``SimulationConfig`` holds every constant the core is parameterized by
and validates itself on construction: authoring mistakes raise
``InvalidConfiguration`` immediately instead of surfacing mid-game.

``load_settings`` reads an optional JSON file and merges it over the
defaults, e.g.::

    {
        "simulation": {
            "count": 25,
            "boundary": "reflective",
            "kinds": {"covid": {"points": 50, "doubling_time": null}}
        },
        "key_bindings": {"pause_toggle": [112]}
    }
"""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Tuple

import pygame

from outbreak.constants import (
    ARENA_HEIGHT,
    ARENA_WIDTH,
    BOUNDARY_REFLECTIVE,
    BOUNDARY_UNBOUNDED,
    COVID_DOUBLING_TIME,
    COVID_HEALTH,
    COVID_POINTS,
    ENTITY_DIAMETER,
    FLU_DOUBLING_TIME,
    FLU_HEALTH,
    FLU_POINTS,
    HIT_DAMAGE,
    HIT_POLICY_HIDE,
    HIT_POLICY_REMOVE,
    HIT_RADIUS,
    INITIAL_COUNT,
    SPEED_INCREMENT,
    SPEED_MAX,
    SPEED_MIN,
)
from outbreak.entities import Kind
from outbreak.errors import InvalidConfiguration
from outbreak.logger import get_logger

log = get_logger("settings")

BOUNDARY_POLICIES = (BOUNDARY_UNBOUNDED, BOUNDARY_REFLECTIVE)
HIT_POLICIES = (HIT_POLICY_REMOVE, HIT_POLICY_HIDE)


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class KindProfile:
    """Behavioral constants of one entity kind.

    ``doubling_time`` is the age in seconds at which an entity splits;
    ``None`` disables reproduction for the kind. ``speed_range`` is an
    inclusive integer range in pixels per second.
    """

    health: int = 1
    points: int = 0
    doubling_time: float | None = None
    speed_range: Tuple[int, int] = (SPEED_MIN, SPEED_MAX)

    def validate(self, kind: Kind) -> None:
        lo, hi = self.speed_range
        if not (_is_finite(lo) and _is_finite(hi)):
            raise InvalidConfiguration(f"{kind.value}: speeds must be finite numbers, got {self.speed_range}")
        if lo < 0 or hi < 0:
            raise InvalidConfiguration(f"{kind.value}: speeds must be >= 0, got {self.speed_range}")
        if lo > hi:
            raise InvalidConfiguration(f"{kind.value}: speed range is inverted: {self.speed_range}")
        if not _is_int(self.health) or self.health < 1:
            raise InvalidConfiguration(f"{kind.value}: health must be >= 1, got {self.health}")
        if self.doubling_time is not None and not (self.doubling_time > 0 and math.isfinite(self.doubling_time)):
            raise InvalidConfiguration(f"{kind.value}: doubling_time must be positive, got {self.doubling_time}")


def default_kinds() -> Dict[Kind, KindProfile]:
    return {
        Kind.FLU: KindProfile(health=FLU_HEALTH, points=FLU_POINTS, doubling_time=FLU_DOUBLING_TIME),
        Kind.COVID: KindProfile(health=COVID_HEALTH, points=COVID_POINTS, doubling_time=COVID_DOUBLING_TIME),
    }


@dataclass(frozen=True)
class SimulationConfig:
    width: float = ARENA_WIDTH
    height: float = ARENA_HEIGHT
    count: int = INITIAL_COUNT
    kinds: Dict[Kind, KindProfile] = field(default_factory=default_kinds)
    kind_weights: Dict[Kind, float] | None = None
    radius: float = HIT_RADIUS
    strict_hit: bool = False
    boundary: str = BOUNDARY_REFLECTIVE
    hit_policy: str = HIT_POLICY_REMOVE
    entity_diameter: float = ENTITY_DIAMETER
    speed_increment: float = SPEED_INCREMENT
    hit_damage: int = HIT_DAMAGE

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not (_is_finite(self.width) and _is_finite(self.height) and self.width > 0 and self.height > 0):
            raise InvalidConfiguration(f"arena must have positive dimensions, got {self.width}x{self.height}")
        if not _is_int(self.count) or self.count < 0:
            raise InvalidConfiguration(f"initial count must be >= 0, got {self.count}")
        if not self.kinds:
            raise InvalidConfiguration("kind table is empty")
        for kind, profile in self.kinds.items():
            if not isinstance(kind, Kind):
                raise InvalidConfiguration(f"unknown kind {kind!r}")
            profile.validate(kind)
        if self.kind_weights is not None:
            unknown = [k for k in self.kind_weights if k not in self.kinds]
            if unknown:
                raise InvalidConfiguration(f"weights given for kinds without a profile: {unknown}")
            weights = list(self.kind_weights.values())
            if not all(_is_finite(w) and w >= 0 for w in weights) or sum(weights) <= 0:
                raise InvalidConfiguration(f"kind weights must be >= 0 with a positive total: {self.kind_weights}")
        if not (_is_finite(self.radius) and self.radius > 0):
            raise InvalidConfiguration(f"hit radius must be positive, got {self.radius}")
        if self.boundary not in BOUNDARY_POLICIES:
            raise InvalidConfiguration(f"boundary must be one of {BOUNDARY_POLICIES}, got {self.boundary!r}")
        if self.hit_policy not in HIT_POLICIES:
            raise InvalidConfiguration(f"hit_policy must be one of {HIT_POLICIES}, got {self.hit_policy!r}")
        if not (_is_finite(self.entity_diameter) and self.entity_diameter >= 0):
            raise InvalidConfiguration(f"entity diameter must be >= 0, got {self.entity_diameter}")
        if not (_is_finite(self.speed_increment) and self.speed_increment >= 0):
            raise InvalidConfiguration(f"speed increment must be >= 0, got {self.speed_increment}")
        if not _is_int(self.hit_damage) or self.hit_damage < 1:
            raise InvalidConfiguration(f"hit damage must be >= 1, got {self.hit_damage}")

    def profile(self, kind: Kind) -> KindProfile:
        return self.kinds[kind]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        """Build a config from plain JSON-style data, merged over the defaults."""
        known = {f.name for f in fields(cls)}
        extra = set(data) - known
        if extra:
            raise InvalidConfiguration(f"unknown configuration keys: {sorted(extra)}")
        values = dict(data)
        try:
            if "kinds" in values:
                kinds = default_kinds()
                for name, overrides in values["kinds"].items():
                    kind = Kind(name)
                    base = kinds.get(kind, KindProfile())
                    merged = {**base.__dict__, **overrides}
                    merged["speed_range"] = tuple(merged["speed_range"])
                    kinds[kind] = KindProfile(**merged)
                values["kinds"] = kinds
            if values.get("kind_weights") is not None:
                values["kind_weights"] = {Kind(k): float(w) for k, w in values["kind_weights"].items()}
        except (ValueError, TypeError) as e:
            raise InvalidConfiguration(f"malformed kind configuration: {e}") from e
        return cls(**values)


def default_key_bindings() -> Dict[str, List[int]]:
    # pygame key integers, same representation as the JSON file
    return {
        "quit": [pygame.K_ESCAPE],
        "pause_toggle": [pygame.K_p, pygame.K_SPACE],
        "restart": [pygame.K_r],
    }


@dataclass
class Settings:
    config: SimulationConfig = field(default_factory=SimulationConfig)
    key_bindings: Dict[str, List[int]] = field(default_factory=default_key_bindings)


def load_settings(path: str | os.PathLike | None = None) -> Settings:
    """Load settings from a JSON file; a missing file yields the defaults."""
    if path is None or not os.path.exists(path):
        if path is not None:
            log.info(f"No settings file at {path}; using defaults")
        return Settings()
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfiguration(f"settings file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"settings file {path} must contain a JSON object")

    config = SimulationConfig.from_dict(data.get("simulation", {}))
    bindings = default_key_bindings()
    for action, keys in data.get("key_bindings", {}).items():
        bindings[action] = [int(k) for k in keys]
    log.debug("Settings loaded from", path)
    return Settings(config=config, key_bindings=bindings)


__all__ = [
    "KindProfile",
    "SimulationConfig",
    "Settings",
    "default_kinds",
    "default_key_bindings",
    "load_settings",
    "BOUNDARY_POLICIES",
    "HIT_POLICIES",
]
