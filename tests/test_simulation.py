import io
import math

import pytest

from conftest import make_entity
from outbreak import simulation as simulation_module
from outbreak.constants import BOUNDARY_UNBOUNDED, HIT_POLICY_HIDE
from outbreak.entities import Kind, Position
from outbreak.settings import KindProfile, SimulationConfig
from outbreak.simulation import SimulationCore, SimulationState, move


def no_split_kinds():
    return {Kind.FLU: KindProfile(points=10), Kind.COVID: KindProfile(points=20)}


def make_core(entities, rng, **cfg):
    cfg.setdefault("kinds", no_split_kinds())
    return SimulationCore(SimulationConfig(**cfg), rng=rng, entities=entities)


# --- Kinematics --------------------------------------------------------------
@pytest.mark.parametrize("angle,speed,dt", [(0.3, 120, 0.016), (math.pi, 50, 0.5), (4.0, 250, 0.033), (1.0, 0, 1.0)])
def test_position_follows_velocity(rng, angle, speed, dt):
    e = make_entity(x=300, y=200, angle=angle, speed=speed)
    core = make_core([e], rng, boundary=BOUNDARY_UNBOUNDED)
    core.advance(dt)
    moved = core.entities[0]
    assert moved.position.x == pytest.approx(300 + speed * math.cos(angle) * dt)
    assert moved.position.y == pytest.approx(200 + speed * math.sin(angle) * dt)
    assert moved.age == pytest.approx(dt)


def test_advance_counts_ticks_and_elapsed(rng):
    core = make_core([make_entity(speed=10)], rng)
    core.advance(0.25)
    core.advance(0.5)
    assert core.state.tick == 2
    assert core.state.elapsed == pytest.approx(0.75)


# --- Boundary policy ---------------------------------------------------------
def test_reflective_boundary_turns_angle_by_quarter(rng):
    cfg = dict(width=1024, height=576, entity_diameter=20)
    e = make_entity(x=1024 - 20 + 1, y=100, angle=0.0, speed=100, points=10)
    core = make_core([e], rng, **cfg)
    core.advance(0.1)
    after = core.entities[0]
    assert after.velocity.angle == -math.pi / 2
    assert after.velocity.speed == 100
    assert after.position.x == pytest.approx(1015)
    assert after.position.y == 100
    assert after.age == pytest.approx(0.1)
    assert (after.id, after.kind, after.health, after.points, after.split_count, after.visible) == (
        e.id,
        e.kind,
        e.health,
        e.points,
        e.split_count,
        e.visible,
    )


def test_reflective_boundary_same_turn_for_vertical_edge(rng):
    e = make_entity(x=200, y=2, angle=-math.pi / 2, speed=100)
    core = make_core([e], rng, width=1024, height=576, entity_diameter=20)
    core.advance(0.1)  # y -> -8, crosses the top edge
    assert core.entities[0].velocity.angle == pytest.approx(-math.pi)


def test_reflective_boundary_in_bounds_keeps_angle(rng):
    e = make_entity(x=500, y=300, angle=1.2, speed=100)
    core = make_core([e], rng)
    core.advance(0.1)
    assert core.entities[0].velocity.angle == 1.2


def test_unbounded_lets_entities_leave(rng):
    e = make_entity(x=1020, y=100, angle=0.0, speed=100)
    core = make_core([e], rng, boundary=BOUNDARY_UNBOUNDED)
    for _ in range(10):
        core.advance(0.1)
    after = core.entities[0]
    assert after.velocity.angle == 0.0
    assert after.position.x == pytest.approx(1120)


# --- Split rule --------------------------------------------------------------
def test_split_when_age_reaches_doubling_time(rng):
    doubling = 5.0
    eps = 0.01
    kinds = {Kind.FLU: KindProfile(points=10), Kind.COVID: KindProfile(points=20, doubling_time=doubling)}
    parent = make_entity(id=4, x=200, y=150, angle=0.5, speed=80, kind=Kind.COVID, points=20, age=doubling - eps)
    other = make_entity(id=1, x=600, y=300, speed=30)
    core = make_core([other, parent], rng, kinds=kinds)

    core.advance(2 * eps)

    assert len(core.entities) == 3
    after_other, after_parent, child = core.entities
    assert after_other.id == 1
    assert after_parent.id == 4
    assert after_parent.age == 0.0
    assert after_parent.split_count == 1
    assert child.position == Position(200, 150)
    assert child.kind is Kind.COVID
    assert child.velocity.speed == 80
    assert 0 <= child.velocity.angle < 2 * math.pi
    assert child.age == 0.0 and child.split_count == 0
    assert child.id == 5  # next after the highest existing id


def test_no_split_before_doubling_time(rng):
    kinds = {Kind.FLU: KindProfile(doubling_time=5.0)}
    core = make_core([make_entity(age=4.0, speed=10)], rng, kinds=kinds)
    core.advance(0.5)
    assert len(core.entities) == 1
    assert core.entities[0].age == pytest.approx(4.5)


def test_kind_without_doubling_time_never_splits(rng):
    core = make_core([make_entity(age=1000.0, speed=10)], rng)
    core.advance(1.0)
    assert len(core.entities) == 1


# --- Ownership by replacement ------------------------------------------------
def test_advance_builds_new_state_and_shares_hidden_entities(rng):
    hidden = make_entity(id=0, x=50, y=50, speed=100, visible=False)
    moving = make_entity(id=1, x=300, y=300, speed=100)
    core = make_core([hidden, moving], rng)
    before = core.state
    core.advance(0.1)
    assert core.state is not before
    assert before.entities[1] is moving
    assert before.entities[1].position == Position(300, 300)  # old state untouched
    assert core.entities[0] is hidden
    assert core.entities[1] is not moving


# --- Malformed ticks ---------------------------------------------------------
@pytest.mark.parametrize("dt", [0, 0.0, -0.016, float("nan"), float("inf"), None, "0.1"])
def test_malformed_tick_is_a_no_op(rng, dt):
    core = make_core([make_entity(speed=100)], rng)
    before = core.state
    assert core.advance(dt) is before
    assert core.state is before


def test_malformed_tick_logs_warning(rng, monkeypatch):
    buf = io.StringIO()
    monkeypatch.setattr(simulation_module.log, "stream", buf)
    monkeypatch.setattr(simulation_module.log, "min_level", 10)
    core = make_core([make_entity(speed=100)], rng)
    core.advance(0)
    warnings = [line for line in buf.getvalue().splitlines() if "WARN" in line]
    assert len(warnings) == 1
    assert "simulation:" in warnings[0] and "malformed tick" in warnings[0]


# --- Hits: remove policy -----------------------------------------------------
def test_remove_on_hit_drops_match_and_scores(rng):
    entities = [
        make_entity(id=0, x=100, y=100, points=20),
        make_entity(id=1, x=400, y=400, points=10),
        make_entity(id=2, x=800, y=100, points=10),
    ]
    core = make_core(entities, rng)
    result = core.apply_hit((110, 105))
    assert [e.id for e in result.matched] == [0]
    assert len(core.entities) == 2
    assert [e.id for e in core.entities] == [1, 2]
    assert core.score == 20


def test_remove_on_hit_multiple_matches_sum_points(rng):
    entities = [
        make_entity(id=0, x=100, y=100, points=20),
        make_entity(id=1, x=105, y=100, points=10),
        make_entity(id=2, x=800, y=100, points=10),
    ]
    core = make_core(entities, rng)
    core.apply_hit(Position(102, 100))
    assert [e.id for e in core.entities] == [2]
    assert core.score == 30


def test_miss_changes_nothing(rng):
    core = make_core([make_entity(x=100, y=100, points=20)], rng)
    before = core.state
    result = core.apply_hit((125, 100))
    assert not result
    assert core.state is before
    assert core.score == 0


def test_click_outside_arena_is_not_an_error(rng):
    core = make_core([make_entity(x=1, y=1, points=20)], rng)
    assert not core.apply_hit((-100, 5000))
    assert len(core.entities) == 1


def test_strict_hit_boundary(rng):
    core = make_core([make_entity(x=100, y=100, points=20)], rng, strict_hit=True)
    assert not core.apply_hit((120, 100))
    assert core.apply_hit((119.9, 100))


def test_health_absorbs_hits_before_elimination(rng):
    core = make_core([make_entity(x=100, y=100, points=20, health=2)], rng)
    core.apply_hit((100, 100))
    assert len(core.entities) == 1
    assert core.entities[0].health == 1
    assert core.score == 0
    core.apply_hit((100, 100))
    assert core.entities == ()
    assert core.score == 20


# --- Hits: hide policy -------------------------------------------------------
def test_hide_on_hit_marks_hidden_and_ramps_survivors(rng):
    entities = [
        make_entity(id=0, x=100, y=100, speed=50, points=20),
        make_entity(id=1, x=400, y=400, speed=60, points=10),
        make_entity(id=2, x=800, y=100, speed=70, points=10),
    ]
    core = make_core(entities, rng, hit_policy=HIT_POLICY_HIDE, speed_increment=15)
    core.apply_hit((100, 100))
    hit, a, b = core.entities
    assert not hit.visible
    assert hit.velocity.speed == 50
    assert (a.velocity.speed, b.velocity.speed) == (75, 85)
    assert core.score == 20
    assert core.state.visible_count == 2


def test_hide_policy_miss_does_not_ramp(rng):
    entities = [make_entity(id=0, x=100, y=100, speed=50), make_entity(id=1, x=400, y=400, speed=60)]
    core = make_core(entities, rng, hit_policy=HIT_POLICY_HIDE)
    core.apply_hit((700, 500))
    assert [e.velocity.speed for e in core.entities] == [50, 60]


def test_hidden_entities_are_not_ramped_or_hit_again(rng):
    entities = [make_entity(id=0, x=100, y=100, speed=50, points=20), make_entity(id=1, x=400, y=400, speed=60)]
    core = make_core(entities, rng, hit_policy=HIT_POLICY_HIDE, speed_increment=10)
    core.apply_hit((100, 100))
    assert not core.apply_hit((100, 100))
    core.apply_hit((400, 400))
    assert [e.velocity.speed for e in core.entities] == [50, 70]
    assert core.score == 20


# --- Win condition -----------------------------------------------------------
def test_win_predicate_hide_policy_no_resurrection(rng):
    kinds = {Kind.FLU: KindProfile(points=10, doubling_time=0.5)}
    entities = [make_entity(id=0, x=100, y=100, speed=0), make_entity(id=1, x=105, y=100, speed=0)]
    core = make_core(entities, rng, kinds=kinds, hit_policy=HIT_POLICY_HIDE)
    assert not core.is_complete
    core.apply_hit((102, 100))
    assert core.is_complete
    for _ in range(20):
        core.advance(0.1)
        assert core.is_complete
    assert len(core.entities) == 2


def test_win_predicate_remove_policy(rng):
    core = make_core([make_entity(x=100, y=100)], rng)
    core.apply_hit((100, 100))
    assert core.entities == ()
    assert core.is_complete
    core.advance(0.1)
    assert core.is_complete
    assert core.snapshot().complete


def test_empty_state_is_complete():
    assert SimulationState().is_complete


# --- Atomicity ---------------------------------------------------------------
def test_hit_during_tick_is_queued_until_tick_finishes(rng):
    kinds = {Kind.FLU: KindProfile(points=10), Kind.COVID: KindProfile(doubling_time=5.0)}
    parent = make_entity(id=0, x=50, y=50, kind=Kind.COVID, age=4.99, speed=0)
    target = make_entity(id=1, x=300, y=300, points=10, speed=0)
    core = make_core([parent, target], rng, kinds=kinds)

    original_split = core.spawner.split
    results = []

    def split_and_click(parent, position):
        results.append(core.apply_hit((300, 300)))
        return original_split(parent, position)

    core.spawner.split = split_and_click
    core.advance(0.02)

    assert results == [None]
    assert [e.id for e in core.entities] == [0, 2]
    assert core.score == 10


# --- Construction ------------------------------------------------------------
def test_core_spawns_initial_batch(rng):
    core = SimulationCore(SimulationConfig(count=7), rng=rng)
    assert len(core.entities) == 7
    assert len({e.id for e in core.entities}) == 7
    assert core.score == 0


def test_reset_respawns(rng):
    core = SimulationCore(SimulationConfig(count=3), rng=rng)
    core.apply_hit(core.entities[0].position)
    core.reset()
    assert len(core.entities) == 3
    assert core.score == 0


def test_move_is_pure():
    cfg = SimulationConfig(kinds=no_split_kinds())
    e = make_entity(x=10, y=10, angle=0.0, speed=10)
    moved = move(e, 1.0, cfg)
    assert e.position == Position(10, 10)
    assert moved.position == Position(20, 10)
