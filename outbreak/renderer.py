"""Snapshot renderer.

Draws a ``SimulationSnapshot`` and nothing else: the renderer has no
access to the simulation core and never mutates what it is given.

Layer order (bottom -> top):
1. Clear the arena surface
2. Entities (visible only), one triangle per entity pointing along its heading
3. HUD (score, remaining count, paused / cleared banners)
4. Scale the arena surface onto the window surface

``capture_sequence`` records the executed steps for tests so they do
not depend on pixel sampling.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import pygame

from outbreak.constants import (
    BACKGROUND_COLOR,
    COVID_COLOR,
    FLU_COLOR,
    GERM_HALF_WIDTH,
    GERM_LENGTH,
    HUD_COLOR,
)
from outbreak.entities import Kind
from outbreak.snapshot import EntitySnapshot, SimulationSnapshot

KIND_COLORS = {
    Kind.FLU.value: FLU_COLOR,
    Kind.COVID.value: COVID_COLOR,
}


def germ_polygon(e: EntitySnapshot) -> List[Tuple[float, float]]:
    """Triangle centered on the entity, nose pointing along its angle."""
    cos_a, sin_a = math.cos(e.angle), math.sin(e.angle)
    half = GERM_LENGTH / 2
    nose = (e.x + cos_a * half, e.y + sin_a * half)
    tail_x, tail_y = e.x - cos_a * half, e.y - sin_a * half
    # perpendicular to the heading
    px, py = -sin_a * GERM_HALF_WIDTH, cos_a * GERM_HALF_WIDTH
    return [nose, (tail_x + px, tail_y + py), (tail_x - px, tail_y - py)]


class Renderer:
    def __init__(self, arena_size: Tuple[int, int]) -> None:
        self.arena = pygame.Surface(arena_size)
        if not pygame.font.get_init():
            pygame.font.init()
        self.font = pygame.font.Font(None, 28)

    def render(
        self,
        snapshot: SimulationSnapshot,
        target_surface: pygame.Surface,
        paused: bool = False,
        capture_sequence: Optional[List[str]] = None,
    ) -> None:
        seq = capture_sequence
        self.arena.fill(BACKGROUND_COLOR)
        if seq is not None:
            seq.append("clear")

        for e in snapshot.entities:
            if not e.visible:
                continue
            pygame.draw.polygon(self.arena, KIND_COLORS.get(e.kind, HUD_COLOR), germ_polygon(e))
        if seq is not None:
            seq.append("entities")

        self._render_hud(snapshot, paused)
        if seq is not None:
            seq.append("hud")

        if self.arena.get_size() != target_surface.get_size():
            scaled = pygame.transform.scale(self.arena, target_surface.get_size())
            target_surface.blit(scaled, (0, 0))
        else:
            target_surface.blit(self.arena, (0, 0))
        if seq is not None:
            seq.append("blit")

    def _render_hud(self, snapshot: SimulationSnapshot, paused: bool) -> None:
        text = f"Score: {snapshot.score}   Left: {snapshot.visible_count}"
        self.arena.blit(self.font.render(text, True, HUD_COLOR), (8, 8))
        banner = None
        if snapshot.complete:
            banner = "All clear! Press R to play again"
        elif paused:
            banner = "Paused"
        if banner:
            surf = self.font.render(banner, True, HUD_COLOR)
            w, h = self.arena.get_size()
            self.arena.blit(surf, ((w - surf.get_width()) // 2, (h - surf.get_height()) // 2))


__all__ = ["Renderer", "germ_polygon", "KIND_COLORS"]
