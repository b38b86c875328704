"""Input routing.

Turns raw pygame events into semantic actions (``quit``,
``pause_toggle``, ``restart``) and left clicks into arena-local points.
The arena is drawn scaled to the window, so click positions are mapped
back through the same scale before they reach the simulation core.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import pygame

from outbreak.entities import Position

Action = str
Rule = Callable[[pygame.event.Event], Action | None]

LEFT_BUTTON = 1


def _key_rule(key: int, action: Action, event_type=pygame.KEYDOWN) -> Rule:
    def _r(e: pygame.event.Event):
        if e.type == event_type and getattr(e, "key", None) == key:
            return action
        return None

    return _r


def _quit_rule(e: pygame.event.Event):
    return "quit" if e.type == pygame.QUIT else None


class InputRouter:
    """Maps pygame events to actions and arena-local click points."""

    def __init__(
        self,
        key_bindings: Dict[str, Sequence[int]],
        arena_size: Tuple[float, float],
        window_size: Tuple[int, int] | None = None,
    ) -> None:
        self.arena_size = arena_size
        self.window_size = window_size or (int(arena_size[0]), int(arena_size[1]))
        self._rules: List[Rule] = [_quit_rule]
        for action, keys in key_bindings.items():
            self._rules.extend(_key_rule(k, action) for k in keys)

    def resize(self, window_size: Tuple[int, int]) -> None:
        self.window_size = window_size

    def to_arena(self, pos: Tuple[float, float]) -> Position:
        ww, wh = self.window_size
        aw, ah = self.arena_size
        return Position(pos[0] * aw / max(1, ww), pos[1] * ah / max(1, wh))

    def process(self, events: Iterable[pygame.event.Event]) -> List[Action]:
        actions: List[Action] = []
        for e in events:
            for rule in self._rules:
                a = rule(e)
                if a:
                    if a not in actions:  # de-duplicate per frame
                        actions.append(a)
                    break
        return actions

    def clicks(self, events: Iterable[pygame.event.Event]) -> List[Position]:
        """Arena-local points of every left click, in event order."""
        return [
            self.to_arena(e.pos)
            for e in events
            if e.type == pygame.MOUSEBUTTONDOWN and getattr(e, "button", None) == LEFT_BUTTON
        ]


__all__ = ["InputRouter", "Action"]
