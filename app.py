"""Application entry point.

Opens a resizable window the size of the arena and runs the session
until the window is closed or ESC is pressed. Settings are read from the
JSON file named by ``OUTBREAK_SETTINGS`` (default ``data/settings.json``);
a missing file means defaults.
"""

from __future__ import annotations

import os

import pygame

from outbreak.constants import TARGET_FPS
from outbreak.renderer import Renderer
from outbreak.session import GameSession
from outbreak.settings import load_settings


def main():
    settings = load_settings(os.environ.get("OUTBREAK_SETTINGS", "data/settings.json"))
    cfg = settings.config
    arena_size = (int(cfg.width), int(cfg.height))

    pygame.init()
    pygame.display.set_caption("Outbreak")
    screen = pygame.display.set_mode(arena_size, pygame.RESIZABLE)
    limiter = pygame.time.Clock()
    renderer = Renderer(arena_size)
    session = GameSession(settings, window_size=screen.get_size())

    try:
        with session:
            while not session.quit_requested:
                # Window may have been resized since the last frame.
                current_surface = pygame.display.get_surface()
                if current_surface is not None and current_surface != screen:
                    screen = current_surface
                session.router.resize(screen.get_size())

                session.handle(pygame.event.get())
                session.update()
                renderer.render(session.snapshot(), screen, paused=session.paused)
                pygame.display.flip()
                limiter.tick(TARGET_FPS)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    main()
