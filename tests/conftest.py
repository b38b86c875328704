import os
import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path for module imports (app, outbreak)
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Headless test mode: no window, no audio device
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from outbreak.entities import Entity, Kind, Position, Velocity  # noqa: E402
from outbreak.rng_service import RNGService  # noqa: E402


def make_entity(id=0, x=100.0, y=100.0, angle=0.0, speed=0.0, kind=Kind.FLU, **kw):
    return Entity(id=id, position=Position(x, y), velocity=Velocity(angle, speed), kind=kind, **kw)


@pytest.fixture
def rng():
    return RNGService(1234)
