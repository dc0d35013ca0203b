from __future__ import annotations

import pytest

from cryptforge.environment.canvas import Canvas
from cryptforge.environment.generators.presets import PresetEngine
from cryptforge.util.rng import SeededRandom


@pytest.fixture
def rng() -> SeededRandom:
    """A fixed-seed random source."""
    return SeededRandom(12345)


@pytest.fixture
def canvas() -> Canvas:
    """A blank 40x30 canvas."""
    return Canvas.create_empty(40, 30)


@pytest.fixture
def engine() -> PresetEngine:
    """A preset engine with the built-in presets."""
    return PresetEngine()
