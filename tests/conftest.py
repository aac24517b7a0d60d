"""Shared test fixtures for overworld tests."""

import numpy as np
import pytest

from overworld.grid import WorldGrid
from overworld.terrain.config import WorldGenConfig
from overworld.terrain.generator import generate


@pytest.fixture
def config() -> WorldGenConfig:
    """Default thresholds on a 64x64 map."""
    return WorldGenConfig(width=64, height=64)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def island_grid() -> WorldGrid:
    """16x16 grid: raised land square in the middle of deep water, all plains."""
    grid = WorldGrid(width=16, height=16, seed=1)
    grid.elevation[:] = 0.1
    grid.elevation[3:13, 3:13] = 0.6
    return grid


@pytest.fixture(scope="module")
def seed_42_world():
    """The 64x64 seed-42 world with default thresholds."""
    config = WorldGenConfig(width=64, height=64)
    grid, simplified = generate(42, config)
    return grid, simplified, config
