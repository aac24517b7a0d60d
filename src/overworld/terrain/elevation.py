"""Elevation synthesis and edge falloff."""

import numpy as np
import structlog
from numpy.typing import NDArray

from ..grid import WorldGrid
from .config import WorldGenConfig
from .noise import NoiseField

logger = structlog.get_logger()

SEED_OFFSET_LIMIT = 2**31 - 1


def edge_falloff(
    width: int,
    height: int,
    power: float,
    start: float,
) -> NDArray[np.float64]:
    """Multiplicative falloff toward the map border.

    Uses the Chebyshev distance from the centre, normalized so the edges sit
    at 1. The factor stays at 1 in the middle of the map and bends toward 0
    over the outer `start` fraction of the half-extent.

    Args:
        width: Map width.
        height: Map height.
        power: Curve exponent; larger keeps more land before the drop.
        start: Fraction of the half-extent affected by falloff.

    Returns:
        Factors in [0, 1], shape (height, width).
    """
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    nx = xs / width * 2.0 - 1.0
    ny = ys / height * 2.0 - 1.0
    distance = np.maximum(np.abs(nx), np.abs(ny))

    value = np.maximum(0.0, distance - (1.0 - start)) / max(1e-4, start)
    value = np.clip(value, 0.0, 1.0)
    return 1.0 - value**power


class ElevationSynthesizer:
    """Stage: fill the elevation layer from fractal noise."""

    name = "elevation"

    def __init__(self, noise: NoiseField | None = None) -> None:
        self._noise = noise

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        grid.reset_flags()

        noise = self._noise or NoiseField(grid.seed)
        seed_offset = int(rng.integers(0, SEED_OFFSET_LIMIT))
        elevation = noise.field(
            grid.width,
            grid.height,
            scale=config.elevation_scale,
            octaves=config.elevation_octaves,
            persistence=config.elevation_persistence,
            lacunarity=config.elevation_lacunarity,
            seed_offset=seed_offset,
            center=True,
        )

        if config.use_edge_falloff:
            elevation = elevation * edge_falloff(
                grid.width, grid.height, config.falloff_power, config.falloff_start
            )

        grid.elevation[:] = np.clip(elevation, 0.0, 1.0)

        logger.debug(
            "elevation_synthesized",
            mean=round(float(grid.elevation.mean()), 4),
            edge_falloff=config.use_edge_falloff,
        )
