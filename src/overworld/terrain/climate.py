"""Temperature and rainfall synthesis."""

import numpy as np
import structlog
from numpy.typing import NDArray

from ..grid import WorldGrid
from .config import WorldGenConfig
from .elevation import SEED_OFFSET_LIMIT
from .noise import NoiseField

logger = structlog.get_logger()


def latitude_profile(height: int) -> NDArray[np.float64]:
    """Per-row closeness to the equator row: 1 at the centre, 0 at the poles.

    Returns:
        Column vector of shape (height, 1) for broadcasting across rows.
    """
    half = height / 2.0
    rows = np.arange(height, dtype=np.float64)
    lat = 1.0 - np.abs(rows - half) / max(half, 1e-9)
    return np.clip(lat, 0.0, 1.0)[:, np.newaxis]


def compute_temperature(
    elevation: NDArray[np.float64],
    noise: NDArray[np.float64],
    config: WorldGenConfig,
) -> NDArray[np.float64]:
    """Temperature from latitude, altitude and noise jitter, clamped to [0, 1]."""
    base = config.base_temperature
    factor = config.latitude_temperature_factor
    lat_effect = latitude_profile(elevation.shape[0]) ** 1.5 * factor

    temperature = (
        base
        + lat_effect * (1.0 - base)
        - (factor - lat_effect) * base
        + (noise - 0.5) * config.temperature_noise_amplitude
        - elevation * config.elevation_temperature_factor
    )
    return np.clip(temperature, 0.0, 1.0)


def compute_rainfall(
    elevation: NDArray[np.float64],
    noise: NDArray[np.float64],
    config: WorldGenConfig,
) -> NDArray[np.float64]:
    """Rainfall with a wet equatorial band and mild orographic lift, clamped to [0, 1]."""
    base = config.base_rainfall
    lat_effect = latitude_profile(elevation.shape[0]) ** config.latitude_rainfall_exponent

    rainfall = (
        base
        + lat_effect * (1.0 - base)
        + (noise - 0.5) * config.rainfall_noise_amplitude
        + elevation * config.elevation_rainfall_factor
    )
    return np.clip(rainfall, 0.0, 1.0)


class ClimateSynthesizer:
    """Stage: fill the temperature and rainfall layers."""

    name = "climate"

    def __init__(self, noise: NoiseField | None = None) -> None:
        self._noise = noise

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        noise = self._noise or NoiseField(grid.seed)

        temperature_noise = noise.field(
            grid.width,
            grid.height,
            scale=config.temperature_scale,
            octaves=config.temperature_octaves,
            persistence=config.temperature_persistence,
            lacunarity=config.temperature_lacunarity,
            seed_offset=int(rng.integers(0, SEED_OFFSET_LIMIT)),
        )
        grid.temperature[:] = compute_temperature(grid.elevation, temperature_noise, config)

        rainfall_noise = noise.field(
            grid.width,
            grid.height,
            scale=config.rainfall_scale,
            octaves=config.rainfall_octaves,
            persistence=config.rainfall_persistence,
            lacunarity=config.rainfall_lacunarity,
            seed_offset=int(rng.integers(0, SEED_OFFSET_LIMIT)),
        )
        grid.rainfall[:] = compute_rainfall(grid.elevation, rainfall_noise, config)

        logger.debug(
            "climate_synthesized",
            mean_temperature=round(float(grid.temperature.mean()), 4),
            mean_rainfall=round(float(grid.rainfall.mean()), 4),
        )
