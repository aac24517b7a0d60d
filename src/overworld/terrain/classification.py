"""Biome classification from elevation, temperature and rainfall."""

import numpy as np
from numpy.typing import NDArray

from ..biome_types import Biome
from ..grid import WorldGrid
from .config import WorldGenConfig

# Rows: temperature band (cold, temperate, warm, hot)
# Columns: rainfall band (dry, arid, moderate, wet, very wet)
BIOME_TABLE: tuple[tuple[Biome, ...], ...] = (
    (Biome.STEPPE, Biome.STEPPE, Biome.COLD_PARKLANDS, Biome.TAIGA, Biome.TAIGA),
    (
        Biome.SHRUBLAND,
        Biome.TEMPERATE_GRASSLAND,
        Biome.TEMPERATE_MIXED_FOREST,
        Biome.TEMPERATE_DECIDUOUS_FOREST,
        Biome.TEMPERATE_RAINFOREST,
    ),
    (
        Biome.DESERT,
        Biome.SUBTROPICAL_GRASSLAND,
        Biome.MEDITERRANEAN,
        Biome.SUBTROPICAL_DRY_FOREST,
        Biome.SUBTROPICAL_MOIST_FOREST,
    ),
    (
        Biome.DESERT,
        Biome.TROPICAL_DRY_FOREST,
        Biome.TROPICAL_GRASSLAND,
        Biome.TROPICAL_MOIST_FOREST,
        Biome.TROPICAL_RAINFOREST,
    ),
)

_TABLE_CODES = np.array(
    [[biome.code for biome in row] for row in BIOME_TABLE], dtype=np.uint8
)


def _code(biome: Biome) -> np.uint8:
    return np.uint8(biome.code)


def water_band_biomes(
    elevation: NDArray[np.float64],
    config: WorldGenConfig,
) -> NDArray[np.uint8]:
    """Deep water, shallow water or beach codes by elevation.

    Only meaningful where elevation is below the beach threshold.
    """
    return np.where(
        elevation < config.deep_water_threshold,
        _code(Biome.DEEP_WATER),
        np.where(
            elevation < config.shallow_water_threshold,
            _code(Biome.SHALLOW_WATER),
            _code(Biome.BEACH),
        ),
    ).astype(np.uint8)


def classify_biomes(
    elevation: NDArray[np.float64],
    temperature: NDArray[np.float64],
    rainfall: NDArray[np.float64],
    config: WorldGenConfig,
) -> NDArray[np.uint8]:
    """Classify every tile into a biome code.

    Rules apply in strict priority order:
    1. Water and beach by elevation.
    2. High mountain or polar ice above high_mountain_threshold.
    3. Mountain family above mountain_threshold, by temperature.
    4. Temperature band x rainfall band lookup, with tundra for cold and dry.
    5. Wetlands override for wet lowland just above the beach line.

    Args:
        elevation: Elevation field.
        temperature: Temperature field.
        rainfall: Rainfall field.
        config: Thresholds.

    Returns:
        Biome codes, shape matching the inputs.
    """
    e, t, r = elevation, temperature, rainfall

    # Rule 4: climate table
    temp_band = np.digitize(t, [config.t_cool, config.t_temperate, config.t_warm])
    rain_band = np.digitize(
        r, [config.r_dry, config.r_arid, config.r_moderate, config.r_wet], right=True
    )
    codes = _TABLE_CODES[temp_band, rain_band]
    tundra = (temp_band == 0) & (t < config.t_cold) & (r < config.r_arid)
    codes = np.where(tundra, _code(Biome.TUNDRA), codes)

    # Rule 3: mountains
    mountain = np.where(
        t < config.t_cold,
        _code(Biome.MOUNTAIN_TUNDRA),
        np.where(t < config.t_cool, _code(Biome.ALPINE_FOREST), _code(Biome.MOUNTAINOUS)),
    )
    codes = np.where(e > config.mountain_threshold, mountain, codes)

    # Rule 2: high mountains
    high = np.where(
        t < config.t_cold * 1.5, _code(Biome.POLAR_ICE), _code(Biome.HIGH_MOUNTAIN)
    )
    codes = np.where(e > config.high_mountain_threshold, high, codes)

    # Rule 1: water bands take precedence over everything above
    water = e < config.beach_threshold
    codes = np.where(water, water_band_biomes(e, config), codes)

    # Rule 5: wetlands post-pass
    wetlands = (
        ~water
        & (e < config.beach_threshold + config.wetland_elevation_band)
        & (r > config.r_moderate)
    )
    codes = np.where(wetlands, _code(Biome.WETLANDS), codes)

    return codes.astype(np.uint8)


class BiomeClassifier:
    """Stage: assign a biome to every tile."""

    name = "biomes"

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        grid.biome[:] = classify_biomes(
            grid.elevation, grid.temperature, grid.rainfall, config
        )
