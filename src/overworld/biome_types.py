"""Biome tags and their properties."""

from enum import Enum

import numpy as np
from numpy.typing import NDArray


class Biome(str, Enum):
    """Biome tags assigned to world tiles."""

    DEEP_WATER = "deep_water"
    SHALLOW_WATER = "shallow_water"
    BEACH = "beach"

    POLAR_ICE = "polar_ice"
    HIGH_MOUNTAIN = "high_mountain"
    MOUNTAIN_TUNDRA = "mountain_tundra"
    ALPINE_FOREST = "alpine_forest"
    MOUNTAINOUS = "mountainous"
    MOUNTAIN = "mountain"
    HILLS = "hills"
    PLAINS = "plains"

    TUNDRA = "tundra"
    TAIGA = "taiga"
    COLD_PARKLANDS = "cold_parklands"
    STEPPE = "steppe"

    SHRUBLAND = "shrubland"
    TEMPERATE_GRASSLAND = "temperate_grassland"
    TEMPERATE_MIXED_FOREST = "temperate_mixed_forest"
    TEMPERATE_DECIDUOUS_FOREST = "temperate_deciduous_forest"
    TEMPERATE_RAINFOREST = "temperate_rainforest"

    MEDITERRANEAN = "mediterranean"
    SUBTROPICAL_GRASSLAND = "subtropical_grassland"
    SUBTROPICAL_DRY_FOREST = "subtropical_dry_forest"
    SUBTROPICAL_MOIST_FOREST = "subtropical_moist_forest"
    DESERT = "desert"

    TROPICAL_GRASSLAND = "tropical_grassland"
    TROPICAL_DRY_FOREST = "tropical_dry_forest"
    TROPICAL_MOIST_FOREST = "tropical_moist_forest"
    TROPICAL_RAINFOREST = "tropical_rainforest"

    WETLANDS = "wetlands"

    CITY = "city"
    DUNGEON_ENTRANCE = "dungeon_entrance"
    RIVER = "river"

    @property
    def code(self) -> int:
        """Storage value used in the uint8 biome layer."""
        return _BIOME_CODES[self]

    @property
    def is_water(self) -> bool:
        """Whether this is one of the elevation-banded water biomes."""
        return self in _WATER_BIOMES

    @property
    def is_special(self) -> bool:
        """Whether this is a marker tag rather than an ecological biome."""
        return self in _SPECIAL_BIOMES

    @property
    def is_mountain(self) -> bool:
        """Whether this belongs to the mountain family."""
        return self in _MOUNTAIN_BIOMES

    @classmethod
    def from_code(cls, code: int) -> "Biome":
        """Look up a biome by its storage value."""
        return _BIOMES_BY_CODE[int(code)]


# Codes follow declaration order and are persisted, so append new members last
_BIOMES_BY_CODE: tuple[Biome, ...] = tuple(Biome)
_BIOME_CODES: dict[Biome, int] = {biome: i for i, biome in enumerate(_BIOMES_BY_CODE)}

_WATER_BIOMES = frozenset({
    Biome.DEEP_WATER,
    Biome.SHALLOW_WATER,
    Biome.BEACH,
})

_SPECIAL_BIOMES = frozenset({
    Biome.CITY,
    Biome.DUNGEON_ENTRANCE,
    Biome.RIVER,
})

_MOUNTAIN_BIOMES = frozenset({
    Biome.POLAR_ICE,
    Biome.HIGH_MOUNTAIN,
    Biome.MOUNTAIN_TUNDRA,
    Biome.ALPINE_FOREST,
    Biome.MOUNTAINOUS,
    Biome.MOUNTAIN,
})


def biome_codes(biomes: "frozenset[Biome] | tuple[Biome, ...] | list[Biome]") -> NDArray[np.uint8]:
    """Convert a collection of biomes to an array of storage codes for np.isin."""
    return np.array(sorted(b.code for b in biomes), dtype=np.uint8)
