"""Seeded overworld map generation."""

from .biome_types import Biome
from .exceptions import MapFormatError, OverworldError
from .grid import (
    PoiKind,
    PointOfInterest,
    SimplifiedGrid,
    SimplifiedTile,
    Tile,
    WorldGrid,
)
from .terrain import WorldGenConfig, WorldGenerator, generate

__all__ = [
    # Types
    "Biome",
    "PoiKind",
    # State
    "PointOfInterest",
    "SimplifiedGrid",
    "SimplifiedTile",
    "Tile",
    "WorldGrid",
    # Generation
    "WorldGenConfig",
    "WorldGenerator",
    "generate",
    # Exceptions
    "OverworldError",
    "MapFormatError",
]
