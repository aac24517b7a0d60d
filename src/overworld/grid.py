"""World grid state: per-tile layers, point-of-interest sites and query surface."""

from enum import Enum

import numpy as np
import structlog
from numpy.typing import NDArray
from pydantic import BaseModel, PrivateAttr, ValidationInfo, field_validator

from .biome_types import Biome

logger = structlog.get_logger()


class PoiKind(str, Enum):
    """Classes of point of interest."""

    SETTLEMENT = "settlement"
    DUNGEON = "dungeon"


class PointOfInterest(BaseModel, frozen=True):
    """An accepted point of interest, in placement order."""

    kind: PoiKind
    x: int
    y: int


class Tile(BaseModel, frozen=True):
    """Immutable snapshot of a single world tile."""

    x: int
    y: int
    elevation: float = 0.0
    temperature: float = 0.0
    rainfall: float = 0.0
    biome: Biome = Biome.PLAINS
    is_river: bool = False
    is_road: bool = False
    has_city: bool = False
    has_dungeon: bool = False

    @property
    def has_poi(self) -> bool:
        """Whether the tile holds a settlement or a dungeon entrance."""
        return self.has_city or self.has_dungeon

    def is_land(self, beach_threshold: float) -> bool:
        """Land is anything at or above the beach line that is not a river."""
        return self.elevation >= beach_threshold and not self.is_river


def _clamp_dimension(value: int, name: str) -> int:
    if value < 1:
        logger.warning("config_value_corrected", field=name, value=value, corrected=1)
        return 1
    return value


class WorldGrid(BaseModel):
    """
    Detailed world map.

    Every layer is a dense array of shape (height, width), allocated once and
    mutated in place by the generation stages. Tile objects are only built on
    demand by tile(). All queries return documented defaults outside the grid.
    """

    width: int
    height: int
    seed: int = 0

    _elevation: NDArray[np.float64] = PrivateAttr()
    _temperature: NDArray[np.float64] = PrivateAttr()
    _rainfall: NDArray[np.float64] = PrivateAttr()
    _biome: NDArray[np.uint8] = PrivateAttr()
    _is_river: NDArray[np.bool_] = PrivateAttr()
    _is_road: NDArray[np.bool_] = PrivateAttr()
    _has_city: NDArray[np.bool_] = PrivateAttr()
    _has_dungeon: NDArray[np.bool_] = PrivateAttr()
    _poi_sites: list[PointOfInterest] = PrivateAttr(default_factory=list)

    @field_validator("width", "height")
    @classmethod
    def _positive_dimensions(cls, value: int, info: ValidationInfo) -> int:
        return _clamp_dimension(value, info.field_name)

    def model_post_init(self, __context) -> None:
        shape = (self.height, self.width)
        self._elevation = np.zeros(shape, dtype=np.float64)
        self._temperature = np.zeros(shape, dtype=np.float64)
        self._rainfall = np.zeros(shape, dtype=np.float64)
        self._biome = np.full(shape, Biome.PLAINS.code, dtype=np.uint8)
        self._is_river = np.zeros(shape, dtype=bool)
        self._is_road = np.zeros(shape, dtype=bool)
        self._has_city = np.zeros(shape, dtype=bool)
        self._has_dungeon = np.zeros(shape, dtype=bool)

    # --- Layers ---

    @property
    def shape(self) -> tuple[int, int]:
        """Array shape of every layer, (height, width)."""
        return (self.height, self.width)

    @property
    def elevation(self) -> NDArray[np.float64]:
        return self._elevation

    @property
    def temperature(self) -> NDArray[np.float64]:
        return self._temperature

    @property
    def rainfall(self) -> NDArray[np.float64]:
        return self._rainfall

    @property
    def biome(self) -> NDArray[np.uint8]:
        """Biome storage codes, see Biome.code."""
        return self._biome

    @property
    def river_mask(self) -> NDArray[np.bool_]:
        return self._is_river

    @property
    def road_mask(self) -> NDArray[np.bool_]:
        return self._is_road

    @property
    def city_mask(self) -> NDArray[np.bool_]:
        return self._has_city

    @property
    def dungeon_mask(self) -> NDArray[np.bool_]:
        return self._has_dungeon

    @property
    def poi_sites(self) -> list[PointOfInterest]:
        """Accepted points of interest in placement order."""
        return self._poi_sites

    def land_mask(self, beach_threshold: float) -> NDArray[np.bool_]:
        """Tiles at or above the beach line that are not rivers."""
        return (self._elevation >= beach_threshold) & ~self._is_river

    def reset_flags(self) -> None:
        """Clear river, road and POI flags before a fresh generation pass."""
        self._is_river.fill(False)
        self._is_road.fill(False)
        self._has_city.fill(False)
        self._has_dungeon.fill(False)
        self._poi_sites.clear()

    def set_biome(self, x: int, y: int, biome: Biome) -> None:
        """Overwrite the biome of one in-bounds tile."""
        self._biome[y, x] = biome.code

    # --- Queries ---

    def is_in_bounds(self, x: int, y: int) -> bool:
        """Check if (x, y) lies within the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def tile(self, x: int, y: int) -> Tile:
        """Snapshot of the tile at (x, y).

        Out-of-bounds positions yield a deep-water tile at elevation 0.
        """
        if not self.is_in_bounds(x, y):
            return Tile(x=x, y=y, biome=Biome.DEEP_WATER)
        return Tile(
            x=x,
            y=y,
            elevation=float(self._elevation[y, x]),
            temperature=float(self._temperature[y, x]),
            rainfall=float(self._rainfall[y, x]),
            biome=Biome.from_code(self._biome[y, x]),
            is_river=bool(self._is_river[y, x]),
            is_road=bool(self._is_road[y, x]),
            has_city=bool(self._has_city[y, x]),
            has_dungeon=bool(self._has_dungeon[y, x]),
        )

    def biome_at(self, x: int, y: int) -> Biome:
        """Biome at (x, y), DEEP_WATER outside the grid."""
        if not self.is_in_bounds(x, y):
            return Biome.DEEP_WATER
        return Biome.from_code(self._biome[y, x])

    def elevation_at(self, x: int, y: int) -> float:
        """Elevation at (x, y), 0.0 outside the grid."""
        if not self.is_in_bounds(x, y):
            return 0.0
        return float(self._elevation[y, x])

    def has_river(self, x: int, y: int) -> bool:
        return self.is_in_bounds(x, y) and bool(self._is_river[y, x])

    def has_road(self, x: int, y: int) -> bool:
        return self.is_in_bounds(x, y) and bool(self._is_road[y, x])

    def has_city(self, x: int, y: int) -> bool:
        return self.is_in_bounds(x, y) and bool(self._has_city[y, x])

    def has_dungeon_entrance(self, x: int, y: int) -> bool:
        return self.is_in_bounds(x, y) and bool(self._has_dungeon[y, x])

    def should_have_dungeon_entrance(self, x: int, y: int) -> bool:
        """Whether a local map generated for (x, y) should contain a way down.

        True for placed dungeon entrances and for mountain-family tiles.
        """
        if not self.is_in_bounds(x, y):
            return False
        return self.has_dungeon_entrance(x, y) or self.biome_at(x, y).is_mountain


class SimplifiedTile(BaseModel, frozen=True):
    """One block of the overview grid."""

    dominant_biome: Biome = Biome.PLAINS
    has_major_poi: bool = False
    is_mostly_water: bool = False


class SimplifiedGrid(BaseModel):
    """Coarse overview grid aggregated from a WorldGrid in factor x factor blocks."""

    width: int
    height: int
    factor: int = 1

    _dominant_biome: NDArray[np.uint8] = PrivateAttr()
    _has_major_poi: NDArray[np.bool_] = PrivateAttr()
    _is_mostly_water: NDArray[np.bool_] = PrivateAttr()

    @field_validator("width", "height", "factor")
    @classmethod
    def _positive_dimensions(cls, value: int, info: ValidationInfo) -> int:
        return _clamp_dimension(value, info.field_name)

    def model_post_init(self, __context) -> None:
        shape = (self.height, self.width)
        self._dominant_biome = np.full(shape, Biome.PLAINS.code, dtype=np.uint8)
        self._has_major_poi = np.zeros(shape, dtype=bool)
        self._is_mostly_water = np.zeros(shape, dtype=bool)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    @property
    def dominant_biome(self) -> NDArray[np.uint8]:
        return self._dominant_biome

    @property
    def has_major_poi(self) -> NDArray[np.bool_]:
        return self._has_major_poi

    @property
    def is_mostly_water(self) -> NDArray[np.bool_]:
        return self._is_mostly_water

    def is_in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_tile(self, x: int, y: int, tile: SimplifiedTile) -> None:
        """Store the aggregate for block (x, y)."""
        self._dominant_biome[y, x] = tile.dominant_biome.code
        self._has_major_poi[y, x] = tile.has_major_poi
        self._is_mostly_water[y, x] = tile.is_mostly_water

    def tile(self, x: int, y: int) -> SimplifiedTile:
        """Aggregate for block (x, y); deep open water outside the grid."""
        if not self.is_in_bounds(x, y):
            return SimplifiedTile(dominant_biome=Biome.DEEP_WATER, is_mostly_water=True)
        return SimplifiedTile(
            dominant_biome=Biome.from_code(self._dominant_biome[y, x]),
            has_major_poi=bool(self._has_major_poi[y, x]),
            is_mostly_water=bool(self._is_mostly_water[y, x]),
        )
