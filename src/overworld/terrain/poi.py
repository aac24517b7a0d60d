"""Placement of settlements and dungeon entrances."""

from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..biome_types import Biome, biome_codes
from ..grid import PoiKind, PointOfInterest, WorldGrid
from .config import WorldGenConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoiClass:
    """Placement rules for one kind of point of interest."""

    kind: PoiKind
    count: int
    allowed_biomes: tuple[Biome, ...]
    marker_biome: Biome
    water_radius: int = 0


def poi_classes(config: WorldGenConfig) -> list[PoiClass]:
    """POI classes in placement order."""
    return [
        PoiClass(
            kind=PoiKind.SETTLEMENT,
            count=config.settlement_count,
            allowed_biomes=config.settlement_biomes,
            marker_biome=Biome.CITY,
            water_radius=config.settlement_water_radius,
        ),
        PoiClass(
            kind=PoiKind.DUNGEON,
            count=config.dungeon_count,
            allowed_biomes=config.dungeon_biomes,
            marker_biome=Biome.DUNGEON_ENTRANCE,
        ),
    ]


def near_water(
    elevation: NDArray[np.float64],
    rivers: NDArray[np.bool_],
    beach_threshold: float,
    radius: int,
) -> NDArray[np.bool_]:
    """Tiles with water anywhere in the surrounding (2r+1)^2 window.

    Water is any tile that is not land: below the beach line or a river. The
    centre tile itself is not considered.
    """
    water = (elevation < beach_threshold) | rivers
    if radius <= 0:
        return np.zeros(elevation.shape, dtype=bool)
    footprint = np.ones((2 * radius + 1, 2 * radius + 1), dtype=bool)
    footprint[radius, radius] = False
    return ndimage.binary_dilation(water, structure=footprint)


class POIPlacer:
    """Stage: scatter points of interest by rejection sampling.

    Each class gets count * poi_attempts_multiplier random draws. Falling short
    of the quota is logged, never raised.
    """

    name = "poi"

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        land = grid.land_mask(config.beach_threshold)
        min_distance_sq = config.min_distance_between_pois**2

        for poi_class in poi_classes(config):
            if poi_class.count <= 0:
                continue

            allowed = np.isin(grid.biome, biome_codes(poi_class.allowed_biomes))
            candidates = allowed & land
            if poi_class.water_radius > 0:
                candidates &= ~near_water(
                    grid.elevation,
                    grid.river_mask,
                    config.beach_threshold,
                    poi_class.water_radius,
                )

            placed = self._place_class(
                grid, poi_class, candidates, min_distance_sq, config, rng
            )

            if placed < poi_class.count:
                logger.warning(
                    "poi_placement_shortfall",
                    poi=poi_class.kind.value,
                    placed=placed,
                    requested=poi_class.count,
                )
            else:
                logger.debug("poi_placed", poi=poi_class.kind.value, placed=placed)

    @staticmethod
    def _place_class(
        grid: WorldGrid,
        poi_class: PoiClass,
        candidates: NDArray[np.bool_],
        min_distance_sq: float,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> int:
        placed = 0
        attempts = poi_class.count * config.poi_attempts_multiplier
        flag = grid.city_mask if poi_class.kind == PoiKind.SETTLEMENT else grid.dungeon_mask

        for _ in range(attempts):
            if placed >= poi_class.count:
                break

            x = int(rng.integers(0, grid.width))
            y = int(rng.integers(0, grid.height))

            if not candidates[y, x]:
                continue
            if grid.city_mask[y, x] or grid.dungeon_mask[y, x]:
                continue
            if any(
                (site.x - x) ** 2 + (site.y - y) ** 2 < min_distance_sq
                for site in grid.poi_sites
            ):
                continue

            flag[y, x] = True
            grid.set_biome(x, y, poi_class.marker_biome)
            grid.poi_sites.append(PointOfInterest(kind=poi_class.kind, x=x, y=y))
            placed += 1

        return placed
