"""Block aggregation of the detailed grid into an overview grid."""

import math

import numpy as np
import structlog

from ..biome_types import Biome, biome_codes
from ..grid import SimplifiedGrid, SimplifiedTile, WorldGrid

logger = structlog.get_logger()

_SPECIAL_CODES = biome_codes([b for b in Biome if b.is_special])


class WorldSimplifier:
    """Aggregate factor x factor blocks into SimplifiedTiles.

    For each block:
    - dominant biome is the most common non-special biome; ties go to the one
      seen first in row-major order, and PLAINS is used if none remain
    - has_major_poi is set if any tile holds a settlement or dungeon
    - is_mostly_water is set if water tiles outnumber land tiles
    - a mostly-water block with no POI shows SHALLOW_WATER unless its dominant
      biome is already DEEP_WATER
    - any river tile makes the block a mostly-water RIVER block, overriding the
      rules above
    """

    def __init__(self, factor: int = 4) -> None:
        if factor < 1:
            logger.warning("config_value_corrected", field="factor", value=factor, corrected=1)
            factor = 1
        self.factor = factor

    def simplify(self, grid: WorldGrid, beach_threshold: float) -> SimplifiedGrid:
        """Build the overview grid for a finished world."""
        f = self.factor
        simplified = SimplifiedGrid(
            width=math.ceil(grid.width / f),
            height=math.ceil(grid.height / f),
            factor=f,
        )
        land = grid.land_mask(beach_threshold)

        for by in range(simplified.height):
            for bx in range(simplified.width):
                rows = slice(by * f, min((by + 1) * f, grid.height))
                cols = slice(bx * f, min((bx + 1) * f, grid.width))
                simplified.set_tile(
                    bx,
                    by,
                    self._aggregate(
                        grid.biome[rows, cols],
                        grid.river_mask[rows, cols],
                        grid.city_mask[rows, cols] | grid.dungeon_mask[rows, cols],
                        land[rows, cols],
                    ),
                )

        return simplified

    @staticmethod
    def _aggregate(biomes, rivers, pois, land) -> SimplifiedTile:
        if biomes.size == 0:
            return SimplifiedTile(dominant_biome=Biome.DEEP_WATER, is_mostly_water=True)

        land_count = int(land.sum())
        is_mostly_water = (biomes.size - land_count) > land_count
        has_major_poi = bool(pois.any())

        if rivers.any():
            return SimplifiedTile(
                dominant_biome=Biome.RIVER,
                has_major_poi=has_major_poi,
                is_mostly_water=True,
            )

        codes = biomes.ravel()
        codes = codes[~np.isin(codes, _SPECIAL_CODES)]
        dominant = Biome.PLAINS
        if codes.size:
            values, first_seen, counts = np.unique(
                codes, return_index=True, return_counts=True
            )
            # Highest count, then earliest first appearance
            best = np.lexsort((first_seen, -counts))[0]
            dominant = Biome.from_code(values[best])

        if is_mostly_water and not has_major_poi and dominant != Biome.DEEP_WATER:
            dominant = Biome.SHALLOW_WATER

        return SimplifiedTile(
            dominant_biome=dominant,
            has_major_poi=has_major_poi,
            is_mostly_water=is_mostly_water,
        )
