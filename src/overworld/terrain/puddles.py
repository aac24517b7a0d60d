"""Removal of small enclosed water pockets."""

import numpy as np
import structlog

from ..grid import WorldGrid
from .config import WorldGenConfig
from .regions import iter_regions

logger = structlog.get_logger()


class PuddleRemover:
    """Stage: raise enclosed water bodies smaller than min_lake_size.

    Noise terrain leaves many one-tile pits below the shallow-water line. Left
    in place, hydrology would treat each one as a river terminus. Regions that
    touch the map border count as ocean and are always kept.
    """

    name = "puddles"

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        if not config.remove_small_puddles:
            return

        threshold = config.shallow_water_threshold
        water = grid.elevation < threshold

        removed = 0
        raised_tiles = 0
        for region in iter_regions(water):
            if region.touches_border or region.size >= config.min_lake_size:
                continue
            jitter = rng.random(region.size) * config.puddle_jitter
            grid.elevation[region.rows, region.cols] = np.minimum(1.0, threshold + jitter)
            removed += 1
            raised_tiles += region.size

        logger.debug("puddles_removed", regions=removed, tiles=raised_tiles)
