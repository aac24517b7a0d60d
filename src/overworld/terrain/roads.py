"""Straight-line roads between settlements."""

import numpy as np
import structlog

from ..grid import PoiKind, WorldGrid
from .config import WorldGenConfig

logger = structlog.get_logger()


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    """Integer points on the line from (x0, y0) to (x1, y1), both ends included."""
    points: list[tuple[int, int]] = []
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    x, y = x0, y0
    while True:
        points.append((x, y))
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy
    return points


class RoadRouter:
    """Stage: join each settlement to the next one placed.

    Roads are traced as straight lines in placement order. Only land tiles
    that are not rivers are marked; crossings of water or rivers are left as
    gaps.
    """

    name = "roads"

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        if not config.generate_roads:
            return

        settlements = [site for site in grid.poi_sites if site.kind == PoiKind.SETTLEMENT]
        if len(settlements) < 2:
            logger.info("roads_skipped", settlements=len(settlements), required=2)
            return

        land = grid.land_mask(config.beach_threshold)
        segments = 0
        for start, end in zip(settlements, settlements[1:]):
            for x, y in bresenham_line(start.x, start.y, end.x, end.y):
                if grid.is_in_bounds(x, y) and land[y, x]:
                    grid.road_mask[y, x] = True
            segments += 1

        logger.info(
            "roads_generated",
            segments=segments,
            road_tiles=int(grid.road_mask.sum()),
        )
