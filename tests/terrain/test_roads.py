"""Tests for road tracing."""

import numpy as np

from overworld.grid import PoiKind, PointOfInterest, WorldGrid
from overworld.terrain.config import WorldGenConfig
from overworld.terrain.roads import RoadRouter, bresenham_line


def settled_grid(*sites: tuple[PoiKind, int, int]) -> WorldGrid:
    grid = WorldGrid(width=20, height=10)
    grid.elevation[:] = 0.6
    for kind, x, y in sites:
        grid.poi_sites.append(PointOfInterest(kind=kind, x=x, y=y))
    return grid


class TestBresenhamLine:
    """Tests for integer line tracing."""

    def test_endpoints(self) -> None:
        points = bresenham_line(0, 0, 5, 3)
        assert points[0] == (0, 0)
        assert points[-1] == (5, 3)
        assert len(points) == 6

    def test_diagonal(self) -> None:
        assert bresenham_line(0, 0, 3, 3) == [(0, 0), (1, 1), (2, 2), (3, 3)]

    def test_reverse(self) -> None:
        assert bresenham_line(3, 0, 0, 0) == [(3, 0), (2, 0), (1, 0), (0, 0)]

    def test_single_point(self) -> None:
        assert bresenham_line(2, 2, 2, 2) == [(2, 2)]

    def test_continuous(self) -> None:
        """Consecutive points are always neighbours."""
        points = bresenham_line(1, 9, 17, 2)
        for (x0, y0), (x1, y1) in zip(points, points[1:]):
            assert max(abs(x1 - x0), abs(y1 - y0)) == 1


class TestRoadRouter:
    """Tests for the road stage."""

    def test_straight_road(self, config: WorldGenConfig, rng: np.random.Generator) -> None:
        grid = settled_grid((PoiKind.SETTLEMENT, 2, 5), (PoiKind.SETTLEMENT, 17, 5))
        RoadRouter().transform(grid, config, rng)
        assert grid.road_mask[5, 2:18].all()
        assert int(grid.road_mask.sum()) == 16

    def test_chain_in_placement_order(self, config: WorldGenConfig, rng: np.random.Generator) -> None:
        grid = settled_grid(
            (PoiKind.SETTLEMENT, 1, 1),
            (PoiKind.SETTLEMENT, 1, 8),
            (PoiKind.SETTLEMENT, 10, 8),
        )
        RoadRouter().transform(grid, config, rng)
        assert grid.road_mask[1:9, 1].all()
        assert grid.road_mask[8, 1:11].all()
        assert not grid.has_road(10, 1)

    def test_water_and_rivers_left_as_gaps(
        self, config: WorldGenConfig, rng: np.random.Generator
    ) -> None:
        grid = settled_grid((PoiKind.SETTLEMENT, 2, 5), (PoiKind.SETTLEMENT, 17, 5))
        grid.elevation[:, 8:10] = 0.1
        grid.river_mask[:, 13] = True
        RoadRouter().transform(grid, config, rng)
        assert not grid.road_mask[5, 8:10].any()
        assert not grid.has_road(13, 5)
        assert grid.has_road(7, 5) and grid.has_road(14, 5)

    def test_dungeons_ignored(self, config: WorldGenConfig, rng: np.random.Generator) -> None:
        """A single settlement gets no road even with dungeons present."""
        grid = settled_grid((PoiKind.SETTLEMENT, 2, 5), (PoiKind.DUNGEON, 17, 5))
        RoadRouter().transform(grid, config, rng)
        assert not grid.road_mask.any()

    def test_disabled(self, config: WorldGenConfig, rng: np.random.Generator) -> None:
        grid = settled_grid((PoiKind.SETTLEMENT, 2, 5), (PoiKind.SETTLEMENT, 17, 5))
        RoadRouter().transform(grid, config.model_copy(update={"generate_roads": False}), rng)
        assert not grid.road_mask.any()
