"""Tests for point-of-interest placement."""

import numpy as np
import pytest

from overworld.biome_types import Biome
from overworld.grid import PoiKind, WorldGrid
from overworld.terrain.config import WorldGenConfig
from overworld.terrain.poi import POIPlacer, near_water, poi_classes


def grassland(width: int = 30, height: int = 30) -> WorldGrid:
    grid = WorldGrid(width=width, height=height, seed=2)
    grid.elevation[:] = 0.6
    grid.biome[:] = Biome.TEMPERATE_GRASSLAND.code
    return grid


@pytest.fixture
def poi_config() -> WorldGenConfig:
    """Three settlements and two dungeons, both allowed on grassland."""
    return WorldGenConfig(
        width=30,
        height=30,
        settlement_count=3,
        dungeon_count=2,
        dungeon_biomes=(Biome.TEMPERATE_GRASSLAND,),
    )


class TestNearWater:
    """Tests for the settlement water check."""

    def test_neighbourhood(self) -> None:
        elevation = np.full((7, 7), 0.6)
        elevation[3, 3] = 0.1
        near = near_water(elevation, np.zeros((7, 7), dtype=bool), 0.35, 1)
        assert near[2, 2] and near[4, 4] and near[3, 4]
        assert not near[3, 3]
        assert not near[0, 0]
        assert not near[3, 5]

    def test_rivers_count_as_water(self) -> None:
        """A river on dry ground blocks its neighbourhood like the sea does."""
        elevation = np.full((7, 7), 0.6)
        rivers = np.zeros((7, 7), dtype=bool)
        rivers[3, 3] = True
        near = near_water(elevation, rivers, 0.35, 2)
        assert near[1, 1] and near[5, 5] and near[3, 4]
        assert not near[3, 3]
        assert not near[0, 3]

    def test_zero_radius(self) -> None:
        elevation = np.full((5, 5), 0.1)
        assert not near_water(elevation, np.zeros((5, 5), dtype=bool), 0.35, 0).any()


class TestPoiClasses:
    """Tests for class ordering and rules."""

    def test_settlements_first(self, config: WorldGenConfig) -> None:
        classes = poi_classes(config)
        assert [c.kind for c in classes] == [PoiKind.SETTLEMENT, PoiKind.DUNGEON]
        assert classes[0].marker_biome == Biome.CITY
        assert classes[1].marker_biome == Biome.DUNGEON_ENTRANCE
        assert classes[0].water_radius == config.settlement_water_radius
        assert classes[1].water_radius == 0


class TestPOIPlacer:
    """Tests for the placement stage."""

    def test_quota_met(self, poi_config: WorldGenConfig, rng: np.random.Generator) -> None:
        grid = grassland()
        POIPlacer().transform(grid, poi_config, rng)
        kinds = [site.kind for site in grid.poi_sites]
        assert kinds.count(PoiKind.SETTLEMENT) == 3
        assert kinds.count(PoiKind.DUNGEON) == 2
        assert kinds[:3] == [PoiKind.SETTLEMENT] * 3

    def test_flags_and_markers(self, poi_config: WorldGenConfig, rng: np.random.Generator) -> None:
        grid = grassland()
        POIPlacer().transform(grid, poi_config, rng)
        for site in grid.poi_sites:
            if site.kind == PoiKind.SETTLEMENT:
                assert grid.has_city(site.x, site.y)
                assert grid.biome_at(site.x, site.y) == Biome.CITY
            else:
                assert grid.has_dungeon_entrance(site.x, site.y)
                assert grid.biome_at(site.x, site.y) == Biome.DUNGEON_ENTRANCE
        assert int(grid.city_mask.sum()) == 3
        assert int(grid.dungeon_mask.sum()) == 2

    def test_exclusive(self, poi_config: WorldGenConfig, rng: np.random.Generator) -> None:
        grid = grassland()
        POIPlacer().transform(grid, poi_config, rng)
        assert not np.any(grid.city_mask & grid.dungeon_mask)

    def test_min_distance(self, poi_config: WorldGenConfig, rng: np.random.Generator) -> None:
        """No two POIs of any kind are closer than the minimum spacing."""
        grid = grassland()
        POIPlacer().transform(grid, poi_config, rng)
        sites = grid.poi_sites
        limit = poi_config.min_distance_between_pois
        for i, a in enumerate(sites):
            for b in sites[i + 1 :]:
                assert np.hypot(a.x - b.x, a.y - b.y) >= limit

    def test_settlements_avoid_open_water(self, rng: np.random.Generator) -> None:
        """Settlements keep settlement_water_radius tiles clear of open water."""
        grid = grassland()
        grid.elevation[:, :15] = 0.1
        grid.biome[:, :15] = Biome.DEEP_WATER.code
        config = WorldGenConfig(
            width=30, height=30, settlement_count=5, dungeon_count=0, min_distance_between_pois=3.0
        )
        POIPlacer().transform(grid, config, rng)
        settlements = [s for s in grid.poi_sites if s.kind == PoiKind.SETTLEMENT]
        assert settlements
        assert all(s.x >= 15 + config.settlement_water_radius for s in settlements)

    def test_settlements_avoid_rivers(self, rng: np.random.Generator) -> None:
        """No settlement lands within settlement_water_radius of a river."""
        grid = grassland()
        grid.river_mask[:, 10] = True
        grid.biome[:, 10] = Biome.RIVER.code
        config = WorldGenConfig(
            width=30, height=30, settlement_count=6, dungeon_count=0, min_distance_between_pois=3.0
        )
        POIPlacer().transform(grid, config, rng)
        settlements = [s for s in grid.poi_sites if s.kind == PoiKind.SETTLEMENT]
        assert settlements
        assert all(abs(s.x - 10) > config.settlement_water_radius for s in settlements)

    def test_only_allowed_biomes(self, rng: np.random.Generator) -> None:
        grid = grassland()
        grid.biome[:, 10:] = Biome.DESERT.code
        config = WorldGenConfig(
            width=30,
            height=30,
            settlement_count=4,
            dungeon_count=0,
            settlement_biomes=(Biome.TEMPERATE_GRASSLAND,),
        )
        POIPlacer().transform(grid, config, rng)
        assert grid.poi_sites
        assert all(site.x < 10 for site in grid.poi_sites)

    def test_shortfall_does_not_raise(self, poi_config: WorldGenConfig, rng: np.random.Generator) -> None:
        """An all-water map places nothing and carries on."""
        grid = WorldGrid(width=30, height=30)
        grid.elevation[:] = 0.1
        grid.biome[:] = Biome.DEEP_WATER.code
        POIPlacer().transform(grid, poi_config, rng)
        assert grid.poi_sites == []
        assert not grid.city_mask.any()

    def test_zero_counts(self, rng: np.random.Generator) -> None:
        grid = grassland()
        config = WorldGenConfig(width=30, height=30, settlement_count=0, dungeon_count=0)
        POIPlacer().transform(grid, config, rng)
        assert grid.poi_sites == []

    def test_deterministic(self, poi_config: WorldGenConfig) -> None:
        a, b = grassland(), grassland()
        POIPlacer().transform(a, poi_config, np.random.default_rng(3))
        POIPlacer().transform(b, poi_config, np.random.default_rng(3))
        assert a.poi_sites == b.poi_sites
