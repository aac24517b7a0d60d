"""Post-generation validation of world invariants."""

import math

import numpy as np
import structlog

from ..biome_types import Biome, biome_codes
from ..grid import PoiKind, SimplifiedGrid, WorldGrid
from .config import WorldGenConfig
from .hydrology import find_valid_outlets
from .regions import iter_regions

logger = structlog.get_logger()

_WATER_CODES = biome_codes([b for b in Biome if b.is_water])


class ValidationResult:
    """Result of world validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_world(
    grid: WorldGrid,
    simplified: SimplifiedGrid,
    config: WorldGenConfig,
) -> ValidationResult:
    """Check a generated world against its invariants.

    Args:
        grid: Detailed world grid.
        simplified: Overview grid built from it.
        config: Generation configuration used.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    _check_field_ranges(grid, result)
    _check_river_floor(grid, config, result)
    _check_water_biomes(grid, config, result)
    _check_poi_tiles(grid, config, result)
    _check_simplified_shape(grid, simplified, result)
    if config.prune_disconnected_rivers:
        _check_river_outlets(grid, config, result)

    if not grid.river_mask.any():
        result.add_warning("No river tiles generated")
    _check_poi_quotas(grid, config, result)

    if result.passed:
        logger.info("world_validation_passed", warnings=len(result.warnings))
    else:
        logger.warning("world_validation_failed", errors=len(result.errors))
        for error in result.errors:
            logger.error("world_validation_error", detail=error)

    for warning in result.warnings:
        logger.warning("world_validation_warning", detail=warning)

    return result


def _check_field_ranges(grid: WorldGrid, result: ValidationResult) -> None:
    """Elevation, temperature and rainfall stay in [0, 1]."""
    for name in ("elevation", "temperature", "rainfall"):
        values = getattr(grid, name)
        if not np.all(np.isfinite(values)):
            result.add_error(f"{name} contains non-finite values")
        elif values.min() < 0.0 or values.max() > 1.0:
            result.add_error(
                f"{name} out of range: [{values.min():.4f}, {values.max():.4f}]"
            )


def _check_river_floor(
    grid: WorldGrid, config: WorldGenConfig, result: ValidationResult
) -> None:
    """River tiles are never carved below the shallow-water line."""
    rivers = grid.river_mask
    if rivers.any():
        lowest = float(grid.elevation[rivers].min())
        if lowest < config.shallow_water_threshold:
            result.add_error(f"River tile below shallow water line: {lowest:.4f}")


def _check_water_biomes(
    grid: WorldGrid, config: WorldGenConfig, result: ValidationResult
) -> None:
    """Tiles under the beach line carry a water biome unless a river covers them."""
    submerged = (grid.elevation < config.beach_threshold) & ~grid.river_mask
    wrong = submerged & ~np.isin(grid.biome, _WATER_CODES)
    if wrong.any():
        result.add_error(f"{int(wrong.sum())} submerged tiles have a land biome")


def _check_poi_tiles(
    grid: WorldGrid, config: WorldGenConfig, result: ValidationResult
) -> None:
    """POIs are exclusive per tile and sit on dry, non-river land."""
    both = grid.city_mask & grid.dungeon_mask
    if both.any():
        result.add_error(f"{int(both.sum())} tiles hold both a city and a dungeon")

    pois = grid.city_mask | grid.dungeon_mask
    off_land = pois & ~grid.land_mask(config.beach_threshold)
    if off_land.any():
        result.add_error(f"{int(off_land.sum())} POIs are not on land")

    if int(pois.sum()) != len(grid.poi_sites):
        result.add_error(
            f"POI flags ({int(pois.sum())}) disagree with site list ({len(grid.poi_sites)})"
        )


def _check_poi_quotas(
    grid: WorldGrid, config: WorldGenConfig, result: ValidationResult
) -> None:
    requested = {
        PoiKind.SETTLEMENT: config.settlement_count,
        PoiKind.DUNGEON: config.dungeon_count,
    }
    for kind, count in requested.items():
        placed = sum(1 for site in grid.poi_sites if site.kind == kind)
        if placed < count:
            result.add_warning(f"Placed {placed}/{count} {kind.value} sites")


def _check_simplified_shape(
    grid: WorldGrid, simplified: SimplifiedGrid, result: ValidationResult
) -> None:
    expected = (
        math.ceil(grid.height / simplified.factor),
        math.ceil(grid.width / simplified.factor),
    )
    if simplified.shape != expected:
        result.add_error(f"Simplified grid is {simplified.shape}, expected {expected}")


def _check_river_outlets(
    grid: WorldGrid, config: WorldGenConfig, result: ValidationResult
) -> None:
    """Every river network reaches a valid outlet."""
    rivers = grid.river_mask
    if not rivers.any():
        return

    valid = find_valid_outlets(grid.elevation, config)
    passable = (grid.elevation < config.beach_threshold) & ~rivers
    orphaned = 0
    for region in iter_regions(rivers | passable):
        if rivers[region.rows, region.cols].any() and not valid[region.rows, region.cols].any():
            orphaned += 1
    if orphaned:
        result.add_error(f"{orphaned} river networks do not reach a valid outlet")
