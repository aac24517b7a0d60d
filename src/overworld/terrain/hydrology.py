"""Hydrology: D4 flow routing, river definition, carving, pruning, bank erosion.

Flow is routed over the raw height field without depression filling. Rivers
that dead-end in an inland sink are removed afterwards by outlet validation.
"""

from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..biome_types import Biome
from ..grid import WorldGrid
from .classification import water_band_biomes
from .config import WorldGenConfig
from .regions import iter_regions

logger = structlog.get_logger()

# D4 directions in tie-break order: +Y (down), -Y (up), +X (right), -X (left)
D4_DY = np.array([1, -1, 0, 0], dtype=np.int32)
D4_DX = np.array([0, 0, 1, -1], dtype=np.int32)

# Sink or non-land tile
FLOW_NONE = 255


@dataclass
class FlowField:
    """Flow routing for one hydrology pass. Never persisted."""

    direction: NDArray[np.uint8]
    accumulation: NDArray[np.float64]

    @property
    def max_accumulation(self) -> float:
        """Peak accumulation, floored at 1 so ratios never divide by zero."""
        if self.accumulation.size == 0:
            return 1.0
        return max(1.0, float(self.accumulation.max()))

    def flow_ratio(self) -> NDArray[np.float64]:
        """Accumulation relative to the peak, in [0, 1]."""
        return np.clip(self.accumulation / self.max_accumulation, 0.0, 1.0)


def compute_flow_direction(
    elevation: NDArray[np.float64],
    land: NDArray[np.bool_],
) -> NDArray[np.uint8]:
    """Steepest-descent D4 direction for each land tile.

    A neighbour must be strictly lower than both the tile itself and every
    earlier candidate, so ties resolve to the first direction in D4 order.

    Args:
        elevation: Height field.
        land: Tiles that route flow.

    Returns:
        Direction index into D4_DY/D4_DX, or FLOW_NONE for sinks and non-land.
    """
    height, width = elevation.shape
    padded = np.pad(elevation, 1, mode="constant", constant_values=np.inf)

    best = elevation.copy()
    direction = np.full((height, width), FLOW_NONE, dtype=np.uint8)

    for d in range(4):
        dy, dx = D4_DY[d], D4_DX[d]
        neighbor = padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]
        lower = neighbor < best
        best = np.where(lower, neighbor, best)
        direction[lower] = d

    direction[~land] = FLOW_NONE
    return direction


def compute_flow_accumulation(
    elevation: NDArray[np.float64],
    direction: NDArray[np.uint8],
    land: NDArray[np.bool_],
) -> NDArray[np.float64]:
    """Count the tiles draining through each tile.

    Every land tile contributes 1. Land tiles are visited from highest to
    lowest, and flow only ever moves to a strictly lower tile, so each tile's
    upstream total is complete before it is pushed on. Non-land tiles start
    at 0 but still receive inflow.

    Args:
        elevation: Height field used for the visiting order.
        direction: Output of compute_flow_direction.
        land: Tiles that contribute and route flow.

    Returns:
        Accumulation per tile.
    """
    height, width = elevation.shape
    flat_direction = direction.ravel()

    target = np.full(height * width, -1, dtype=np.int64)
    routed = flat_direction != FLOW_NONE
    source = np.nonzero(routed)[0]
    d = flat_direction[source]
    ty = source // width + D4_DY[d]
    tx = source % width + D4_DX[d]
    target[source] = ty * width + tx

    land_index = np.nonzero(land.ravel())[0]
    order = land_index[np.argsort(-elevation.ravel()[land_index], kind="stable")]

    accumulation = land.ravel().astype(np.float64).tolist()
    targets = target.tolist()
    for i in order.tolist():
        t = targets[i]
        if t >= 0:
            accumulation[t] += accumulation[i]

    return np.array(accumulation, dtype=np.float64).reshape(height, width)


def river_thresholds(
    elevation: NDArray[np.float64],
    max_accumulation: float,
    config: WorldGenConfig,
) -> NDArray[np.float64]:
    """Accumulation a tile must exceed to become a river.

    The lowland threshold is a fixed share of the peak accumulation. Above
    river_mountain_start_elevation it shrinks linearly toward
    river_threshold_floor_ratio, so headwater streams appear at altitude.
    """
    start = config.river_mountain_start_elevation
    span = max(1e-9, config.river_high_mountain_elevation - start)
    t = np.clip((elevation - start) / span, 0.0, 1.0)
    multiplier = np.where(
        elevation >= start,
        1.0 + (config.river_threshold_floor_ratio - 1.0) * t,
        1.0,
    )
    return config.river_flow_threshold * max_accumulation * multiplier


def carve_riverbeds(
    elevation: NDArray[np.float64],
    rivers: NDArray[np.bool_],
    flow: FlowField,
    config: WorldGenConfig,
) -> NDArray[np.float64]:
    """Lower river tiles in proportion to their flow, never into the sea."""
    floor = config.shallow_water_threshold + config.carve_floor_margin
    depth = config.base_carve_depth + flow.flow_ratio() * config.flow_carve_multiplier
    carved = np.maximum(floor, elevation - depth)
    return np.where(rivers, carved, elevation)


def find_valid_outlets(
    elevation: NDArray[np.float64],
    config: WorldGenConfig,
) -> NDArray[np.bool_]:
    """Water tiles belonging to a body a river may legitimately end in.

    A body is valid when it touches the map border (ocean) or holds at least
    min_lake_size tiles.
    """
    valid = np.zeros(elevation.shape, dtype=bool)
    for region in iter_regions(elevation < config.shallow_water_threshold):
        if region.touches_border or region.size >= config.min_lake_size:
            valid[region.rows, region.cols] = True
    return valid


def prune_disconnected_rivers(
    rivers: NDArray[np.bool_],
    passable: NDArray[np.bool_],
    valid_outlets: NDArray[np.bool_],
) -> tuple[NDArray[np.bool_], int]:
    """Remove river networks that never reach a valid outlet.

    A network is a 4-connected component of river tiles together with the
    non-land tiles they touch.

    Args:
        rivers: River mask.
        passable: Non-land tiles a network may continue through.
        valid_outlets: Output of find_valid_outlets.

    Returns:
        Tuple of (pruned river mask, number of tiles removed).
    """
    kept = rivers.copy()
    removed = 0
    for region in iter_regions(rivers | passable):
        region_rivers = rivers[region.rows, region.cols]
        if not region_rivers.any():
            continue
        if valid_outlets[region.rows, region.cols].any():
            continue
        kept[region.rows[region_rivers], region.cols[region_rivers]] = False
        removed += int(region_rivers.sum())
    return kept, removed


def erode_banks(
    elevation: NDArray[np.float64],
    rivers: NDArray[np.bool_],
    flow: FlowField,
    config: WorldGenConfig,
) -> tuple[NDArray[np.float64], int]:
    """Lower land beside rivers by the strongest nearby flow.

    All depths are computed from the input snapshot before any are applied.

    Returns:
        Tuple of (eroded elevation, number of tiles lowered).
    """
    radius = config.bank_erosion_radius
    if radius <= 0 or not rivers.any():
        return elevation, 0

    size = 2 * radius + 1
    land = (elevation >= config.beach_threshold) & ~rivers
    near_river = ndimage.binary_dilation(rivers, structure=np.ones((size, size), dtype=bool))
    banks = near_river & land

    river_ratio = np.where(rivers, flow.flow_ratio(), 0.0)
    max_ratio = ndimage.maximum_filter(river_ratio, size=size, mode="constant", cval=0.0)

    floor = config.shallow_water_threshold + config.carve_floor_margin
    depth = config.base_bank_depth + max_ratio * config.bank_flow_multiplier
    eroded = np.where(banks, np.maximum(floor, elevation - depth), elevation)
    return eroded, int(banks.sum())


class HydrologyEngine:
    """Stage: route flow, define and carve rivers, prune, erode banks.

    Ends by tagging river tiles with the RIVER biome and re-banding any tile
    pushed below the beach line back into a water biome.
    """

    name = "hydrology"

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        flow = self.route(grid, config)

        land = grid.land_mask(config.beach_threshold)
        thresholds = river_thresholds(grid.elevation, flow.max_accumulation, config)
        rivers = land & (flow.accumulation > thresholds)
        defined = int(rivers.sum())

        elevation = grid.elevation.copy()
        if config.carve_rivers:
            elevation = carve_riverbeds(elevation, rivers, flow, config)

        pruned = 0
        if config.prune_disconnected_rivers:
            valid_outlets = find_valid_outlets(elevation, config)
            passable = (elevation < config.beach_threshold) & ~rivers
            rivers, pruned = prune_disconnected_rivers(rivers, passable, valid_outlets)

        eroded = 0
        if config.erode_banks:
            elevation, eroded = erode_banks(elevation, rivers, flow, config)

        grid.elevation[:] = np.clip(elevation, 0.0, 1.0)
        grid.river_mask[:] = rivers
        self._reconcile_biomes(grid, config)

        logger.info(
            "rivers_defined",
            max_accumulation=flow.max_accumulation,
            defined=defined,
            pruned=pruned,
            river_tiles=int(rivers.sum()),
            bank_tiles=eroded,
        )

    @staticmethod
    def route(grid: WorldGrid, config: WorldGenConfig) -> FlowField:
        """Compute flow directions and accumulation for the current grid."""
        land = grid.land_mask(config.beach_threshold)
        direction = compute_flow_direction(grid.elevation, land)
        accumulation = compute_flow_accumulation(grid.elevation, direction, land)
        return FlowField(direction=direction, accumulation=accumulation)

    @staticmethod
    def _reconcile_biomes(grid: WorldGrid, config: WorldGenConfig) -> None:
        rivers = grid.river_mask
        sunk = ~rivers & (grid.elevation < config.beach_threshold)
        grid.biome[sunk] = water_band_biomes(grid.elevation, config)[sunk]
        grid.biome[rivers] = Biome.RIVER.code
