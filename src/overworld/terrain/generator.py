"""World generation orchestration."""

import time
from typing import Protocol

import numpy as np
import structlog

from ..biome_types import Biome
from ..grid import PoiKind, SimplifiedGrid, WorldGrid
from .classification import BiomeClassifier
from .climate import ClimateSynthesizer
from .config import WorldGenConfig
from .elevation import ElevationSynthesizer
from .hydrology import HydrologyEngine
from .poi import POIPlacer
from .puddles import PuddleRemover
from .roads import RoadRouter
from .simplify import WorldSimplifier
from .smoothing import ElevationSmoother
from .validation import ValidationResult, validate_world

logger = structlog.get_logger()

SEED_LIMIT = 2**31 - 1


class GenerationStage(Protocol):
    """One step of the pipeline. Mutates the grid in place."""

    name: str

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None: ...


def default_stages() -> list[GenerationStage]:
    """The standard pipeline, in dependency order."""
    return [
        ElevationSynthesizer(),
        PuddleRemover(),
        ElevationSmoother(),
        ClimateSynthesizer(),
        BiomeClassifier(),
        HydrologyEngine(),
        POIPlacer(),
        RoadRouter(),
    ]


def resolve_seed(seed: int) -> int:
    """Replace seed 0 with a fresh random seed; keep any other seed as given."""
    if seed != 0:
        return seed
    return int(np.random.default_rng().integers(1, SEED_LIMIT))


class WorldGenerator:
    """Runs an ordered list of stages over a fresh grid."""

    def __init__(
        self,
        config: WorldGenConfig | None = None,
        stages: list[GenerationStage] | None = None,
    ) -> None:
        self.config = config or WorldGenConfig()
        self.stages = stages if stages is not None else default_stages()
        self.simplifier = WorldSimplifier(self.config.simplification_factor)
        self.validation: ValidationResult | None = None

    def build(self, seed: int = 0) -> WorldGrid:
        """Run every stage and return the detailed grid.

        One random generator, seeded from the resolved seed, is shared by all
        stages in order. The sign of the seed is part of the seed material, so
        negative seeds give their own worlds.
        """
        config = self.config
        resolved = resolve_seed(seed)
        if resolved != seed:
            logger.info("seed_resolved", requested=seed, seed=resolved)

        grid = WorldGrid(width=config.width, height=config.height, seed=resolved)
        rng = np.random.default_rng([abs(resolved), int(resolved < 0)])

        logger.info(
            "generation_started",
            width=grid.width,
            height=grid.height,
            seed=resolved,
            stages=[stage.name for stage in self.stages],
        )

        for stage in self.stages:
            start = time.perf_counter()
            stage.transform(grid, config, rng)
            logger.info(
                "stage_completed",
                stage=stage.name,
                elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
            )

        return grid

    def run(self, seed: int = 0) -> tuple[WorldGrid, SimplifiedGrid]:
        """Generate a world and its overview grid."""
        start = time.perf_counter()
        grid = self.build(seed)
        simplified = self.simplifier.simplify(grid, self.config.beach_threshold)

        _log_world_stats(grid, simplified, self.config)
        self.validation = validate_world(grid, simplified, self.config)

        logger.info(
            "generation_completed",
            seed=grid.seed,
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return grid, simplified


def generate(
    seed: int = 0,
    config: WorldGenConfig | None = None,
) -> tuple[WorldGrid, SimplifiedGrid]:
    """Generate a world from a seed.

    Args:
        seed: World seed. 0 picks a random seed, stored on the returned grid
            so the same world can be regenerated.
        config: Generation parameters; defaults when omitted.

    Returns:
        Tuple of (detailed grid, overview grid).
    """
    return WorldGenerator(config).run(seed)


def _log_world_stats(
    grid: WorldGrid,
    simplified: SimplifiedGrid,
    config: WorldGenConfig,
) -> None:
    """Log summary statistics about the generated world."""
    total = grid.width * grid.height
    land = grid.land_mask(config.beach_threshold)

    codes, counts = np.unique(grid.biome, return_counts=True)
    top = sorted(zip(counts.tolist(), codes.tolist()), reverse=True)[:5]

    logger.info(
        "world_stats",
        land_fraction=round(float(land.sum()) / total, 3),
        river_tiles=int(grid.river_mask.sum()),
        road_tiles=int(grid.road_mask.sum()),
        settlements=sum(1 for s in grid.poi_sites if s.kind == PoiKind.SETTLEMENT),
        dungeons=sum(1 for s in grid.poi_sites if s.kind == PoiKind.DUNGEON),
        top_biomes={Biome.from_code(code).value: count for count, code in top},
        simplified=f"{simplified.width}x{simplified.height}",
    )
