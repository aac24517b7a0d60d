"""World persistence: save and load generated worlds."""

import json
import math
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import structlog

from ..exceptions import MapFormatError
from ..grid import PointOfInterest, SimplifiedGrid, WorldGrid
from .config import WorldGenConfig

logger = structlog.get_logger()

FORMAT_VERSION = 1

_GRID_LAYERS = (
    "elevation",
    "temperature",
    "rainfall",
    "biome",
    "river_mask",
    "road_mask",
    "city_mask",
    "dungeon_mask",
)

_SIMPLIFIED_LAYERS = ("dominant_biome", "has_major_poi", "is_mostly_water")

_REQUIRED_METADATA = frozenset({"seed", "width", "height", "simplification_factor"})


def save_world(
    path: Path,
    grid: WorldGrid,
    simplified: SimplifiedGrid,
    config: WorldGenConfig,
) -> None:
    """Save a generated world to disk.

    Uses numpy's compressed .npz format. Every grid layer is stored as its
    own array; POI sites, config and metadata are stored as JSON.

    Args:
        path: Output path (should end with .npz).
        grid: Detailed world grid.
        simplified: Overview grid.
        config: Generation configuration used.
    """
    metadata = {
        "version": FORMAT_VERSION,
        "seed": grid.seed,
        "width": grid.width,
        "height": grid.height,
        "simplification_factor": simplified.factor,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    sites = [site.model_dump(mode="json") for site in grid.poi_sites]

    arrays = {name: getattr(grid, name) for name in _GRID_LAYERS}
    arrays.update(
        {f"simplified_{name}": getattr(simplified, name) for name in _SIMPLIFIED_LAYERS}
    )

    np.savez_compressed(
        path,
        **arrays,
        poi_sites=np.frombuffer(json.dumps(sites).encode("utf-8"), dtype=np.uint8),
        config=np.frombuffer(config.model_dump_json().encode("utf-8"), dtype=np.uint8),
        metadata=np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
    )

    file_size = path.stat().st_size / 1024
    logger.info("world_saved", path=str(path), size_kb=round(file_size, 1))


def _read_json(data, key: str):
    if key not in data:
        raise MapFormatError(f"Invalid world file: missing '{key}'")
    try:
        return json.loads(data[key].tobytes().decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MapFormatError(f"Invalid world file: corrupt '{key}'") from e


def load_world(path: Path) -> tuple[WorldGrid, SimplifiedGrid, dict]:
    """Load a world from disk.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (WorldGrid, SimplifiedGrid, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        MapFormatError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"World file not found: {path}")

    try:
        data = np.load(path)
    except (OSError, ValueError) as e:
        raise MapFormatError(f"Invalid world file: {path} is not an npz archive") from e
    if not hasattr(data, "files"):
        raise MapFormatError(f"Invalid world file: {path} is not an npz archive")

    with data:
        metadata = _read_json(data, "metadata")
        if metadata.get("version") != FORMAT_VERSION:
            raise MapFormatError(
                f"Unsupported world file version: {metadata.get('version')}"
            )
        missing = _REQUIRED_METADATA - metadata.keys()
        if missing:
            raise MapFormatError(f"Invalid world file: metadata missing {sorted(missing)}")
        sites = _read_json(data, "poi_sites")

        grid = WorldGrid(
            width=metadata["width"], height=metadata["height"], seed=metadata["seed"]
        )
        for name in _GRID_LAYERS:
            _copy_layer(data, name, getattr(grid, name))

        simplified = SimplifiedGrid(
            width=math.ceil(grid.width / metadata["simplification_factor"]),
            height=math.ceil(grid.height / metadata["simplification_factor"]),
            factor=metadata["simplification_factor"],
        )
        for name in _SIMPLIFIED_LAYERS:
            _copy_layer(data, f"simplified_{name}", getattr(simplified, name))

    grid.poi_sites.extend(PointOfInterest.model_validate(site) for site in sites)

    logger.info("world_loaded", path=str(path), width=grid.width, height=grid.height)
    return grid, simplified, metadata


def _copy_layer(data, key: str, target: np.ndarray) -> None:
    if key not in data:
        raise MapFormatError(f"Invalid world file: missing '{key}' array")
    layer = data[key]
    if layer.shape != target.shape:
        raise MapFormatError(
            f"Invalid world file: '{key}' has shape {layer.shape}, expected {target.shape}"
        )
    target[:] = layer
