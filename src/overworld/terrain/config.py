"""World generation configuration.

All parameters live on one flat model so each maps 1:1 onto a value read by a
single pipeline stage. Out-of-range values are corrected to a safe minimum
with a logged diagnostic instead of failing validation.
"""

import tomllib
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..biome_types import Biome

logger = structlog.get_logger()

MIN_NOISE_SCALE = 0.0001

# Broad enough that the cool, wet default climate still hosts settlements and
# dungeons on small maps. Narrow per world through config.
DEFAULT_SETTLEMENT_BIOMES: tuple[Biome, ...] = (
    Biome.TEMPERATE_GRASSLAND,
    Biome.PLAINS,
    Biome.HILLS,
    Biome.MEDITERRANEAN,
    Biome.STEPPE,
    Biome.COLD_PARKLANDS,
    Biome.TAIGA,
    Biome.TUNDRA,
    Biome.SHRUBLAND,
    Biome.TEMPERATE_MIXED_FOREST,
    Biome.TEMPERATE_DECIDUOUS_FOREST,
    Biome.SUBTROPICAL_GRASSLAND,
    Biome.SUBTROPICAL_DRY_FOREST,
    Biome.TROPICAL_GRASSLAND,
)

DEFAULT_DUNGEON_BIOMES: tuple[Biome, ...] = (
    Biome.MOUNTAINOUS,
    Biome.MOUNTAIN_TUNDRA,
    Biome.HILLS,
    Biome.ALPINE_FOREST,
    Biome.TAIGA,
    Biome.TEMPERATE_DECIDUOUS_FOREST,
    Biome.DESERT,
    Biome.WETLANDS,
    Biome.TUNDRA,
)


def _corrected(info: ValidationInfo, value: object, corrected: object) -> None:
    logger.warning(
        "config_value_corrected",
        field=info.field_name,
        value=value,
        corrected=corrected,
    )


class WorldGenConfig(BaseModel):
    """Complete world generation parameters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Map
    width: int = Field(default=256, description="World width in tiles")
    height: int = Field(default=256, description="World height in tiles")
    simplification_factor: int = Field(
        default=4, description="Block edge length of the overview grid"
    )

    # Elevation noise
    elevation_scale: float = Field(default=50.0, description="Elevation noise scale in tiles")
    elevation_octaves: int = Field(default=7, description="Elevation noise octaves")
    elevation_persistence: float = Field(
        default=0.5, description="Amplitude multiplier per elevation octave"
    )
    elevation_lacunarity: float = Field(
        default=2.0, description="Frequency multiplier per elevation octave"
    )

    # Edge falloff
    use_edge_falloff: bool = Field(default=True, description="Attenuate elevation toward map edges")
    falloff_power: float = Field(default=3.0, description="Exponent of the edge falloff curve")
    falloff_start: float = Field(
        default=0.8, description="Fraction of the half-extent over which falloff acts"
    )

    # Water thresholds
    deep_water_threshold: float = Field(default=0.2, description="Below this is deep water")
    shallow_water_threshold: float = Field(default=0.3, description="Below this is shallow water")
    beach_threshold: float = Field(default=0.35, description="Below this is beach; land starts here")

    # Puddle removal
    remove_small_puddles: bool = Field(default=True, description="Fill small enclosed water pockets")
    min_lake_size: int = Field(
        default=10, description="Enclosed water bodies smaller than this are filled"
    )
    puddle_jitter: float = Field(
        default=0.01, description="Random elevation jitter added to filled puddle tiles"
    )

    # Smoothing
    smoothing_passes: int = Field(default=1, description="Box blur passes over elevation")
    smoothing_kernel_size: int = Field(default=3, description="Box blur kernel edge, odd and >= 3")

    # Temperature
    temperature_scale: float = Field(default=60.0, description="Temperature noise scale")
    temperature_octaves: int = Field(default=4, description="Temperature noise octaves")
    temperature_persistence: float = Field(default=0.5, description="Temperature noise persistence")
    temperature_lacunarity: float = Field(default=2.0, description="Temperature noise lacunarity")
    base_temperature: float = Field(default=0.5, description="Temperature before adjustments")
    latitude_temperature_factor: float = Field(
        default=0.9, description="Strength of the equator-to-pole temperature gradient"
    )
    elevation_temperature_factor: float = Field(
        default=0.7, description="Cooling per unit of elevation"
    )
    temperature_noise_amplitude: float = Field(
        default=0.2, description="Peak-to-peak temperature noise jitter"
    )

    # Rainfall
    rainfall_scale: float = Field(default=55.0, description="Rainfall noise scale")
    rainfall_octaves: int = Field(default=4, description="Rainfall noise octaves")
    rainfall_persistence: float = Field(default=0.5, description="Rainfall noise persistence")
    rainfall_lacunarity: float = Field(default=2.0, description="Rainfall noise lacunarity")
    base_rainfall: float = Field(default=0.5, description="Rainfall before adjustments")
    latitude_rainfall_exponent: float = Field(
        default=2.0, description="Exponent shaping the wet equatorial band"
    )
    elevation_rainfall_factor: float = Field(
        default=0.15, description="Extra rainfall per unit of elevation"
    )
    rainfall_noise_amplitude: float = Field(
        default=0.3, description="Peak-to-peak rainfall noise jitter"
    )

    # Biome bands
    t_cold: float = Field(default=0.15, description="Upper temperature of the coldest band")
    t_cool: float = Field(default=0.35, description="Upper temperature of the cool band")
    t_temperate: float = Field(default=0.65, description="Upper temperature of the temperate band")
    t_warm: float = Field(default=0.85, description="Upper temperature of the warm band")
    r_dry: float = Field(default=0.15, description="Upper rainfall of the dry band")
    r_arid: float = Field(default=0.30, description="Upper rainfall of the arid band")
    r_moderate: float = Field(default=0.55, description="Upper rainfall of the moderate band")
    r_wet: float = Field(default=0.75, description="Upper rainfall of the wet band")
    mountain_threshold: float = Field(default=0.7, description="Above this is mountain terrain")
    high_mountain_threshold: float = Field(default=0.85, description="Above this is high mountain")
    wetland_elevation_band: float = Field(
        default=0.1, description="Height above the beach line eligible for wetlands"
    )

    # Rivers
    river_flow_threshold: float = Field(
        default=0.01, description="Fraction of peak accumulation that makes a river"
    )
    river_mountain_start_elevation: float = Field(
        default=0.6, description="Elevation where the river threshold starts to drop"
    )
    river_high_mountain_elevation: float = Field(
        default=0.9, description="Elevation where the river threshold reaches its floor"
    )
    river_threshold_floor_ratio: float = Field(
        default=0.4, description="Lowest multiplier applied to the river threshold at altitude"
    )
    carve_rivers: bool = Field(default=True, description="Lower river tile elevation")
    base_carve_depth: float = Field(default=0.002, description="Minimum riverbed depth")
    flow_carve_multiplier: float = Field(
        default=0.05, description="Extra riverbed depth at peak flow"
    )
    carve_floor_margin: float = Field(
        default=0.01, description="Carved tiles stay this far above shallow water"
    )
    prune_disconnected_rivers: bool = Field(
        default=True, description="Drop river networks that never reach a valid outlet"
    )
    erode_banks: bool = Field(default=True, description="Lower land tiles beside rivers")
    bank_erosion_radius: int = Field(default=1, description="Reach of bank erosion in tiles")
    base_bank_depth: float = Field(default=0.005, description="Minimum bank erosion depth")
    bank_flow_multiplier: float = Field(
        default=0.02, description="Extra bank erosion depth at peak flow"
    )

    # Points of interest
    settlement_count: int = Field(default=7, description="Settlements to place")
    dungeon_count: int = Field(default=12, description="Dungeon entrances to place")
    poi_attempts_multiplier: int = Field(
        default=100, description="Random draws allowed per requested POI"
    )
    min_distance_between_pois: float = Field(
        default=5.0, description="Minimum Euclidean spacing between any two POIs"
    )
    settlement_water_radius: int = Field(
        default=3, description="Settlements need dry land within this Chebyshev radius"
    )
    settlement_biomes: tuple[Biome, ...] = Field(
        default=DEFAULT_SETTLEMENT_BIOMES, description="Biomes that accept settlements"
    )
    dungeon_biomes: tuple[Biome, ...] = Field(
        default=DEFAULT_DUNGEON_BIOMES, description="Biomes that accept dungeon entrances"
    )

    # Roads
    generate_roads: bool = Field(default=True, description="Connect settlements with roads")

    @field_validator("width", "height", "simplification_factor")
    @classmethod
    def _at_least_one(cls, value: int, info: ValidationInfo) -> int:
        if value < 1:
            _corrected(info, value, 1)
            return 1
        return value

    @field_validator("elevation_scale", "temperature_scale", "rainfall_scale")
    @classmethod
    def _positive_scale(cls, value: float, info: ValidationInfo) -> float:
        if value <= 0:
            _corrected(info, value, MIN_NOISE_SCALE)
            return MIN_NOISE_SCALE
        return value

    @field_validator("smoothing_kernel_size")
    @classmethod
    def _odd_kernel(cls, value: int, info: ValidationInfo) -> int:
        corrected = max(3, value)
        if corrected % 2 == 0:
            corrected += 1
        if corrected != value:
            _corrected(info, value, corrected)
        return corrected

    @field_validator(
        "elevation_octaves",
        "temperature_octaves",
        "rainfall_octaves",
        "min_lake_size",
        "smoothing_passes",
        "bank_erosion_radius",
        "settlement_count",
        "dungeon_count",
        "poi_attempts_multiplier",
        "settlement_water_radius",
    )
    @classmethod
    def _non_negative(cls, value: int, info: ValidationInfo) -> int:
        if value < 0:
            _corrected(info, value, 0)
            return 0
        return value

    @field_validator("falloff_power")
    @classmethod
    def _positive_power(cls, value: float, info: ValidationInfo) -> float:
        if value <= 0:
            _corrected(info, value, MIN_NOISE_SCALE)
            return MIN_NOISE_SCALE
        return value


def load_config(config_path: Path) -> WorldGenConfig:
    """Load generation parameters from a flat TOML file.

    Keys not present in the file keep their defaults.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed WorldGenConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        pydantic.ValidationError: If a key is unknown or a value has the wrong type.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return WorldGenConfig.model_validate(data)
