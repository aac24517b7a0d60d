"""Tests for generation configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from overworld.biome_types import Biome
from overworld.terrain.config import (
    DEFAULT_SETTLEMENT_BIOMES,
    MIN_NOISE_SCALE,
    WorldGenConfig,
    load_config,
)


class TestWorldGenConfig:
    """Tests for defaults and corrections."""

    def test_defaults(self) -> None:
        config = WorldGenConfig()
        assert config.width == 256
        assert config.height == 256
        assert config.simplification_factor == 4
        assert config.elevation_octaves == 7
        assert config.deep_water_threshold == 0.2
        assert config.shallow_water_threshold == 0.3
        assert config.beach_threshold == 0.35
        assert config.min_lake_size == 10
        assert config.smoothing_kernel_size == 3
        assert config.settlement_count == 7
        assert config.dungeon_count == 12
        assert config.min_distance_between_pois == 5.0
        assert config.settlement_biomes == DEFAULT_SETTLEMENT_BIOMES

    @pytest.mark.parametrize("size, expected", [(4, 5), (1, 3), (-2, 3), (7, 7)])
    def test_kernel_corrected(self, size: int, expected: int) -> None:
        """Kernel sizes become odd and at least 3."""
        assert WorldGenConfig(smoothing_kernel_size=size).smoothing_kernel_size == expected

    def test_dimensions_corrected(self) -> None:
        config = WorldGenConfig(width=0, height=-5, simplification_factor=0)
        assert (config.width, config.height, config.simplification_factor) == (1, 1, 1)

    def test_scale_corrected(self) -> None:
        config = WorldGenConfig(elevation_scale=0.0, rainfall_scale=-3.0)
        assert config.elevation_scale == MIN_NOISE_SCALE
        assert config.rainfall_scale == MIN_NOISE_SCALE
        assert config.temperature_scale == 60.0

    def test_counts_floored(self) -> None:
        config = WorldGenConfig(settlement_count=-3, elevation_octaves=-1, min_lake_size=-10)
        assert config.settlement_count == 0
        assert config.elevation_octaves == 0
        assert config.min_lake_size == 0

    def test_falloff_power_positive(self) -> None:
        assert WorldGenConfig(falloff_power=0.0).falloff_power > 0.0

    def test_frozen(self) -> None:
        config = WorldGenConfig()
        with pytest.raises(ValidationError):
            config.width = 10

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WorldGenConfig(widht=10)

    def test_biomes_from_strings(self) -> None:
        config = WorldGenConfig(dungeon_biomes=["desert", "hills"])
        assert config.dungeon_biomes == (Biome.DESERT, Biome.HILLS)


class TestLoadConfig:
    """Tests for TOML loading."""

    def test_partial_file(self, tmp_path: Path) -> None:
        """Keys absent from the file keep their defaults."""
        path = tmp_path / "small.toml"
        path.write_text(
            'width = 64\nheight = 48\nsettlement_count = 3\nsettlement_biomes = ["taiga"]\n'
        )
        config = load_config(path)
        assert config.width == 64
        assert config.height == 48
        assert config.settlement_count == 3
        assert config.settlement_biomes == (Biome.TAIGA,)
        assert config.dungeon_count == 12

    def test_corrections_apply(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("smoothing_kernel_size = 4\n")
        assert load_config(path).smoothing_kernel_size == 5

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "typo.toml"
        path.write_text("river_treshold = 0.5\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_shipped_config(self) -> None:
        """The bundled example config loads cleanly."""
        path = Path(__file__).parents[2] / "configs" / "small.toml"
        config = load_config(path)
        assert config.width == 64
        assert config.height == 64
