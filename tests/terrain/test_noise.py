"""Tests for fractal noise sampling."""

import numpy as np
import pytest

from overworld.terrain.noise import NoiseField, normalize


class TestNoiseField:
    """Tests for NoiseField sampling."""

    def test_field_shape(self) -> None:
        """Field has (height, width) shape."""
        field = NoiseField(1).field(40, 25, scale=20.0, octaves=4, persistence=0.5, lacunarity=2.0)
        assert field.shape == (25, 40)

    def test_range(self) -> None:
        """Values are normalized to exactly span [0, 1]."""
        field = NoiseField(3).field(50, 50, scale=15.0, octaves=5, persistence=0.5, lacunarity=2.0)
        assert field.min() == pytest.approx(0.0)
        assert field.max() == pytest.approx(1.0)

    def test_deterministic(self) -> None:
        """Same seed and offset give identical fields."""
        a = NoiseField(42).field(30, 30, 10.0, 4, 0.5, 2.0, seed_offset=9)
        b = NoiseField(42).field(30, 30, 10.0, 4, 0.5, 2.0, seed_offset=9)
        np.testing.assert_array_equal(a, b)

    def test_seed_offset_decorrelates(self) -> None:
        """Different offsets give different fields."""
        noise = NoiseField(42)
        a = noise.field(30, 30, 10.0, 4, 0.5, 2.0, seed_offset=1)
        b = noise.field(30, 30, 10.0, 4, 0.5, 2.0, seed_offset=2)
        assert not np.allclose(a, b)

    def test_negative_seed_distinct(self) -> None:
        """A seed and its negation give different fields."""
        a = NoiseField(5).field(30, 30, 10.0, 4, 0.5, 2.0)
        b = NoiseField(-5).field(30, 30, 10.0, 4, 0.5, 2.0)
        assert not np.allclose(a, b)

    def test_smooth(self) -> None:
        """Neighboring samples differ far less than the full range."""
        field = NoiseField(5).field(64, 64, scale=30.0, octaves=1, persistence=0.5, lacunarity=2.0)
        assert np.abs(np.diff(field, axis=1)).max() < 0.25

    def test_array_coordinates(self) -> None:
        """Arbitrary coordinate arrays are accepted."""
        xs = np.linspace(0, 100, 17)
        ys = np.linspace(-50, 50, 17)
        values = NoiseField(8).sample(xs, ys, 12.0, 3, 0.5, 2.0)
        assert values.shape == (17,)
        assert np.all((values >= 0.0) & (values <= 1.0))

    def test_non_positive_scale_clamped(self) -> None:
        """A zero or negative scale does not raise or produce NaN."""
        for scale in (0.0, -5.0):
            field = NoiseField(1).field(8, 8, scale, 3, 0.5, 2.0)
            assert np.all(np.isfinite(field))


class TestDegenerateNoise:
    """Tests for constant noise input."""

    def test_zero_octaves(self) -> None:
        """Zero octaves yields uniform 0.5."""
        field = NoiseField(1).field(10, 10, 20.0, 0, 0.5, 2.0)
        np.testing.assert_array_equal(field, np.full((10, 10), 0.5))

    def test_flat_gradients(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Constant raw noise normalizes to 0.5, not NaN."""
        monkeypatch.setattr(
            NoiseField, "_gradient_noise", lambda self, x, y, perm, grad: np.zeros_like(x)
        )
        field = NoiseField(1).field(12, 9, 20.0, 6, 0.5, 2.0)
        assert not np.any(np.isnan(field))
        np.testing.assert_array_equal(field, np.full((9, 12), 0.5))

    def test_single_point(self) -> None:
        """A single sample has no range and comes back as 0.5."""
        assert float(NoiseField(1).sample(3.0, 4.0, 10.0, 4, 0.5, 2.0)) == 0.5


class TestNormalize:
    """Tests for min-max normalization."""

    def test_rescales(self) -> None:
        np.testing.assert_allclose(normalize(np.array([2.0, 4.0, 3.0])), [0.0, 1.0, 0.5])

    def test_constant(self) -> None:
        np.testing.assert_array_equal(normalize(np.full(4, 7.0)), np.full(4, 0.5))
