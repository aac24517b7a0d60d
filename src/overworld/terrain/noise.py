"""Fractal gradient noise sampling.

Gradient (Perlin) noise on an integer lattice, summed over octaves and
normalized to [0, 1] over each sampled batch.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import MIN_NOISE_SCALE

LATTICE_SIZE = 256
OCTAVE_OFFSET_RANGE = 10000.0


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    # Quintic fade (Perlin)
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


class NoiseField:
    """Seeded multi-octave gradient noise sampler.

    Output is deterministic for a given seed and seed offset. Callers that need
    uncorrelated fields (elevation, temperature, rainfall) pass distinct
    seed offsets.
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)

    def _lattice(
        self, rng: np.random.Generator
    ) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
        """Build the permutation table and unit gradients for one octave stack."""
        perm = rng.permutation(LATTICE_SIZE)
        perm = np.concatenate([perm, perm])
        angles = rng.uniform(0.0, 2.0 * np.pi, LATTICE_SIZE)
        gradients = np.stack([np.cos(angles), np.sin(angles)], axis=-1)
        return perm, gradients

    def _gradient_noise(
        self,
        x: NDArray[np.float64],
        y: NDArray[np.float64],
        perm: NDArray[np.int64],
        gradients: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Single-octave gradient noise, roughly in [-1, 1]."""
        x0 = np.floor(x)
        y0 = np.floor(y)
        fx = x - x0
        fy = y - y0
        xi = x0.astype(np.int64) & (LATTICE_SIZE - 1)
        yi = y0.astype(np.int64) & (LATTICE_SIZE - 1)
        xi1 = (xi + 1) & (LATTICE_SIZE - 1)
        yi1 = (yi + 1) & (LATTICE_SIZE - 1)

        def corner(ix: NDArray[np.int64], iy: NDArray[np.int64], dx, dy) -> NDArray[np.float64]:
            g = gradients[perm[perm[ix] + iy]]
            return g[..., 0] * dx + g[..., 1] * dy

        n00 = corner(xi, yi, fx, fy)
        n10 = corner(xi1, yi, fx - 1.0, fy)
        n01 = corner(xi, yi1, fx, fy - 1.0)
        n11 = corner(xi1, yi1, fx - 1.0, fy - 1.0)

        u = _fade(fx)
        v = _fade(fy)
        nx0 = n00 + u * (n10 - n00)
        nx1 = n01 + u * (n11 - n01)
        # Unit gradients peak at sqrt(2)/2
        return (nx0 + v * (nx1 - nx0)) * np.sqrt(2.0)

    def sample(
        self,
        x: ArrayLike,
        y: ArrayLike,
        scale: float,
        octaves: int,
        persistence: float,
        lacunarity: float,
        seed_offset: int = 0,
    ) -> NDArray[np.float64]:
        """Sample fractal noise at the given coordinates.

        The result is min-max normalized over the whole batch, so a batch must
        cover the full field being generated. A batch with no variation (a
        single point, zero octaves, flat gradients) comes back as 0.5.

        Args:
            x: X coordinates in tiles, scalar or array.
            y: Y coordinates in tiles, broadcastable against x.
            scale: Feature size in tiles; values <= 0 are clamped.
            octaves: Number of noise layers.
            persistence: Amplitude multiplier per octave.
            lacunarity: Frequency multiplier per octave.
            seed_offset: Decorrelates fields generated from the same seed.

        Returns:
            Noise values in [0, 1] with the broadcast shape of x and y.
        """
        xs, ys = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
        )
        if scale <= 0:
            scale = MIN_NOISE_SCALE

        rng = np.random.default_rng(
            [abs(self.seed), int(self.seed < 0), abs(int(seed_offset))]
        )
        perm, gradients = self._lattice(rng)
        offsets = rng.uniform(-OCTAVE_OFFSET_RANGE, OCTAVE_OFFSET_RANGE, (max(octaves, 0), 2))

        raw = np.zeros(xs.shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        amplitude_sum = 0.0
        for octave in range(octaves):
            sx = xs / scale * frequency + offsets[octave, 0]
            sy = ys / scale * frequency + offsets[octave, 1]
            raw += self._gradient_noise(sx, sy, perm, gradients) * amplitude
            amplitude_sum += amplitude
            amplitude *= persistence
            frequency *= lacunarity

        if amplitude_sum > 0:
            raw = (raw / amplitude_sum + 1.0) * 0.5
        else:
            raw = np.full(xs.shape, 0.5)

        return normalize(raw)

    def field(
        self,
        width: int,
        height: int,
        scale: float,
        octaves: int,
        persistence: float,
        lacunarity: float,
        seed_offset: int = 0,
        center: bool = False,
    ) -> NDArray[np.float64]:
        """Sample a (height, width) field over integer tile coordinates.

        Args:
            center: Measure coordinates from the middle of the map instead of
                the top-left corner.
        """
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
        if center:
            xs -= width / 2.0
            ys -= height / 2.0
        return self.sample(xs, ys, scale, octaves, persistence, lacunarity, seed_offset)


def normalize(values: NDArray[np.float64]) -> NDArray[np.float64]:
    """Min-max rescale to [0, 1]; a constant array becomes uniformly 0.5."""
    lo = float(np.min(values)) if values.size else 0.0
    hi = float(np.max(values)) if values.size else 0.0
    if hi > lo:
        return (values - lo) / (hi - lo)
    return np.full(values.shape, 0.5, dtype=np.float64)
