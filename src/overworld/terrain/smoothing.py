"""Box-blur smoothing of the elevation layer."""

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from ..grid import WorldGrid
from .config import WorldGenConfig


def box_blur(elevation: NDArray[np.float64], kernel_size: int) -> NDArray[np.float64]:
    """Average each tile over the in-bounds tiles of a k x k window.

    Reads only from the input array, so the result does not depend on the
    order tiles are visited.

    Args:
        elevation: Height field.
        kernel_size: Odd window edge length.

    Returns:
        New smoothed array.
    """
    totals = ndimage.uniform_filter(elevation, size=kernel_size, mode="constant", cval=0.0)
    counts = ndimage.uniform_filter(
        np.ones_like(elevation), size=kernel_size, mode="constant", cval=0.0
    )
    return totals / counts


class ElevationSmoother:
    """Stage: soften noise artifacts with repeated box blurs."""

    name = "smoothing"

    def transform(
        self,
        grid: WorldGrid,
        config: WorldGenConfig,
        rng: np.random.Generator,
    ) -> None:
        elevation = grid.elevation.copy()
        for _ in range(config.smoothing_passes):
            elevation = box_blur(elevation, config.smoothing_kernel_size)
        grid.elevation[:] = np.clip(elevation, 0.0, 1.0)
