"""Connected region search over boolean masks."""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

# 4-connected neighbour offsets as (dy, dx)
NEIGHBORS_4: tuple[tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass
class Region:
    """A maximal 4-connected set of tiles."""

    rows: NDArray[np.int64]
    cols: NDArray[np.int64]
    touches_border: bool

    @property
    def size(self) -> int:
        return len(self.rows)


def iter_regions(mask: NDArray[np.bool_]) -> Iterator[Region]:
    """Yield every 4-connected region of True tiles in row-major discovery order.

    Uses an explicit queue and a visited array so region size is not limited
    by recursion depth.
    """
    height, width = mask.shape
    visited = np.zeros(mask.shape, dtype=bool)

    for start_y, start_x in zip(*np.nonzero(mask)):
        if visited[start_y, start_x]:
            continue

        visited[start_y, start_x] = True
        queue: deque[tuple[int, int]] = deque([(int(start_y), int(start_x))])
        rows: list[int] = []
        cols: list[int] = []
        touches_border = False

        while queue:
            y, x = queue.popleft()
            rows.append(y)
            cols.append(x)
            if y == 0 or x == 0 or y == height - 1 or x == width - 1:
                touches_border = True

            for dy, dx in NEIGHBORS_4:
                ny, nx = y + dy, x + dx
                if 0 <= ny < height and 0 <= nx < width:
                    if mask[ny, nx] and not visited[ny, nx]:
                        visited[ny, nx] = True
                        queue.append((ny, nx))

        yield Region(
            rows=np.array(rows, dtype=np.int64),
            cols=np.array(cols, dtype=np.int64),
            touches_border=touches_border,
        )
