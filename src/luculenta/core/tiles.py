"""Image tiles: the unit of work handed to render workers.

A Tile is a rectangular pixel region together with local accumulation
buffers. Exactly one worker owns a tile while it is being sampled; its sums
and counts are merged into the shared Film when the pass completes and then
cleared for the next pass.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import numpy.typing as npt


class TileState(Enum):
    """Lifecycle of a tile within one render."""

    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"
    FAILED = "failed"


@dataclass(eq=False)
class Tile:
    """A rectangular region [x0, x1) x [y0, y1) of the image.

    Attributes:
        index: Position in the row-major tile order.
        x0, y0: Top-left pixel (inclusive).
        x1, y1: Bottom-right bound (exclusive).
        state: Current lifecycle state.
        passes: Number of passes merged into the film.
        samples_per_pixel: Samples per pixel merged into the film so far.
        xyz_sum: Local (h, w, 3) tristimulus sums of the current pass.
        counts: Local (h, w) sample counts of the current pass.
    """

    index: int
    x0: int
    y0: int
    x1: int
    y1: int
    state: TileState = TileState.PENDING
    passes: int = 0
    samples_per_pixel: int = 0
    xyz_sum: npt.NDArray[np.float64] = field(init=False, repr=False)
    counts: npt.NDArray[np.int64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.x1 <= self.x0 or self.y1 <= self.y0:
            raise ValueError(
                f"Tile {self.index} has zero area: [{self.x0}, {self.x1}) x [{self.y0}, {self.y1})"
            )
        self.xyz_sum = np.zeros((self.height, self.width, 3), dtype=np.float64)
        self.counts = np.zeros((self.height, self.width), dtype=np.int64)

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def area(self) -> int:
        return self.width * self.height

    def pixels(self) -> Iterator[tuple[int, int]]:
        """Iterate over the (x, y) image coordinates of the tile, row by row."""
        for y in range(self.y0, self.y1):
            for x in range(self.x0, self.x1):
                yield x, y

    def record_pixel(self, x: int, y: int, xyz: tuple[float, float, float], count: int) -> None:
        """Add the summed contribution of `count` samples to one pixel."""
        ly = y - self.y0
        lx = x - self.x0
        self.xyz_sum[ly, lx] += xyz
        self.counts[ly, lx] += count

    def clear_local(self) -> None:
        """Reset the local buffers after a merge (or a failed pass)."""
        self.xyz_sum.fill(0.0)
        self.counts.fill(0)


def make_tiles(width: int, height: int, tile_size: int) -> list[Tile]:
    """Partition an image into row-major tiles.

    Tiles on the right and bottom edges are clipped to the image.

    Raises:
        ValueError: If any dimension is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if tile_size <= 0:
        raise ValueError(f"Tile size must be positive, got {tile_size}")

    tiles = []
    for y0 in range(0, height, tile_size):
        for x0 in range(0, width, tile_size):
            tiles.append(
                Tile(
                    index=len(tiles),
                    x0=x0,
                    y0=y0,
                    x1=min(x0 + tile_size, width),
                    y1=min(y0 + tile_size, height),
                )
            )
    return tiles
