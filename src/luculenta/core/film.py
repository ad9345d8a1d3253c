"""Accumulation buffer (film) shared by all render workers.

The film stores, for every pixel, the running sum of XYZ contributions and
the number of samples that produced it. sum / count is an unbiased estimate
of the pixel's tristimulus value at every moment, so any consumer may read
the film while rendering continues.

Workers never touch the film per sample. They accumulate into their tile's
local buffers and merge a whole tile at once; merges and snapshots take the
same lock, so a snapshot never contains a pixel whose sum and count come
from different merges. Merges are rare compared to sampling work, so the
lock is uncontended in practice.

Example:
    >>> film = Film(64, 48)
    >>> snap = film.snapshot()
    >>> rgb = snap.linear_srgb()   # (48, 64, 3)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from luculenta.core.spectrum import xyz_to_linear_srgb

if TYPE_CHECKING:
    from luculenta.core.tiles import Tile


@dataclass(frozen=True)
class FilmSnapshot:
    """A consistent copy of the film.

    Attributes:
        xyz_sum: (height, width, 3) accumulated XYZ sums.
        counts: (height, width) sample counts.
        merges: Number of tile merges included in the snapshot.
    """

    xyz_sum: npt.NDArray[np.float64]
    counts: npt.NDArray[np.int64]
    merges: int

    @property
    def width(self) -> int:
        return int(self.counts.shape[1])

    @property
    def height(self) -> int:
        return int(self.counts.shape[0])

    @property
    def total_samples(self) -> int:
        return int(self.counts.sum())

    @property
    def min_samples(self) -> int:
        """Smallest per-pixel sample count."""
        return int(self.counts.min())

    @property
    def mean_samples(self) -> float:
        return float(self.counts.mean())

    def mean_xyz(self) -> npt.NDArray[np.float64]:
        """Per-pixel XYZ estimate; pixels without samples are black."""
        denom = np.maximum(self.counts, 1)[..., np.newaxis]
        return self.xyz_sum / denom

    def linear_srgb(self) -> npt.NDArray[np.float64]:
        """Per-pixel linear sRGB estimate (unclamped)."""
        return xyz_to_linear_srgb(self.mean_xyz())


class Film:
    """Full-image grid of XYZ sums and sample counts.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Film dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._xyz_sum = np.zeros((height, width, 3), dtype=np.float64)
        self._counts = np.zeros((height, width), dtype=np.int64)
        self._merges = 0
        self._lock = threading.Lock()

    def merge(self, tile: Tile) -> None:
        """Add a tile's local sums and counts to the film."""
        if tile.x1 > self.width or tile.y1 > self.height:
            raise ValueError(
                f"Tile {tile.index} extends beyond the {self.width}x{self.height} film"
            )
        with self._lock:
            self._xyz_sum[tile.y0 : tile.y1, tile.x0 : tile.x1] += tile.xyz_sum
            self._counts[tile.y0 : tile.y1, tile.x0 : tile.x1] += tile.counts
            self._merges += 1

    def snapshot(self) -> FilmSnapshot:
        """Return a consistent copy of the current accumulation state."""
        with self._lock:
            return FilmSnapshot(self._xyz_sum.copy(), self._counts.copy(), self._merges)

    def clear(self) -> None:
        """Reset all sums and counts to zero."""
        with self._lock:
            self._xyz_sum.fill(0.0)
            self._counts.fill(0)
            self._merges = 0

    @property
    def total_samples(self) -> int:
        with self._lock:
            return int(self._counts.sum())

    def mean_xyz(self) -> npt.NDArray[np.float64]:
        return self.snapshot().mean_xyz()

    def to_srgb(self) -> npt.NDArray[np.float64]:
        return self.snapshot().linear_srgb()

    def __repr__(self) -> str:
        return f"Film(width={self.width}, height={self.height}, samples={self.total_samples})"
