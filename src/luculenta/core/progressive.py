"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the tile scheduler that
supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks for UI updates
- Easy reset and re-render functionality

The ProgressiveRenderer keeps one Film across calls. Every batch is a
fixed-target render into that film with its own seed, so successive batches
add independent samples.

Example:
    >>> from luculenta.core.progressive import ProgressiveRenderer
    >>> from luculenta.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene = create_cornell_box_scene()
    >>> renderer = ProgressiveRenderer(scene, 256, 256)
    >>> renderer.render(64, batch_size=16)  # Render 64 SPP
    >>> image = renderer.get_image_numpy(gamma=2.2)
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from luculenta.core.film import Film, FilmSnapshot
from luculenta.core.integrator import DEFAULT_SETTINGS, IntegratorSettings
from luculenta.core.scheduler import DEFAULT_TILE_SIZE, RenderHandle, render

if TYPE_CHECKING:
    from luculenta.camera.pinhole import PinholeCamera
    from luculenta.scene.scene import Scene

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    Attributes:
        scene: The scene being rendered.
        camera: Camera for primary rays (defaults to scene.camera).
        film: The accumulation buffer shared by all batches.
    """

    def __init__(
        self,
        scene: Scene,
        width: int,
        height: int,
        camera: PinholeCamera | None = None,
        threads: int | None = None,
        tile_size: int = DEFAULT_TILE_SIZE,
        seed: int = 0,
        settings: IntegratorSettings = DEFAULT_SETTINGS,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            scene: The scene to render.
            width: Image width in pixels.
            height: Image height in pixels.
            camera: Camera override; None uses scene.camera.
            threads: Worker threads per batch; None uses one per CPU.
            tile_size: Tile edge length in pixels.
            seed: Base seed; batch k derives its own seed from it.
            settings: Integrator parameters.

        Raises:
            ValueError: If the dimensions are not positive.
        """
        self.scene = scene
        self.camera = camera
        self.film = Film(width, height)
        self._threads = threads
        self._tile_size = tile_size
        self._seed = seed
        self._settings = settings
        self._batches = 0

    @property
    def width(self) -> int:
        return self.film.width

    @property
    def height(self) -> int:
        return self.film.height

    @property
    def sample_count(self) -> int:
        """Samples per pixel accumulated in every pixel."""
        return self.film.snapshot().min_samples

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the film, allowing a fresh render without changing the image
        dimensions.
        """
        self.film.clear()
        self._batches = 0

    def _batch_seed(self) -> int:
        seed = int(np.random.SeedSequence([self._seed, self._batches]).generate_state(1)[0])
        self._batches += 1
        return seed

    def start(self, samples_per_pixel: int | None) -> RenderHandle:
        """Start one non-blocking render into the film.

        Args:
            samples_per_pixel: Samples to add, or None for a continuous render
                that runs until the returned handle is stopped.

        Returns:
            The RenderHandle of the started render.
        """
        return render(
            self.scene,
            self.camera,
            self.width,
            self.height,
            samples_per_pixel=samples_per_pixel,
            threads=self._threads,
            tile_size=self._tile_size,
            seed=self._batch_seed(),
            settings=self._settings,
            film=self.film,
        )

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing film.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples per pixel to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples per pixel to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            with self.start(batch) as handle:
                handle.wait()
            remaining -= batch
            yield (self.sample_count, target_samples)

    def snapshot(self) -> FilmSnapshot:
        return self.film.snapshot()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Returns linear sRGB clamped to [0, 1] and optionally gamma corrected.
        The array shape is (height, width, 3).

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).
                Use 2.2 for sRGB display.
        """
        image = np.clip(self.film.to_srgb(), 0.0, 1.0).astype(np.float32)

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit array suitable for saving."""
        image = self.get_image_numpy(gamma=gamma)
        return (image * 255).astype(np.uint8)

    def save_image(self, filepath: str, gamma: float = 2.2) -> None:
        """Save the rendered image to a PNG file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 2.2 for sRGB.
        """
        from luculenta.preview.export import save_png

        save_png(self, filepath, gamma=gamma)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
