"""PNG export of rendered films.

Images are written as 8-bit sRGB PNGs through Pillow after the same display
pipeline the preview window uses.

Example:
    >>> from luculenta.preview.export import save_png
    >>> handle = render(scene, None, 256, 256, samples_per_pixel=64)
    >>> handle.wait()
    >>> save_png(handle, "cornell.png", tone_map="reinhard")
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from luculenta.preview.display import (
    FilmSource,
    ToneMapMethod,
    film_to_linear,
    process_image_for_display,
)


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear image to display-encoded 8-bit values."""
    processed = process_image_for_display(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    return np.round(processed * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.floating],
    filepath: str | os.PathLike[str],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> None:
    """Write a linear (H, W, 3) image as a PNG.

    Raises:
        ValueError: If the array is not an (H, W, 3) image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    pixels = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    PILImage.fromarray(pixels).save(filepath, format="PNG")


def save_png(
    source: FilmSource,
    filepath: str | os.PathLike[str],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> None:
    """Snapshot a Film, RenderHandle or ProgressiveRenderer and save it as a PNG."""
    save_png_from_array(
        film_to_linear(source), filepath, tone_map=tone_map, gamma=gamma, exposure=exposure
    )


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Root mean squared error between two images of the same shape.

    Raises:
        ValueError: If the shapes differ.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")
    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
