"""Matplotlib preview of a film while it accumulates.

The film holds XYZ estimates. Display goes through
XYZ -> linear sRGB -> tone map -> gamma 2.2 -> clamp to [0, 1].

Anything with a snapshot() method can be previewed: a Film, a RenderHandle
or a ProgressiveRenderer.

Example:
    >>> from luculenta.preview.display import show_preview
    >>> handle = render(scene, None, 320, 240, samples_per_pixel=None)
    >>> show_preview(handle, tone_map="reinhard", block=False)
"""

from __future__ import annotations

from typing import Literal, Protocol

import numpy as np
import numpy.typing as npt

from luculenta.core.film import FilmSnapshot

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]


class FilmSource(Protocol):
    def snapshot(self) -> FilmSnapshot: ...


def tone_map_reinhard(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """Reinhard global operator c / (1 + c), applied per channel."""
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.floating],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Exponential exposure curve 1 - exp(-c * exposure).

    Args:
        image: Linear HDR image of shape (H, W, 3).
        exposure: Larger values brighten the image.
    """
    image = np.maximum(image, 0.0)
    return (1.0 - np.exp(-image * exposure)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Encode linear values in [0, 1] with a power-law gamma."""
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image.astype(np.float32)
    # Negative values would produce NaN under the power
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.floating],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Run the display pipeline on a linear sRGB image.

    Args:
        image: Linear HDR image of shape (H, W, 3).
        tone_map: "none", "reinhard" or "exposure".
        gamma: Display gamma (2.2 approximates sRGB).
        exposure: Exposure for the "exposure" curve.

    Returns:
        Display-ready float32 image in [0, 1].

    Raises:
        ValueError: For an unknown tone mapping method.
    """
    if tone_map == "reinhard":
        result = tone_map_reinhard(image)
    elif tone_map == "exposure":
        result = tone_map_exposure(image, exposure)
    elif tone_map == "none":
        result = np.asarray(image, dtype=np.float32)
    else:
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)


def film_to_linear(source: FilmSource | FilmSnapshot) -> npt.NDArray[np.float32]:
    """Linear sRGB image of a film source, negative values clipped to 0."""
    snapshot = source if isinstance(source, FilmSnapshot) else source.snapshot()
    return np.maximum(snapshot.linear_srgb(), 0.0).astype(np.float32)


def film_to_display(
    source: FilmSource | FilmSnapshot,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Snapshot a film source and turn it into a display-ready image."""
    return process_image_for_display(
        film_to_linear(source), tone_map=tone_map, gamma=gamma, exposure=exposure
    )


def show_preview(
    source: FilmSource,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Show the current state of a film in a Matplotlib window.

    The default title reports the mean samples per pixel.
    """
    import matplotlib.pyplot as plt

    snapshot = source.snapshot()
    display_image = film_to_display(snapshot, tone_map=tone_map, gamma=gamma, exposure=exposure)

    _, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {snapshot.mean_samples:.1f} SPP"
        if tone_map != "none":
            title += f" ({tone_map})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
    *,
    labels: tuple[str, str] = ("A", "B"),
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Show two linear images next to their amplified difference.

    Returns:
        RMSE between the two images in display space.
    """
    import matplotlib.pyplot as plt

    from luculenta.preview.export import compute_rmse

    display_a = process_image_for_display(image_a, tone_map=tone_map, gamma=gamma)
    display_b = process_image_for_display(image_b, tone_map=tone_map, gamma=gamma)
    rmse = compute_rmse(display_a, display_b)
    diff = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    _, axes = plt.subplots(1, 3, figsize=figsize)
    panels = (
        (display_a, labels[0]),
        (display_b, labels[1]),
        (diff, f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}"),
    )
    for ax, (image, label) in zip(axes, panels):
        ax.imshow(image)
        ax.set_title(label)
        ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
