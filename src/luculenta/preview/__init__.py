"""Preview module: turning a film into something to look at.

Components:
    display: Tone mapping and a Matplotlib preview window
    export: Gamma-correct PNG export through Pillow

Example:
    >>> from luculenta.preview import show_preview, save_png
    >>> handle = render(scene, None, 256, 256, samples_per_pixel=64)
    >>> handle.wait()
    >>> show_preview(handle, tone_map="reinhard")
    >>> save_png(handle, "output.png", gamma=2.2)
"""

from luculenta.preview.display import (
    ToneMapMethod,
    apply_gamma,
    film_to_display,
    film_to_linear,
    process_image_for_display,
    show_comparison,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from luculenta.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    "film_to_display",
    "film_to_linear",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
