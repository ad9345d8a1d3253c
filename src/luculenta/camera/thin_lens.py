"""Thin lens camera with depth of field and chromatic aberration.

Rays start from a random point on a circular lens of diameter `aperture` and
pass through the point they would have hit on the plane of focus, so only
objects at `focus_distance` are sharp.

Chromatic aberration scales the image plane per wavelength:

    scale(lambda) = 1 + chromatic_aberration * (lambda - 580 nm) / 200 nm

so red and blue images of the same object land at slightly different
positions, with fringes growing toward the image edges.

Example:
    >>> camera = ThinLensCamera(
    ...     lookfrom=(0.0, 1.0, -10.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vfov=90.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.2,
    ...     focus_distance=10.0,
    ...     chromatic_aberration=0.01,
    ... )
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from luculenta.camera.pinhole import PinholeCamera
from luculenta.core.ray import random_in_unit_disk

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler

# Wavelength with unit magnification
REFERENCE_WAVELENGTH = 580.0
ABERRATION_SPAN = 200.0


@dataclass
class ThinLensCamera(PinholeCamera):
    """Pinhole camera extended with lens parameters.

    Attributes:
        aperture: Lens diameter. 0 behaves like a pinhole.
        focus_distance: Distance to the plane of perfect focus. None uses the
            distance between lookfrom and lookat.
        chromatic_aberration: Relative change in magnification per 200 nm.
    """

    aperture: float = 0.0
    focus_distance: float | None = None
    chromatic_aberration: float = 0.0

    def _validate(self) -> None:
        super()._validate()
        if self.aperture < 0.0:
            raise ValueError(f"Aperture must be non-negative, got {self.aperture}")
        if self.focus_distance is not None and not self.focus_distance > 0.0:
            raise ValueError(f"Focus distance must be positive, got {self.focus_distance}")
        # |lambda - 580| / 200 reaches 1 at both ends of the visible range
        if abs(self.chromatic_aberration) >= 1.0:
            raise ValueError(
                f"Chromatic aberration {self.chromatic_aberration} would invert the image"
            )

    def focus_plane_distance(self) -> float:
        if self.focus_distance is not None:
            return self.focus_distance
        return math.dist(self.lookfrom, self.lookat)

    def image_scale(self, wavelength: float) -> float:
        return 1.0 + self.chromatic_aberration * (
            (wavelength - REFERENCE_WAVELENGTH) / ABERRATION_SPAN
        )

    def lens_offset(self, sampler: Sampler | None) -> tuple[float, float]:
        if self.aperture == 0.0 or sampler is None:
            return 0.0, 0.0
        dx, dy = random_in_unit_disk(sampler)
        radius = self.aperture / 2.0
        return dx * radius, dy * radius
