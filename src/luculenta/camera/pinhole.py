"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates primary rays for rendering.
The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view
- Arbitrary aspect ratios
- Jittered sampling for anti-aliasing
- Camera motion during the shutter interval (motion blur)

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Pixel coordinates follow image conventions: (0, 0) is the top-left pixel and
y grows downward, matching the row order of the film arrays.

Example:
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> ray = camera.get_ray(0.5, 0.5, wavelength=550.0)  # Ray through image center
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from luculenta.core.ray import Ray, Vec3, make_ray

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler


def _as_vec(a: np.ndarray) -> Vec3:
    return (float(a[0]), float(a[1]), float(a[2]))


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    A pinhole camera produces perfect perspective projection with no
    depth of field effects.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        motion: Displacement of the camera between shutter open (time 0)
            and shutter close (time 1). Orientation does not change.

    Raises:
        ValueError: If the parameters describe a degenerate camera.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 40.0
    aspect_ratio: float = 1.0
    motion: tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Derived frame (filled by __post_init__)
    origin: Vec3 = field(init=False, repr=False)
    u: Vec3 = field(init=False, repr=False)
    v: Vec3 = field(init=False, repr=False)
    w: Vec3 = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._validate()
        self._setup_frame()

    def _validate(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Vertical field of view must be in (0, 180) degrees, got {self.vfov}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {self.aspect_ratio}")
        if not all(math.isfinite(c) for c in self.motion):
            raise ValueError(f"Camera motion must be finite, got {self.motion}")

    def _setup_frame(self) -> None:
        """Compute the orthonormal basis (u, v, w) and viewport extents."""
        lookfrom = np.array(self.lookfrom, dtype=np.float64)
        lookat = np.array(self.lookat, dtype=np.float64)
        vup = np.array(self.vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = lookfrom - lookat
        w_len = np.linalg.norm(w)
        if w_len < 1e-12:
            raise ValueError("Camera lookfrom and lookat must be distinct points")
        w = w / w_len

        # u points right (perpendicular to w and vup)
        u = np.cross(vup, w)
        u_len = np.linalg.norm(u)
        if u_len < 1e-12:
            raise ValueError(f"Camera up vector {self.vup} is parallel to the view direction")
        u = u / u_len

        # v points up in the camera's frame
        v = np.cross(w, u)

        self.origin = _as_vec(lookfrom)
        self.u = _as_vec(u)
        self.v = _as_vec(v)
        self.w = _as_vec(w)

        # Viewport dimensions at unit distance
        self.viewport_height = 2.0 * math.tan(math.radians(self.vfov) / 2.0)
        self.viewport_width = self.aspect_ratio * self.viewport_height

    # -------------------------------------------------------------------------
    # Lens model hooks (a pinhole has no lens)
    # -------------------------------------------------------------------------

    def focus_plane_distance(self) -> float:
        return 1.0

    def image_scale(self, wavelength: float) -> float:
        """Per-wavelength magnification of the image plane."""
        return 1.0

    def lens_offset(self, sampler: Sampler | None) -> tuple[float, float]:
        """Offset of the ray origin on the lens, in camera (u, v) units."""
        return 0.0, 0.0

    # -------------------------------------------------------------------------
    # Shutter
    # -------------------------------------------------------------------------

    @property
    def is_moving(self) -> bool:
        return any(c != 0.0 for c in self.motion)

    def position_at(self, time: float) -> Vec3:
        """Camera position at shutter time `time` in [0, 1]."""
        if not 0.0 <= time <= 1.0:
            raise ValueError(f"Shutter time must be in [0, 1], got {time}")
        ox, oy, oz = self.origin
        mx, my, mz = self.motion
        return (ox + time * mx, oy + time * my, oz + time * mz)

    # -------------------------------------------------------------------------
    # Ray generation
    # -------------------------------------------------------------------------

    def get_ray(
        self,
        s: float,
        t: float,
        wavelength: float,
        sampler: Sampler | None = None,
        time: float = 0.0,
    ) -> Ray:
        """Generate a ray through normalized image coordinates (s, t).

        Args:
            s: Horizontal coordinate in [0, 1] (left to right).
            t: Vertical coordinate in [0, 1] (bottom to top).
            wavelength: Wavelength carried by the ray, in nm.
            sampler: Random stream for lens sampling (unused by a pinhole).
            time: Shutter time in [0, 1]; only matters for a moving camera.

        Returns:
            A Ray from the lens toward the point (s, t) on the focus plane.
        """
        focus = self.focus_plane_distance()
        mag = self.image_scale(wavelength) * focus
        du = (s - 0.5) * self.viewport_width * mag
        dv = (t - 0.5) * self.viewport_height * mag

        ox, oy, oz = self.position_at(time) if self.is_moving else self.origin
        u, v, w = self.u, self.v, self.w
        target = (
            ox + du * u[0] + dv * v[0] - focus * w[0],
            oy + du * u[1] + dv * v[1] - focus * w[1],
            oz + du * u[2] + dv * v[2] - focus * w[2],
        )

        lu, lv = self.lens_offset(sampler)
        origin = (
            ox + lu * u[0] + lv * v[0],
            oy + lu * u[1] + lv * v[1],
            oz + lu * u[2] + lv * v[2],
        )
        direction = (target[0] - origin[0], target[1] - origin[1], target[2] - origin[2])
        return make_ray(origin, direction, wavelength)

    def generate_ray(
        self,
        pixel_x: int,
        pixel_y: int,
        width: int,
        height: int,
        jitter: tuple[float, float],
        wavelength: float,
        sampler: Sampler | None = None,
    ) -> Ray:
        """Generate a jittered primary ray for one pixel.

        When accumulated over multiple samples, the random sub-pixel jitter
        produces smooth (anti-aliased) edges. A moving camera also draws a
        uniform shutter time from `sampler`, which blurs along its motion.

        Args:
            pixel_x: Column, 0 = left.
            pixel_y: Row, 0 = top.
            width: Image width in pixels.
            height: Image height in pixels.
            jitter: Sub-pixel offset in [0, 1)^2.
            wavelength: Wavelength carried by the ray, in nm.
            sampler: Random stream for lens sampling.
        """
        s = (pixel_x + jitter[0]) / width
        t = 1.0 - (pixel_y + jitter[1]) / height
        time = sampler.next_float() if self.is_moving and sampler is not None else 0.0
        return self.get_ray(s, t, wavelength, sampler, time)

    def get_camera_info(self) -> dict[str, tuple[float, float, float]]:
        """Get the camera frame for debugging."""
        return {"origin": self.origin, "u": self.u, "v": self.v, "w": self.w}
