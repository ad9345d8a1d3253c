"""Scene container and ray-scene intersection.

A Scene is an ordered collection of primitives, the camera that views them
and a background spectrum returned for rays that escape. It is built by an
external loader (or one of the preset factories) and is read-only while a
render is running.

Intersection returns the nearest hit with T_MIN < t < T_MAX. Primitives are
tested in insertion order and a later primitive only replaces the current
hit if it is strictly closer, so exact floating-point ties go to the
primitive that was added first.

Example:
    >>> scene = Scene(camera=camera)
    >>> scene.add(Sphere((0, 0, -2), 1.0, LambertianMaterial(0.8)))
    >>> hit = scene.intersect(ray)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from luculenta.core.spectrum import Spectrum
from luculenta.geometry.base import AABB, HitRecord, Primitive
from luculenta.materials.base import Material

if TYPE_CHECKING:
    from luculenta.camera.pinhole import PinholeCamera
    from luculenta.core.ray import Ray

# t_min and t_max for ray intersection
T_MIN = 1e-4
T_MAX = 1e10


class Scene:
    """Ordered primitives plus a camera and a background.

    Attributes:
        camera: The camera used when a render does not pass its own.
        background: Radiance returned for rays that hit nothing.
    """

    def __init__(
        self,
        primitives: Iterable[Primitive] = (),
        camera: PinholeCamera | None = None,
        background: Spectrum | float | None = None,
    ) -> None:
        self._primitives: list[Primitive] = []
        self.camera = camera
        if background is None:
            background = Spectrum.zero()
        elif not isinstance(background, Spectrum):
            background = Spectrum.constant(float(background))
        self.background = background
        self._active_renders = 0
        self._lock = threading.Lock()
        self.extend(primitives)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add(self, primitive: Primitive) -> int:
        """Append a primitive and return its index.

        Raises:
            RuntimeError: If a render using this scene is in progress.
            ValueError: If the primitive has no valid material.
        """
        if self._active_renders:
            raise RuntimeError("Scene is read-only while a render is in progress")
        if not isinstance(getattr(primitive, "material", None), Material):
            raise ValueError(f"{primitive!r} does not reference a valid Material")
        self._primitives.append(primitive)
        return len(self._primitives) - 1

    def extend(self, primitives: Iterable[Primitive]) -> None:
        for primitive in primitives:
            self.add(primitive)

    @property
    def primitives(self) -> tuple[Primitive, ...]:
        return tuple(self._primitives)

    def __len__(self) -> int:
        return len(self._primitives)

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self._primitives)

    @property
    def lights(self) -> list[Primitive]:
        """Primitives whose material emits light."""
        return [p for p in self._primitives if p.material.is_emissive]

    def validate(self, camera: PinholeCamera | None = None) -> None:
        """Check that the scene can be rendered.

        Args:
            camera: Camera used instead of the scene camera, if any.

        Raises:
            ValueError: If the scene is empty, has no camera, or a primitive
                lacks a material.
        """
        if not self._primitives:
            raise ValueError("Scene has no primitives")
        if camera is None and self.camera is None:
            raise ValueError("Scene has no camera")
        for index, primitive in enumerate(self._primitives):
            if not isinstance(getattr(primitive, "material", None), Material):
                raise ValueError(f"Primitive {index} ({primitive!r}) has no valid Material")

    # -------------------------------------------------------------------------
    # Render bookkeeping
    # -------------------------------------------------------------------------

    def begin_render(self) -> None:
        with self._lock:
            self._active_renders += 1

    def end_render(self) -> None:
        with self._lock:
            self._active_renders = max(0, self._active_renders - 1)

    @property
    def rendering(self) -> bool:
        return self._active_renders > 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def intersect(self, ray: Ray, t_min: float = T_MIN, t_max: float = T_MAX) -> HitRecord | None:
        """Find the nearest intersection along the ray.

        Args:
            ray: The ray to test.
            t_min: Minimum t value to consider a valid hit.
            t_max: Maximum t value to consider a valid hit.

        Returns:
            The closest HitRecord, or None if the ray escapes.
        """
        closest = t_max
        result = None
        for primitive in self._primitives:
            hit = primitive.intersect(ray, t_min, closest)
            if hit is not None:
                closest = hit.t
                result = hit
        return result

    def intersect_any(self, ray: Ray, t_min: float = T_MIN, t_max: float = T_MAX) -> bool:
        """Test if the ray hits anything (occlusion query)."""
        return any(p.intersect(ray, t_min, t_max) is not None for p in self._primitives)

    def background_radiance(self, wavelength: float) -> float:
        return self.background.sample(wavelength)

    def bounds(self) -> AABB:
        if not self._primitives:
            raise ValueError("Empty scene has no bounds")
        box = self._primitives[0].bounds()
        for primitive in self._primitives[1:]:
            box = box.union(primitive.bounds())
        return box

    def __repr__(self) -> str:
        return f"Scene(primitives={len(self._primitives)}, lights={len(self.lights)})"
