"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere primitive using the robust quadratic formula
from Ray Tracing Gems to avoid floating-point artifacts.

The robust quadratic formula avoids catastrophic cancellation when b^2 is
nearly equal to 4ac by using a reformulated calculation that maintains
numerical stability.

Example:
    >>> from luculenta.materials import LambertianMaterial
    >>> sphere = Sphere(center=(0.0, 0.0, -1.0), radius=0.5,
    ...                 material=LambertianMaterial(0.5))
    >>> hit = sphere.intersect(ray, 1e-4, 1e10)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from luculenta.core.ray import Ray, Vec3, dot, scale, sub
from luculenta.geometry.base import AABB, HitRecord, Primitive, make_hit

if TYPE_CHECKING:
    from luculenta.materials.base import Material


def _solve_quadratic_robust(h: float, a: float, c: float, sqrt_d: float) -> tuple[float, float]:
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = -1.0 if h < 0.0 else 1.0
    q = -(h + sign_h * sqrt_d)

    if abs(q) < 1e-12:
        # Tangent ray: fall back to the standard formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1


class Sphere(Primitive):
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material: The sphere's material.
    """

    __slots__ = ("center", "radius", "material")

    def __init__(self, center: Vec3, radius: float, material: Material) -> None:
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = tuple(float(c) for c in center)
        self.radius = float(radius)
        self.material = material

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Test for ray-sphere intersection.

        Solves |origin + t * direction - center|^2 = radius^2 in the
        half-b form a*t^2 + 2*h*t + c = 0 with
            a = dot(direction, direction)
            h = dot(direction, oc)
            c = dot(oc, oc) - radius^2
        and returns the first root inside (t_min, t_max).
        """
        oc = sub(ray.origin, self.center)
        a = dot(ray.direction, ray.direction)
        h = dot(ray.direction, oc)
        c = dot(oc, oc) - self.radius * self.radius

        discriminant = h * h - a * c
        if discriminant < 0.0:
            return None

        t0, t1 = _solve_quadratic_robust(h, a, c, math.sqrt(discriminant))
        t = t0
        if not t_min < t < t_max:
            t = t1
            if not t_min < t < t_max:
                return None

        hit_point = (
            ray.origin[0] + t * ray.direction[0],
            ray.origin[1] + t * ray.direction[1],
            ray.origin[2] + t * ray.direction[2],
        )
        outward_normal = scale(sub(hit_point, self.center), 1.0 / self.radius)
        return make_hit(ray, t, outward_normal, self)

    def bounds(self) -> AABB:
        r = self.radius
        cx, cy, cz = self.center
        return AABB((cx - r, cy - r, cz - r), (cx + r, cy + r, cz + r))

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"
