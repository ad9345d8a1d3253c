"""Infinite plane primitive."""

from __future__ import annotations

from typing import TYPE_CHECKING

from luculenta.core.ray import Ray, Vec3, dot, near_zero, normalize, sub
from luculenta.geometry.base import UNBOUNDED, AABB, HitRecord, Primitive, make_hit

if TYPE_CHECKING:
    from luculenta.materials.base import Material


class Plane(Primitive):
    """An infinite plane through a point with a given outward normal.

    Attributes:
        point: Any point on the plane.
        normal: Unit normal; the side it points to is the front face.
        material: The plane's material.
    """

    __slots__ = ("point", "normal", "material", "_d")

    def __init__(self, point: Vec3, normal: Vec3, material: Material) -> None:
        if near_zero(normal):
            raise ValueError(f"Plane normal {normal} has zero length")
        self.point = tuple(float(c) for c in point)
        self.normal = normalize(normal)
        self.material = material
        self._d = dot(self.normal, self.point)

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        denom = dot(self.normal, ray.direction)
        if abs(denom) < 1e-12:
            return None
        t = (self._d - dot(self.normal, ray.origin)) / denom
        if not t_min < t < t_max:
            return None
        return make_hit(ray, t, self.normal, self)

    def bounds(self) -> AABB:
        return UNBOUNDED

    def signed_distance(self, p: Vec3) -> float:
        return dot(self.normal, sub(p, self.point))

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal})"
