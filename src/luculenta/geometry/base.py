"""Primitive interface, hit records and bounding boxes.

Every shape in a scene implements the Primitive interface:

    hit = primitive.intersect(ray, t_min, t_max)   # HitRecord or None
    box = primitive.bounds()                       # AABB

Hit records always carry a normal facing the incoming ray together with a
front_face flag telling whether the geometric (outward) normal was hit from
outside. Dielectrics rely on that flag to pick the refraction ratio.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from luculenta.core.ray import Ray, Vec3, dot, neg, ray_at

if TYPE_CHECKING:
    from luculenta.materials.base import Material

INF = math.inf


@dataclass(frozen=True, slots=True)
class AABB:
    """Axis-aligned bounding box.

    Attributes:
        min_point: Lower corner. Components may be -inf for unbounded shapes.
        max_point: Upper corner. Components may be +inf for unbounded shapes.
    """

    min_point: Vec3
    max_point: Vec3

    def union(self, other: AABB) -> AABB:
        return AABB(
            tuple(min(a, b) for a, b in zip(self.min_point, other.min_point)),  # type: ignore[arg-type]
            tuple(max(a, b) for a, b in zip(self.max_point, other.max_point)),  # type: ignore[arg-type]
        )

    def is_bounded(self) -> bool:
        return all(math.isfinite(c) for c in self.min_point + self.max_point)


UNBOUNDED = AABB((-INF, -INF, -INF), (INF, INF, INF))


@dataclass(slots=True)
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        t: Distance along the (unit length) ray to the intersection.
        point: The intersection point.
        normal: Unit surface normal, oriented against the incoming ray.
        front_face: True if the ray hit the outward-facing side.
        material: The material of the primitive that was hit.
        primitive: The primitive that was hit.
    """

    t: float
    point: Vec3
    normal: Vec3
    front_face: bool
    material: Material
    primitive: Primitive


def make_hit(ray: Ray, t: float, outward_normal: Vec3, primitive: Primitive) -> HitRecord:
    """Build a HitRecord, orienting the normal against the ray."""
    front_face = dot(ray.direction, outward_normal) < 0.0
    normal = outward_normal if front_face else neg(outward_normal)
    return HitRecord(
        t=t,
        point=ray_at(ray, t),
        normal=normal,
        front_face=front_face,
        material=primitive.material,
        primitive=primitive,
    )


class Primitive(ABC):
    """Base class for all scene geometry.

    Attributes:
        material: The material shared by every point of the primitive.
    """

    material: Material

    @abstractmethod
    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Return the nearest intersection with t_min < t < t_max, or None."""

    @abstractmethod
    def bounds(self) -> AABB:
        """Return the bounding box of the primitive."""
