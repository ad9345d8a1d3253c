"""Quad primitive with ray-quad intersection.

This module provides a Quad primitive for rendering rectangular surfaces
such as the walls of a Cornell box.

A quad is defined by:
- q: A corner point of the quad
- u: Edge vector from q to adjacent corner
- v: Edge vector from q to other adjacent corner

The quad spans the parallelogram from q to q+u+v. The normal is computed as
normalize(cross(u, v)), pointing in the direction determined by the right-hand
rule.

Ray-quad intersection uses the parametric plane test:
1. Find where ray intersects the plane containing the quad
2. Check if the intersection point lies within the quad bounds
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from luculenta.core.ray import Ray, Vec3, add, cross, dot, length, normalize, ray_at, scale, sub
from luculenta.geometry.base import AABB, HitRecord, Primitive, make_hit

if TYPE_CHECKING:
    from luculenta.materials.base import Material


class Quad(Primitive):
    """A parallelogram defined by a corner point and two edge vectors.

    The quad has vertices at q, q+u, q+v, q+u+v.

    Attributes:
        q: The corner point of the quad.
        u: Edge vector from q to adjacent corner.
        v: Edge vector from q to other adjacent corner.
        material: The quad's material.
    """

    __slots__ = ("q", "u", "v", "material", "normal", "_d", "_w_u", "_w_v")

    def __init__(self, q: Vec3, u: Vec3, v: Vec3, material: Material) -> None:
        self.q = tuple(float(c) for c in q)
        self.u = tuple(float(c) for c in u)
        self.v = tuple(float(c) for c in v)
        self.material = material

        n = cross(self.u, self.v)
        n_dot_n = dot(n, n)
        if n_dot_n < 1e-20:
            raise ValueError(f"Quad edges {u} and {v} are parallel (zero area)")

        self.normal = normalize(n)
        # Plane equation: dot(normal, P) = d
        self._d = dot(self.normal, self.q)
        # w_u and w_v satisfy dot(w_u, u) = 1, dot(w_u, v) = 0,
        # dot(w_v, u) = 0, dot(w_v, v) = 1
        self._w_u = scale(cross(self.v, n), 1.0 / n_dot_n)
        self._w_v = scale(cross(n, self.u), 1.0 / n_dot_n)

    @property
    def area(self) -> float:
        return length(cross(self.u, self.v))

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        denom = dot(self.normal, ray.direction)
        if abs(denom) < 1e-12:
            return None

        t = (self._d - dot(self.normal, ray.origin)) / denom
        if not t_min < t < t_max:
            return None

        # P = q + alpha * u + beta * v
        p_minus_q = sub(ray_at(ray, t), self.q)
        alpha = dot(self._w_u, p_minus_q)
        beta = dot(self._w_v, p_minus_q)
        if not (0.0 <= alpha <= 1.0 and 0.0 <= beta <= 1.0):
            return None

        return make_hit(ray, t, self.normal, self)

    def bounds(self) -> AABB:
        corners = (self.q, add(self.q, self.u), add(self.q, self.v), add(add(self.q, self.u), self.v))
        pad = 1e-6
        return AABB(
            tuple(min(c[i] for c in corners) - pad for i in range(3)),  # type: ignore[arg-type]
            tuple(max(c[i] for c in corners) + pad for i in range(3)),  # type: ignore[arg-type]
        )

    def __repr__(self) -> str:
        return f"Quad(q={self.q}, u={self.u}, v={self.v})"
