"""Geometric primitives.

Every primitive references exactly one material and answers
intersect(ray, t_min, t_max) with a HitRecord (normal facing the ray) or
None.
"""

from .base import AABB, HitRecord, Primitive, make_hit
from .plane import Plane
from .quad import Quad
from .sphere import Sphere
from .triangle import Triangle, make_prism

__all__ = [
    "AABB",
    "HitRecord",
    "Primitive",
    "make_hit",
    "Sphere",
    "Plane",
    "Triangle",
    "Quad",
    "make_prism",
]
