"""Triangle primitive and closed triangle meshes built from it.

Intersection uses the Moller-Trumbore algorithm. The outward normal follows
the winding order: normalize(cross(b - a, c - a)).

make_prism() assembles a closed triangular prism with all faces wound
outward, which is what a refracting (dielectric) solid needs so that
front_face tells whether a ray is entering or leaving the glass.

Example:
    >>> from luculenta.materials import DielectricMaterial
    >>> glass = DielectricMaterial.flint_glass()
    >>> faces = make_prism((-1, 0, 0), (1, 0, 0), (0, 1.7, 0), (0, 0, 2), glass)
    >>> scene = Scene(faces, camera)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from luculenta.core.ray import Ray, Vec3, add, cross, dot, length, normalize, scale, sub
from luculenta.geometry.base import AABB, HitRecord, Primitive, make_hit

if TYPE_CHECKING:
    from luculenta.materials.base import Material

# Determinant threshold below which a ray counts as parallel to the triangle
PARALLEL_EPSILON = 1e-12


class Triangle(Primitive):
    """A single triangle with vertices a, b, c.

    Attributes:
        a, b, c: Vertex positions, counter-clockwise seen from the front.
        normal: Unit outward normal.
        material: The triangle's material.
    """

    __slots__ = ("a", "b", "c", "material", "normal", "_e1", "_e2")

    def __init__(self, a: Vec3, b: Vec3, c: Vec3, material: Material) -> None:
        self.a = tuple(float(x) for x in a)
        self.b = tuple(float(x) for x in b)
        self.c = tuple(float(x) for x in c)
        self.material = material
        self._e1 = sub(self.b, self.a)
        self._e2 = sub(self.c, self.a)
        n = cross(self._e1, self._e2)
        if length(n) < 1e-12:
            raise ValueError(f"Degenerate triangle {a}, {b}, {c} has zero area")
        self.normal = normalize(n)

    @property
    def area(self) -> float:
        return 0.5 * length(cross(self._e1, self._e2))

    def centroid(self) -> Vec3:
        return scale(add(add(self.a, self.b), self.c), 1.0 / 3.0)

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        p = cross(ray.direction, self._e2)
        det = dot(self._e1, p)
        if abs(det) < PARALLEL_EPSILON:
            return None
        inv_det = 1.0 / det

        s = sub(ray.origin, self.a)
        u = dot(s, p) * inv_det
        if u < 0.0 or u > 1.0:
            return None

        q = cross(s, self._e1)
        v = dot(ray.direction, q) * inv_det
        if v < 0.0 or u + v > 1.0:
            return None

        t = dot(self._e2, q) * inv_det
        if not t_min < t < t_max:
            return None
        return make_hit(ray, t, self.normal, self)

    def bounds(self) -> AABB:
        verts = (self.a, self.b, self.c)
        pad = 1e-6
        return AABB(
            tuple(min(v[i] for v in verts) - pad for i in range(3)),  # type: ignore[arg-type]
            tuple(max(v[i] for v in verts) + pad for i in range(3)),  # type: ignore[arg-type]
        )

    def __repr__(self) -> str:
        return f"Triangle(a={self.a}, b={self.b}, c={self.c})"


def _outward_triangle(a: Vec3, b: Vec3, c: Vec3, center: Vec3, material: Material) -> Triangle:
    """Create a triangle wound so that its normal points away from center."""
    tri = Triangle(a, b, c, material)
    if dot(tri.normal, sub(tri.centroid(), center)) < 0.0:
        tri = Triangle(a, c, b, material)
    return tri


def make_prism(a: Vec3, b: Vec3, c: Vec3, extrusion: Vec3, material: Material) -> list[Triangle]:
    """Build a closed triangular prism.

    The cross-section is the triangle (a, b, c); the prism extends from it
    along the extrusion vector.

    Args:
        a, b, c: Vertices of the cross-section.
        extrusion: Vector from the first cap to the second.
        material: Material for every face (usually a dielectric).

    Returns:
        Eight outward-facing triangles: two caps and two per side face.

    Raises:
        ValueError: If the cross-section is degenerate or the extrusion is
            parallel to it.
    """
    a2, b2, c2 = add(a, extrusion), add(b, extrusion), add(c, extrusion)
    center = scale(add(add(add(a, b), c), scale(extrusion, 1.5)), 1.0 / 3.0)

    cap_normal = cross(sub(b, a), sub(c, a))
    if abs(dot(normalize(cap_normal), normalize(extrusion))) < 1e-6:
        raise ValueError("Prism extrusion must not lie in the cross-section plane")

    faces = [
        _outward_triangle(a, b, c, center, material),
        _outward_triangle(a2, b2, c2, center, material),
    ]
    for p, q in ((a, b), (b, c), (c, a)):
        p2, q2 = add(p, extrusion), add(q, extrusion)
        faces.append(_outward_triangle(p, q, q2, center, material))
        faces.append(_outward_triangle(p, q2, p2, center, material))
    return faces
