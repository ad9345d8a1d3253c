"""Ray data structure and vector utilities for spectral path tracing.

This module provides the fundamental Ray dataclass and the vector utility
functions used by every other part of the renderer. Vectors are plain
``(x, y, z)`` float tuples: the renderer works one path at a time inside
worker threads, and tuples are both immutable (safe to share between
threads) and considerably cheaper than small NumPy arrays for scalar
per-bounce math.

Each ray carries the single wavelength (in nanometres) that its path is
being traced at.

Example:
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = make_ray(origin, direction, wavelength=550.0)
    >>> ray_at(ray, 5.0)  # Point 5 units along the ray
    (0.0, 0.0, -5.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler

# Type alias for 3D vectors
Vec3 = tuple[float, float, float]

ZERO = (0.0, 0.0, 0.0)


def vec3(x: float, y: float, z: float) -> Vec3:
    """Build a vector from three components."""
    return (float(x), float(y), float(z))


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray with an origin point, direction vector and wavelength.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Rays built with make_ray() are
            always unit length.
        wavelength: The wavelength carried by the ray, in nanometres.
    """

    origin: Vec3
    direction: Vec3
    wavelength: float


def ray_at(ray: Ray, t: float) -> Vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    o = ray.origin
    d = ray.direction
    return (o[0] + t * d[0], o[1] + t * d[1], o[2] + t * d[2])


def make_ray(origin: Vec3, direction: Vec3, wavelength: float) -> Ray:
    """Create a ray from origin, direction and wavelength.

    The direction is normalized. Degenerate rays are rejected here so that
    the geometry layer never has to deal with them.

    Raises:
        ValueError: If the direction has (near) zero length.
    """
    if near_zero(direction):
        raise ValueError(f"Ray direction {direction} has zero length")
    return Ray(origin=origin, direction=normalize(direction), wavelength=wavelength)


# =============================================================================
# Vector Utility Functions
# =============================================================================


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(v: Vec3, s: float) -> Vec3:
    return (v[0] * s, v[1] * s, v[2] * s)


def neg(v: Vec3) -> Vec3:
    return (-v[0], -v[1], -v[2])


def madd(a: Vec3, b: Vec3, s: float) -> Vec3:
    """Compute a + s * b."""
    return (a[0] + s * b[0], a[1] + s * b[1], a[2] + s * b[2])


def dot(a: Vec3, b: Vec3) -> float:
    """Compute the dot product of two vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Compute the cross product of two vectors."""
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length_squared(v: Vec3) -> float:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return v[0] * v[0] + v[1] * v[1] + v[2] * v[2]


def length(v: Vec3) -> float:
    """Compute the Euclidean length of a vector."""
    return math.sqrt(length_squared(v))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    Returns:
        A unit vector in the same direction as v. If v is zero-length,
        returns a zero vector.
    """
    n = length(v)
    if n == 0.0:
        return ZERO
    inv = 1.0 / n
    return (v[0] * inv, v[1] * inv, v[2] * inv)


def near_zero(v: Vec3) -> bool:
    """Check if a vector is near zero in all components."""
    s = 1e-8
    return abs(v[0]) < s and abs(v[1]) < s and abs(v[2]) < s


def reflect(incident: Vec3, normal: Vec3) -> Vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return madd(incident, normal, -2.0 * dot(incident, normal))


def refract(incident: Vec3, normal: Vec3, eta: float) -> Vec3 | None:
    """Refract an incident vector through a surface.

    Computes the refracted direction using Snell's law.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal, facing the incident side (normalized).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector, or None if total internal
        reflection occurs.
    """
    cos_i = min(-dot(incident, normal), 1.0)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    if sin2_t > 1.0:
        return None
    cos_t = math.sqrt(1.0 - sin2_t)
    return normalize(madd(scale(incident, eta), normal, eta * cos_i - cos_t))


def schlick_fresnel(cosine: float, ref_idx: float) -> float:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


def build_onb_from_normal(normal: Vec3) -> tuple[Vec3, Vec3, Vec3]:
    """Build an orthonormal basis from a normal vector.

    Creates a local coordinate frame where the normal is the z-axis.

    Returns:
        A tuple (tangent, bitangent, normal) forming an orthonormal basis.
    """
    # Choose a vector not parallel to normal
    a = (0.0, 1.0, 0.0) if abs(normal[0]) > 0.9 else (1.0, 0.0, 0.0)
    tangent = normalize(cross(a, normal))
    bitangent = cross(normal, tangent)
    return tangent, bitangent, normal


def local_to_world(local_dir: Vec3, tangent: Vec3, bitangent: Vec3, normal: Vec3) -> Vec3:
    """Transform a direction from local (z-up) to world coordinates."""
    x, y, z = local_dir
    return (
        x * tangent[0] + y * bitangent[0] + z * normal[0],
        x * tangent[1] + y * bitangent[1] + z * normal[1],
        x * tangent[2] + y * bitangent[2] + z * normal[2],
    )


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


def random_cosine_direction(sampler: Sampler) -> Vec3:
    """Generate a random direction with cosine-weighted distribution.

    The distribution has PDF = cos(theta) / pi.

    Returns:
        A random direction in the local coordinate frame (z-up).
    """
    r1, r2 = sampler.next_2d()
    phi = 2.0 * math.pi * r1
    sqrt_r2 = math.sqrt(r2)
    return (math.cos(phi) * sqrt_r2, math.sin(phi) * sqrt_r2, math.sqrt(1.0 - r2))


def sample_cosine_hemisphere(normal: Vec3, sampler: Sampler) -> tuple[Vec3, float]:
    """Cosine-weighted hemisphere sampling for diffuse surfaces.

    Args:
        normal: The surface normal defining the hemisphere orientation.
        sampler: The random stream of the calling worker.

    Returns:
        A tuple of (direction, pdf) where pdf = cos(theta) / pi.
    """
    local_dir = random_cosine_direction(sampler)
    tangent, bitangent, n = build_onb_from_normal(normal)
    world_dir = local_to_world(local_dir, tangent, bitangent, n)
    return world_dir, max(dot(world_dir, normal), 0.0) / math.pi


def random_in_unit_disk(sampler: Sampler) -> tuple[float, float]:
    """Generate a uniformly distributed point inside the unit disk.

    Uses the polar mapping rather than rejection sampling so that exactly
    two variates are consumed per call.
    """
    r1, r2 = sampler.next_2d()
    r = math.sqrt(r1)
    theta = 2.0 * math.pi * r2
    return r * math.cos(theta), r * math.sin(theta)
