"""Unit tests for the sphere primitive.

Tests cover:
- Ray-sphere intersection (hit, miss, tangent)
- Hit record normals and front_face from outside and inside
- t range handling
- Constructor validation and bounds
"""

import math

import pytest

from luculenta.core.ray import dot, length, make_ray
from luculenta.geometry.sphere import Sphere
from luculenta.materials.lambertian import LambertianMaterial


@pytest.fixture
def unit_sphere():
    return Sphere((0.0, 0.0, -5.0), 1.0, LambertianMaterial(0.5))


class TestSphereIntersection:
    """Tests for Sphere.intersect."""

    def test_hit_from_outside(self, unit_sphere):
        """A ray toward the center hits the near surface."""
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 550.0)
        hit = unit_sphere.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(4.0)
        assert hit.point == pytest.approx((0.0, 0.0, -4.0))
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0))
        assert hit.front_face
        assert hit.material is unit_sphere.material
        assert hit.primitive is unit_sphere

    def test_miss(self, unit_sphere):
        """Test that a ray pointing away from the sphere misses."""
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 550.0)
        assert unit_sphere.intersect(ray, 1e-4, 1e10) is None

    def test_hit_from_inside_flips_normal(self, unit_sphere):
        """From inside, the normal faces the ray and front_face is False."""
        ray = make_ray((0.0, 0.0, -5.0), (1.0, 0.0, 0.0), 550.0)
        hit = unit_sphere.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(1.0)
        assert not hit.front_face
        assert hit.normal == pytest.approx((-1.0, 0.0, 0.0))
        assert dot(hit.normal, ray.direction) < 0.0

    def test_sphere_behind_ray(self, unit_sphere):
        """Test that a sphere behind the origin is not hit."""
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 550.0)
        assert unit_sphere.intersect(ray, 1e-4, 1e10) is None

    def test_t_max_excludes_far_hits(self, unit_sphere):
        """Test that hits beyond t_max are ignored."""
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 550.0)
        assert unit_sphere.intersect(ray, 1e-4, 3.9) is None

    def test_t_min_skips_near_root(self, unit_sphere):
        """With the near root excluded the far side is returned."""
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 550.0)
        hit = unit_sphere.intersect(ray, 4.5, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(6.0)

    def test_normal_is_unit_length_off_axis(self, unit_sphere):
        """Test that off-axis hits have unit normals and the right t."""
        ray = make_ray((0.3, 0.4, 0.0), (0.0, 0.0, -1.0), 550.0)
        hit = unit_sphere.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert length(hit.normal) == pytest.approx(1.0)
        assert hit.t == pytest.approx(5.0 - math.sqrt(1.0 - 0.25))

    def test_large_distance_precision(self):
        """The robust quadratic keeps small spheres far away accurate."""
        sphere = Sphere((0.0, 0.0, -1e5), 0.5, LambertianMaterial(0.5))
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 550.0)
        hit = sphere.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(1e5 - 0.5, rel=1e-12)


class TestSphereConstruction:
    """Tests for sphere construction."""

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_rejected(self, radius):
        """Test that zero and negative radii are rejected."""
        with pytest.raises(ValueError, match="radius"):
            Sphere((0.0, 0.0, 0.0), radius, LambertianMaterial(0.5))

    def test_bounds(self):
        """Test that the bounds enclose the sphere."""
        box = Sphere((1.0, 2.0, 3.0), 2.0, LambertianMaterial(0.5)).bounds()

        assert box.min_point == (-1.0, 0.0, 1.0)
        assert box.max_point == (3.0, 4.0, 5.0)
        assert box.is_bounded()
