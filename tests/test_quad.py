"""Unit tests for the quad (parallelogram) primitive."""

import pytest

from luculenta.core.ray import make_ray
from luculenta.geometry.quad import Quad
from luculenta.materials.lambertian import LambertianMaterial


@pytest.fixture
def floor_quad():
    """Unit square in the xz-plane, normal +y."""
    return Quad((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0, 0.0), LambertianMaterial(0.5))


class TestQuadIntersection:
    """Test ray-quad intersection."""

    def test_hit_inside(self, floor_quad):
        """Test that a ray through the interior hits at the right point."""
        ray = make_ray((0.5, 2.0, 0.5), (0.0, -1.0, 0.0), 550.0)
        hit = floor_quad.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(2.0)
        assert hit.point == pytest.approx((0.5, 0.0, 0.5))
        assert hit.normal == pytest.approx((0.0, 1.0, 0.0))
        assert hit.front_face

    @pytest.mark.parametrize("x, z", [(-0.1, 0.5), (1.1, 0.5), (0.5, -0.1), (0.5, 1.1)])
    def test_miss_outside_edges(self, floor_quad, x, z):
        """Test that rays just past each edge miss."""
        ray = make_ray((x, 2.0, z), (0.0, -1.0, 0.0), 550.0)
        assert floor_quad.intersect(ray, 1e-4, 1e10) is None

    def test_hit_from_below_is_back_face(self, floor_quad):
        """Test that a hit from behind is a back face."""
        ray = make_ray((0.5, -1.0, 0.5), (0.0, 1.0, 0.0), 550.0)
        hit = floor_quad.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert not hit.front_face
        assert hit.normal == pytest.approx((0.0, -1.0, 0.0))

    def test_parallel_ray_misses(self, floor_quad):
        """Test that a ray in the quad's plane misses."""
        ray = make_ray((0.5, 0.0, -1.0), (0.0, 0.0, 1.0), 550.0)
        assert floor_quad.intersect(ray, 1e-4, 1e10) is None


class TestQuadConstruction:
    """Test quad construction."""

    def test_parallel_edges_rejected(self):
        """Test that parallel edge vectors are rejected."""
        with pytest.raises(ValueError, match="parallel"):
            Quad((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0), LambertianMaterial(0.5))

    def test_area(self):
        """Test that the area is the edge cross product length."""
        quad = Quad((0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (0.0, 3.0, 0.0), LambertianMaterial(0.5))
        assert quad.area == pytest.approx(6.0)

    def test_bounds_contain_corners(self, floor_quad):
        """Test that the bounds span the corners."""
        box = floor_quad.bounds()
        assert box.min_point == pytest.approx((0.0, 0.0, 0.0), abs=1e-5)
        assert box.max_point == pytest.approx((1.0, 0.0, 1.0), abs=1e-5)
