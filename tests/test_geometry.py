"""Unit tests for planes, triangles and the prism builder."""

import pytest

from luculenta.core.ray import add, dot, make_ray, scale, sub
from luculenta.geometry.plane import Plane
from luculenta.geometry.triangle import Triangle, make_prism
from luculenta.materials.dielectric import DielectricMaterial
from luculenta.materials.lambertian import LambertianMaterial


class TestPlane:
    """Test infinite plane intersection."""

    def test_hit_from_above(self):
        """Test that a ray from above hits with the normal facing it."""
        plane = Plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), LambertianMaterial(0.5))
        ray = make_ray((3.0, 2.0, -7.0), (0.0, -1.0, 0.0), 550.0)
        hit = plane.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(3.0)
        assert hit.normal == pytest.approx((0.0, 1.0, 0.0))
        assert hit.front_face

    def test_parallel_ray_misses(self):
        """Test that a ray parallel to the plane misses."""
        plane = Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), LambertianMaterial(0.5))
        ray = make_ray((0.0, 1.0, 0.0), (1.0, 0.0, 0.0), 550.0)
        assert plane.intersect(ray, 1e-4, 1e10) is None

    def test_plane_is_unbounded(self):
        """Test the normalised normal, infinite bounds and signed distance."""
        plane = Plane((0.0, 0.0, 0.0), (0.0, 0.0, 2.0), LambertianMaterial(0.5))

        assert plane.normal == pytest.approx((0.0, 0.0, 1.0))
        assert not plane.bounds().is_bounded()
        assert plane.signed_distance((0.0, 0.0, 3.0)) == pytest.approx(3.0)

    def test_zero_normal_rejected(self):
        """Test that a zero normal is rejected."""
        with pytest.raises(ValueError, match="normal"):
            Plane((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), LambertianMaterial(0.5))


class TestTriangle:
    """Moller-Trumbore intersection."""

    @pytest.fixture
    def tri(self):
        return Triangle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), LambertianMaterial(0.5))

    def test_normal_follows_winding(self, tri):
        """Test that the normal follows counter-clockwise winding."""
        assert tri.normal == pytest.approx((0.0, 0.0, 1.0))
        assert tri.area == pytest.approx(0.5)

    def test_hit_inside(self, tri):
        """Test that a ray through the interior hits."""
        ray = make_ray((0.25, 0.25, 2.0), (0.0, 0.0, -1.0), 550.0)
        hit = tri.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert hit.t == pytest.approx(2.0)
        assert hit.front_face

    @pytest.mark.parametrize("x, y", [(0.6, 0.6), (-0.1, 0.5), (0.5, -0.1)])
    def test_miss_outside(self, tri, x, y):
        """Test that rays outside the edges miss."""
        ray = make_ray((x, y, 2.0), (0.0, 0.0, -1.0), 550.0)
        assert tri.intersect(ray, 1e-4, 1e10) is None

    def test_back_face_hit(self, tri):
        """Test that a back-face hit flips the normal toward the ray."""
        ray = make_ray((0.25, 0.25, -2.0), (0.0, 0.0, 1.0), 550.0)
        hit = tri.intersect(ray, 1e-4, 1e10)

        assert hit is not None
        assert not hit.front_face
        assert hit.normal == pytest.approx((0.0, 0.0, -1.0))

    def test_degenerate_rejected(self):
        """Test that collinear vertices are rejected."""
        with pytest.raises(ValueError, match="Degenerate"):
            Triangle((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (2.0, 2.0, 2.0), LambertianMaterial(0.5))


class TestPrism:
    """A closed prism must be wound outward for refraction to work."""

    A = (-1.0, 0.0, -1.0)
    B = (1.0, 0.0, -1.0)
    C = (0.0, 1.732, -1.0)
    E = (0.0, 0.0, 2.0)

    def test_eight_faces_all_outward(self):
        """Test that every face normal points out of the prism."""
        faces = make_prism(self.A, self.B, self.C, self.E, DielectricMaterial.flint_glass())
        center = add(scale(add(add(self.A, self.B), self.C), 1.0 / 3.0), scale(self.E, 0.5))

        assert len(faces) == 8
        for face in faces:
            assert dot(face.normal, sub(face.centroid(), center)) > 0.0

    def test_ray_through_prism_enters_then_leaves(self):
        """Test that a ray enters through a front face and leaves through a back face."""
        faces = make_prism(self.A, self.B, self.C, self.E, DielectricMaterial.crown_glass())
        ray = make_ray((-3.0, 0.5, 0.0), (1.0, 0.0, 0.0), 550.0)

        hits = [f.intersect(ray, 1e-4, 1e10) for f in faces]
        hits = sorted((h for h in hits if h is not None), key=lambda h: h.t)

        assert len(hits) == 2
        assert hits[0].front_face
        assert not hits[1].front_face

    def test_extrusion_in_cross_section_plane_rejected(self):
        """Test that a flat extrusion is rejected."""
        with pytest.raises(ValueError, match="extrusion"):
            make_prism(self.A, self.B, self.C, (1.0, 0.0, 0.0), LambertianMaterial(0.5))
