"""Unit tests for the pinhole and thin lens cameras.

Tests cover:
- Camera setup and orthonormal basis computation
- Ray generation for center and corner pixels
- Jittered sampling for anti-aliasing
- Depth of field and chromatic aberration
- Parameter validation
"""

import math

import pytest

from luculenta.camera.pinhole import PinholeCamera
from luculenta.camera.thin_lens import ThinLensCamera
from luculenta.core.ray import dot, length, ray_at
from luculenta.core.sampler import Sampler


class TestCameraSetup:
    """Test camera frame construction."""

    def test_orthonormal_basis(self):
        """Test that u, v and w are orthonormal for an arbitrary view."""
        camera = PinholeCamera(lookfrom=(1.0, 2.0, 3.0), lookat=(-1.0, 0.5, 0.0), vfov=70.0)
        u, v, w = camera.u, camera.v, camera.w

        assert abs(dot(u, v)) < 1e-9
        assert abs(dot(u, w)) < 1e-9
        assert abs(dot(v, w)) < 1e-9
        for axis in (u, v, w):
            assert length(axis) == pytest.approx(1.0)

    def test_basis_looking_down_negative_z(self, front_camera):
        """Test the frame of a camera looking down -z."""
        info = front_camera.get_camera_info()

        assert info["origin"] == pytest.approx((0.0, 0.0, 3.0))
        assert info["u"] == pytest.approx((1.0, 0.0, 0.0))
        assert info["v"] == pytest.approx((0.0, 1.0, 0.0))
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))

    def test_viewport_from_fov(self):
        """Test that the viewport follows the field of view and aspect."""
        camera = PinholeCamera(
            lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0), vfov=90.0, aspect_ratio=2.0
        )

        assert camera.viewport_height == pytest.approx(2.0)
        assert camera.viewport_width == pytest.approx(4.0)


class TestRayGeneration:
    """Test primary ray generation."""

    def test_center_ray_points_at_target(self, front_camera):
        """Test that the centre ray points at lookat."""
        ray = front_camera.get_ray(0.5, 0.5, 550.0)

        assert ray.origin == pytest.approx((0.0, 0.0, 3.0))
        assert ray.direction == pytest.approx((0.0, 0.0, -1.0))
        assert ray.wavelength == 550.0

    def test_top_left_pixel(self, front_camera):
        """Pixel (0, 0) is the top-left corner of the image."""
        ray = front_camera.generate_ray(0, 0, 4, 4, (0.0, 0.0), 550.0)

        assert ray.direction[0] < 0.0
        assert ray.direction[1] > 0.0

    def test_bottom_right_pixel(self, front_camera):
        """Test that the last pixel is the bottom-right corner."""
        ray = front_camera.generate_ray(3, 3, 4, 4, (0.99, 0.99), 550.0)

        assert ray.direction[0] > 0.0
        assert ray.direction[1] < 0.0

    def test_corner_angle_matches_fov(self):
        """Test that the top edge sits half the field of view above the axis."""
        camera = PinholeCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0), vfov=90.0)
        ray = camera.get_ray(0.5, 1.0, 550.0)

        # Top edge of a 90 degree view is 45 degrees above the axis
        assert ray.direction == pytest.approx((0.0, math.sqrt(0.5), -math.sqrt(0.5)))

    def test_jitter_stays_inside_pixel(self, front_camera):
        """Jittered rays through one pixel stay between its neighbours."""
        left = front_camera.generate_ray(1, 1, 4, 4, (0.0, 0.5), 550.0)
        right = front_camera.generate_ray(2, 1, 4, 4, (0.0, 0.5), 550.0)
        sampler = Sampler(5)

        def slope(r):
            return r.direction[0] / -r.direction[2]

        for _ in range(50):
            ray = front_camera.generate_ray(1, 1, 4, 4, sampler.next_2d(), 550.0)
            assert slope(left) <= slope(ray) < slope(right)

    def test_rays_are_normalized(self, front_camera):
        """Test that ray directions have unit length."""
        ray = front_camera.generate_ray(0, 3, 4, 4, (0.2, 0.7), 480.0)
        assert length(ray.direction) == pytest.approx(1.0)


class TestCameraValidation:
    """Test camera parameter validation."""

    @pytest.mark.parametrize("vfov", [0.0, 180.0, -10.0])
    def test_bad_fov(self, vfov):
        """Test that out-of-range fields of view are rejected."""
        with pytest.raises(ValueError, match="field of view"):
            PinholeCamera(lookfrom=(0.0, 0.0, 1.0), lookat=(0.0, 0.0, 0.0), vfov=vfov)

    def test_bad_aspect_ratio(self):
        """Test that a zero aspect ratio is rejected."""
        with pytest.raises(ValueError, match="Aspect ratio"):
            PinholeCamera(lookfrom=(0.0, 0.0, 1.0), lookat=(0.0, 0.0, 0.0), aspect_ratio=0.0)

    def test_coincident_points(self):
        """Test that lookfrom equal to lookat is rejected."""
        with pytest.raises(ValueError, match="distinct"):
            PinholeCamera(lookfrom=(1.0, 1.0, 1.0), lookat=(1.0, 1.0, 1.0))

    def test_up_parallel_to_view(self):
        """Test that an up vector along the view direction is rejected."""
        with pytest.raises(ValueError, match="parallel"):
            PinholeCamera(lookfrom=(0.0, 5.0, 0.0), lookat=(0.0, 0.0, 0.0))


class TestThinLensCamera:
    """Test depth of field and chromatic aberration."""

    def make(self, **kwargs):
        params = dict(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -4.0), vfov=60.0)
        params.update(kwargs)
        return ThinLensCamera(**params)

    def test_zero_aperture_matches_pinhole(self, sampler):
        """Test that a closed aperture behaves like a pinhole."""
        lens = self.make(focus_distance=7.0)
        pinhole = PinholeCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -4.0), vfov=60.0)

        a = lens.get_ray(0.2, 0.8, 550.0, sampler)
        b = pinhole.get_ray(0.2, 0.8, 550.0)

        assert a.origin == pytest.approx(b.origin)
        assert a.direction == pytest.approx(b.direction)

    def test_rays_converge_on_focus_plane(self, sampler):
        """Rays through one image point meet at the focus distance."""
        camera = self.make(aperture=0.5)
        target = None
        origins = set()

        for _ in range(20):
            ray = camera.get_ray(0.3, 0.6, 550.0, sampler)
            t = (4.0 + ray.origin[2]) / -ray.direction[2]
            point = ray_at(ray, t)
            origins.add(ray.origin)
            if target is None:
                target = point
            assert point == pytest.approx(target)

        assert len(origins) > 1

    def test_lens_offsets_bounded_by_aperture(self, sampler):
        """Test that lens samples stay within the aperture radius."""
        camera = self.make(aperture=0.4)
        for _ in range(200):
            du, dv = camera.lens_offset(sampler)
            assert math.hypot(du, dv) <= 0.2 + 1e-12

    def test_default_focus_is_lookat_distance(self):
        """Test that focus defaults to the lookat distance."""
        assert self.make().focus_plane_distance() == pytest.approx(4.0)

    def test_chromatic_aberration_magnifies_red(self):
        """Test that positive aberration spreads red outward and blue inward."""
        camera = self.make(chromatic_aberration=0.1)
        red = camera.get_ray(1.0, 0.5, 700.0)
        green = camera.get_ray(1.0, 0.5, 580.0)
        blue = camera.get_ray(1.0, 0.5, 400.0)

        assert camera.image_scale(580.0) == pytest.approx(1.0)
        assert red.direction[0] > green.direction[0] > blue.direction[0]

    def test_no_aberration_at_image_center(self):
        """Test that the image centre has no colour fringe."""
        camera = self.make(chromatic_aberration=0.1)

        red = camera.get_ray(0.5, 0.5, 700.0)
        blue = camera.get_ray(0.5, 0.5, 400.0)

        assert red.direction == pytest.approx(blue.direction)

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"aperture": -0.1}, "Aperture"),
            ({"focus_distance": 0.0}, "Focus distance"),
            ({"chromatic_aberration": 1.0}, "invert"),
        ],
    )
    def test_validation(self, kwargs, message):
        """Test that each invalid lens parameter raises a descriptive error."""
        with pytest.raises(ValueError, match=message):
            self.make(**kwargs)


class TestCameraMotion:
    """Test camera motion across the shutter interval."""

    def moving(self):
        return PinholeCamera(
            lookfrom=(0.0, 0.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=60.0, motion=(1.0, 0.0, 0.0)
        )

    def test_static_camera_ignores_time(self, front_camera):
        """Test that a camera without motion ignores the shutter time."""
        assert not front_camera.is_moving
        assert front_camera.get_ray(0.5, 0.5, 550.0, time=1.0).origin == pytest.approx(
            (0.0, 0.0, 3.0)
        )

    def test_position_follows_shutter_time(self):
        """Test that the position moves linearly over the shutter."""
        camera = self.moving()

        assert camera.position_at(0.0) == pytest.approx((0.0, 0.0, 3.0))
        assert camera.position_at(0.5) == pytest.approx((0.5, 0.0, 3.0))
        assert camera.get_ray(0.5, 0.5, 550.0, time=1.0).origin == pytest.approx((1.0, 0.0, 3.0))

    def test_motion_translates_without_turning(self):
        """Test that motion keeps ray directions unchanged."""
        camera = self.moving()
        start = camera.get_ray(0.2, 0.7, 550.0, time=0.0)
        end = camera.get_ray(0.2, 0.7, 550.0, time=1.0)

        assert start.direction == pytest.approx(end.direction)

    def test_generate_ray_draws_shutter_time(self, fixed_sampler):
        """Test that generate_ray takes the shutter time from the sampler."""
        camera = self.moving()
        ray = camera.generate_ray(1, 1, 4, 4, (0.5, 0.5), 550.0, fixed_sampler(0.25))

        assert ray.origin == pytest.approx((0.25, 0.0, 3.0))

    def test_shutter_times_spread_over_motion(self):
        """Test that random shutter times cover the whole motion."""
        camera = self.moving()
        sampler = Sampler(8)
        xs = [
            camera.generate_ray(2, 2, 4, 4, (0.5, 0.5), 550.0, sampler).origin[0]
            for _ in range(200)
        ]

        assert min(xs) >= 0.0 and max(xs) <= 1.0
        assert max(xs) - min(xs) > 0.8

    def test_thin_lens_inherits_motion(self, sampler):
        """Test that a thin lens camera moves too."""
        camera = ThinLensCamera(
            lookfrom=(0.0, 0.0, 3.0),
            lookat=(0.0, 0.0, 0.0),
            motion=(0.0, 2.0, 0.0),
            aperture=0.1,
        )
        ray = camera.get_ray(0.5, 0.5, 550.0, sampler, time=1.0)

        assert ray.origin[1] == pytest.approx(2.0, abs=0.06)

    def test_time_outside_shutter_rejected(self):
        """Test that shutter times outside [0, 1] are rejected."""
        with pytest.raises(ValueError, match="Shutter time"):
            self.moving().position_at(1.5)

    def test_non_finite_motion_rejected(self):
        """Test that infinite motion is rejected."""
        with pytest.raises(ValueError, match="motion"):
            PinholeCamera(
                lookfrom=(0.0, 0.0, 3.0), lookat=(0.0, 0.0, 0.0), motion=(math.inf, 0.0, 0.0)
            )
