"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete rendering pipeline from scene creation through
final image output. It verifies that all components work together correctly
and that the output meets basic quality criteria.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
from PIL import Image

from luculenta.camera.pinhole import PinholeCamera
from luculenta.core.integrator import RAY_EPSILON, _offset_ray_origin
from luculenta.core.progressive import ProgressiveRenderer
from luculenta.core.ray import Ray, dot, make_ray, normalize
from luculenta.core.scheduler import render
from luculenta.geometry.plane import Plane
from luculenta.geometry.sphere import Sphere
from luculenta.geometry.triangle import make_prism
from luculenta.materials.dielectric import DielectricMaterial
from luculenta.materials.emissive import EmissiveMaterial
from luculenta.materials.lambertian import LambertianMaterial
from luculenta.preview.export import save_png
from luculenta.scene.cornell_box import create_cornell_box_scene
from luculenta.scene.presets import create_prism_scene, create_sphere_over_plane_scene
from luculenta.scene.scene import Scene


def trace_through(scene, ray, sampler, max_events=10):
    """Follow a ray through specular surfaces until it escapes."""
    for _ in range(max_events):
        hit = scene.intersect(ray)
        if hit is None:
            return ray.direction
        sample = hit.material.sample_direction(
            ray.direction, hit.normal, hit.front_face, ray.wavelength, sampler
        )
        assert sample is not None
        origin = _offset_ray_origin(hit.point, hit.normal, sample.direction, RAY_EPSILON)
        ray = Ray(origin, sample.direction, ray.wavelength)
    raise AssertionError("ray did not leave the scene")


def white_sphere_under_light():
    """White diffuse sphere at the origin below an emissive plane at y = 3.

    The light has unit equal-energy radiance and the background is black.
    At the point facing the camera, half of the cosine-weighted hemisphere
    sees the light, so the outgoing radiance is 1 * 1 / 2 at every
    wavelength and the centre pixel converges to Y = 0.5.
    """
    camera = PinholeCamera(lookfrom=(0.0, 0.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=60.0)
    return Scene(
        [
            Sphere((0.0, 0.0, 0.0), 1.0, LambertianMaterial(1.0)),
            Plane((0.0, 3.0, 0.0), (0.0, -1.0, 0.0), EmissiveMaterial(1.0)),
        ],
        camera=camera,
    )


class TestDiffuseSphereUnderLight:
    """Test a fixed-seed render against the closed-form centre pixel."""

    def test_center_pixel_matches_closed_form(self):
        """Test that the centre pixel's mean Y converges to 0.5.

        A single sample is Y = f(lambda) with probability 1/2 and 0 otherwise,
        where f has mean 1 and E[f^2] ~ 2.6, so the per-sample standard
        deviation is about 1.04. At 4096 spp the standard error is 0.016;
        the tolerance is a little over four of them.
        """
        handle = render(
            white_sphere_under_light(), None, 3, 3, samples_per_pixel=4096, threads=1, seed=11
        )
        assert handle.wait(timeout=600.0)

        snap = handle.snapshot()
        assert snap.counts[1, 1] == 4096
        assert snap.mean_xyz()[1, 1, 1] == pytest.approx(0.5, abs=0.07)
        assert handle.stats().discarded == 0

    def test_fixed_seed_repeats_bit_for_bit(self):
        """Test that two single-threaded renders with one seed are identical."""
        images = []
        for _ in range(2):
            handle = render(
                white_sphere_under_light(), None, 9, 9, samples_per_pixel=64, threads=1, seed=7
            )
            assert handle.wait(timeout=120.0)
            images.append(handle.snapshot().mean_xyz())

        assert np.array_equal(images[0], images[1])
        assert images[0][4, 4, 1] > 0.0


class TestDispersion:
    """Test that white light through a flint prism separates by wavelength."""

    @pytest.fixture
    def prism(self):
        faces = make_prism(
            (-1.0, 0.0, -1.0),
            (1.0, 0.0, -1.0),
            (0.0, 1.732, -1.0),
            (0.0, 0.0, 2.0),
            DielectricMaterial.flint_glass(),
        )
        return Scene(faces)

    def deviation(self, prism, wavelength, sampler):
        # 60 degree incidence at the middle of the left face
        direction = normalize((0.866, 0.5, 0.0))
        entry = (-0.5, 0.866, 0.0)
        start = tuple(p - 3.0 * d for p, d in zip(entry, direction))
        out = trace_through(prism, make_ray(start, direction, wavelength), sampler)
        return math.degrees(math.acos(max(-1.0, min(1.0, dot(out, direction)))))

    def test_blue_deviates_more_than_red(self, prism, fixed_sampler):
        """Test that blue light is bent further than red light."""
        blue = self.deviation(prism, 450.0, fixed_sampler(0.99))
        red = self.deviation(prism, 650.0, fixed_sampler(0.99))

        assert blue == pytest.approx(68.1, abs=1.0)
        assert red == pytest.approx(63.4, abs=1.0)
        assert blue - red > 1.0

    def test_non_dispersive_glass_does_not_separate(self, fixed_sampler):
        """Test that a constant IOR deviates every wavelength equally."""
        faces = make_prism(
            (-1.0, 0.0, -1.0),
            (1.0, 0.0, -1.0),
            (0.0, 1.732, -1.0),
            (0.0, 0.0, 2.0),
            DielectricMaterial.from_ior(1.5),
        )
        prism = Scene(faces)

        blue = self.deviation(prism, 450.0, fixed_sampler(0.99))
        red = self.deviation(prism, 650.0, fixed_sampler(0.99))

        assert blue == pytest.approx(red, abs=1e-9)


class TestCornellBoxIntegration:
    """Test the Cornell box from scene to PNG."""

    def test_end_to_end_png(self, tmp_path):
        """Test that a small progressive render is written as a PNG."""
        scene = create_cornell_box_scene()
        renderer = ProgressiveRenderer(scene, 16, 16, threads=2, tile_size=8, seed=1)
        renderer.render(4, batch_size=2)
        path = tmp_path / "cornell.png"
        save_png(renderer, path, tone_map="reinhard")

        assert renderer.sample_count == 4
        with Image.open(path) as img:
            assert img.size == (16, 16)
        assert np.all(np.isfinite(renderer.snapshot().xyz_sum))

    @pytest.mark.slow
    def test_coloured_walls(self):
        """Test that the left wall bleeds red and the right wall green."""
        scene = create_cornell_box_scene()
        handle = render(scene, None, 32, 32, samples_per_pixel=32, threads=4, seed=5)
        assert handle.wait(timeout=600.0)

        rgb = handle.snapshot().linear_srgb()
        left = rgb[12:20, 1:4].sum(axis=(0, 1))
        right = rgb[12:20, 28:31].sum(axis=(0, 1))

        assert left[0] > left[1]
        assert right[1] > right[0]


class TestPresetIntegration:
    """Test that the preset scenes render cleanly."""

    def test_sphere_over_plane_continuous(self):
        """Test that a continuous render of the sphere preset accumulates samples."""
        scene = create_sphere_over_plane_scene(aspect_ratio=2.0)

        with render(scene, None, 16, 8, samples_per_pixel=None, threads=2, tile_size=8) as handle:
            for _ in range(1000):
                if handle.snapshot().total_samples:
                    break
                handle.wait(timeout=0.01)

        snap = handle.snapshot()
        assert snap.total_samples > 0
        assert np.all(np.isfinite(snap.xyz_sum))
        assert handle.stats().tiles_failed == 0

    def test_prism_scene_renders(self):
        """Test that the prism preset reaches its sample target with some light."""
        scene = create_prism_scene(aspect_ratio=1.0)
        handle = render(scene, None, 8, 8, samples_per_pixel=2, threads=2, tile_size=4)

        assert handle.wait(timeout=120.0)
        snap = handle.snapshot()
        assert np.all(snap.counts == 2)
        assert snap.mean_xyz()[..., 1].max() > 0.0
