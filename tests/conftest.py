"""Pytest configuration for luculenta tests.

Shared fixtures: seeded samplers, a deterministic stand-in sampler, small
cameras and scenes cheap enough to render in a unit test.
"""

import pytest

from luculenta.camera.pinhole import PinholeCamera
from luculenta.core.sampler import Sampler
from luculenta.geometry.sphere import Sphere
from luculenta.materials.lambertian import LambertianMaterial
from luculenta.scene.scene import Scene


class FixedSampler:
    """Sampler stand-in that always returns the same variate.

    Useful to force a branch of a stochastic material, e.g. 0.99 makes a
    dielectric refract whenever the Fresnel reflectance is below 0.99.
    """

    def __init__(self, value: float = 0.5) -> None:
        self.value = value

    def next_float(self) -> float:
        return self.value

    def next_2d(self) -> tuple[float, float]:
        return self.value, self.value

    def sample_wavelength(self) -> tuple[float, float]:
        return 380.0 + self.value * 400.0, 1.0 / 400.0


@pytest.fixture
def sampler():
    """A seeded sampler so stochastic tests are reproducible."""
    return Sampler(1234)


@pytest.fixture
def fixed_sampler():
    return FixedSampler


@pytest.fixture
def front_camera():
    """Square pinhole camera at z = 3 looking at the origin."""
    return PinholeCamera(lookfrom=(0.0, 0.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=60.0)


@pytest.fixture
def lit_sphere_scene(front_camera):
    """Grey diffuse sphere under a uniform white sky."""
    return Scene(
        [Sphere((0.0, 0.0, 0.0), 1.0, LambertianMaterial(0.5))],
        camera=front_camera,
        background=1.0,
    )
