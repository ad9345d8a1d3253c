"""Mirror (perfect specular reflector) material implementation.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal. The BSDF is a
delta distribution, so sampling is deterministic and the throughput simply
picks up the reflectance at the path's wavelength.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from luculenta.core.ray import Vec3, dot, reflect
from luculenta.core.spectrum import Spectrum
from luculenta.materials.base import BSDFSample, Material, as_spectrum, make_sample

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler


class MirrorMaterial(Material):
    """Perfect specular reflector.

    Attributes:
        reflectance: Reflected fraction at each wavelength, in [0, 1].
    """

    specular = True

    def __init__(self, reflectance: Spectrum | float = 1.0) -> None:
        self.reflectance = as_spectrum(reflectance, "Mirror reflectance")

    def sample_direction(
        self,
        incoming: Vec3,
        normal: Vec3,
        front_face: bool,
        wavelength: float,
        sampler: Sampler,
    ) -> BSDFSample | None:
        direction = reflect(incoming, normal)
        cos_theta = dot(direction, normal)
        if cos_theta <= 0.0:
            return None
        # value * cos / pdf == reflectance with pdf = 1
        return make_sample(
            direction,
            self.reflectance.sample(wavelength) / cos_theta,
            1.0,
            normal,
            specular=True,
        )

    def evaluate(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        return 0.0

    def pdf(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"MirrorMaterial(reflectance={self.reflectance!r})"
