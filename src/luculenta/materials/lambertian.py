"""Lambertian (ideal diffuse) material implementation.

This module implements the Lambertian BRDF, which models ideal diffuse reflection
where incident light is scattered uniformly in all directions weighted by the
cosine of the angle from the surface normal.

The Lambertian BRDF is:
    f_r(wi, wo) = reflectance(lambda) / pi

The probability density function for cosine-weighted hemisphere sampling is:
    pdf(wo) = cos(theta) / pi

so every sample carries the weight f_r * cos / pdf = reflectance(lambda).

A Lambertian surface may also glow (diffuse reflection plus emission), which
is what closed "furnace" scenes need.

Example:
    >>> red = LambertianMaterial.coloured(0.9, 700.0, 120.0)
    >>> white = LambertianMaterial(0.73)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from luculenta.core.ray import Vec3, dot, sample_cosine_hemisphere
from luculenta.core.spectrum import Spectrum
from luculenta.materials.base import BSDFSample, Material, as_spectrum, make_sample

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler

INV_PI = 1.0 / math.pi


class LambertianMaterial(Material):
    """Ideal diffuse reflector.

    Attributes:
        reflectance: Fraction of light reflected at each wavelength, in [0, 1].
        emission_spectrum: Optional self-emission.
    """

    def __init__(
        self,
        reflectance: Spectrum | float,
        emission: Spectrum | float | None = None,
    ) -> None:
        self.reflectance = as_spectrum(reflectance, "Lambertian reflectance")
        if emission is not None:
            if not isinstance(emission, Spectrum):
                emission = Spectrum.constant(float(emission))
            if emission.values.min() < 0.0:
                raise ValueError("Emission spectrum must be non-negative")
        self.emission_spectrum = emission

    @classmethod
    def coloured(cls, peak: float, center: float, width: float) -> LambertianMaterial:
        """Diffuse surface with a Gaussian reflectance bump."""
        return cls(Spectrum.gaussian(peak, center, width))

    def sample_direction(
        self,
        incoming: Vec3,
        normal: Vec3,
        front_face: bool,
        wavelength: float,
        sampler: Sampler,
    ) -> BSDFSample | None:
        direction, pdf = sample_cosine_hemisphere(normal, sampler)
        return make_sample(direction, self.reflectance.sample(wavelength) * INV_PI, pdf, normal)

    def evaluate(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        # Reflection only: both directions on the normal's side
        if dot(incoming, normal) >= 0.0 or dot(outgoing, normal) <= 0.0:
            return 0.0
        return self.reflectance.sample(wavelength) * INV_PI

    def pdf(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        cos_theta = dot(outgoing, normal)
        return cos_theta * INV_PI if cos_theta > 0.0 else 0.0

    def __repr__(self) -> str:
        return f"LambertianMaterial(reflectance={self.reflectance!r}, emissive={self.is_emissive})"
