"""Dielectric (glass/water) material with wavelength-dependent refraction.

This module implements the dielectric BSDF, which models transparent materials
like glass and water with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1
    - Cauchy's equation for dispersion: n(lambda) = A + B / lambda^2
      (lambda in micrometres)

Because every path carries one wavelength, two paths at different
wavelengths bend by different amounts at the same interface. Accumulated
over many samples this separates white light into its colours.

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.

Example:
    >>> glass = DielectricMaterial.crown_glass()
    >>> glass.ior(450.0) > glass.ior(650.0)
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from luculenta.core.ray import Vec3, dot, reflect, refract, schlick_fresnel
from luculenta.core.spectrum import Spectrum
from luculenta.materials.base import BSDFSample, Material, as_spectrum, make_sample

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler


class DielectricMaterial(Material):
    """Refractive material whose index of refraction follows Cauchy's equation.

    Attributes:
        cauchy_a: Constant term of the Cauchy equation. Must be >= 1.0.
        cauchy_b: Dispersion term in square micrometres. Must be >= 0.
            Zero gives a non-dispersive material.
        transmittance: Fraction of light surviving each transmission
            (coloured glass). Defaults to 1 everywhere.
    """

    specular = True

    def __init__(
        self,
        cauchy_a: float = 1.5,
        cauchy_b: float = 0.0,
        transmittance: Spectrum | float = 1.0,
    ) -> None:
        if cauchy_a < 1.0:
            raise ValueError(
                f"Index of refraction = {cauchy_a} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )
        if cauchy_b < 0.0:
            raise ValueError(f"Cauchy dispersion coefficient must be >= 0, got {cauchy_b}")
        self.cauchy_a = float(cauchy_a)
        self.cauchy_b = float(cauchy_b)
        self.transmittance = as_spectrum(transmittance, "Dielectric transmittance")

    # Common glasses (coefficients for lambda in micrometres)

    @classmethod
    def from_ior(cls, ior: float) -> DielectricMaterial:
        """Non-dispersive dielectric with a fixed index of refraction."""
        return cls(cauchy_a=ior, cauchy_b=0.0)

    @classmethod
    def crown_glass(cls) -> DielectricMaterial:
        """Borosilicate crown glass (BK7)."""
        return cls(cauchy_a=1.5046, cauchy_b=0.00420)

    @classmethod
    def flint_glass(cls) -> DielectricMaterial:
        """Dense flint glass, strongly dispersive."""
        return cls(cauchy_a=1.7280, cauchy_b=0.01342)

    @classmethod
    def water(cls) -> DielectricMaterial:
        return cls(cauchy_a=1.3199, cauchy_b=0.00409)

    def ior(self, wavelength: float) -> float:
        """Index of refraction at a wavelength given in nanometres."""
        lam_um = wavelength * 1e-3
        return self.cauchy_a + self.cauchy_b / (lam_um * lam_um)

    def refraction_ratio(self, wavelength: float, front_face: bool) -> float:
        """n_incident / n_transmitted for a ray entering or leaving the material."""
        n = self.ior(wavelength)
        return 1.0 / n if front_face else n

    def fresnel_reflectance(
        self, incoming: Vec3, normal: Vec3, front_face: bool, wavelength: float
    ) -> float:
        """Probability of reflection, 1.0 under total internal reflection."""
        eta = self.refraction_ratio(wavelength, front_face)
        cos_theta = min(-dot(incoming, normal), 1.0)
        sin2_theta = max(0.0, 1.0 - cos_theta * cos_theta)
        if eta * eta * sin2_theta > 1.0:
            return 1.0
        return schlick_fresnel(cos_theta, eta)

    def sample_direction(
        self,
        incoming: Vec3,
        normal: Vec3,
        front_face: bool,
        wavelength: float,
        sampler: Sampler,
    ) -> BSDFSample | None:
        """Choose reflection with probability F, refraction otherwise.

        With the choice probability as pdf, both branches carry the weight
        value * cos / pdf of exactly 1 (times transmittance when refracting).
        Total internal reflection routes all energy into reflection.
        """
        reflectance = self.fresnel_reflectance(incoming, normal, front_face, wavelength)

        if reflectance >= 1.0 or sampler.next_float() < reflectance:
            direction = reflect(incoming, normal)
            cos_theta = abs(dot(direction, normal))
            if cos_theta == 0.0:
                return None
            return make_sample(
                direction, reflectance / cos_theta, reflectance, normal, specular=True
            )

        direction = refract(incoming, normal, self.refraction_ratio(wavelength, front_face))
        if direction is None:
            return None
        cos_theta = abs(dot(direction, normal))
        if cos_theta == 0.0:
            return None
        transmitted = 1.0 - reflectance
        return make_sample(
            direction,
            transmitted * self.transmittance.sample(wavelength) / cos_theta,
            transmitted,
            normal,
            specular=True,
        )

    def evaluate(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        return 0.0

    def pdf(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"DielectricMaterial(cauchy_a={self.cauchy_a}, cauchy_b={self.cauchy_b})"
