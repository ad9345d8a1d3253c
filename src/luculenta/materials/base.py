"""Material interface shared by every BSDF model.

Each material provides:
    - sample_direction(): importance sample an outgoing direction
    - evaluate(): BSDF value for a pair of directions
    - pdf(): probability density of sampling a direction
    - emission(): emitted radiance at a wavelength (zero for non-emitters)

Conventions:
    - incoming is the direction the ray travels *toward* the surface.
    - normal faces the incoming ray (HitRecord.normal).
    - All values are scalars at the single wavelength carried by the path.

sample_direction() returns a BSDFSample whose value and pdf are meant to
be used as one combined weight, value * |cos(theta)| / pdf. For delta
distributions (mirror, glass) both are expressed relative to the discrete
choice that was made, so the weight stays finite. Samples that would
produce a NaN, a negative or a zero probability (grazing angles, numerical
noise) are reported as None and the path is terminated.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from luculenta.core.ray import Vec3, dot
from luculenta.core.spectrum import Spectrum

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler

# Samples whose outgoing direction is closer than this to the tangent plane
# are discarded.
GRAZING_EPSILON = 1e-6


@dataclass(frozen=True, slots=True)
class BSDFSample:
    """An importance-sampled outgoing direction.

    Attributes:
        direction: Unit outgoing direction.
        value: BSDF value at the sampled pair of directions.
        pdf: Probability density (or discrete probability for specular
            events) of having sampled this direction.
        cos_theta: |cos| between direction and the surface normal.
        specular: True for delta distributions.
    """

    direction: Vec3
    value: float
    pdf: float
    cos_theta: float
    specular: bool = False

    @property
    def weight(self) -> float:
        """Throughput multiplier value * |cos| / pdf."""
        return self.value * self.cos_theta / self.pdf


def make_sample(
    direction: Vec3, value: float, pdf: float, normal: Vec3, specular: bool = False
) -> BSDFSample | None:
    """Validate a candidate sample, returning None for degenerate ones."""
    cos_theta = abs(dot(direction, normal))
    if (
        cos_theta < GRAZING_EPSILON
        or not pdf > 0.0
        or not math.isfinite(pdf)
        or not math.isfinite(value)
        or value < 0.0
    ):
        return None
    return BSDFSample(direction, value, pdf, cos_theta, specular)


def as_spectrum(value: Spectrum | float, name: str) -> Spectrum:
    """Accept a Spectrum or a flat scalar and check it lies in [0, 1]."""
    spectrum = value if isinstance(value, Spectrum) else Spectrum.constant(float(value))
    if spectrum.values.min() < 0.0 or spectrum.values.max() > 1.0:
        raise ValueError(
            f"{name} must lie in [0, 1] at every wavelength "
            f"(got range [{spectrum.values.min():.4g}, {spectrum.values.max():.4g}]). "
            "This would violate energy conservation."
        )
    return spectrum


class Material(ABC):
    """Base class for surface scattering models.

    Attributes:
        emission_spectrum: Emitted radiance, or None for non-emitters.
        specular: True if the BSDF is a delta distribution.
    """

    emission_spectrum: Spectrum | None = None
    specular: bool = False

    @property
    def is_emissive(self) -> bool:
        return self.emission_spectrum is not None

    def emission(self, wavelength: float) -> float:
        """Emitted radiance at a wavelength (two-sided)."""
        if self.emission_spectrum is None:
            return 0.0
        return self.emission_spectrum.sample(wavelength)

    @abstractmethod
    def sample_direction(
        self,
        incoming: Vec3,
        normal: Vec3,
        front_face: bool,
        wavelength: float,
        sampler: Sampler,
    ) -> BSDFSample | None:
        """Importance sample an outgoing direction, or None if absorbed."""

    @abstractmethod
    def evaluate(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        """BSDF value. Zero for delta distributions."""

    @abstractmethod
    def pdf(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        """Sampling density of outgoing. Zero for delta distributions."""
