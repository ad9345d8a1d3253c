"""Emissive (light source) material.

A pure emitter: it adds its emission to every path that reaches it and
absorbs everything, so paths end at lights.

Example:
    >>> sun = EmissiveMaterial.blackbody(6504.0, intensity=5.0)
    >>> sun.emission(550.0) > 0.0
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from luculenta.core.ray import Vec3
from luculenta.core.spectrum import Spectrum
from luculenta.materials.base import BSDFSample, Material

if TYPE_CHECKING:
    from luculenta.core.sampler import Sampler


class EmissiveMaterial(Material):
    """Light-emitting surface.

    Attributes:
        emission_spectrum: Emitted radiance (spectrum scaled by intensity).
    """

    def __init__(self, spectrum: Spectrum | float, intensity: float = 1.0) -> None:
        if intensity < 0.0:
            raise ValueError(f"Emission intensity must be non-negative, got {intensity}")
        if not isinstance(spectrum, Spectrum):
            spectrum = Spectrum.constant(float(spectrum))
        if spectrum.values.min() < 0.0:
            raise ValueError("Emission spectrum must be non-negative")
        self.emission_spectrum = spectrum * intensity

    @classmethod
    def blackbody(cls, temperature: float, intensity: float = 1.0) -> EmissiveMaterial:
        """Black body emitter normalised to peak radiance `intensity`."""
        return cls(Spectrum.blackbody(temperature), intensity)

    def sample_direction(
        self,
        incoming: Vec3,
        normal: Vec3,
        front_face: bool,
        wavelength: float,
        sampler: Sampler,
    ) -> BSDFSample | None:
        return None

    def evaluate(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        return 0.0

    def pdf(self, incoming: Vec3, outgoing: Vec3, normal: Vec3, wavelength: float) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"EmissiveMaterial({self.emission_spectrum!r})"
