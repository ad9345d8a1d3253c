"""Materials module for BSDF models.

Components:
    lambertian: Ideal diffuse reflection, optionally self-emitting
    mirror: Perfect specular reflection
    dielectric: Glass with Cauchy dispersion and Schlick Fresnel
    emissive: Pure emitters (absorb all incoming light)

Each material provides:
    - sample_direction(): Importance sample a scattering direction
    - evaluate(): BSDF value for a pair of directions
    - pdf(): Probability density of a direction
    - emission(): Emitted radiance at a wavelength
"""

from .base import BSDFSample, Material, make_sample
from .dielectric import DielectricMaterial
from .emissive import EmissiveMaterial
from .lambertian import LambertianMaterial
from .mirror import MirrorMaterial

__all__ = [
    "BSDFSample",
    "Material",
    "make_sample",
    "LambertianMaterial",
    "MirrorMaterial",
    "DielectricMaterial",
    "EmissiveMaterial",
]
