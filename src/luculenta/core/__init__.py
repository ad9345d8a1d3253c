"""Core rendering module.

Components:
    ray: Ray type, tuple vector helpers and direction sampling
    spectrum: Spectra, CIE colour matching and XYZ -> sRGB conversion
    sampler: Per-thread random streams
    integrator: Single-wavelength path tracer with Russian roulette
    tiles: Image tiles with local accumulation buffers
    film: Shared XYZ accumulation buffer
    scheduler: Worker pool and the render() entry point
    progressive: Batch-wise accumulation on a persistent film
"""

from .film import Film, FilmSnapshot
from .ray import (
    Ray,
    Vec3,
    build_onb_from_normal,
    cross,
    dot,
    length,
    length_squared,
    local_to_world,
    make_ray,
    near_zero,
    normalize,
    random_cosine_direction,
    random_in_unit_disk,
    ray_at,
    reflect,
    refract,
    sample_cosine_hemisphere,
    schlick_fresnel,
    vec3,
)
from .sampler import Sampler, worker_sampler
from .spectrum import (
    LAMBDA_MAX,
    LAMBDA_MIN,
    Spectrum,
    color_matching,
    wavelength_to_xyz,
    xyz_to_linear_srgb,
)
from .tiles import Tile, TileState, make_tiles

# Note: integrator, scheduler and progressive are NOT imported here so that
# importing a vector helper does not pull in the whole renderer.
#
# To render, use:
#   from luculenta.core.scheduler import render

__all__ = [
    "Ray",
    "Vec3",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "random_in_unit_disk",
    "random_cosine_direction",
    "build_onb_from_normal",
    "local_to_world",
    "sample_cosine_hemisphere",
    "Spectrum",
    "LAMBDA_MIN",
    "LAMBDA_MAX",
    "color_matching",
    "wavelength_to_xyz",
    "xyz_to_linear_srgb",
    "Sampler",
    "worker_sampler",
    "Tile",
    "TileState",
    "make_tiles",
    "Film",
    "FilmSnapshot",
]
