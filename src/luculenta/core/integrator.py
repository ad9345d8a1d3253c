"""Spectral path tracing integrator for Monte Carlo light transport.

This module implements unbiased path tracing at a single wavelength per path,
with material importance sampling, Russian roulette termination and a hard
bounce limit.

The path tracer solves the rendering equation by tracing rays from the camera
through the scene, bouncing off surfaces according to their material properties,
and accumulating radiance along each path. Each traced path moves through the
states

    ACTIVE  -> extending the path, carrying a throughput weight
    EMIT    -> the hit surface emits; throughput * emission is added
    TERMINATED -> the ray escaped, was absorbed, lost the roulette, became
                  degenerate, or reached the bounce limit

The recursive estimator is written as a loop with an explicit throughput, so
stack usage does not grow with path length.

Key features:
    - Material dispatch through the Material interface
    - Russian roulette termination after a minimum number of bounces
    - Self-intersection avoidance with ray offset
    - NaN / negative samples discarded instead of polluting the image

Example:
    >>> from luculenta.core.integrator import render_sample
    >>> from luculenta.core.sampler import Sampler
    >>> sample = render_sample(scene, scene.camera, 32, 32, 64, 64, Sampler(7))
    >>> sample.wavelength, sample.radiance
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from luculenta.core.ray import Ray, Vec3, dot
from luculenta.core.spectrum import wavelength_to_xyz

if TYPE_CHECKING:
    from luculenta.camera.pinhole import PinholeCamera
    from luculenta.core.sampler import Sampler
    from luculenta.scene.scene import Scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (safety bound, not a physical parameter)
MAX_DEPTH = 50

# Minimum bounces before Russian roulette can terminate paths
MIN_BOUNCES_BEFORE_RR = 3

# Russian roulette survival probability cap
MAX_RR_PROBABILITY = 0.95

# Ray offset epsilon to avoid self-intersection
RAY_EPSILON = 1e-4

# Throughput below which a path can no longer contribute
THROUGHPUT_EPSILON = 1e-12


@dataclass(frozen=True)
class IntegratorSettings:
    """Tunable parameters of the path tracer.

    Attributes:
        max_depth: Hard limit on the number of surface interactions.
        min_bounces_before_rr: Depth from which Russian roulette applies.
            None disables Russian roulette.
        max_rr_probability: Upper bound of the survival probability.
        ray_epsilon: Offset applied to secondary ray origins.
    """

    max_depth: int = MAX_DEPTH
    min_bounces_before_rr: int | None = MIN_BOUNCES_BEFORE_RR
    max_rr_probability: float = MAX_RR_PROBABILITY
    ray_epsilon: float = RAY_EPSILON

    def validate(self) -> None:
        """Raise ValueError for settings that cannot produce a valid estimator."""
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.min_bounces_before_rr is not None and self.min_bounces_before_rr < 0:
            raise ValueError(
                f"min_bounces_before_rr must be >= 0 or None, got {self.min_bounces_before_rr}"
            )
        if not 0.0 < self.max_rr_probability <= 1.0:
            raise ValueError(
                f"max_rr_probability must be in (0, 1], got {self.max_rr_probability}"
            )
        if not self.ray_epsilon > 0.0:
            raise ValueError(f"ray_epsilon must be positive, got {self.ray_epsilon}")


DEFAULT_SETTINGS = IntegratorSettings()


class Termination(Enum):
    """Why a path stopped."""

    ESCAPED = "escaped"
    ABSORBED = "absorbed"
    DEGENERATE = "degenerate"
    ROULETTE = "roulette"
    MAX_DEPTH = "max_depth"


@dataclass(frozen=True, slots=True)
class PathResult:
    """Outcome of tracing one path.

    Attributes:
        radiance: Radiance estimate at the path's wavelength.
        bounces: Number of surface interactions.
        termination: Why the path ended.
    """

    radiance: float
    bounces: int
    termination: Termination


@dataclass(frozen=True, slots=True)
class SpectralSample:
    """One camera sample: a wavelength, its radiance and XYZ contribution.

    Attributes:
        wavelength: Sampled wavelength in nm.
        radiance: Radiance estimate (0 if discarded).
        xyz: Contribution to the pixel's tristimulus accumulation.
        discarded: True if the raw estimate was NaN, infinite or negative.
    """

    wavelength: float
    radiance: float
    xyz: tuple[float, float, float]
    discarded: bool = False


# =============================================================================
# Path Tracing Core
# =============================================================================


def _offset_ray_origin(point: Vec3, normal: Vec3, direction: Vec3, epsilon: float) -> Vec3:
    """Offset ray origin to avoid self-intersection.

    Pushes the point slightly along the normal on the side the scattered ray
    travels (above the surface for reflection, below for refraction).
    """
    if dot(direction, normal) < 0.0:
        epsilon = -epsilon
    return (
        point[0] + epsilon * normal[0],
        point[1] + epsilon * normal[1],
        point[2] + epsilon * normal[2],
    )


def trace_path(
    scene: Scene,
    ray: Ray,
    sampler: Sampler,
    settings: IntegratorSettings = DEFAULT_SETTINGS,
) -> PathResult:
    """Trace a single path through the scene at the ray's wavelength.

    Implements unbiased Monte Carlo path tracing with:
    - Emission accumulation from every surface hit
    - Material-based importance sampling, weighted by value * cos / pdf
    - Russian roulette termination after settings.min_bounces_before_rr
    - Background radiance for escaped rays

    Args:
        scene: The scene to trace against (read only).
        ray: The primary ray; its wavelength is kept for the whole path.
        sampler: The calling worker's random stream.
        settings: Integrator parameters.

    Returns:
        A PathResult with the radiance estimate and termination reason.
    """
    wavelength = ray.wavelength
    radiance = 0.0
    throughput = 1.0
    rr_depth = settings.min_bounces_before_rr

    for depth in range(settings.max_depth):
        hit = scene.intersect(ray)
        if hit is None:
            radiance += throughput * scene.background_radiance(wavelength)
            return PathResult(radiance, depth, Termination.ESCAPED)

        material = hit.material
        if material.emission_spectrum is not None:
            radiance += throughput * material.emission(wavelength)

        bsdf = material.sample_direction(
            ray.direction, hit.normal, hit.front_face, wavelength, sampler
        )
        if bsdf is None:
            return PathResult(radiance, depth + 1, Termination.ABSORBED)

        throughput *= bsdf.weight
        if not throughput > THROUGHPUT_EPSILON or not math.isfinite(throughput):
            return PathResult(radiance, depth + 1, Termination.DEGENERATE)

        if rr_depth is not None and depth >= rr_depth:
            survival = min(throughput, settings.max_rr_probability)
            if sampler.next_float() >= survival:
                return PathResult(radiance, depth + 1, Termination.ROULETTE)
            # Compensate for termination probability
            throughput /= survival

        origin = _offset_ray_origin(hit.point, hit.normal, bsdf.direction, settings.ray_epsilon)
        ray = Ray(origin, bsdf.direction, wavelength)

    return PathResult(radiance, settings.max_depth, Termination.MAX_DEPTH)


def estimate_radiance(
    scene: Scene,
    ray: Ray,
    sampler: Sampler,
    settings: IntegratorSettings = DEFAULT_SETTINGS,
) -> tuple[float, bool]:
    """Trace a path and sanitise the result.

    Returns:
        (radiance, discarded). NaN, infinite or negative estimates are
        replaced by 0.0 and flagged as discarded.
    """
    radiance = trace_path(scene, ray, sampler, settings).radiance
    if not math.isfinite(radiance) or radiance < 0.0:
        return 0.0, True
    return radiance, False


def render_sample(
    scene: Scene,
    camera: PinholeCamera,
    pixel_x: int,
    pixel_y: int,
    width: int,
    height: int,
    sampler: Sampler,
    settings: IntegratorSettings = DEFAULT_SETTINGS,
) -> SpectralSample:
    """Render a single sample for a pixel.

    Samples a wavelength and a sub-pixel offset, fires the camera ray,
    traces it and converts the radiance into an XYZ contribution.

    Args:
        scene: The scene to render.
        camera: The camera generating the primary ray.
        pixel_x: Column, 0 = left.
        pixel_y: Row, 0 = top.
        width: Image width in pixels.
        height: Image height in pixels.
        sampler: The calling worker's random stream.
        settings: Integrator parameters.

    Returns:
        The SpectralSample for this pixel.
    """
    wavelength, _ = sampler.sample_wavelength()
    jitter = sampler.next_2d()
    ray = camera.generate_ray(pixel_x, pixel_y, width, height, jitter, wavelength, sampler)
    radiance, discarded = estimate_radiance(scene, ray, sampler, settings)
    return SpectralSample(wavelength, radiance, wavelength_to_xyz(wavelength, radiance), discarded)
