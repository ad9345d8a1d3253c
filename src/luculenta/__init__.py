"""Luculenta: a multithreaded spectral path tracer.

Every light path carries a single wavelength sampled over the visible range,
so dispersion and chromatic aberration fall out of the Monte Carlo estimator.
Renders run on a pool of worker threads feeding a shared XYZ film that can
be read at any time.

Subpackages:
    core: Vectors, spectra, samplers, the integrator and the tile scheduler
    geometry: Spheres, planes, triangles, quads and the prism builder
    materials: Lambertian, mirror, dispersive dielectric and emissive BSDFs
    camera: Pinhole and thin lens cameras
    scene: Scene container and preset scenes
    preview: Tone mapping, Matplotlib preview and PNG export
"""

__version__ = "0.1.0"
