"""Small preset scenes that show off spectral effects.

- create_sphere_over_plane_scene: a 6504 K black body sphere resting in a
  reddish diffuse ground plane, seen through a thin lens with depth of field
  and chromatic aberration.
- create_prism_scene: a flint glass prism lit by a small white emitter,
  spreading the light into a spectrum on a diffuse screen.
"""

from __future__ import annotations

from luculenta.camera.thin_lens import ThinLensCamera
from luculenta.geometry.plane import Plane
from luculenta.geometry.quad import Quad
from luculenta.geometry.sphere import Sphere
from luculenta.geometry.triangle import make_prism
from luculenta.materials.dielectric import DielectricMaterial
from luculenta.materials.emissive import EmissiveMaterial
from luculenta.materials.lambertian import LambertianMaterial
from luculenta.scene.scene import Scene

# Colour temperature of the D65 white point
D65_TEMPERATURE = 6504.0


def create_sphere_over_plane_scene(aspect_ratio: float = 16.0 / 9.0) -> Scene:
    """Black body sphere on a red ground plane, thin lens camera."""
    ground = LambertianMaterial.coloured(0.9, 700.0, 120.0)
    sun = EmissiveMaterial.blackbody(D65_TEMPERATURE, 1.0)

    scene = Scene(
        [
            Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), ground),
            Sphere((0.0, 0.0, 0.0), 2.0, sun),
        ]
    )
    scene.camera = ThinLensCamera(
        lookfrom=(0.0, 1.0, -10.0),
        lookat=(0.0, 0.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.2,
        focus_distance=10.0,
        chromatic_aberration=0.1,
    )
    return scene


def create_prism_scene(
    glass: DielectricMaterial | None = None,
    aspect_ratio: float = 16.0 / 9.0,
    light_intensity: float = 40.0,
) -> Scene:
    """Dispersion demo: light through a glass prism onto a white screen.

    Args:
        glass: Prism material; None uses flint glass.
        aspect_ratio: Camera aspect ratio (width / height).
        light_intensity: Peak radiance of the emitter.
    """
    if glass is None:
        glass = DielectricMaterial.flint_glass()
    white = LambertianMaterial(0.8)
    light = EmissiveMaterial.blackbody(D65_TEMPERATURE, light_intensity)

    # Equilateral cross-section in the xy-plane, lifted off the floor
    base = 0.01
    prism = make_prism(
        (-1.0, base, -1.0),
        (1.0, base, -1.0),
        (0.0, base + 1.732, -1.0),
        (0.0, 0.0, 2.0),
        glass,
    )

    scene = Scene(background=0.02)
    scene.add(Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), white))
    scene.extend(prism)
    scene.add(Sphere((-4.0, 1.0, 0.0), 0.3, light))
    # Screen behind the prism, facing the light
    scene.add(Quad((5.0, 0.0, -3.0), (0.0, 0.0, 6.0), (0.0, 4.0, 0.0), white))

    scene.camera = ThinLensCamera(
        lookfrom=(0.0, 3.0, -9.0),
        lookat=(1.0, 0.8, 0.0),
        vfov=50.0,
        aspect_ratio=aspect_ratio,
    )
    return scene
