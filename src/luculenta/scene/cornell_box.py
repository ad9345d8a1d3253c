"""Spectral Cornell box scene configuration.

The Cornell box is the standard test scene for global illumination. This
version describes every surface with a reflectance spectrum instead of an RGB
albedo, and the ceiling light with a black body emission spectrum, so colour
bleeding between the walls is computed per wavelength.

The box consists of:
- 5 walls forming an open box (left, right, back, floor, ceiling)
- Left wall: red diffuse (Gaussian reflectance around 640 nm)
- Right wall: green diffuse (Gaussian reflectance around 540 nm)
- Back, floor, ceiling: white diffuse (constant reflectance)
- 3 spheres: diffuse, mirror and flint glass
- Area light on the ceiling (black body emissive quad)

The box spans 0..555 in each dimension and the camera looks in through the
open front along +Z.

Example:
    >>> from luculenta.scene.cornell_box import create_cornell_box_scene
    >>> scene = create_cornell_box_scene()
    >>> len(scene)
    9
    >>> handle = render(scene, None, 256, 256, samples_per_pixel=64)
"""

from __future__ import annotations

from dataclasses import dataclass

from luculenta.camera.pinhole import PinholeCamera
from luculenta.core.spectrum import Spectrum
from luculenta.geometry.quad import Quad
from luculenta.geometry.sphere import Sphere
from luculenta.materials.dielectric import DielectricMaterial
from luculenta.materials.emissive import EmissiveMaterial
from luculenta.materials.lambertian import LambertianMaterial
from luculenta.materials.mirror import MirrorMaterial
from luculenta.scene.scene import Scene

# (peak, center nm, width nm) of a Gaussian reflectance
GaussianReflectance = tuple[float, float, float]


@dataclass
class CornellBoxParams:
    """Parameters for configuring a Cornell box scene.

    Attributes:
        light_intensity: Peak radiance of the area light.
        light_temperature: Colour temperature of the light in Kelvin.
        left_wall: Gaussian reflectance of the left (red) wall.
        right_wall: Gaussian reflectance of the right (green) wall.
        white_reflectance: Constant reflectance of back wall, floor, ceiling.

    Example:
        >>> params = CornellBoxParams()
        >>> params.light_temperature
        6504.0

        >>> # Warm light, blue left wall
        >>> custom = CornellBoxParams(
        ...     light_temperature=3000.0,
        ...     left_wall=(0.6, 450.0, 40.0),
        ... )
    """

    light_intensity: float = 15.0
    light_temperature: float = 6504.0
    left_wall: GaussianReflectance = (0.65, 640.0, 70.0)
    right_wall: GaussianReflectance = (0.45, 540.0, 50.0)
    white_reflectance: float = 0.73

    def validate(self) -> None:
        """Raise ValueError for parameters that break energy conservation."""
        if self.light_intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.light_intensity}")
        if self.light_temperature <= 0.0:
            raise ValueError(
                f"Light temperature must be positive, got {self.light_temperature}"
            )
        for name, (peak, _, width) in (("left_wall", self.left_wall), ("right_wall", self.right_wall)):
            if not 0.0 <= peak <= 1.0:
                raise ValueError(
                    f"{name} peak reflectance = {peak} would violate energy conservation"
                )
            if width <= 0.0:
                raise ValueError(f"{name} width must be positive, got {width}")
        if not 0.0 <= self.white_reflectance <= 1.0:
            raise ValueError(
                f"White reflectance = {self.white_reflectance} would violate energy conservation"
            )


# =============================================================================
# Cornell Box Constants
# =============================================================================

# Classic Cornell box dimensions (approximately 555x555x555 units)
BOX_SIZE = 555.0

# Ceiling light footprint (classic Cornell box light is ~130x105 units)
LIGHT_WIDTH = 130.0
LIGHT_DEPTH = 105.0

SPHERE_RADIUS = 80.0
CAMERA_DISTANCE = 800.0


def _light_corner(box_size: float) -> tuple[float, float, float]:
    # Just below the ceiling to avoid coplanar hits
    return (
        (box_size - LIGHT_WIDTH) / 2.0,
        box_size - 1.0,
        (box_size - LIGHT_DEPTH) / 2.0,
    )


# =============================================================================
# Cornell Box Factory
# =============================================================================


def create_cornell_box_scene(
    box_size: float = BOX_SIZE,
    params: CornellBoxParams | None = None,
    aspect_ratio: float = 1.0,
) -> Scene:
    """Create the spectral Cornell box with its camera attached.

    The coordinate system places the box origin at (0, 0, 0) with:
    - X-axis: left to right (0 to box_size)
    - Y-axis: floor to ceiling (0 to box_size)
    - Z-axis: front to back (0 to box_size), camera looks toward +Z

    Args:
        box_size: Edge length of the box.
        params: Light and wall parameters; None uses the defaults.
        aspect_ratio: Camera aspect ratio (width / height).

    Returns:
        A Scene of 6 quads and 3 spheres with a PinholeCamera.

    Raises:
        ValueError: If the box size or the parameters are invalid.
    """
    if box_size <= 0.0:
        raise ValueError(f"Box size must be positive, got {box_size}")
    if params is None:
        params = CornellBoxParams()
    params.validate()

    red = LambertianMaterial.coloured(*params.left_wall)
    green = LambertianMaterial.coloured(*params.right_wall)
    white = LambertianMaterial(params.white_reflectance)
    light = EmissiveMaterial.blackbody(params.light_temperature, params.light_intensity)

    s = box_size
    scene = Scene(
        [
            # Walls: left, right, back, floor, ceiling
            Quad((0.0, 0.0, 0.0), (0.0, s, 0.0), (0.0, 0.0, s), red),
            Quad((s, 0.0, s), (0.0, s, 0.0), (0.0, 0.0, -s), green),
            Quad((0.0, 0.0, s), (s, 0.0, 0.0), (0.0, s, 0.0), white),
            Quad((0.0, 0.0, 0.0), (s, 0.0, 0.0), (0.0, 0.0, s), white),
            Quad((0.0, s, s), (s, 0.0, 0.0), (0.0, 0.0, -s), white),
            Quad(_light_corner(s), (LIGHT_WIDTH, 0.0, 0.0), (0.0, 0.0, LIGHT_DEPTH), light),
            # Spheres resting on the floor
            Sphere((s * 0.27, SPHERE_RADIUS, s * 0.35), SPHERE_RADIUS, LambertianMaterial(0.73)),
            Sphere((s * 0.73, SPHERE_RADIUS, s * 0.35), SPHERE_RADIUS, MirrorMaterial(0.95)),
            Sphere(
                (s * 0.5, SPHERE_RADIUS, s * 0.65),
                SPHERE_RADIUS,
                DielectricMaterial.flint_glass(),
            ),
        ]
    )

    scene.camera = PinholeCamera(
        lookfrom=(s / 2.0, s / 2.0, -CAMERA_DISTANCE),
        lookat=(s / 2.0, s / 2.0, s / 2.0),
        vup=(0.0, 1.0, 0.0),
        vfov=40.0,
        aspect_ratio=aspect_ratio,
    )
    return scene


def get_light_quad_info(box_size: float = BOX_SIZE) -> dict[str, tuple[float, float, float] | float]:
    """Geometry of the ceiling light quad.

    Returns:
        A dictionary with 'corner', 'edge_u', 'edge_v', 'center' and 'area'.
    """
    corner = _light_corner(box_size)
    return {
        "corner": corner,
        "edge_u": (LIGHT_WIDTH, 0.0, 0.0),
        "edge_v": (0.0, 0.0, LIGHT_DEPTH),
        "center": (corner[0] + LIGHT_WIDTH / 2.0, corner[1], corner[2] + LIGHT_DEPTH / 2.0),
        "area": LIGHT_WIDTH * LIGHT_DEPTH,
    }


def get_cornell_box_bounds(box_size: float = BOX_SIZE) -> dict[str, tuple[float, float, float]]:
    """Get the bounding box of the Cornell box scene.

    Returns:
        A dictionary with 'min', 'max', 'center' and 'size'.
    """
    return {
        "min": (0.0, 0.0, 0.0),
        "max": (box_size, box_size, box_size),
        "center": (box_size / 2.0, box_size / 2.0, box_size / 2.0),
        "size": (box_size, box_size, box_size),
    }


def light_spectrum(params: CornellBoxParams | None = None) -> Spectrum:
    """Emission spectrum of the ceiling light for the given parameters."""
    params = params or CornellBoxParams()
    return Spectrum.blackbody(params.light_temperature, params.light_intensity)
