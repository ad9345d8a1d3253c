"""Scene container and preset scenes."""

from .cornell_box import (
    BOX_SIZE,
    CornellBoxParams,
    create_cornell_box_scene,
    get_cornell_box_bounds,
    get_light_quad_info,
)
from .presets import create_prism_scene, create_sphere_over_plane_scene
from .scene import T_MAX, T_MIN, Scene

__all__ = [
    "Scene",
    "T_MIN",
    "T_MAX",
    "CornellBoxParams",
    "create_cornell_box_scene",
    "get_cornell_box_bounds",
    "get_light_quad_info",
    "BOX_SIZE",
    "create_sphere_over_plane_scene",
    "create_prism_scene",
]
