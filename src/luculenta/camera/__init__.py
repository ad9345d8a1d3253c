"""Camera models for primary ray generation.

Components:
    pinhole: Perspective camera with jittered sub-pixel sampling
    thin_lens: Depth of field and wavelength-dependent magnification
"""

from .pinhole import PinholeCamera
from .thin_lens import ThinLensCamera

__all__ = [
    "PinholeCamera",
    "ThinLensCamera",
]
