"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at camera with field of view and defocus blur

Pixel coordinates are (col, row) with (0, 0) at the upper-left pixel.
"""

from .thin_lens import (
    Camera,
    ViewportBasis,
    camera_from_dict,
    compute_viewport,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "ViewportBasis",
    "camera_from_dict",
    "compute_viewport",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
