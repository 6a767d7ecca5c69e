"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable camera with defocus blur (depth of field)

Camera responsibilities:
    - Validate view parameters and derive the basis and viewport on the host
    - Transform (i, j) pixel coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Sample ray origins on the lens disk when defocus_angle > 0

Pixel coordinates are integer column/row indices with (0, 0) at the
top-left of the image.
"""

from .thin_lens import (
    MAX_IMAGE_WIDTH,
    Camera,
    defocus_disk_sample,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "MAX_IMAGE_WIDTH",
    "setup_camera",
    "get_ray",
    "defocus_disk_sample",
    "get_camera_info",
]
