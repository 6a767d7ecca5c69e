"""Output module for writing rendered images.

Components:
    ppm: Plain-text PPM (P3) header/pixel writers and a reader for checks
"""

from .ppm import (
    PPM_MAGIC,
    PPM_MAX_VALUE,
    format_pixels,
    ppm_header,
    read_ppm,
    write_pixel_rows,
    write_ppm_header,
)

__all__ = [
    "PPM_MAGIC",
    "PPM_MAX_VALUE",
    "ppm_header",
    "format_pixels",
    "write_ppm_header",
    "write_pixel_rows",
    "read_ppm",
]
