"""Plain-text PPM (P3) image output.

The renderer streams its image as a P3 file:

    P3
    <width> <height>
    255
    <r> <g> <b>        (one line per pixel, row-major, top-left origin)

Every channel is a decimal integer in [0, 255]. Sinks are binary file-like
objects; the text is ASCII-encoded.

Example:
    >>> import numpy as np
    >>> from pathtracer.output.ppm import write_ppm_header, write_pixel_rows
    >>> with open("image.ppm", "wb") as f:
    ...     write_ppm_header(f, 2, 1)
    ...     write_pixel_rows(f, np.array([[255, 0, 0], [0, 0, 255]]))
"""

from __future__ import annotations

from typing import BinaryIO

import numpy as np
import numpy.typing as npt

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def ppm_header(width: int, height: int) -> bytes:
    """Return the P3 header for an image of the given size."""
    return f"{PPM_MAGIC}\n{width} {height}\n{PPM_MAX_VALUE}\n".encode("ascii")


def format_pixels(pixels: npt.ArrayLike) -> bytes:
    """Format pixels as P3 body lines.

    Args:
        pixels: Integer array whose last axis holds (r, g, b). Any leading
            shape is flattened in row-major order.

    Returns:
        One "r g b" line per pixel, each terminated by a newline.

    Raises:
        ValueError: If the last axis is not of size 3 or a value is outside
            [0, 255].
    """
    array = np.asarray(pixels)
    if array.ndim == 0 or array.shape[-1] != 3:
        raise ValueError(f"Pixels must have a trailing axis of size 3, got shape {array.shape}")
    flat = array.reshape(-1, 3).astype(np.int64)
    if flat.size and (flat.min() < 0 or flat.max() > PPM_MAX_VALUE):
        raise ValueError(f"Pixel values must be in [0, {PPM_MAX_VALUE}]")
    return "".join(f"{r} {g} {b}\n" for r, g, b in flat.tolist()).encode("ascii")


def write_ppm_header(sink: BinaryIO, width: int, height: int) -> None:
    """Write the P3 header to a binary sink."""
    sink.write(ppm_header(width, height))


def write_pixel_rows(sink: BinaryIO, pixels: npt.ArrayLike) -> None:
    """Write pixels to a binary sink, one line per pixel."""
    sink.write(format_pixels(pixels))


def read_ppm(data: bytes | str) -> tuple[int, int, npt.NDArray[np.int64]]:
    """Parse a P3 image written by this module.

    Args:
        data: The file contents.

    Returns:
        Tuple of (width, height, pixels) where pixels has shape
        (height, width, 3).

    Raises:
        ValueError: If the data is not a well-formed P3 image.
    """
    if isinstance(data, bytes):
        data = data.decode("ascii")
    tokens = data.split()
    if len(tokens) < 4 or tokens[0] != PPM_MAGIC:
        raise ValueError("Not a P3 PPM image")

    width, height, max_value = int(tokens[1]), int(tokens[2]), int(tokens[3])
    if max_value != PPM_MAX_VALUE:
        raise ValueError(f"Unsupported maximum value {max_value}")

    values = np.array([int(t) for t in tokens[4:]], dtype=np.int64)
    if values.size != width * height * 3:
        raise ValueError(
            f"Expected {width * height * 3} channel values, found {values.size}"
        )
    return width, height, values.reshape(height, width, 3)
