"""Renderer driving the row-batch kernel and streaming the image.

This module provides the host-side render loop:
- Uploads the scene and camera to the device
- Renders the image in batches of rows, top to bottom
- Streams each finished batch to a binary sink as PPM (P3) text
- Reports progress through an optional callback
- Stops between batches when a cancellation signal is set

Rendering is deterministic: the same scene, camera and seed produce a
byte-identical image regardless of batch size.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import render
    >>> from pathtracer.scene.cover import create_material_showcase_scene
    >>>
    >>> scene, camera = create_material_showcase_scene(image_width=200)
    >>> with open("image.ppm", "wb") as f:
    ...     render(scene, camera, f, seed=1)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from contextlib import closing
from typing import TYPE_CHECKING, BinaryIO, Protocol

import numpy as np
import numpy.typing as npt

from pathtracer.camera.thin_lens import Camera, setup_camera
from pathtracer.core.integrator import MAX_ROWS_PER_BATCH, get_row_buffer, render_rows
from pathtracer.core.sampling import normalize_seed
from pathtracer.output.ppm import write_pixel_rows, write_ppm_header

if TYPE_CHECKING:
    from pathtracer.scene.manager import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class CancelSignal(Protocol):
    """Anything with an is_set() method, e.g. threading.Event."""

    def is_set(self) -> bool: ...


class RenderCancelled(RuntimeError):
    """Raised when a render is stopped through its cancel signal."""


class Renderer:
    """Renders a scene through a camera, one batch of rows at a time.

    Attributes:
        camera: The camera configuration.
        seed: Seed of the per-pixel random streams.
        rows_per_batch: Rows rendered per kernel launch.
    """

    def __init__(self, camera: Camera, seed: int = 0, rows_per_batch: int = MAX_ROWS_PER_BATCH) -> None:
        """Initialize the renderer.

        Args:
            camera: Camera configuration.
            seed: Render seed. Any integer; folded to 31 bits.
            rows_per_batch: Rows per kernel launch, in [1, MAX_ROWS_PER_BATCH].

        Raises:
            ValueError: If the camera is invalid or rows_per_batch is out of
                range.
        """
        camera.validate()
        if not 1 <= rows_per_batch <= MAX_ROWS_PER_BATCH:
            raise ValueError(
                f"rows_per_batch = {rows_per_batch} must be in [1, {MAX_ROWS_PER_BATCH}]"
            )
        self.camera = camera
        self.seed = seed
        self.rows_per_batch = rows_per_batch

    @property
    def width(self) -> int:
        return self.camera.image_width

    @property
    def height(self) -> int:
        return self.camera.image_height

    def _prepare(self, scene: Scene) -> None:
        scene.upload()
        setup_camera(self.camera)

    def _iter_batches(
        self, scene: Scene
    ) -> Generator[tuple[int, npt.NDArray[np.int32]], None, None]:
        """Render batches lazily, yielding (first_row, bytes of shape (rows, width, 3))."""
        self._prepare(scene)
        kernel_seed = normalize_seed(self.seed)

        for row_start in range(0, self.height, self.rows_per_batch):
            row_count = min(self.rows_per_batch, self.height - row_start)
            render_rows(row_start, row_count, kernel_seed)
            logger.debug("Rendered rows %d-%d", row_start, row_start + row_count - 1)
            yield row_start, get_row_buffer(row_count, self.width)

    def iter_rows(self, scene: Scene) -> Generator[tuple[int, npt.NDArray[np.int32]], None, None]:
        """Render the image row by row.

        Args:
            scene: The scene to render. It is uploaded before the first row.

        Yields:
            Tuple of (row, pixels), top row first, where pixels is an int32
            array of shape (width, 3) holding display bytes.
        """
        for row_start, batch in self._iter_batches(scene):
            for offset in range(batch.shape[0]):
                yield row_start + offset, batch[offset]

    def render(
        self,
        scene: Scene,
        sink: BinaryIO,
        callback: ProgressCallback | None = None,
        cancel: CancelSignal | None = None,
    ) -> None:
        """Render the scene and stream it to ``sink`` as a P3 image.

        Args:
            scene: The scene to render.
            sink: Binary file-like object receiving the image.
            callback: Optional function called after each batch with
                (rows_done, total_rows).
            cancel: Optional signal checked before each batch.

        Raises:
            RenderCancelled: If ``cancel`` was set; nothing more is written.
            OSError: If writing to the sink fails.
        """
        width, height = self.width, self.height
        logger.info(
            "Rendering %dx%d image, %d spp, max depth %d, %d spheres, seed %d",
            width,
            height,
            self.camera.samples_per_pixel,
            self.camera.max_depth,
            len(scene),
            self.seed,
        )
        start = time.perf_counter()

        try:
            write_ppm_header(sink, width, height)

            with closing(self._iter_batches(scene)) as batches:
                rows_done = 0
                while rows_done < height:
                    if cancel is not None and cancel.is_set():
                        logger.warning("Render cancelled after %d of %d rows", rows_done, height)
                        raise RenderCancelled(
                            f"Render cancelled after {rows_done} of {height} rows"
                        )

                    _, batch = next(batches)
                    write_pixel_rows(sink, batch)
                    rows_done += batch.shape[0]

                    if callback is not None:
                        callback(rows_done, height)
        except OSError as e:
            logger.error("Error writing image: %s", e)
            raise

        logger.info("Render finished in %.2f s", time.perf_counter() - start)


def render(
    scene: Scene,
    camera: Camera,
    sink: BinaryIO,
    *,
    seed: int = 0,
    callback: ProgressCallback | None = None,
    cancel: CancelSignal | None = None,
) -> None:
    """Render ``scene`` through ``camera`` and write a P3 image to ``sink``.

    See Renderer.render for the meaning of the arguments and the exceptions
    raised.
    """
    Renderer(camera, seed=seed).render(scene, sink, callback=callback, cancel=cancel)
