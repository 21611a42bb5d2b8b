"""Escape-time rasterization of the Mandelbrot set into a binary bitmap."""

from __future__ import annotations

from typing import Optional

import numpy as np
from numba import njit

from buddhabrot.sampling.bitmap import Bitmap
from buddhabrot.util.logging_setup import get_logger

ESCAPE_RADIUS_SQ = 4.0

@njit(nogil=True)
def _rasterize_kernel(out, size, max_iter, seed):
    # single precision throughout; this pass only needs the coarse set shape
    np.random.seed(seed)
    lo = np.float32(-2.0)
    span = np.float32(4.0)
    fsize = np.float32(size)
    jitter = np.float32(0.25) * span / fsize
    limit = np.float32(ESCAPE_RADIUS_SQ)

    for y in range(size):
        im = lo + span * np.float32(y) / fsize
        for x in range(size):
            re = lo + span * np.float32(x) / fsize
            cr = re + np.float32(np.random.uniform(-jitter, jitter))
            ci = im + np.float32(np.random.uniform(-jitter, jitter))

            zr = np.float32(0.0)
            zi = np.float32(0.0)
            i = 0
            while i < max_iter and zr * zr + zi * zi < limit:
                t = zr * zr - zi * zi + cr
                zi = np.float32(2.0) * zr * zi + ci
                zr = t
                i += 1

            out[y * size + x] = zr * zr + zi * zi < limit

def binary_mandelbrot(size: int, max_iter: int, seed: Optional[int] = None) -> Bitmap:
    """Return the in/out bitmap of the Mandelbrot set on a ``size`` x ``size`` lattice.

    A cell is true when its (jittered) point has not escaped ``|z|^2 >= 4``
    within ``max_iter`` iterations.
    """
    if size < 1:
        raise ValueError("size must be >= 1")
    if max_iter < 0:
        raise ValueError("max_iter must be >= 0")

    if seed is None:
        seed = int(np.random.SeedSequence().generate_state(1)[0])

    logger = get_logger()
    logger.info("Rasterizing binary Mandelbrot size=%s max_iter=%s", size, max_iter)

    cells = np.zeros(size * size, dtype=np.bool_)
    _rasterize_kernel(cells, size, max_iter, seed)
    return Bitmap(size=size, cells=cells)
