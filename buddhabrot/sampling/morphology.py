"""Morphological selection of seed points around the Mandelbrot boundary.

The selector brackets the set's boundary from both sides (the inner edge of
the set and the inner edge of its complement) and then widens the band
outwards with repeated dilations, since the orbits that matter for a
Buddhabrot start slightly outside the set.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from buddhabrot.sampling.bitmap import Bitmap
from buddhabrot.sampling.coords import grid_to_complex
from buddhabrot.sampling.rasterizer import binary_mandelbrot
from buddhabrot.util.logging_setup import get_logger


def _neighbours(grid: np.ndarray, fill: bool) -> tuple[np.ndarray, ...]:
    padded = np.pad(grid, 1, mode="constant", constant_values=fill)
    return (
        padded[:-2, 1:-1],  # up
        padded[2:, 1:-1],   # down
        padded[1:-1, :-2],  # left
        padded[1:-1, 2:],   # right
    )


def edge(bitmap: Bitmap) -> Bitmap:
    """Cells that are set and have at least one unset 4-neighbour."""
    grid = bitmap.grid
    # cells outside the grid are absent, i.e. never an unset neighbour
    up, down, left, right = _neighbours(grid, fill=True)
    touches_unset = ~up | ~down | ~left | ~right
    return Bitmap.from_grid(grid & touches_unset)


def invert(bitmap: Bitmap) -> Bitmap:
    return Bitmap(size=bitmap.size, cells=~bitmap.cells)


def bitmap_or(a: Bitmap, b: Bitmap) -> Bitmap:
    if a.size != b.size:
        raise ValueError(f"bitmap sizes differ: {a.size} != {b.size}")
    return Bitmap(size=a.size, cells=a.cells | b.cells)


def dilate(bitmap: Bitmap) -> Bitmap:
    """Grow the set region by one cell in each 4-connected direction."""
    grid = bitmap.grid
    up, down, left, right = _neighbours(grid, fill=False)
    return Bitmap.from_grid(grid | up | down | left | right)


def select_edges(bitmap: Bitmap, dilations: int) -> Bitmap:
    if dilations < 0:
        raise ValueError("dilations must be >= 0")

    result = bitmap_or(edge(bitmap), edge(invert(bitmap)))
    current = bitmap
    for _ in range(dilations):
        current = dilate(current)
        result = bitmap_or(result, edge(invert(current)))
    return result


def collect_points(bitmap: Bitmap) -> np.ndarray:
    """Plane coordinates ``(re, im)`` of every set cell, in row-major order."""
    ys, xs = np.nonzero(bitmap.grid)
    points = np.column_stack((grid_to_complex(xs, bitmap.size), grid_to_complex(ys, bitmap.size)))
    points = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 2)
    points.setflags(write=False)
    return points


def find_good_points(size: int, max_iter: int, dilations: int, seed: Optional[int] = None) -> np.ndarray:
    logger = get_logger()

    mandel = binary_mandelbrot(size, max_iter, seed=seed)
    logger.info("Binary Mandelbrot done: %s of %s cells inside", mandel.count(), size * size)

    selected = select_edges(mandel, dilations)
    points = collect_points(selected)
    logger.info("Collected %s edge points (dilations=%s)", points.shape[0], dilations)
    return points
