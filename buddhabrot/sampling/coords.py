"""Linear maps between grid indices and the [-2, 2] x [-2, 2] plane."""

from __future__ import annotations

import numpy as np
from numba import njit

PLANE_MIN = -2.0
PLANE_MAX = 2.0
PLANE_SPAN = PLANE_MAX - PLANE_MIN

def grid_to_complex(index, size: int):
    """Map a lattice index (scalar or array) onto the plane, the rasterizer's mapping."""
    return PLANE_MIN + PLANE_SPAN * np.asarray(index, dtype=np.float64) / size

def complex_to_grid(value, size: int):
    """Inverse of :func:`grid_to_complex`, rounded to the nearest lattice index."""
    idx = np.rint((np.asarray(value, dtype=np.float64) - PLANE_MIN) * size / PLANE_SPAN)
    return np.clip(idx, 0, size - 1).astype(np.int64)

@njit(nogil=True)
def histogram_index(value: float, size: int) -> int:
    # clamp into [0, 1] then stretch over [0, size - 1]; truncation picks the cell
    t = (value - PLANE_MIN) / PLANE_SPAN
    if t < 0.0:
        t = 0.0
    elif t > 1.0:
        t = 1.0
    return int(t * (size - 1))
