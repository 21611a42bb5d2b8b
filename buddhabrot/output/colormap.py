"""Color lookup and histogram normalisation."""

from __future__ import annotations

from typing import Optional

import numpy as np
from matplotlib import colormaps as _mpl_colormaps

COLORMAP_NAMES = ("magma", "inferno", "plasma", "viridis", "cividis", "twilight", "cubehelix", "gray")


class Colormap:
    """A named colormap evaluated over a configurable ``[vmin, vmax]`` range."""

    def __init__(self, name: str, vmin: float = 0.0, vmax: float = 1.0) -> None:
        self.name = name
        self._cmap = _mpl_colormaps[name]
        self.vmin = float(vmin)
        self.vmax = float(vmax)

    def set_vrange(self, vmin: float, vmax: float) -> None:
        self.vmin = float(vmin)
        self.vmax = float(vmax)

    def __call__(self, values):
        """Return RGB floats in ``[0, 1]``; values outside the range are clamped."""
        values = np.asarray(values, dtype=np.float64)
        span = self.vmax - self.vmin
        if span > 0:
            t = (values - self.vmin) / span
        else:
            t = np.zeros_like(values)
        rgba = self._cmap(np.clip(t, 0.0, 1.0))
        return np.asarray(rgba)[..., :3]


def get_colormap(name: str) -> Colormap:
    if name not in COLORMAP_NAMES:
        raise ValueError(f"Unknown colormap {name!r}; choose one of: {', '.join(COLORMAP_NAMES)}")
    return Colormap(name)


def log_scale(counts: np.ndarray) -> np.ndarray:
    return np.log(np.maximum(counts, 1).astype(np.float32))


def colorize(counts: np.ndarray, cmap: Colormap, vmin: Optional[float] = None, vmax: Optional[float] = None) -> np.ndarray:
    """Log-scale ``counts`` and map them through ``cmap`` to a ``uint8`` RGB image."""
    scaled = log_scale(counts)
    lo = float(scaled.min()) if vmin is None else float(vmin)
    hi = float(scaled.max()) if vmax is None else float(vmax)
    cmap.set_vrange(lo, hi)
    rgb = cmap(scaled)
    return np.clip((256 * rgb).astype(np.int64), 0, 255).astype(np.uint8)
