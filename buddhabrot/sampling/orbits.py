"""Per-worker Buddhabrot orbit sampling.

Each :class:`OrbitSampler` owns its histogram, its trajectory scratch buffer
and a one-cell progress counter. The hot loop is compiled with numba and
releases the GIL, so one sampler per thread scales across cores without any
locking: the only value another thread ever reads is the progress cell, and a
stale read there only skews the ETA.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numba import njit

from buddhabrot.sampling.coords import PLANE_MAX, PLANE_MIN, histogram_index
from buddhabrot.util.logging_setup import get_logger

DEFAULT_BAILOUT = 8.0
DEFAULT_ESCAPE = 4.0
DEFAULT_PROGRESS_STRIDE = 1000

_ONE = np.uint64(1)


@njit(nogil=True)
def _sample_kernel(counts, progress, trajectory, good_points, n_points, max_iter,
                   p_uniform, radius, seed, bailout, escape, stride):
    np.random.seed(seed)
    size = counts.shape[0]
    n_good = good_points.shape[0]
    visits = 0

    for k in range(n_points):
        if k % stride == 0:
            progress[0] = k + 1

        if n_good == 0 or np.random.random() < p_uniform:
            cr = np.random.uniform(PLANE_MIN, PLANE_MAX)
            ci = np.random.uniform(PLANE_MIN, PLANE_MAX)
        else:
            idx = np.random.randint(0, n_good)
            cr = np.random.uniform(good_points[idx, 0] - radius, good_points[idx, 0] + radius)
            ci = np.random.uniform(good_points[idx, 1] - radius, good_points[idx, 1] + radius)
        c = complex(cr, ci)

        z = 0j
        length = 0
        while length < max_iter and z.real * z.real + z.imag * z.imag < bailout:
            z = z * z + c
            trajectory[length] = z
            length += 1

        if z.real * z.real + z.imag * z.imag < escape:
            continue

        for j in range(length):
            zj = trajectory[j]
            if abs(zj.real) > PLANE_MAX or abs(zj.imag) > PLANE_MAX:
                continue
            x = histogram_index(zj.real, size)
            y = histogram_index(zj.imag, size)
            # the set is symmetric about the real axis, count the mirror too
            counts[y, x] += _ONE
            counts[size - y - 1, x] += _ONE
            visits += 1

    progress[0] = n_points
    return visits


class OrbitSampler:
    """Accumulate escaping orbits into a private ``size`` x ``size`` histogram.

    Proposals are drawn uniformly over ``[-2, 2]^2`` with probability
    ``p_uniform`` and otherwise uniformly inside a square of half-width
    ``radius`` around a random good point. Orbits are tracked while
    ``|z|^2 < bailout`` and only contribute when they end with
    ``|z|^2 >= escape``. Arithmetic is double precision.
    """

    def __init__(
        self,
        *,
        size: int,
        max_iter: int,
        p_uniform: float,
        good_points: Optional[np.ndarray],
        radius: float,
        seed: int,
        bailout: float = DEFAULT_BAILOUT,
        escape: float = DEFAULT_ESCAPE,
        progress_stride: int = DEFAULT_PROGRESS_STRIDE,
    ) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        if max_iter < 1:
            raise ValueError("max_iter must be >= 1")
        if not 0.0 <= p_uniform <= 1.0:
            raise ValueError("p_uniform must be within [0, 1]")
        if radius < 0:
            raise ValueError("radius must be >= 0")
        if escape > bailout:
            raise ValueError("escape threshold must not exceed the bailout margin")
        if progress_stride < 1:
            raise ValueError("progress_stride must be >= 1")

        if good_points is None:
            good_points = np.empty((0, 2), dtype=np.float64)
        good_points = np.asarray(good_points, dtype=np.float64).reshape(-1, 2)
        if good_points.shape[0] == 0 and p_uniform < 1.0:
            get_logger().warning("No good points available, sampler falls back to uniform proposals")

        self.size = size
        self.max_iter = max_iter
        self.p_uniform = float(p_uniform)
        self.good_points = good_points
        self.radius = float(radius)
        self.seed = int(seed)
        self._rng = np.random.default_rng(self.seed)
        self.bailout = float(bailout)
        self.escape = float(escape)
        self.progress_stride = int(progress_stride)

        self.counts = np.zeros((size, size), dtype=np.uint64)
        self._trajectory = np.empty(max_iter, dtype=np.complex128)
        self._progress = np.zeros(1, dtype=np.int64)
        self.visits = 0

    @property
    def progress(self) -> int:
        """Samples drawn so far; updated every ``progress_stride`` samples."""
        return int(self._progress[0])

    def sample(self, n_points: int) -> int:
        """Draw ``n_points`` proposals and return the number of in-bounds orbit visits recorded."""
        if n_points < 0:
            raise ValueError("n_points must be >= 0")

        # numba's generator is thread-local; reseed it with a per-call value derived from self.seed
        kernel_seed = int(self._rng.integers(0, 2**32))
        visits = _sample_kernel(
            self.counts, self._progress, self._trajectory, self.good_points,
            n_points, self.max_iter, self.p_uniform, self.radius, kernel_seed,
            self.bailout, self.escape, self.progress_stride,
        )
        self.visits += visits
        return visits
