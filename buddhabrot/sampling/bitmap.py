"""Immutable square boolean grid used by the rasterizer and the edge selector."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Bitmap:
    """A ``size`` x ``size`` grid of booleans stored flat and row-major.

    The storage is copied on construction and marked read-only, so every
    transform has to build a new bitmap.
    """

    size: int
    cells: np.ndarray

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError("size must be >= 1")
        cells = np.array(self.cells, dtype=np.bool_).reshape(-1)
        if cells.shape[0] != self.size * self.size:
            raise ValueError(f"expected {self.size * self.size} cells, got {cells.shape[0]}")
        cells.setflags(write=False)
        object.__setattr__(self, "cells", cells)

    @classmethod
    def from_grid(cls, grid: np.ndarray) -> "Bitmap":
        grid = np.asarray(grid, dtype=np.bool_)
        if grid.ndim != 2 or grid.shape[0] != grid.shape[1]:
            raise ValueError("grid must be a square 2D array")
        return cls(size=grid.shape[0], cells=grid)

    @classmethod
    def empty(cls, size: int) -> "Bitmap":
        return cls(size=size, cells=np.zeros(size * size, dtype=np.bool_))

    @property
    def grid(self) -> np.ndarray:
        """Read-only ``(size, size)`` view indexed ``[y, x]``."""
        return self.cells.reshape(self.size, self.size)

    def count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def __getitem__(self, xy: tuple[int, int]) -> bool:
        x, y = xy
        return bool(self.cells[y * self.size + x])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitmap):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self.cells, other.cells))

    def __hash__(self) -> int:
        return hash((self.size, self.cells.tobytes()))
