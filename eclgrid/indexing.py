"""
Grid dimensions and the natural cell ordering.

Cells are stored with i varying fastest, then j, then k:
``index = k*ny*nx + j*nx + i``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class GridDimensions:
    nx: int
    ny: int
    nz: int

    def __post_init__(self):
        for axis, n in (("nx", self.nx), ("ny", self.ny), ("nz", self.nz)):
            if int(n) != n or n <= 0:
                raise ValueError(f"Grid dimension {axis} must be a positive integer, got {n!r}")

    @property
    def area(self) -> int:
        """Number of cells in one horizontal layer."""
        return self.nx * self.ny

    @property
    def volume(self) -> int:
        return self.nx * self.ny * self.nz

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.nx, self.ny, self.nz)

    def extent(self, dim: int) -> int:
        """Number of cells along axis ``dim`` (0=i, 1=j, 2=k)."""
        return self.as_tuple()[dim]

    def index(self, i: int, j: int, k: int) -> int:
        if not (0 <= i < self.nx and 0 <= j < self.ny and 0 <= k < self.nz):
            raise IndexError(f"Cell ({i},{j},{k}) outside grid {self.nx}x{self.ny}x{self.nz}")
        return k * self.ny * self.nx + j * self.nx + i

    def ijk(self, index: int) -> Tuple[int, int, int]:
        if not 0 <= index < self.volume:
            raise IndexError(f"Cell index {index} outside grid of {self.volume} cells")
        k, rest = divmod(index, self.area)
        j, i = divmod(rest, self.nx)
        return i, j, k

    def cell_coordinates(self) -> np.ndarray:
        """
        Return a (volume, 3) integer array of (i, j, k) for every cell in natural order.
        """
        k, j, i = np.meshgrid(
            np.arange(self.nz), np.arange(self.ny), np.arange(self.nx), indexing="ij"
        )
        return np.stack([i.ravel(), j.ravel(), k.ravel()], axis=1)


def to_ijk_array(dims: GridDimensions, values: np.ndarray) -> np.ndarray:
    """Reshape a natural-order cell vector into an (nx, ny, nz) array."""
    return np.ascontiguousarray(np.asarray(values).reshape(dims.nz, dims.ny, dims.nx).transpose(2, 1, 0))
