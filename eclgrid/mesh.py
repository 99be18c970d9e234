"""
Mesh engine adapter: Eclipse geometry vectors -> xtgeo.Grid.

xtgeo keeps corner-point geometry as
- coordsv: (ncol+1, nrow+1, 6) float64 pillar end points (top xyz, bottom xyz)
- zcornsv: (ncol+1, nrow+1, nlay+1, 4) float32 depths per node and interface,
  one value for each of the four cells around the node (quadrants SW, SE, NW, NE)
- actnumsv: (ncol, nrow, nlay) int32

Eclipse gives COORD pillar by pillar (i fastest) and ZCORN with 8 corners per
cell laid out as (k, top/bottom, j, south/north, i, west/east). Cartesian
DX/DY/DZ/TOPS input is first turned into the same COORD/ZCORN pair.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import xtgeo

from .errors import DiscontinuousLayersError
from .indexing import GridDimensions, to_ijk_array

log = logging.getLogger(__name__)

# ------------------------------- Geometry constants --------------------------- #
Q_SW, Q_SE, Q_NW, Q_NE = 0, 1, 2, 3  # XTGeo quadrants at node/interface
# quadrant -> offset from node (I, J) to the cell in that quadrant
QUADRANT_OFFSETS = {
    Q_SW: (-1, -1),
    Q_SE: (0, -1),
    Q_NW: (-1, 0),
    Q_NE: (0, 0),
}


# ----------------------------- Cartesian to CPG ------------------------------ #
def cartesian_coord(dims: GridDimensions, dx: np.ndarray, dy: np.ndarray,
                    dz: np.ndarray, tops: np.ndarray) -> np.ndarray:
    """
    Vertical pillars from cumulative DX/DY of the top layer, origin at (0, 0).

    Pillar x positions follow the DX of the row the pillar starts (last row for
    the northern edge); y positions follow DY of the column likewise.
    """
    nx, ny = dims.nx, dims.ny
    dx0 = np.asarray(dx, dtype=np.float64)[: dims.area].reshape(ny, nx)
    dy0 = np.asarray(dy, dtype=np.float64)[: dims.area].reshape(ny, nx)

    x_edges = np.concatenate([np.zeros((ny, 1)), np.cumsum(dx0, axis=1)], axis=1)  # (ny, nx+1)
    y_edges = np.concatenate([np.zeros((1, nx)), np.cumsum(dy0, axis=0)], axis=0)  # (ny+1, nx)
    rows = np.minimum(np.arange(ny + 1), ny - 1)
    cols = np.minimum(np.arange(nx + 1), nx - 1)
    px = x_edges[rows, :]            # (ny+1, nx+1)
    py = y_edges[:, cols]            # (ny+1, nx+1)

    tops = np.asarray(tops, dtype=np.float64)
    bottoms = tops + np.asarray(dz, dtype=np.float64)
    ztop = float(min(tops.min(), bottoms.min()))
    zbot = float(max(tops.max(), bottoms.max()))

    coord = np.empty((ny + 1, nx + 1, 6), dtype=np.float64)
    coord[..., 0] = px
    coord[..., 1] = py
    coord[..., 2] = ztop
    coord[..., 3] = px
    coord[..., 4] = py
    coord[..., 5] = zbot
    return coord.ravel()


def cartesian_zcorn(dims: GridDimensions, dz: np.ndarray, tops: np.ndarray) -> np.ndarray:
    """Eclipse ZCORN with every cell a box from TOPS down to TOPS + DZ."""
    nx, ny, nz = dims.as_tuple()
    top = np.asarray(tops, dtype=np.float64).reshape(nz, ny, nx)
    bottom = top + np.asarray(dz, dtype=np.float64).reshape(nz, ny, nx)
    zc = np.empty((nz, 2, ny, 2, nx, 2), dtype=np.float64)
    zc[:, 0] = top[:, :, None, :, None]
    zc[:, 1] = bottom[:, :, None, :, None]
    return zc.ravel()


# ------------------------------ Eclipse to XTGeo ----------------------------- #
def coord_to_xtgeo(dims: GridDimensions, coord: np.ndarray) -> np.ndarray:
    c = np.asarray(coord, dtype=np.float64).reshape(dims.ny + 1, dims.nx + 1, 6)
    return np.ascontiguousarray(c.transpose(1, 0, 2), dtype=np.float64)


def zcorn_to_xtgeo(dims: GridDimensions, zcorn: np.ndarray) -> np.ndarray:
    """
    Build ZCORN in XTGeo 4-D shape: (nx+1, ny+1, nz+1, 4), float32.

    Interface k < nz carries the top corners of layer k, interface nz the
    bottom corners of the last layer. Quadrants outside the grid repeat the
    nearest cell's corner on that node.
    """
    nx, ny, nz = dims.as_tuple()
    zc = np.asarray(zcorn, dtype=np.float64).reshape(nz, 2, ny, 2, nx, 2)

    K = np.arange(nz + 1)
    layer = np.minimum(K, nz - 1)[None, None, :]
    side = (K == nz).astype(np.intp)[None, None, :]
    I = np.arange(nx + 1)
    J = np.arange(ny + 1)

    z4 = np.empty((nx + 1, ny + 1, nz + 1, 4), dtype=np.float32)
    for q, (di, dj) in QUADRANT_OFFSETS.items():
        ci = np.clip(I + di, 0, nx - 1)
        cj = np.clip(J + dj, 0, ny - 1)
        east = I - ci      # 0: node is the cell's west corner, 1: east
        north = J - cj
        z4[:, :, :, q] = zc[
            layer, side,
            cj[None, :, None], north[None, :, None],
            ci[:, None, None], east[:, None, None],
        ]
    return z4


def check_layer_continuity(dims: GridDimensions, dz: np.ndarray, tops: np.ndarray) -> None:
    tops = np.asarray(tops, dtype=np.float64)
    bottoms = tops + np.asarray(dz, dtype=np.float64)
    below, above = tops[dims.area:], bottoms[: -dims.area]
    bad = np.flatnonzero(~np.isclose(below, above))
    if bad.size:
        index = int(bad[0]) + dims.area
        raise DiscontinuousLayersError(index, dims.ijk(index), float(above[bad[0]]), float(below[bad[0]]))


def create_mesh(dims: GridDimensions, coord: np.ndarray, zcorn: np.ndarray,
                actnum: Optional[np.ndarray] = None, name: Optional[str] = None) -> xtgeo.Grid:
    """Hand Eclipse COORD/ZCORN/ACTNUM to xtgeo, which owns the assembled grid."""
    if actnum is None:
        actnum = np.ones(dims.volume, dtype=np.int32)
    coordsv = coord_to_xtgeo(dims, coord)
    zcornsv = zcorn_to_xtgeo(dims, zcorn)
    actnumsv = to_ijk_array(dims, np.asarray(actnum, dtype=np.int32)).astype(np.int32)
    xgrid = xtgeo.Grid(coordsv=coordsv, zcornsv=zcornsv, actnumsv=actnumsv, name=name or "eclgrid")
    log.debug("Built xtgeo grid %dx%dx%d (%d active)", xgrid.ncol, xgrid.nrow, xgrid.nlay, int(actnumsv.sum()))
    return xgrid


def create_cartesian_mesh(dims: GridDimensions, dx: np.ndarray, dy: np.ndarray, dz: np.ndarray,
                          tops: np.ndarray, actnum: Optional[np.ndarray] = None,
                          name: Optional[str] = None) -> xtgeo.Grid:
    """
    Box cells from DX/DY/DZ/TOPS.

    xtgeo keeps one depth per node and interface, so the top of every layer
    below the first must equal the bottom of the cell above it.
    """
    check_layer_continuity(dims, dz, tops)
    coord = cartesian_coord(dims, dx, dy, dz, tops)
    zcorn = cartesian_zcorn(dims, dz, tops)
    return create_mesh(dims, coord, zcorn, actnum=actnum, name=name)
