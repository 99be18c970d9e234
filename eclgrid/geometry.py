"""
Keyword-to-geometry resolution for Eclipse grids.

Decides how the GRID section describes the geometry and expands its keywords
into dense per-cell vectors in natural order (i fastest, then j, then k):

- DX/DY/DZ given per cell, or DXV/DYV/DZV given as a row vector and scattered.
- DZ may give only the top layer; deeper layers copy the layer above.
- TOPS may give only the top layer; deeper layers stack on the layer above
  (top of layer k = top of layer k-1 + DZ of layer k-1).
- COORD/ZCORN corner-point input is size checked and passed through.

Only the query contract in SectionLike is used, so any section object with
those three methods can drive it.
"""
from __future__ import annotations

import enum
import logging
from typing import Protocol

import numpy as np

from .errors import (
    AmbiguousGridSpecificationError,
    MissingDimensionsError,
    MissingKeywordError,
    SizeMismatchError,
    UnsupportedGridSpecificationError,
)
from .indexing import GridDimensions

log = logging.getLogger(__name__)

# dim -> (per-cell keyword, row-vector keyword)
AXIS_KEYWORDS = {
    0: ("DX", "DXV"),
    1: ("DY", "DYV"),
    2: ("DZ", "DZV"),
}


class SectionLike(Protocol):
    def has_keyword(self, name: str) -> bool: ...

    def get_keyword(self, name: str): ...

    def get_record_field(self, name: str, record_index: int, field_name: str) -> int: ...


class GridMode(enum.Enum):
    CORNER_POINT = "corner-point"
    CARTESIAN = "cartesian"
    INVALID = "invalid"


def _payload(section: SectionLike, name: str) -> np.ndarray:
    kw = section.get_keyword(name)
    values = getattr(kw, "values", kw)
    return np.array(values, dtype=np.float64).ravel()


# ------------------------------ Dimensions ----------------------------------- #
def read_dimensions(runspec: SectionLike) -> GridDimensions:
    """Read NX, NY, NZ from the first DIMENS record."""
    if not runspec.has_keyword("DIMENS"):
        raise MissingDimensionsError()
    nx, ny, nz = (runspec.get_record_field("DIMENS", 0, f) for f in ("NX", "NY", "NZ"))
    try:
        return GridDimensions(nx, ny, nz)
    except ValueError as e:
        raise MissingDimensionsError(f"DIMENS must hold three positive grid dimensions: {e}") from e


# ---------------------------------- Mode ------------------------------------- #
def has_corner_point_keywords(section: SectionLike) -> bool:
    return section.has_keyword("ZCORN") and section.has_keyword("COORD")


def has_cartesian_keywords(section: SectionLike) -> bool:
    for d_key, dv_key in AXIS_KEYWORDS.values():
        if not (section.has_keyword(d_key) or section.has_keyword(dv_key)):
            return False
    return section.has_keyword("TOPS")


def select_mode(section: SectionLike) -> GridMode:
    """Corner point takes precedence over Cartesian when both keyword sets are complete."""
    if has_corner_point_keywords(section):
        return GridMode.CORNER_POINT
    if has_cartesian_keywords(section):
        return GridMode.CARTESIAN
    return GridMode.INVALID


def resolve_mode(section: SectionLike) -> GridMode:
    """Like select_mode, but refuses INVALID and the corner-point/Cartesian overlap."""
    mode = select_mode(section)
    if mode is GridMode.INVALID:
        raise UnsupportedGridSpecificationError()
    if mode is GridMode.CORNER_POINT and has_cartesian_keywords(section):
        raise AmbiguousGridSpecificationError()
    return mode


# ------------------------------ Layer helpers -------------------------------- #
def extend_layers(values: np.ndarray, dims: GridDimensions, step=None) -> np.ndarray:
    """
    Fill the cells from len(values) up to dims.volume one layer at a time.

    Cell t gets values[t - area] (plus step[t - area] when given). Requires
    len(values) >= area; shorter or complete inputs are returned unchanged.
    """
    n = values.size
    if n < dims.area or n >= dims.volume:
        return values
    out = np.empty(dims.volume, dtype=np.float64)
    out[:n] = values
    filled = n
    while filled < dims.volume:
        # sources all lie in the already filled part
        end = min(filled + dims.area, dims.volume)
        src = slice(filled - dims.area, end - dims.area)
        out[filled:end] = out[src] if step is None else out[src] + step[src]
        filled = end
    return out


def scatter_dim(dims: GridDimensions, dim: int, dv: np.ndarray) -> np.ndarray:
    """Broadcast a row vector along axis ``dim`` over the two other axes."""
    coords = dims.cell_coordinates()
    return np.asarray(dv, dtype=np.float64)[coords[:, dim]]


# ------------------------------ Axis vectors --------------------------------- #
def build_axis_vector(dims: GridDimensions, dim: int, d_key: str, dv_key: str,
                      section: SectionLike) -> np.ndarray:
    """
    Dense per-cell extents along one axis from ``d_key`` or its row vector ``dv_key``.

    The row vector is always checked against nx, whatever the axis.
    """
    if section.has_keyword(d_key):
        d = _payload(section, d_key)
        if d_key == "DZ" and dims.area <= d.size < dims.volume:
            # DZ may specify the top layer only
            log.debug("Extending %s from %d to %d values", d_key, d.size, dims.volume)
            d = extend_layers(d, dims)
        if d.size != dims.volume:
            raise SizeMismatchError(d_key, dims.volume, d.size)
        return d

    if not section.has_keyword(dv_key):
        raise MissingKeywordError(d_key, f"The GRID section needs {d_key} or {dv_key}")
    dv = _payload(section, dv_key)
    if dv.size != dims.nx:
        raise SizeMismatchError(dv_key, dims.nx, dv.size)
    if dv.size < dims.extent(dim):
        raise SizeMismatchError(dv_key, dims.extent(dim), dv.size)
    return scatter_dim(dims, dim, dv)


def build_tops_vector(dims: GridDimensions, dz: np.ndarray, section: SectionLike) -> np.ndarray:
    """Dense cell top depths; a top-layer-only TOPS is stacked down with DZ."""
    if not section.has_keyword("TOPS"):
        raise MissingKeywordError("TOPS")
    tops = _payload(section, "TOPS")
    if dims.area <= tops.size < dims.volume:
        log.debug("Extending TOPS from %d to %d values", tops.size, dims.volume)
        tops = extend_layers(tops, dims, step=np.asarray(dz, dtype=np.float64))
    if tops.size != dims.volume:
        raise SizeMismatchError("TOPS", dims.volume, tops.size)
    return tops


# ---------------------------- Corner-point input ----------------------------- #
def build_coord_vector(dims: GridDimensions, section: SectionLike) -> np.ndarray:
    if not section.has_keyword("COORD"):
        raise MissingKeywordError("COORD")
    coord = _payload(section, "COORD")
    expected = 6 * (dims.nx + 1) * (dims.ny + 1)
    if coord.size != expected:
        raise SizeMismatchError("COORD", expected, coord.size)
    return coord


def build_zcorn_vector(dims: GridDimensions, section: SectionLike) -> np.ndarray:
    if not section.has_keyword("ZCORN"):
        raise MissingKeywordError("ZCORN")
    zcorn = _payload(section, "ZCORN")
    if zcorn.size != 8 * dims.volume:
        raise SizeMismatchError("ZCORN", 8 * dims.volume, zcorn.size)
    return zcorn


def build_actnum_vector(dims: GridDimensions, section: SectionLike) -> np.ndarray:
    """ACTNUM flags, all cells active when the keyword is absent."""
    if not section.has_keyword("ACTNUM"):
        return np.ones(dims.volume, dtype=np.int32)
    actnum = _payload(section, "ACTNUM")
    if actnum.size != dims.volume:
        raise SizeMismatchError("ACTNUM", dims.volume, actnum.size)
    return actnum.astype(np.int32)
