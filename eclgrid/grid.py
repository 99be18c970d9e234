from __future__ import annotations

import logging
from typing import Optional

from .deck import Deck
from .errors import GridClosedError
from .geometry import (
    AXIS_KEYWORDS,
    GridMode,
    SectionLike,
    build_actnum_vector,
    build_axis_vector,
    build_coord_vector,
    build_tops_vector,
    build_zcorn_vector,
    read_dimensions,
    resolve_mode,
)
from .indexing import GridDimensions
from . import mesh

log = logging.getLogger(__name__)


class EclipseGrid:
    """
    Grid geometry built from the RUNSPEC and GRID sections of a deck.

    The assembled xtgeo grid is owned by this object until ``close()`` (also
    called on leaving a ``with`` block); after that the accessors raise
    GridClosedError.
    """

    def __init__(self, runspec_section: SectionLike, grid_section: SectionLike, name: Optional[str] = None):
        self._dims = read_dimensions(runspec_section)
        self._mode = resolve_mode(grid_section)
        dims = self._dims

        if self._mode is GridMode.CARTESIAN:
            dx, dy, dz = (
                build_axis_vector(dims, dim, d_key, dv_key, grid_section)
                for dim, (d_key, dv_key) in sorted(AXIS_KEYWORDS.items())
            )
            tops = build_tops_vector(dims, dz, grid_section)
            actnum = build_actnum_vector(dims, grid_section)
            self._mesh = mesh.create_cartesian_mesh(dims, dx, dy, dz, tops, actnum=actnum, name=name)
        else:
            coord = build_coord_vector(dims, grid_section)
            zcorn = build_zcorn_vector(dims, grid_section)
            actnum = build_actnum_vector(dims, grid_section)
            self._mesh = mesh.create_mesh(dims, coord, zcorn, actnum=actnum, name=name)

        log.info("Built %s grid %dx%dx%d", self._mode.value, dims.nx, dims.ny, dims.nz)

    @classmethod
    def from_deck(cls, deck: Deck, name: Optional[str] = None) -> "EclipseGrid":
        runspec = deck.section("RUNSPEC")
        read_dimensions(runspec)  # DIMENS problems are reported before a missing GRID section
        return cls(runspec, deck.section("GRID"), name=name)

    # ------------------------------------------------------------------ #
    @property
    def dims(self) -> GridDimensions:
        return self._dims

    @property
    def mode(self) -> GridMode:
        return self._mode

    @property
    def closed(self) -> bool:
        return self._mesh is None

    @property
    def mesh(self):
        """The owned xtgeo.Grid."""
        if self._mesh is None:
            raise GridClosedError()
        return self._mesh

    def get_nx(self) -> int:
        return int(self.mesh.ncol)

    def get_ny(self) -> int:
        return int(self.mesh.nrow)

    def get_nz(self) -> int:
        return int(self.mesh.nlay)

    def close(self) -> None:
        if self._mesh is not None:
            log.debug("Releasing mesh of %dx%dx%d grid", *self._dims.as_tuple())
            self._mesh = None

    def __enter__(self) -> "EclipseGrid":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else self._mode.value
        return f"EclipseGrid({self._dims.nx}x{self._dims.ny}x{self._dims.nz}, {state})"
