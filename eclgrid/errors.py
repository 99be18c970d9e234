"""
Exception hierarchy for eclgrid.

Grid construction is all-or-nothing: every GridError aborts the current
construction and no partial grid is handed back to the caller.
"""
from __future__ import annotations

import os
from typing import Optional


class EclGridError(Exception):
    """Root of all eclgrid errors."""


# ----------------------------------- Deck ------------------------------------ #
class DeckError(EclGridError):
    """Raised for problems with the deck itself (syntax, missing sections)."""


class DeckParseError(DeckError):
    """Invalid deck syntax, reported with file name and line number."""

    def __init__(self, message: str, file_name: Optional[str] = None, line_number: int = 0):
        self.file_name = file_name
        self.line_number = line_number
        where = os.path.basename(file_name) if file_name else "<string>"
        super().__init__(f"{where}:{line_number}: {message}")


class MissingSectionError(DeckError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"The deck has no {section} section")


# ----------------------------------- Grid ------------------------------------ #
class GridError(EclGridError, ValueError):
    """Grid geometry could not be constructed from the deck."""


class MissingDimensionsError(GridError):
    def __init__(self, message: str = "The RUNSPEC section must have the DIMENS keyword with grid dimensions"):
        super().__init__(message)


class UnsupportedGridSpecificationError(GridError):
    def __init__(self, message: str = "The GRID section must have COORD / ZCORN or D?? keywords"):
        super().__init__(message)


class AmbiguousGridSpecificationError(UnsupportedGridSpecificationError):
    def __init__(self, message: str = "The GRID section has both COORD / ZCORN and D?? / TOPS keywords"):
        super().__init__(message)


class MissingKeywordError(GridError):
    def __init__(self, keyword: str, message: Optional[str] = None):
        self.keyword = keyword
        super().__init__(message or f"The GRID section is missing the {keyword} keyword")


class SizeMismatchError(GridError):
    """A payload does not have the dense size its keyword requires."""

    def __init__(self, keyword: str, expected: int, actual: int):
        self.keyword = keyword
        self.expected = expected
        self.actual = actual
        super().__init__(f"{keyword} size mismatch: expected {expected} values, got {actual}")


class DiscontinuousLayersError(GridError):
    """TOPS leaves a gap or an overlap between a cell and the cell above it."""

    def __init__(self, index: int, ijk, expected: float, actual: float):
        self.index = index
        self.ijk = ijk
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"TOPS of cell {ijk} is {actual}, but the cell above ends at {expected}; "
            "layers must stack without gaps"
        )


class GridClosedError(GridError):
    def __init__(self):
        super().__init__("The grid has been closed and no longer owns a mesh")
