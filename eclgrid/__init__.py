"""
eclgrid – Eclipse deck grid geometry

Reads the RUNSPEC and GRID sections of an Eclipse deck and builds the grid
geometry: DIMENS gives the size, COORD/ZCORN or DX/DY/DZ(+V)/TOPS the shape.
See `geometry.py` for the keyword expansion rules, `grid.py` for the
EclipseGrid assembler and `cli.py` for the command-line interface.
"""
from .deck import Deck, KeywordPayload, Section, parse_deck_file, parse_deck_string
from .errors import (
    AmbiguousGridSpecificationError,
    DeckError,
    DeckParseError,
    DiscontinuousLayersError,
    EclGridError,
    GridClosedError,
    GridError,
    MissingDimensionsError,
    MissingKeywordError,
    MissingSectionError,
    SizeMismatchError,
    UnsupportedGridSpecificationError,
)
from .geometry import GridMode, select_mode
from .grid import EclipseGrid
from .indexing import GridDimensions

__all__ = [
    'Deck',
    'KeywordPayload',
    'Section',
    'parse_deck_file',
    'parse_deck_string',
    'EclipseGrid',
    'GridDimensions',
    'GridMode',
    'select_mode',
    'EclGridError',
    'DeckError',
    'DeckParseError',
    'MissingSectionError',
    'GridError',
    'GridClosedError',
    'MissingDimensionsError',
    'UnsupportedGridSpecificationError',
    'AmbiguousGridSpecificationError',
    'MissingKeywordError',
    'SizeMismatchError',
    'DiscontinuousLayersError',
]
