"""
Shared pytest fixtures for the test suite.

DictSection stands in for a deck section so the geometry code can be tested
without going through the deck reader; the BOX_DECK text exercises the
reader end to end.
"""

import numpy as np
import pytest

from eclgrid.deck import KeywordPayload


class DictSection:
    """Section backed by plain dicts; records every keyword query."""

    def __init__(self, keywords=None, records=None):
        self.keywords = {k: np.asarray(v, dtype=float) for k, v in (keywords or {}).items()}
        self.records = dict(records or {})
        self.queries = []

    def has_keyword(self, name):
        self.queries.append(name)
        return name in self.keywords or name in self.records

    def get_keyword(self, name):
        self.queries.append(name)
        return KeywordPayload(name, self.keywords[name])

    def get_record_field(self, name, record_index, field_name):
        self.queries.append(name)
        return int(self.records[name][record_index][field_name])


def runspec(nx, ny, nz):
    return DictSection(records={"DIMENS": [{"NX": nx, "NY": ny, "NZ": nz}]})


# =============================================================================
# Deck text
# =============================================================================

BOX_DECK = """\
-- 2x2x2 box model, top layer given for DZ and TOPS
RUNSPEC
TITLE
Simple box model

DIMENS
 2 2 2 /

METRIC
OIL
WATER

GRID
DX
 8*100.0 /
DY
 8*50 /
DZ
 4*10 /   top layer only
TOPS
 4*2000 /
PORO
 8*0.25 /

PROPS

SOLUTION

SCHEDULE
END
"""


@pytest.fixture
def box_deck_text():
    return BOX_DECK


@pytest.fixture
def box_deck_file(tmp_path):
    path = tmp_path / "BOX.DATA"
    path.write_text(BOX_DECK)
    return path
