"""
Minimal Eclipse deck reader.

Parses the keyword/record layout of an Eclipse ``.DATA``/``.GRDECL`` deck into
DeckKeyword objects and exposes named sections through the small query
contract the grid code consumes (``has_keyword``, ``get_keyword``,
``get_record_field``).

Conventions handled:
- ``--`` starts a comment that runs to the end of the line.
- Data items run until ``/``; anything after the terminating slash is ignored.
- ``n*v`` repeats ``v`` n times; a bare ``n*`` defaults n record items.
- ``TITLE`` takes the following line as free text.
- ``INCLUDE`` splices another file, path relative to the including file.
- Unknown keywords are kept and consume lines up to the next lone keyword.

Numeric payloads are returned in SI units (see UNIT_SYSTEMS).
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np

from .errors import DeckParseError, MissingSectionError

log = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 30

SECTION_NAMES = ("RUNSPEC", "GRID", "EDIT", "PROPS", "REGIONS", "SOLUTION", "SUMMARY", "SCHEDULE")

# Keyword payload kinds
NONE, TITLE, RECORD, ARRAY = "none", "title", "record", "array"

# ------------------------------- Unit systems -------------------------------- #
DARCY = 9.869233e-13
UNIT_SYSTEMS: Dict[str, Dict[str, float]] = {
    "METRIC": {"length": 1.0, "permeability": 1.0e-3 * DARCY},
    "FIELD": {"length": 0.3048, "permeability": 1.0e-3 * DARCY},
    "LAB": {"length": 0.01, "permeability": 1.0e-3 * DARCY},
}
DEFAULT_UNIT_SYSTEM = "METRIC"


@dataclass(frozen=True)
class KeywordSpec:
    name: str
    kind: str
    sections: Tuple[str, ...] = ()
    items: Tuple[str, ...] = ()
    dimension: Optional[str] = None
    integer: bool = False


def _specs(kind: str, sections: Tuple[str, ...], names: Sequence[str], **kwargs) -> Dict[str, KeywordSpec]:
    return {n: KeywordSpec(n, kind, sections, **kwargs) for n in names}


_ANY = SECTION_NAMES
KEYWORDS: Dict[str, KeywordSpec] = {}
KEYWORDS.update(_specs(NONE, (), SECTION_NAMES))
KEYWORDS.update(_specs(NONE, _ANY, ("ECHO", "NOECHO", "END")))
KEYWORDS.update(_specs(RECORD, _ANY, ("INCLUDE",), items=("FILENAME",)))
KEYWORDS.update(_specs(TITLE, ("RUNSPEC",), ("TITLE",)))
KEYWORDS.update(_specs(NONE, ("RUNSPEC",), (
    "METRIC", "FIELD", "LAB", "OIL", "WATER", "GAS", "DISGAS", "VAPOIL", "UNIFOUT", "UNIFIN", "NOSIM",
)))
KEYWORDS.update(_specs(RECORD, ("RUNSPEC",), ("DIMENS",), items=("NX", "NY", "NZ")))
KEYWORDS.update(_specs(RECORD, ("RUNSPEC",), ("START",), items=("DAY", "MONTH", "YEAR", "TIME")))
KEYWORDS.update(_specs(RECORD, ("RUNSPEC",), ("EQLDIMS",), items=("NTEQUL", "DEPTH_NODES_P", "DEPTH_NODES_TAB")))
KEYWORDS.update(_specs(RECORD, ("RUNSPEC",), ("TABDIMS",), items=("NTSFUN", "NTPVT", "NSSFUN", "NPPVT")))
KEYWORDS.update(_specs(RECORD, ("RUNSPEC",), ("WELLDIMS",), items=("MAXWELLS", "MAXCONN", "MAXGROUPS", "MAX_GROUPSIZE")))
KEYWORDS.update(_specs(NONE, ("GRID",), ("INIT", "NEWTRAN", "OLDTRAN")))
KEYWORDS.update(_specs(RECORD, ("GRID",), ("SPECGRID",), items=("NX", "NY", "NZ", "NUMRES", "COORD_TYPE")))
KEYWORDS.update(_specs(RECORD, ("GRID",), ("MAPAXES",), items=("X1", "Y1", "X2", "Y2", "X3", "Y3")))
KEYWORDS.update(_specs(ARRAY, ("GRID", "EDIT"), (
    "DX", "DY", "DZ", "DXV", "DYV", "DZV", "TOPS", "COORD", "ZCORN",
), dimension="length"))
KEYWORDS.update(_specs(ARRAY, ("GRID",), ("ACTNUM",), integer=True))
KEYWORDS.update(_specs(ARRAY, ("GRID", "EDIT"), ("PORO", "NTG")))
KEYWORDS.update(_specs(ARRAY, ("GRID",), ("PERMX", "PERMY", "PERMZ"), dimension="permeability"))
KEYWORDS.update(_specs(ARRAY, ("REGIONS",), ("SATNUM", "PVTNUM", "EQLNUM", "FIPNUM"), integer=True))
KEYWORDS.update(_specs(ARRAY, ("SOLUTION",), ("PRESSURE", "SWAT", "SGAS")))


# --------------------------------- Tokens ------------------------------------ #
_TOKEN_RE = re.compile(r"'[^']*'|/|[^\s/']+")
_KEYWORD_RE = re.compile(r"^[A-Z][A-Z0-9_]{0,7}$")
_REPEAT_RE = re.compile(r"^(\d+)\*(.*)$")


def _strip_comment(line: str) -> str:
    # "--" inside a quoted string is not a comment
    in_quote = False
    for pos, ch in enumerate(line):
        if ch == "'":
            in_quote = not in_quote
        elif not in_quote and line.startswith("--", pos):
            return line[:pos]
    return line


def _tokenize(line: str) -> List[str]:
    return _TOKEN_RE.findall(_strip_comment(line))


def _is_keyword_line(tokens: List[str]) -> bool:
    return len(tokens) == 1 and bool(_KEYWORD_RE.match(tokens[0]))


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] == "'":
        return token[1:-1]
    return token


def _to_float(token: str) -> float:
    return float(token.replace("D", "E").replace("d", "e"))


def expand_items(tokens: Sequence[str]) -> List[Optional[str]]:
    """Expand ``n*v`` into n copies of v and ``n*`` into n defaulted (None) items."""
    out: List[Optional[str]] = []
    for tok in tokens:
        m = _REPEAT_RE.match(tok)
        if m:
            count = int(m.group(1))
            value = m.group(2)
            out.extend([value if value else None] * count)
        else:
            out.append(tok)
    return out


# ------------------------------- Deck model ---------------------------------- #
@dataclass
class DeckKeyword:
    name: str
    records: List[List[str]] = field(default_factory=list)
    file_name: Optional[str] = None
    line_number: int = 0
    is_known: bool = True
    title: Optional[str] = None

    @property
    def spec(self) -> Optional[KeywordSpec]:
        return KEYWORDS.get(self.name)

    def raw_values(self) -> np.ndarray:
        """Numeric payload of the first record, repeat counts expanded, no unit conversion."""
        tokens = self.records[0] if self.records else []
        items = expand_items(tokens)
        if any(v is None for v in items):
            raise DeckParseError(f"Defaulted values are not allowed in {self.name}", self.file_name, self.line_number)
        try:
            if self.spec is not None and self.spec.integer:
                return np.array([int(_to_float(v)) for v in items], dtype=np.int64)
            return np.array([_to_float(v) for v in items], dtype=np.float64)
        except ValueError as exc:
            raise DeckParseError(f"Invalid numeric data in {self.name}: {exc}", self.file_name, self.line_number)

    def record_item(self, record_index: int, item_name: str) -> Optional[str]:
        spec = self.spec
        if spec is None or item_name not in spec.items:
            raise KeyError(f"Keyword {self.name} has no item {item_name}")
        if record_index >= len(self.records):
            raise IndexError(f"Keyword {self.name} has no record {record_index}")
        items = expand_items(self.records[record_index])
        pos = spec.items.index(item_name)
        return items[pos] if pos < len(items) else None


@dataclass(frozen=True)
class KeywordPayload:
    """Named numeric payload in SI units."""
    name: str
    values: np.ndarray

    def __len__(self) -> int:
        return int(self.values.size)


class Deck:
    def __init__(self, keywords: Optional[List[DeckKeyword]] = None):
        self.keywords: List[DeckKeyword] = list(keywords or [])

    def __len__(self) -> int:
        return len(self.keywords)

    def __iter__(self) -> Iterator[DeckKeyword]:
        return iter(self.keywords)

    def __getitem__(self, idx: int) -> DeckKeyword:
        return self.keywords[idx]

    @property
    def unit_system(self) -> str:
        units = DEFAULT_UNIT_SYSTEM
        for kw in self.keywords:
            if kw.name in UNIT_SYSTEMS:
                units = kw.name
        return units

    def has_section(self, name: str) -> bool:
        return any(kw.name == name for kw in self.keywords)

    def section(self, name: str) -> "Section":
        return Section(self, name)

    def si_values(self, keyword: DeckKeyword) -> np.ndarray:
        values = keyword.raw_values()
        spec = keyword.spec
        if spec is None or spec.dimension is None:
            return values.astype(np.float64)
        return values.astype(np.float64) * UNIT_SYSTEMS[self.unit_system][spec.dimension]


class Section:
    """Read-only view over the keywords of one deck section."""

    def __init__(self, deck: Deck, name: str):
        if name not in SECTION_NAMES:
            raise ValueError(f"Unknown section name {name!r}")
        self.deck = deck
        self.name = name
        self.keywords: List[DeckKeyword] = []
        found = False
        for kw in deck:
            if kw.name in SECTION_NAMES:
                if found:
                    break
                found = kw.name == name
                continue
            if found:
                self.keywords.append(kw)
        if not found:
            raise MissingSectionError(name)

    def __len__(self) -> int:
        return len(self.keywords)

    def __iter__(self) -> Iterator[DeckKeyword]:
        return iter(self.keywords)

    def has_keyword(self, name: str) -> bool:
        return any(kw.name == name for kw in self.keywords)

    def get_deck_keyword(self, name: str) -> DeckKeyword:
        # last occurrence wins
        for kw in reversed(self.keywords):
            if kw.name == name:
                return kw
        raise KeyError(f"Keyword {name} not in {self.name} section")

    def get_keyword(self, name: str) -> KeywordPayload:
        kw = self.get_deck_keyword(name)
        return KeywordPayload(name, self.deck.si_values(kw))

    def get_record_field(self, name: str, record_index: int, field_name: str) -> int:
        kw = self.get_deck_keyword(name)
        value = kw.record_item(record_index, field_name)
        if value is None:
            raise DeckParseError(f"{name} item {field_name} may not be defaulted", kw.file_name, kw.line_number)
        try:
            return int(value)
        except ValueError:
            raise DeckParseError(f"{name} item {field_name} is not an integer: {value!r}", kw.file_name, kw.line_number)


# --------------------------------- Parser ------------------------------------ #
class _Parser:
    def __init__(self, file_name: Optional[str], base_dir: Optional[str], depth: int, visited: Set[str]):
        self.file_name = file_name
        self.base_dir = base_dir or os.getcwd()
        self.depth = depth
        self.visited = visited

    def error(self, message: str, line_number: int) -> DeckParseError:
        return DeckParseError(message, self.file_name, line_number)

    def parse(self, text: str) -> List[DeckKeyword]:
        lines = text.splitlines()
        out: List[DeckKeyword] = []
        pos = 0
        while pos < len(lines):
            tokens = _tokenize(lines[pos])
            lineno = pos + 1
            if not tokens:
                pos += 1
                continue
            name = tokens[0]
            if not _KEYWORD_RE.match(name):
                raise self.error(f"Expected a keyword, found {name!r}", lineno)
            spec = KEYWORDS.get(name)
            kw = DeckKeyword(name, file_name=self.file_name, line_number=lineno, is_known=spec is not None)
            rest = tokens[1:]
            pos += 1

            if spec is None:
                pos = self._read_unknown(kw, rest, lines, pos)
            elif spec.kind == NONE:
                if rest:
                    raise self.error(f"Keyword {name} takes no data", lineno)
            elif spec.kind == TITLE:
                while pos < len(lines) and not lines[pos].strip():
                    pos += 1
                kw.title = lines[pos].strip() if pos < len(lines) else ""
                pos += 1
            else:
                record, pos = self._read_record(name, rest, lines, pos, lineno)
                kw.records.append(record)

            if name == "INCLUDE":
                out.extend(self._include(kw))
            else:
                out.append(kw)
        return out

    def _read_record(self, name: str, tokens: List[str], lines: List[str], pos: int, lineno: int):
        record: List[str] = []
        pending = list(tokens)
        while True:
            for tok in pending:
                if tok == "/":
                    return record, pos
                record.append(tok)
            if pos >= len(lines):
                raise self.error(f"Keyword {name} is not terminated by '/'", lineno)
            pending = _tokenize(lines[pos])
            pos += 1

    def _read_unknown(self, kw: DeckKeyword, tokens: List[str], lines: List[str], pos: int) -> int:
        current: List[str] = []

        def feed(toks: List[str]):
            for tok in toks:
                if tok == "/":
                    kw.records.append(list(current))
                    current.clear()
                else:
                    current.append(tok)

        feed(tokens)
        while pos < len(lines):
            toks = _tokenize(lines[pos])
            if _is_keyword_line(toks):
                break
            feed(toks)
            pos += 1
        if current:
            kw.records.append(list(current))
        log.debug("Unknown keyword %s at %s:%d with %d record(s)", kw.name, self.file_name, kw.line_number, len(kw.records))
        return pos

    def _include(self, kw: DeckKeyword) -> List[DeckKeyword]:
        if not kw.records or not kw.records[0]:
            raise self.error("INCLUDE needs a file name", kw.line_number)
        path = _unquote(kw.records[0][0])
        if not os.path.isabs(path):
            path = os.path.join(self.base_dir, path)
        path = os.path.normpath(path)
        if self.depth + 1 > MAX_INCLUDE_DEPTH:
            raise self.error(f"INCLUDE nesting deeper than {MAX_INCLUDE_DEPTH}", kw.line_number)
        if path in self.visited:
            raise self.error(f"INCLUDE cycle through {path}", kw.line_number)
        if not os.path.isfile(path):
            raise self.error(f"INCLUDE file not found: {path}", kw.line_number)
        log.debug("Including %s", path)
        return _parse_path(path, self.depth + 1, self.visited | {path})


def _parse_path(path: str, depth: int, visited: Set[str]) -> List[DeckKeyword]:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()
    return _Parser(path, os.path.dirname(path), depth, visited).parse(text)


def parse_deck_string(text: str, file_name: Optional[str] = None, base_dir: Optional[str] = None) -> Deck:
    """Parse deck text. INCLUDE paths are resolved against ``base_dir`` (default: cwd)."""
    visited = {os.path.normpath(file_name)} if file_name else set()
    deck = Deck(_Parser(file_name, base_dir, 0, visited).parse(text))
    log.debug("Parsed %d keywords (%s units)", len(deck), deck.unit_system)
    return deck


def parse_deck_file(path: str) -> Deck:
    path = os.path.normpath(os.path.abspath(path))
    deck = Deck(_parse_path(path, 0, {path}))
    log.info("Parsed deck %s: %d keywords, %s units", path, len(deck), deck.unit_system)
    return deck
