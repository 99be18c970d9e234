"""
Single-pass deck checks: unknown keywords and section topology.

Issues are collected as DeckIssue records; ``check_deck`` logs them as
warnings (with file and line) and returns whether the deck passed.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from .deck import KEYWORDS, SECTION_NAMES, Deck, DeckKeyword

log = logging.getLogger(__name__)

# (section, mandatory) in the order they must appear
SECTION_ORDER = (
    ("RUNSPEC", True),
    ("GRID", True),
    ("EDIT", False),
    ("PROPS", True),
    ("REGIONS", False),
    ("SOLUTION", True),
    ("SUMMARY", False),
    ("SCHEDULE", True),
)


class DeckChecks(enum.IntFlag):
    NONE = 0
    UNKNOWN_KEYWORDS = 1
    SECTION_TOPOLOGY = 2
    KEYWORD_SECTION = 4
    ALL = UNKNOWN_KEYWORDS | SECTION_TOPOLOGY | KEYWORD_SECTION


@dataclass(frozen=True)
class DeckIssue:
    message: str
    file_name: Optional[str] = None
    line_number: int = 0

    @classmethod
    def at(cls, kw: DeckKeyword, message: str) -> "DeckIssue":
        return cls(message, kw.file_name, kw.line_number)

    def __str__(self) -> str:
        return f"{self.file_name or '<string>'}:{self.line_number}: {self.message}"


def _unknown_keywords(deck: Deck) -> List[DeckIssue]:
    return [DeckIssue.at(kw, f"Keyword '{kw.name}' is unknown.") for kw in deck if not kw.is_known]


def _section_topology(deck: Deck, ensure_keyword_section: bool) -> List[DeckIssue]:
    issues: List[DeckIssue] = []
    if len(deck) == 0:
        return [DeckIssue("The deck is empty.")]
    if deck[0].name != "RUNSPEC":
        issues.append(DeckIssue.at(deck[0], "The first keyword of a valid deck must be RUNSPEC."))

    order = [name for name, _ in SECTION_ORDER]
    current: Optional[str] = None
    seen: List[str] = []
    for kw in deck:
        if kw.name in SECTION_NAMES:
            if kw.name in seen:
                issues.append(DeckIssue.at(kw, f"Section {kw.name} appears more than once."))
            elif seen and order.index(kw.name) < order.index(seen[-1]):
                issues.append(DeckIssue.at(kw, f"Section {kw.name} must not follow {seen[-1]}."))
            seen.append(kw.name)
            current = kw.name
            continue
        if not ensure_keyword_section or current is None or not kw.is_known:
            continue
        allowed = KEYWORDS[kw.name].sections
        if allowed and current not in allowed:
            issues.append(DeckIssue.at(kw, f"Keyword '{kw.name}' is not allowed in the {current} section."))

    for name, mandatory in SECTION_ORDER:
        if mandatory and name not in seen:
            issues.append(DeckIssue(f"The mandatory {name} section is missing."))
    if seen and seen[-1] != "SCHEDULE":
        issues.append(DeckIssue(f"The last section of a valid deck must be SCHEDULE, not {seen[-1]}."))
    return issues


def validate_deck(deck: Deck, checks: DeckChecks = DeckChecks.ALL) -> List[DeckIssue]:
    issues: List[DeckIssue] = []
    if checks & DeckChecks.UNKNOWN_KEYWORDS:
        issues.extend(_unknown_keywords(deck))
    if checks & DeckChecks.SECTION_TOPOLOGY:
        issues.extend(_section_topology(deck, bool(checks & DeckChecks.KEYWORD_SECTION)))
    return issues


def check_deck(deck: Deck, checks: DeckChecks = DeckChecks.ALL) -> bool:
    issues = validate_deck(deck, checks)
    for issue in issues:
        log.warning("%s", issue)
    return not issues


def parse_checks(value: str) -> DeckChecks:
    """Parse 'all', 'none' or a comma-separated list such as 'unknown_keywords,section_topology'."""
    text = (value or "").strip().lower()
    if text in ("", "all"):
        return DeckChecks.ALL
    if text == "none":
        return DeckChecks.NONE
    flags = DeckChecks.NONE
    for chunk in text.replace(";", ",").split(","):
        name = chunk.strip().upper()
        if not name:
            continue
        try:
            flags |= DeckChecks[name]
        except KeyError:
            raise ValueError(f"Unknown deck check {chunk.strip()!r}")
    return flags
