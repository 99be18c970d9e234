# -*- coding: utf-8 -*-
"""
CLI entry point: read an Eclipse deck, check it and build its grid geometry.
"""
from __future__ import annotations
import argparse
import logging
from pathlib import Path

from .check import DeckChecks, check_deck
from .config import Config
from .deck import parse_deck_file
from .errors import EclGridError
from .grid import EclipseGrid

log = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog='eclgrid',
        description="Build the grid geometry of an Eclipse deck (DIMENS + COORD/ZCORN or DX/DY/DZ/TOPS)"
    )
    ap.add_argument("deck", help="Path to the .DATA / .GRDECL deck")
    ap.add_argument("--no-check", action="store_true", help="Skip the unknown keyword and section order checks")
    ap.add_argument("--strict", action="store_true", default=None,
                    help="Fail when the deck checks report problems (default: warn only)")
    ap.add_argument("--name", default=None, help="Name given to the assembled grid")
    ap.add_argument("--debug", action="store_true", help="Verbose debug logging")
    return ap


def run(args, cfg: Config) -> int:
    deck = parse_deck_file(args.deck)
    checks = DeckChecks.NONE if args.no_check else cfg.checks
    strict = cfg.strict if args.strict is None else args.strict
    if checks and not check_deck(deck, checks):
        if strict:
            log.error("Deck %s failed the deck checks", args.deck)
            return 1
        log.warning("Deck %s has problems; continuing", args.deck)

    with EclipseGrid.from_deck(deck, name=args.name or cfg.grid_name or Path(args.deck).stem) as grid:
        nx, ny, nz = grid.get_nx(), grid.get_ny(), grid.get_nz()
        print(f"{Path(args.deck).name}: {nx}x{ny}x{nz} {grid.mode.value} grid, {nx * ny * nz} cells")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = Config.from_env()
    except ValueError as e:
        logging.basicConfig(format=LOG_FORMAT)
        log.error("Invalid configuration: %s", e)
        return 1
    logging.basicConfig(level=logging.DEBUG if args.debug else cfg.log_level, format=LOG_FORMAT)
    try:
        return run(args, cfg)
    except (EclGridError, OSError) as e:
        log.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
