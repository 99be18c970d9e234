import logging
import os
from dataclasses import dataclass
from typing import Optional

from .check import DeckChecks, parse_checks


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    log_level: str = "INFO"
    checks: DeckChecks = DeckChecks.ALL
    strict: bool = False  # treat failed deck checks as errors
    grid_name: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'Config':
        log_level = os.getenv('ECLGRID_LOG_LEVEL', 'INFO').upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Unknown ECLGRID_LOG_LEVEL: {log_level!r}")
        return cls(
            log_level=log_level,
            checks=parse_checks(os.getenv('ECLGRID_CHECKS', 'all')),
            strict=_env_flag('ECLGRID_STRICT'),
            grid_name=os.getenv('ECLGRID_GRID_NAME') or None,
        )
