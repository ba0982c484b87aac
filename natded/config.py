from __future__ import annotations
import logging
import os
from dataclasses import dataclass

from .core.ids import DEFAULT_ALPHABET


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    ident_alphabet: str = DEFAULT_ALPHABET
    alpha_merge: bool = False
    spawn_x: float = 10
    spawn_y: float = 10
    split_offset: float = 100

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("NATDED_LOG_LEVEL", "WARNING").upper(),
            ident_alphabet=os.getenv("NATDED_IDENT_ALPHABET", DEFAULT_ALPHABET) or DEFAULT_ALPHABET,
            alpha_merge=_flag("NATDED_ALPHA_MERGE"),
            spawn_x=_number("NATDED_SPAWN_X", 10),
            spawn_y=_number("NATDED_SPAWN_Y", 10),
            split_offset=_number("NATDED_SPLIT_OFFSET", 100),
        )


def configure_logging(level: str = None):
    level = (level or os.getenv("NATDED_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
