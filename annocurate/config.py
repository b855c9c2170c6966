"""Configuration dataclasses for curation sessions and the command line tools."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

LTR = "LTR"
RTL = "RTL"
SCRIPT_DIRECTIONS = (LTR, RTL)

DEFAULT_WINDOW_SIZE = 10


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _env_window_size(name: str) -> int:
    size = _env_int(name, DEFAULT_WINDOW_SIZE)
    return size if size is not None and size >= 1 else DEFAULT_WINDOW_SIZE


def _env_direction(name: str, default: str = LTR) -> str:
    val = (os.getenv(name) or "").strip().upper()
    return val if val in SCRIPT_DIRECTIONS else default


@dataclass
class CurationConfig:
    """Defaults applied when a user has no stored preferences.

    Attributes:
        window_size: number of sentences shown per page.
        script_direction: ``LTR`` or ``RTL``; only carried through to the
            presentation layer.
        log_level: level handed to :func:`logging.basicConfig` by the CLIs.
    """

    window_size: int = field(default_factory=lambda: _env_window_size("ANNOCURATE_WINDOW_SIZE"))
    script_direction: str = field(default_factory=lambda: _env_direction("ANNOCURATE_SCRIPT_DIRECTION"))
    log_level: str = field(default_factory=lambda: os.getenv("ANNOCURATE_LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        if self.window_size < 1:
            raise ValueError("window_size must be at least 1")
        if self.script_direction not in SCRIPT_DIRECTIONS:
            raise ValueError(f"Unknown script direction: {self.script_direction}")


def configure_logging(config: CurationConfig | None = None) -> None:
    cfg = config or CurationConfig()
    level = getattr(logging, str(cfg.log_level).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
