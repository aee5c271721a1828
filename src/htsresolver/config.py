"""Environment-driven settings for the resolver."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

DEFAULT_SCAN_WINDOW = 15
DEFAULT_VERIFY_RADIUS = 5


def _int_setting(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    return max(minimum, value)


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


@dataclass(frozen=True)
class ResolverSettings:
    verified_seed: Path = DATA_DIR / "verified_rates.json"
    schedule_seed: Path = DATA_DIR / "schedule_rates.json"
    reference_document: Optional[Path] = None
    scan_window: int = DEFAULT_SCAN_WINDOW
    verify_radius: int = DEFAULT_VERIFY_RADIUS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ResolverSettings":
        """Build settings from ``HTS_*`` environment variables."""
        return cls(
            verified_seed=_optional_path("HTS_VERIFIED_SEED") or DATA_DIR / "verified_rates.json",
            schedule_seed=_optional_path("HTS_SCHEDULE_SEED") or DATA_DIR / "schedule_rates.json",
            reference_document=_optional_path("HTS_REFERENCE_DOCUMENT"),
            scan_window=_int_setting("HTS_SCAN_WINDOW", DEFAULT_SCAN_WINDOW, 1),
            verify_radius=_int_setting("HTS_VERIFY_RADIUS", DEFAULT_VERIFY_RADIUS, 0),
            log_level=os.getenv("HTS_LOG_LEVEL", "INFO").upper(),
        )
