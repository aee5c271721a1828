"""Curated in-memory HTS rate tables.

Two tables ship with the package, each built from a separate manual pass over
the 2025 schedule:

* ``verified`` - a short list of rates checked line by line against the
  printed schedule.
* ``schedule`` - a broader pass grouped by chapter.

They are deliberately kept apart and queried in that order by the resolver;
merging them would change which pass wins when both hold a code.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from htsresolver.config import ResolverSettings
from htsresolver.errors import SeedFileError
from htsresolver.models import Confidence, HTSEntry, ResultSource
from htsresolver.normalizer import chapter_of, digits_only, heading_of, normalize
from htsresolver.rate_parser import approximate_percentage, parse_duty_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableStatistics:
    """Summary of a table's contents."""

    name: str
    total_codes: int
    chapter_breakdown: Dict[int, int] = field(default_factory=dict)
    free_rates: int = 0
    average_percentage: float = 0.0
    highest_percentage: float = 0.0
    lowest_nonzero_percentage: Optional[float] = None
    sample_codes: List[str] = field(default_factory=list)


def entry_from_record(rec: Dict[str, object], source: ResultSource, confidence: Confidence) -> HTSEntry:
    """Build an :class:`HTSEntry` from a seed record.

    ``percentage`` is derived from the rate string when the record omits it.
    """
    hts = normalize(str(rec.get("hts_code", "")))
    general = str(rec.get("general", rec.get("general_rate", ""))).strip()
    chapter = chapter_of(hts)
    if chapter is None or not general:
        raise ValueError(f"incomplete rate record: {rec!r}")

    percentage = rec.get("percentage")
    if percentage is None:
        percentage = approximate_percentage(parse_duty_rate(general))

    unit = rec.get("unit")
    return HTSEntry(
        hs_code=hts,
        description=str(rec.get("description", "")).strip(),
        general_rate=general,
        percentage=float(percentage),
        source=source,
        confidence=confidence,
        chapter=chapter,
        unit=str(unit) if unit else None,
    )


class StaticRateTable:
    """Code -> :class:`HTSEntry` map with format-tolerant lookup.

    A table built with ``seed_path`` loads it on first access; concurrent
    first callers block on the same load instead of seeing a partial table.
    """

    def __init__(
        self,
        name: str,
        source: ResultSource,
        seed_path: Optional[Path] = None,
        confidence: Confidence = "high",
    ) -> None:
        self.name = name
        self.source = source
        self.confidence = confidence
        self._seed_path = seed_path
        self._entries: Dict[str, HTSEntry] = {}
        self._lock = threading.Lock()
        self._loaded = seed_path is None

    @classmethod
    def from_entries(
        cls,
        name: str,
        source: ResultSource,
        entries: Iterable[HTSEntry],
        confidence: Confidence = "high",
    ) -> "StaticRateTable":
        table = cls(name, source, confidence=confidence)
        for entry in entries:
            table.add(entry)
        return table

    # -- loading -----------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            try:
                self.load_seed(self._seed_path)
            except SeedFileError:
                logger.warning("Rate table %s unavailable, continuing empty", self.name, exc_info=True)
            self._loaded = True

    def load_seed(self, path: Path) -> int:
        """Load ``{"rates": [...]}`` records from a JSON seed file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SeedFileError(f"cannot read seed file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SeedFileError(f"seed file {path} must hold a JSON object")

        count = 0
        for rec in data.get("rates", []):
            try:
                entry = entry_from_record(rec, self.source, self.confidence)
            except (ValidationError, ValueError, TypeError, AttributeError):
                logger.warning("Skipping malformed record in %s: %r", Path(path).name, rec)
                continue
            self._entries.setdefault(entry.hs_code, entry)
            count += 1
        logger.info("Loaded %d rate entries into %s table from %s", count, self.name, Path(path).name)
        return count

    def add(self, entry: HTSEntry) -> None:
        """Insert ``entry`` unless its code is already present.

        Entries are stored under this table's source and confidence.
        """
        if entry.source != self.source or entry.confidence != self.confidence:
            entry = entry.with_provenance(self.source, self.confidence)
        self._entries.setdefault(normalize(entry.hs_code), entry)

    # -- lookups -----------------------------------------------------------

    def lookup(self, code: str) -> Optional[HTSEntry]:
        """Find ``code`` however it is spelled.

        Tries the key as given, then its canonical form, then a digit-only
        comparison against every key, and finally the 8-digit subheading of
        a longer code.
        """
        self._ensure_loaded()

        entry = self._entries.get(code)
        if entry is not None:
            return entry

        entry = self._entries.get(normalize(code))
        if entry is not None:
            return entry

        digits = digits_only(code)
        if not digits:
            return None
        for key, candidate in self._entries.items():
            if digits_only(key) == digits:
                return candidate

        if len(digits) > 8:
            return self._entries.get(normalize(digits[:8]))
        return None

    def by_chapter(self, chapter: int) -> List[HTSEntry]:
        return [e for e in self.entries() if e.chapter == chapter]

    def by_heading(self, heading: str) -> List[HTSEntry]:
        target = heading_of(heading)
        return [e for e in self.entries() if e.heading == target]

    def search_description(self, term: str) -> List[HTSEntry]:
        """Case-insensitive substring search over descriptions."""
        needle = term.strip().lower()
        if not needle:
            return []
        return [e for e in self.entries() if needle in e.description.lower()]

    def entries(self) -> List[HTSEntry]:
        """All entries ordered by code."""
        self._ensure_loaded()
        return [self._entries[key] for key in sorted(self._entries)]

    def statistics(self) -> TableStatistics:
        entries = self.entries()
        if not entries:
            return TableStatistics(name=self.name, total_codes=0)

        percentages = [e.percentage for e in entries]
        nonzero = [p for p in percentages if p > 0]
        chapters = Counter(e.chapter for e in entries)
        return TableStatistics(
            name=self.name,
            total_codes=len(entries),
            chapter_breakdown=dict(sorted(chapters.items())),
            free_rates=sum(1 for p in percentages if p == 0),
            average_percentage=round(sum(percentages) / len(percentages), 6),
            highest_percentage=max(percentages),
            lowest_nonzero_percentage=min(nonzero) if nonzero else None,
            sample_codes=[e.hs_code for e in entries[:10]],
        )

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._entries)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.lookup(code) is not None


# ---------------------------------------------------------------------------
# Bundled tables
# ---------------------------------------------------------------------------
def build_verified_table(seed_path: Path) -> StaticRateTable:
    return StaticRateTable("verified", "verified_table", seed_path=seed_path)


def build_schedule_table(seed_path: Path) -> StaticRateTable:
    return StaticRateTable("schedule", "schedule_table", seed_path=seed_path)


@lru_cache(maxsize=1)
def get_verified_table() -> StaticRateTable:
    return build_verified_table(ResolverSettings.from_env().verified_seed)


@lru_cache(maxsize=1)
def get_schedule_table() -> StaticRateTable:
    return build_schedule_table(ResolverSettings.from_env().schedule_seed)
