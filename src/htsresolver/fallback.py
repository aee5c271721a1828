"""Chapter-level duty estimates for codes nothing else could resolve.

Only a handful of chapters have an estimate.  A code from any other chapter
stays unresolved rather than receiving a made-up rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from htsresolver.models import HTSEntry
from htsresolver.normalizer import digits_only, normalize
from htsresolver.rate_parser import approximate_percentage, parse_duty_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChapterEstimate:
    general_rate: str
    description: str
    unit: str = "kg"

    @property
    def percentage(self) -> float:
        return approximate_percentage(parse_duty_rate(self.general_rate))


DEFAULT_CHAPTER_ESTIMATES: Dict[str, ChapterEstimate] = {
    "04": ChapterEstimate("5.4%", "Dairy products"),
    "61": ChapterEstimate("16.5%", "Knitted apparel"),
    "62": ChapterEstimate("12%", "Woven apparel"),
    "84": ChapterEstimate("2.5%", "Machinery"),
    "85": ChapterEstimate("Free", "Electrical equipment"),
}


class ChapterFallbackEstimator:
    """Maps a two-digit chapter prefix to a low-confidence estimate."""

    def __init__(self, estimates: Optional[Mapping[str, ChapterEstimate]] = None) -> None:
        self.estimates: Dict[str, ChapterEstimate] = dict(
            DEFAULT_CHAPTER_ESTIMATES if estimates is None else estimates
        )

    def estimate(self, code: str) -> Optional[HTSEntry]:
        digits = digits_only(code)
        if len(digits) < 2:
            return None
        chapter_key = digits[:2]
        fallback = self.estimates.get(chapter_key)
        if fallback is None:
            return None

        chapter = int(chapter_key)
        logger.info("Using chapter %s estimate %s for %s", chapter_key, fallback.general_rate, code)
        return HTSEntry(
            hs_code=normalize(code),
            description=f"{fallback.description} (estimated based on chapter {chapter_key})",
            general_rate=fallback.general_rate,
            percentage=fallback.percentage,
            source="not_found",
            confidence="low",
            chapter=chapter,
            unit=fallback.unit,
        )
