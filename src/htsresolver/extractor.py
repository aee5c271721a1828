"""Read a general duty rate out of the text of the printed schedule.

Text rendered from the HTSUS PDF lays each tariff line out as::

    6208.19.90   Of other textile materials ........   doz. kg
                 Free (AU, BH, CL, CO, D, E, IL,        <- special column
                 JO, KR, MA, OM, P, PA, PE, S, SG)
                 8.7 %                                  <- general column

The general rate is only distinguishable by position: it is the first bare
rate (no parenthesised program list) after the special-rates block.  The
scanner below walks forward from the code line with a two-state machine to
find it, and gives up when it reaches the next tariff line.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import List, Optional, Sequence, Set, Tuple

from htsresolver.chapters import default_unit, describe_chapter
from htsresolver.config import DEFAULT_SCAN_WINDOW, DEFAULT_VERIFY_RADIUS
from htsresolver.document_store import DocumentStore
from htsresolver.errors import DocumentUnavailableError
from htsresolver.models import HTSEntry
from htsresolver.normalizer import chapter_of, generate_search_variants, is_plausible, normalize
from htsresolver.rate_parser import approximate_percentage, format_percent, parse_duty_rate

logger = logging.getLogger(__name__)

_HS_CODE_LINE_RE = re.compile(r"\b\d{4}[.\s]?\d{2}[.\s]?\d{2,4}\b")
_SPECIAL_MARKER_RE = re.compile(r"Free \(|% \(|\([A-Z]{1,2}[+*]?,")
_COLUMN_HEADER_RE = re.compile(r"\bGeneral\b|\bColumn 1\b")
_PERCENT_LINE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*%$")
_FREE_LINE_RE = re.compile(r"^Free$", re.IGNORECASE)
_SPECIFIC_LINE_RE = re.compile(r"^(?:\d+(?:\.\d+)?\s*%\s*\+\s*)?(?:\d+(?:\.\d+)?\s*¢|\$\s*\d)")
_STAT_SUFFIX_RE = re.compile(r"^\d{2}\b")
_TRAILING_UNIT_RE = re.compile(r"\s+(doz\.\s*kg|doz\.|kg|No\.|m2|m3|liters|pcs|t)$")


class ScanState(str, Enum):
    DESCRIPTION = "description"
    SPECIAL_RATES = "special_rates"


# ---------------------------------------------------------------------------
# Line predicates
# ---------------------------------------------------------------------------
def contains_code(line: str, variants: Sequence[str]) -> bool:
    return any(variant in line for variant in variants)


def is_code_line(line: str) -> bool:
    """Whether the line carries some HTS number (any, not just ours)."""
    return bool(_HS_CODE_LINE_RE.search(line))


def is_special_rate_marker(line: str) -> bool:
    return bool(_SPECIAL_MARKER_RE.search(line))


def is_column_header(line: str) -> bool:
    return bool(_COLUMN_HEADER_RE.search(line))


def match_general_rate(line: str) -> Optional[Tuple[str, float]]:
    """Parse a standalone rate line into ``(general_rate, percentage)``."""
    if "(" in line:
        return None

    if _FREE_LINE_RE.match(line):
        return "Free", 0.0

    percent = _PERCENT_LINE_RE.match(line)
    if percent:
        value = float(percent.group(1))
        return format_percent(value), round(value / 100.0, 6)

    if _SPECIFIC_LINE_RE.match(line):
        return line, approximate_percentage(parse_duty_rate(line))

    return None


def split_code_line(line: str, variants: Sequence[str]) -> Tuple[str, Optional[str]]:
    """Split the text after the code on its line into ``(description, unit)``.

    ``"6208.19.90 00 Of cotton doz. kg"`` gives ``("Of cotton", "doz. kg")``.
    """
    rest = line
    for variant in variants:
        if variant in line:
            rest = line.split(variant, 1)[1]
            break
    rest = _STAT_SUFFIX_RE.sub("", rest.strip(), count=1).strip()

    unit = None
    trailing = _TRAILING_UNIT_RE.search(rest)
    if trailing:
        unit = trailing.group(1)
        rest = rest[: trailing.start()]
    return rest.strip(" .:"), unit


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------
class DocumentRateExtractor:
    """Looks codes up in the reference schedule text."""

    def __init__(
        self,
        store: DocumentStore,
        document_id: str,
        window: int = DEFAULT_SCAN_WINDOW,
        verify_radius: int = DEFAULT_VERIFY_RADIUS,
    ) -> None:
        self.store = store
        self.document_id = document_id
        self.window = window
        self.verify_radius = verify_radius

    def extract(self, code: str) -> Optional[HTSEntry]:
        """Resolve ``code`` from the reference document, or ``None``."""
        if not is_plausible(code):
            return None
        try:
            text = self.read_document()
        except DocumentUnavailableError as exc:
            logger.warning("Document extraction skipped for %s: %s", code, exc)
            return None
        return self.extract_from_text(text, code)

    def read_document(self) -> str:
        """Text of the reference document; raises DocumentUnavailableError."""
        return self.store.read_text(self.document_id)

    def extract_from_text(self, text: str, code: str) -> Optional[HTSEntry]:
        variants = generate_search_variants(code)
        if not variants:
            return None

        lines = text.splitlines()
        tried: Set[int] = set()
        for variant in variants:
            for index, line in enumerate(lines):
                if index in tried or variant not in line:
                    continue
                tried.add(index)
                entry = self.scan_rate(lines, index, code)
                if entry is not None:
                    return entry

        logger.debug("Code %s not found in %s", code, self.document_id)
        return None

    def scan_rate(self, lines: List[str], index: int, code: str, relocate: bool = True) -> Optional[HTSEntry]:
        """Read the general rate belonging to the code line at ``index``.

        If ``lines[index]`` does not actually carry the code, the nearest line
        within ``verify_radius`` that does is used instead (once).
        """
        variants = generate_search_variants(code)
        if not 0 <= index < len(lines):
            return None

        if not contains_code(lines[index], variants):
            if not relocate:
                return None
            exact = self._find_code_line(lines, index, variants)
            if exact is None:
                logger.debug("No line near %d carries %s", index, code)
                return None
            return self.scan_rate(lines, exact, code, relocate=False)

        state = ScanState.DESCRIPTION
        for line in lines[index + 1 : index + 1 + self.window]:
            line = line.strip()
            if not line:
                continue

            if is_code_line(line) and not contains_code(line, variants):
                logger.debug("Reached next tariff line before a rate for %s: %r", code, line)
                return None

            if is_special_rate_marker(line):
                state = ScanState.SPECIAL_RATES
                continue

            if is_column_header(line):
                continue

            if state is ScanState.SPECIAL_RATES:
                matched = match_general_rate(line)
                if matched is not None:
                    general_rate, percentage = matched
                    logger.info("Extracted general rate %s for %s", general_rate, code)
                    return self._build_entry(code, lines[index], general_rate, percentage)

        return None

    def _find_code_line(self, lines: List[str], index: int, variants: Sequence[str]) -> Optional[int]:
        start = max(0, index - self.verify_radius)
        stop = min(len(lines), index + self.verify_radius + 1)
        for candidate in range(start, stop):
            if contains_code(lines[candidate], variants):
                return candidate
        return None

    def _build_entry(self, code: str, code_line: str, general_rate: str, percentage: float) -> Optional[HTSEntry]:
        chapter = chapter_of(code)
        if not chapter:
            return None
        description, unit = split_code_line(code_line, generate_search_variants(code))
        return HTSEntry(
            hs_code=normalize(code),
            description=description or describe_chapter(chapter),
            general_rate=general_rate,
            percentage=percentage,
            source="document_extractor",
            confidence="medium",
            chapter=chapter,
            unit=unit or default_unit(chapter),
        )
