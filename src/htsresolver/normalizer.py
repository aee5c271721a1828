"""HTS code normalization and search-variant generation.

Codes reach the resolver in whatever shape a user typed or a document
printed: ``6208.19.90``, ``62081990``, ``6208 19 90``.  Everything downstream
compares either the canonical dotted form or the digit-only form.
"""

from __future__ import annotations

import re
from typing import List, Optional

_NON_DIGIT_RE = re.compile(r"\D")
_WHITESPACE_RE = re.compile(r"\s+")

MIN_CODE_DIGITS = 6
MAX_CODE_DIGITS = 10


def digits_only(raw: str) -> str:
    """Strip all non-digit characters from an HTS code."""
    return _NON_DIGIT_RE.sub("", str(raw or ""))


def normalize(raw: str) -> str:
    """Return the canonical dotted form of ``raw``.

    8 digits become ``XXXX.XX.XX`` and 10 digits become ``XXXX.XX.XX.XX``.
    Other lengths only lose their whitespace, so ``"6208 19"`` and
    ``"620819"`` share one form.  Leading zeros are significant (chapters
    01-09).
    """
    digits = digits_only(raw)
    if len(digits) == 8:
        return f"{digits[:4]}.{digits[4:6]}.{digits[6:8]}"
    if len(digits) == 10:
        return f"{digits[:4]}.{digits[4:6]}.{digits[6:8]}.{digits[8:10]}"
    return _WHITESPACE_RE.sub("", str(raw or ""))


def is_plausible(code: str) -> bool:
    """True when ``code`` has between 6 and 10 digits.

    This is a shape check, not validation against the schedule.  Letters are
    discarded before counting, so ``"62AB0819"`` counts as six digits.
    """
    return MIN_CODE_DIGITS <= len(digits_only(code)) <= MAX_CODE_DIGITS


def generate_search_variants(code: str) -> List[str]:
    """Spellings of ``code`` likely to appear in a printed schedule.

    Ordered dotted, undotted, space separated; duplicates removed.
    """
    digits = digits_only(code)
    if not digits:
        return []

    dotted = normalize(code)
    if "." not in dotted:
        dotted = digits
    candidates = [dotted, digits, dotted.replace(".", " ")]

    variants: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def chapter_of(code: str) -> Optional[int]:
    """Two-digit chapter as an int, or None when the code is too short."""
    digits = digits_only(code)
    if len(digits) < 2:
        return None
    return int(digits[:2])


def heading_of(code: str) -> str:
    """Four-digit heading (or whatever prefix is available)."""
    return digits_only(code)[:4]
