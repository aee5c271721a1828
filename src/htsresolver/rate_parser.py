"""Parse HTS general-rate expressions.

Handles the formats found in the General column of the schedule:
  - "Free"
  - "12.8%"
  - "2¢/each", "68¢/head"
  - "$5.00", "$1.05/kg"
  - "6.5% + 2.1¢/kg" (compound)

``percentage`` on an :class:`~htsresolver.models.HTSEntry` comes from
:func:`approximate_percentage`.  For specific rates it is a placeholder, not
an ad valorem equivalent: a cents amount is read as a fraction
(``2¢`` -> 0.02) and a dollar amount falls back to a flat 5%.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_CENTS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*¢(?:\s*/\s*([\w.]+))?")
_DOLLAR_RE = re.compile(r"\$\s*(\d+(?:\.\d+)?)(?:\s*/\s*([\w.]+))?")

DOLLAR_RATE_PLACEHOLDER = 0.05


@dataclass(frozen=True)
class ParsedDutyRate:
    """Structured representation of a duty rate string."""

    raw: str
    ad_valorem_pct: float | None = None  # 12.8 for "12.8%"
    specific_amount: float | None = None  # dollars; 0.02 for "2¢/each"
    specific_unit: str | None = None
    is_free: bool = False
    is_compound: bool = False
    is_unknown: bool = False
    from_cents: bool = False

    @property
    def is_specific(self) -> bool:
        return self.specific_amount is not None and self.ad_valorem_pct is None


def parse_duty_rate(raw: str) -> ParsedDutyRate:
    """Parse a general-rate string into structured form."""
    if not raw or not raw.strip():
        return ParsedDutyRate(raw=raw or "", is_unknown=True)

    cleaned = raw.strip()
    if cleaned.lower() in ("free", "0", "0%", "0.0%"):
        return ParsedDutyRate(raw=raw, ad_valorem_pct=0.0, is_free=True)

    ad_valorem = None
    specific = None
    specific_unit = None
    from_cents = False

    pct_match = _PERCENT_RE.search(cleaned)
    if pct_match:
        ad_valorem = float(pct_match.group(1))

    cents_match = _CENTS_RE.search(cleaned)
    if cents_match:
        specific = float(cents_match.group(1)) / 100.0
        specific_unit = (cents_match.group(2) or "").lower() or None
        from_cents = True

    dollar_match = _DOLLAR_RE.search(cleaned)
    if dollar_match and specific is None:
        specific = float(dollar_match.group(1))
        specific_unit = (dollar_match.group(2) or "").lower() or None

    if ad_valorem is None and specific is None:
        return ParsedDutyRate(raw=raw, is_unknown=True)

    return ParsedDutyRate(
        raw=raw,
        ad_valorem_pct=ad_valorem,
        specific_amount=specific,
        specific_unit=specific_unit,
        is_compound=ad_valorem is not None and specific is not None,
        from_cents=from_cents,
    )


def approximate_percentage(parsed: ParsedDutyRate) -> float:
    """Best-effort fraction for cost estimates (advisory for specific rates)."""
    if parsed.is_free:
        return 0.0
    if parsed.ad_valorem_pct is not None:
        return round(parsed.ad_valorem_pct / 100.0, 6)
    if parsed.specific_amount is not None:
        if parsed.from_cents:
            return round(parsed.specific_amount, 6)
        return DOLLAR_RATE_PLACEHOLDER
    return 0.0


def format_percent(value: float) -> str:
    """Render a percentage value the way the schedule prints it."""
    return f"{value:g}%"
