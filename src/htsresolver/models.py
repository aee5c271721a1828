"""Resolved duty-rate record returned by every resolution stage."""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ResultSource = Literal["verified_table", "schedule_table", "document_extractor", "not_found"]
Confidence = Literal["high", "medium", "low"]

_PURE_PERCENT_RE = re.compile(r"^\d+(?:\.\d+)?\s*%$")


class HTSEntry(BaseModel):
    """Duty rate for a single HTS code.

    ``general_rate`` is the literal rate expression and the source of truth.
    ``percentage`` is a fraction used for cost estimates; for specific or
    compound rates it is an approximation only (see :attr:`is_ad_valorem`).
    """

    hs_code: str = Field(min_length=2)
    description: str = ""
    general_rate: str
    percentage: float = Field(ge=0.0)
    source: ResultSource
    confidence: Confidence
    chapter: int = Field(ge=1, le=99)
    unit: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _chapter_matches_code(self) -> "HTSEntry":
        digits = re.sub(r"\D", "", self.hs_code)
        if len(digits) < 2 or int(digits[:2]) != self.chapter:
            raise ValueError(f"chapter {self.chapter} does not match HTS code {self.hs_code!r}")
        return self

    @property
    def digits(self) -> str:
        return re.sub(r"\D", "", self.hs_code)

    @property
    def heading(self) -> str:
        return self.digits[:4]

    @property
    def is_ad_valorem(self) -> bool:
        rate = self.general_rate.strip()
        return rate.lower() == "free" or bool(_PURE_PERCENT_RE.match(rate))

    def with_provenance(self, source: ResultSource, confidence: Confidence) -> "HTSEntry":
        """Return a copy tagged with a different stage and confidence."""

        return self.model_copy(update={"source": source, "confidence": confidence})
