"""Single entry point for duty-rate resolution.

Stages are tried in a fixed order and the first answer wins:

1. verified table
2. schedule table
3. codes resolved earlier by stages 4-5 in this process
4. reference document text
5. chapter estimate

Chapter estimates made while the reference document is unreadable are not
remembered, so a document that becomes readable later still gets consulted.

``None`` means no rate is available for the code; it is never an error.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from htsresolver.config import ResolverSettings
from htsresolver.document_store import CachedDocumentStore, FileDocumentStore
from htsresolver.errors import DocumentUnavailableError
from htsresolver.extractor import DocumentRateExtractor
from htsresolver.fallback import ChapterFallbackEstimator
from htsresolver.models import HTSEntry
from htsresolver.normalizer import is_plausible, normalize
from htsresolver.static_tables import (
    StaticRateTable,
    build_schedule_table,
    build_verified_table,
    get_schedule_table,
    get_verified_table,
)

logger = logging.getLogger(__name__)

WELL_POPULATED_THRESHOLD = 1000


class DutyRateResolver:
    """Resolve HTS codes against tables, document text and chapter estimates."""

    def __init__(
        self,
        tables: Optional[Iterable[StaticRateTable]] = None,
        extractor: Optional[DocumentRateExtractor] = None,
        estimator: Optional[ChapterFallbackEstimator] = None,
    ) -> None:
        if tables is None:
            tables = [get_verified_table(), get_schedule_table()]
        self.tables: List[StaticRateTable] = list(tables)
        self.extractor = extractor
        self.estimator = estimator if estimator is not None else ChapterFallbackEstimator()
        self._resolved: Dict[str, HTSEntry] = {}
        self._resolved_lock = threading.Lock()

    def get_duty_rate(self, hs_code: str) -> Optional[HTSEntry]:
        if not is_plausible(hs_code):
            logger.info("Rejecting implausible HTS code %r", hs_code)
            return None

        logger.debug("Resolving HTS code %s", hs_code)
        for table in self.tables:
            entry = self._run_stage(f"{table.name} table", table.lookup, hs_code)
            if entry is not None:
                logger.info("Resolved %s via %s table: %s", hs_code, table.name, entry.general_rate)
                return entry

        entry = self.cached(hs_code)
        if entry is not None:
            logger.info("Resolved %s from earlier %s result: %s", hs_code, entry.source, entry.general_rate)
            return entry

        document_read = True
        if self.extractor is not None:
            entry, document_read = self._extract(hs_code)
            if entry is not None:
                logger.info("Resolved %s via document extraction: %s", hs_code, entry.general_rate)
                return self._remember(hs_code, entry)

        if self.estimator is not None:
            entry = self._run_stage("chapter fallback", self.estimator.estimate, hs_code)
            if entry is not None:
                logger.info("Estimated %s from its chapter: %s (low confidence)", hs_code, entry.general_rate)
                if not document_read:
                    # Left uncached until the document can be read.
                    return entry
                return self._remember(hs_code, entry)

        logger.info("No duty rate found for HTS code %s", hs_code)
        return None

    def _extract(self, hs_code: str) -> Tuple[Optional[HTSEntry], bool]:
        """Run the document stage; the flag is False when the document could not be read."""
        try:
            text = self.extractor.read_document()
        except DocumentUnavailableError as exc:
            logger.warning("Document extraction skipped for %s: %s", hs_code, exc)
            return None, False
        except Exception:
            logger.warning("Stage document extractor failed for %s", hs_code, exc_info=True)
            return None, False
        entry = self._run_stage(
            "document extractor", lambda code: self.extractor.extract_from_text(text, code), hs_code
        )
        return entry, True

    def _run_stage(
        self, name: str, stage: Callable[[str], Optional[HTSEntry]], hs_code: str
    ) -> Optional[HTSEntry]:
        try:
            return stage(hs_code)
        except Exception:
            logger.warning("Stage %s failed for %s", name, hs_code, exc_info=True)
            return None

    # -- resolution cache --------------------------------------------------

    def cached(self, hs_code: str) -> Optional[HTSEntry]:
        return self._resolved.get(normalize(hs_code))

    def _remember(self, hs_code: str, entry: HTSEntry) -> HTSEntry:
        key = normalize(hs_code)
        with self._resolved_lock:
            return self._resolved.setdefault(key, entry)

    @property
    def cache_size(self) -> int:
        return len(self._resolved)

    # -- reporting ---------------------------------------------------------

    def statistics(self) -> Dict[str, Any]:
        tables = [asdict(table.statistics()) for table in self.tables]
        total = sum(stats["total_codes"] for stats in tables)
        return {
            "tables": tables,
            "total_table_codes": total,
            "resolved_cache_size": self.cache_size,
            "document_extraction": self.extractor is not None,
            "recommended_action": (
                "needs document extraction to cover the full schedule"
                if total < WELL_POPULATED_THRESHOLD
                else "tables are well populated"
            ),
        }


def build_resolver(settings: ResolverSettings) -> DutyRateResolver:
    """Wire a resolver from settings (bundled tables, optional reference document)."""
    extractor = None
    if settings.reference_document is not None:
        extractor = DocumentRateExtractor(
            CachedDocumentStore(FileDocumentStore()),
            str(settings.reference_document),
            window=settings.scan_window,
            verify_radius=settings.verify_radius,
        )
    return DutyRateResolver(
        tables=[build_verified_table(settings.verified_seed), build_schedule_table(settings.schedule_seed)],
        extractor=extractor,
    )


@lru_cache(maxsize=1)
def get_resolver() -> DutyRateResolver:
    """Process-wide resolver configured from the environment."""
    return build_resolver(ResolverSettings.from_env())


def get_duty_rate(hs_code: str) -> Optional[HTSEntry]:
    return get_resolver().get_duty_rate(hs_code)
