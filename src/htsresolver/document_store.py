"""Access to the reference tariff schedule as plain text.

The extractor only needs "give me the document's text".  Files ending in
``.pdf`` go through pdfplumber; anything else is read as UTF-8 text that
some other tool already produced.
"""

from __future__ import annotations

import io
import logging
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

import pdfplumber

from htsresolver.errors import DocumentUnavailableError

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def read_text(self, document_id: str) -> str:
        """Return the full text of ``document_id`` or raise DocumentUnavailableError."""
        ...


def pdf_bytes_to_text(blob: bytes) -> str:
    """Concatenate the extracted text of every page, one page after another."""
    with pdfplumber.open(io.BytesIO(blob)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages)


class FileDocumentStore:
    """Reads documents from the filesystem, optionally relative to ``root``."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else None

    def _resolve(self, document_id: str) -> Path:
        path = Path(document_id)
        if self.root is not None and not path.is_absolute():
            path = self.root / path
        return path

    def read_text(self, document_id: str) -> str:
        path = self._resolve(document_id)
        if not path.is_file():
            raise DocumentUnavailableError(document_id, f"file not found: {path}")
        try:
            if path.suffix.lower() == ".pdf":
                text = pdf_bytes_to_text(path.read_bytes())
            else:
                text = path.read_text(encoding="utf-8")
        except Exception as exc:
            raise DocumentUnavailableError(document_id, str(exc)) from exc
        logger.info("Read %d characters from %s", len(text), path.name)
        return text


class InMemoryDocumentStore:
    """Documents supplied by the caller, keyed by identifier."""

    def __init__(self, documents: Optional[Mapping[str, str]] = None) -> None:
        self._documents: Dict[str, str] = dict(documents or {})

    def put(self, document_id: str, text: str) -> None:
        self._documents[document_id] = text

    def read_text(self, document_id: str) -> str:
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentUnavailableError(document_id, "not loaded") from None


class CachedDocumentStore:
    """Keeps successfully read text for the life of the process.

    Only one thread performs the read for a given document; failures are not
    cached so a document that appears later is picked up on the next call.
    """

    def __init__(self, inner: DocumentStore) -> None:
        self._inner = inner
        self._texts: Dict[str, str] = {}
        self._lock = threading.Lock()

    def read_text(self, document_id: str) -> str:
        text = self._texts.get(document_id)
        if text is not None:
            return text
        with self._lock:
            text = self._texts.get(document_id)
            if text is None:
                text = self._inner.read_text(document_id)
                self._texts[document_id] = text
        return text

    def is_cached(self, document_id: str) -> bool:
        return document_id in self._texts
