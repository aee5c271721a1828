"""Exception types raised by the HTS resolver.

Expected misses (unknown code, implausible input, missing reference
document) are reported as ``None`` by the public lookup functions.  These
exceptions cross internal seams only and are converted at stage boundaries.
"""

from __future__ import annotations


class HTSResolverError(Exception):
    """Base class for resolver errors."""


class DocumentUnavailableError(HTSResolverError):
    """The reference document could not be read or converted to text."""

    def __init__(self, document_id: str, reason: str) -> None:
        super().__init__(f"Reference document {document_id!r} unavailable: {reason}")
        self.document_id = document_id
        self.reason = reason


class SeedFileError(HTSResolverError):
    """A static rate seed file is missing or not valid JSON."""
