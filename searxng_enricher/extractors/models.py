"""
Shared types for the fetch / extract stages.
"""

from dataclasses import dataclass


PDF_CONTENT_TYPE = 'application/pdf'


@dataclass(frozen=True)
class FetchedDocument:
    """Raw response of a single document fetch."""
    url: str
    content_type: str
    body: bytes
    status: int = 200

    @property
    def is_pdf(self) -> bool:
        return PDF_CONTENT_TYPE in (self.content_type or '').lower()


@dataclass(frozen=True)
class ExtractedContent:
    """Readable text extracted from one document."""
    url: str
    content: str
    method: str  # readability | trafilatura | markup_fallback | pdf
