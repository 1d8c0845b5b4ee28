"""
Routes a fetched document to PDF or HTML extraction by content type.
"""

import codecs
import logging
from typing import Optional

from ..config import settings
from .models import ExtractedContent, FetchedDocument
from .pdf_extractor import PdfTextExtractor
from .text_extractor import TextExtractor

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = 'utf-8'


def _charset_from_content_type(content_type: str) -> str:
    for param in (content_type or '').split(';')[1:]:
        key, _, value = param.partition('=')
        if key.strip().lower() == 'charset':
            charset = value.strip().strip('"\'')
            try:
                return codecs.lookup(charset).name
            except LookupError:
                break
    return DEFAULT_CHARSET


def decode_body(body: bytes, content_type: str = '') -> str:
    """Decode a response body using the declared charset, falling back to UTF-8."""
    return body.decode(_charset_from_content_type(content_type), errors='ignore')


class ContentParser:
    """
    Classifies a FetchedDocument and delegates to the matching extractor.
    """

    def __init__(
        self,
        text_extractor: Optional[TextExtractor] = None,
        pdf_extractor: Optional[PdfTextExtractor] = None,
        max_content_length: int = settings.ENRICHER_MAX_CONTENT_LENGTH,
        log: Optional[logging.Logger] = None
    ):
        self.text_extractor = text_extractor or TextExtractor(max_chars=max_content_length, log=log)
        self.pdf_extractor = pdf_extractor or PdfTextExtractor(log=log)
        self.max_content_length = max_content_length
        self.logger = log or logger

    async def parse(self, doc: FetchedDocument) -> Optional[ExtractedContent]:
        """
        Extract readable content from a fetched document.

        Args:
            doc: Document returned by the fetcher

        Returns:
            ExtractedContent truncated to max_content_length, or None
        """
        try:
            if doc.is_pdf:
                return await self._parse_pdf(doc)
            return await self._parse_html(doc)
        except Exception as e:
            self.logger.error(f"[content_parser] Error processing {doc.url}: {e}")
            return None

    async def _parse_pdf(self, doc: FetchedDocument) -> Optional[ExtractedContent]:
        self.logger.info(f"[content_parser] Detected PDF content for URL: {doc.url}")

        text = await self.pdf_extractor.extract(doc.body, doc.url)
        if not text:
            self.logger.warning(f"[content_parser] Could not extract text from PDF: {doc.url}")
            return None

        return ExtractedContent(url=doc.url, content=text[:self.max_content_length], method='pdf')

    async def _parse_html(self, doc: FetchedDocument) -> Optional[ExtractedContent]:
        html = decode_body(doc.body, doc.content_type)
        if not html.strip():
            self.logger.warning(f"[content_parser] No HTML provided for parsing from URL: {doc.url}")
            return None

        extracted = await self.text_extractor.extract_content(html, doc.url)
        if extracted is None or not extracted.content:
            self.logger.warning(f"[content_parser] No readable content extracted from {doc.url}")
            return None

        if len(extracted.content) > self.max_content_length:
            extracted = ExtractedContent(
                url=extracted.url,
                content=extracted.content[:self.max_content_length],
                method=extracted.method
            )

        return extracted
