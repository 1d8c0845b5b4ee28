"""
Text extractor with a two-tier fallback chain.

Tier 1 (structured article extractors, tried in order):
- readability-lxml
- trafilatura

Tier 2 (only when tier 1 finds nothing):
- BeautifulSoup strip-and-flatten of the page body

The blocking parse runs in a worker thread and is raced against a deadline.
"""

import asyncio
import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from ..config import settings
from .models import ExtractedContent

logger = logging.getLogger(__name__)

NOISE_TAGS = ['script', 'style', 'nav', 'footer', 'header']
FALLBACK_METHOD = 'markup_fallback'

_WHITESPACE_RE = re.compile(r'\s+')


class TextExtractor:
    """
    Main-content extraction from HTML.
    """

    def __init__(
        self,
        extractor_sequence: Optional[List[str]] = None,
        max_chars: int = settings.ENRICHER_MAX_CONTENT_LENGTH,
        timeout_sec: float = settings.ENRICHER_PARSING_TIMEOUT_SEC,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize TextExtractor.

        Args:
            extractor_sequence: Ordered tier-1 extractors to try
            max_chars: Maximum characters to keep from extracted text
            timeout_sec: Deadline for one extraction
            log: Diagnostic sink, defaults to the module logger
        """
        self.extractor_sequence = list(extractor_sequence or settings.ENRICHER_EXTRACTOR_SEQUENCE)
        self.max_chars = max_chars
        self.timeout_sec = timeout_sec
        self.logger = log or logger

    async def extract(self, html: str, url: str) -> Optional[str]:
        """
        Extract readable text from HTML within the deadline.

        Args:
            html: HTML content as string
            url: Source URL (for relative-link resolution and diagnostics)

        Returns:
            Truncated text, or None if both tiers are empty or the deadline passes
        """
        extracted = await self.extract_content(html, url)
        return extracted.content if extracted else None

    async def extract_content(self, html: str, url: str) -> Optional[ExtractedContent]:
        """Same as extract(), keeping the name of the tier that produced the text."""
        loop = asyncio.get_running_loop()
        try:
            # On timeout the worker thread is left to finish on its own; its result is dropped.
            return await asyncio.wait_for(
                loop.run_in_executor(None, self.extract_sync, html, url),
                timeout=self.timeout_sec
            )
        except asyncio.TimeoutError:
            self.logger.warning(f"[text_extractor] Parsing timed out for URL: {url}")
            return None
        except Exception as e:
            self.logger.error(f"[text_extractor] Error parsing content from {url}: {e}")
            return None

    def extract_sync(self, html: str, url: str) -> Optional[ExtractedContent]:
        """
        Run both tiers without a deadline.

        Args:
            html: HTML content as string
            url: Source URL

        Returns:
            ExtractedContent or None if nothing readable was found
        """
        self.logger.info(f"[text_extractor] Parsing HTML content from URL: {url}")

        result = self._extract_structured(html, url)

        if result is None:
            self.logger.warning(
                f"[text_extractor] Structured extraction found nothing in {url}, "
                f"falling back to markup stripping"
            )
            text = self._extract_fallback(html)
            if text:
                result = (text, FALLBACK_METHOD)

        if result is None:
            self.logger.warning(f"[text_extractor] Markup stripping also failed to extract content from {url}")
            return None

        text, method = result
        self.logger.info(f"[text_extractor] Extracted {len(text)} chars using {method} from {url}")

        return ExtractedContent(url=url, content=text[:self.max_chars], method=method)

    def _extract_structured(self, html: str, url: str) -> Optional[Tuple[str, str]]:
        for extractor_name in self.extractor_sequence:
            try:
                text = self._try_extractor(extractor_name, html, url)
            except Exception as e:
                self.logger.debug(f"[text_extractor] {extractor_name} failed for {url}: {e}")
                continue

            if text:
                return text, extractor_name

        return None

    def _try_extractor(self, name: str, html: str, url: str) -> Optional[str]:
        """
        Try a specific tier-1 extractor.

        Args:
            name: Extractor name
            html: HTML content as string
            url: Source URL

        Returns:
            Extracted text or None
        """
        if name == 'readability':
            return self._extract_readability(html, url)
        elif name == 'trafilatura':
            return self._extract_trafilatura(html, url)
        else:
            self.logger.warning(f"[text_extractor] Unknown extractor: {name}")
            return None

    def _extract_readability(self, html: str, url: str) -> Optional[str]:
        """Extract using readability-lxml."""
        from readability import Document

        doc = Document(html, url=url)
        summary = doc.summary()

        # Convert article HTML to plain text
        soup = BeautifulSoup(summary, 'html.parser')
        text = soup.get_text(separator=' ', strip=True)

        return text or None

    def _extract_trafilatura(self, html: str, url: str) -> Optional[str]:
        """Extract using trafilatura."""
        import trafilatura

        text = trafilatura.extract(
            html,
            url=url,
            include_comments=False,
            include_tables=False
        )

        return text.strip() if text and text.strip() else None

    def _extract_fallback(self, html: str) -> Optional[str]:
        """
        Strip structural noise and flatten the remaining body text.

        Args:
            html: HTML content as string

        Returns:
            Whitespace-collapsed text or None
        """
        try:
            soup = BeautifulSoup(html, 'html.parser')
            for tag in soup(NOISE_TAGS):
                tag.decompose()

            root = soup.body or soup
            text = _WHITESPACE_RE.sub(' ', root.get_text()).strip()
            return text or None

        except Exception as e:
            self.logger.debug(f"[text_extractor] markup fallback error: {e}")
            return None
