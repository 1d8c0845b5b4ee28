"""
Async document fetcher.

Features:
- Async HTTP with aiohttp
- Hard total timeout per request
- Response body size cap (streamed, raw bytes)
- Single attempt: any failure is terminal for that URL
"""

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from ..config import settings
from .models import FetchedDocument

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class BodyTooLarge(Exception):
    """Raised internally when a response exceeds the size cap."""


class DocumentFetcher:
    """
    Fetches raw bytes and content type for a URL.
    """

    def __init__(
        self,
        user_agent: str = settings.SEARXNG_USER_AGENT,
        timeout_sec: float = settings.ENRICHER_HTTP_TIMEOUT_SEC,
        max_body_bytes: int = settings.ENRICHER_MAX_BODY_BYTES,
        extra_headers: Optional[Dict[str, str]] = None,
        follow_redirects: bool = True,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize DocumentFetcher.

        Args:
            user_agent: User agent string
            timeout_sec: Total timeout for one request
            max_body_bytes: Largest response body accepted
            extra_headers: Additional headers sent with every request
            follow_redirects: Whether to follow redirects
            log: Diagnostic sink, defaults to the module logger
        """
        self.user_agent = user_agent
        self.timeout_sec = timeout_sec
        self.max_body_bytes = max_body_bytes
        self.extra_headers = dict(extra_headers or {})
        self.follow_redirects = follow_redirects
        self.logger = log or logger

    def _headers(self) -> Dict[str, str]:
        headers = {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,application/pdf;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
        }
        headers.update(self.extra_headers)
        return headers

    async def fetch(self, url: str) -> Optional[FetchedDocument]:
        """
        Fetch a document.

        Args:
            url: Absolute URL, already validated

        Returns:
            FetchedDocument, or None on network error, timeout,
            non-success status or oversized body
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_sec)
        status = None

        self.logger.info(f"[document_fetcher] Fetching content from URL: {url}")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(
                    url,
                    headers=self._headers(),
                    allow_redirects=self.follow_redirects,
                    ssl=False  # More permissive for varied sites
                ) as response:
                    status = response.status

                    if not 200 <= status < 300:
                        self.logger.error(
                            f"[document_fetcher] Error fetching {url}: non-success response. "
                            f"Status code: {status}"
                        )
                        return None

                    body = await self._read_capped(response)
                    content_type = response.headers.get('Content-Type', '')

                    self.logger.info(
                        f"[document_fetcher] Fetched {url} -> {status} "
                        f"({len(body)} bytes, {content_type or 'no content type'})"
                    )
                    return FetchedDocument(url=url, content_type=content_type, body=body, status=status)

        except BodyTooLarge as e:
            self.logger.error(f"[document_fetcher] Error fetching {url}: {e}. Status code: {status}")
            return None

        except asyncio.TimeoutError:
            self.logger.error(
                f"[document_fetcher] Timeout fetching {url} after {self.timeout_sec}s. "
                f"Status code: {status or 'N/A'}"
            )
            return None

        except aiohttp.ClientError as e:
            self.logger.error(
                f"[document_fetcher] HTTP client error fetching {url}: {e}. "
                f"Status code: {status or 'N/A'}"
            )
            return None

        except Exception as e:
            self.logger.error(f"[document_fetcher] Unexpected error fetching {url}: {e}")
            return None

    async def _read_capped(self, response: aiohttp.ClientResponse) -> bytes:
        """
        Read the response body, refusing anything over max_body_bytes.

        Args:
            response: Open aiohttp response

        Returns:
            Raw body bytes
        """
        declared = response.content_length
        if declared is not None and declared > self.max_body_bytes:
            raise BodyTooLarge(
                f"declared body of {declared} bytes exceeds limit of {self.max_body_bytes}"
            )

        buffer = bytearray()
        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
            buffer.extend(chunk)
            if len(buffer) > self.max_body_bytes:
                raise BodyTooLarge(f"body exceeds limit of {self.max_body_bytes} bytes")

        return bytes(buffer)
