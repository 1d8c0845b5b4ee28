"""
SearXNG search client.

Submits a query to a SearXNG instance and enriches the returned results
with the readable text of each linked document.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import settings
from ..extractors import ContentParser, DocumentFetcher, PdfTextExtractor, TextExtractor
from .result_enricher import ResultEnricher

logger = logging.getLogger(__name__)


class SearXNGClient:
    """
    Search + fetch + parse over a SearXNG JSON API.
    """

    def __init__(
        self,
        base_url: str = settings.SEARXNG_BASE_URL,
        api_key: str = settings.SEARXNG_API_KEY,
        user_agent: str = settings.SEARXNG_USER_AGENT,
        engines: Optional[List[str]] = None,
        num_results: int = settings.SEARXNG_NUM_RESULTS,
        timeout_sec: float = settings.ENRICHER_HTTP_TIMEOUT_SEC,
        enricher: Optional[ResultEnricher] = None,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize SearXNGClient.

        Args:
            base_url: SearXNG instance root
            api_key: Value of the API-key header, empty to omit it
            user_agent: User agent string
            engines: Engines to query, defaults to settings.SEARXNG_ENGINES
            num_results: Result count cap passed upstream
            timeout_sec: Timeout for the search request and each document fetch
            enricher: Pipeline used for fetch + parse, built from settings if omitted
            log: Diagnostic sink, defaults to the module logger
        """
        self.base_url = base_url.rstrip('/')
        self.engines = list(engines or settings.SEARXNG_ENGINES)
        self.num_results = num_results
        self.timeout_sec = timeout_sec
        self.logger = log or logger

        self.headers = {'User-Agent': user_agent}
        if api_key:
            self.headers[settings.SEARXNG_API_KEY_HEADER] = api_key

        self.enricher = enricher or self._build_enricher(log)

    def _build_enricher(self, log: Optional[logging.Logger]) -> ResultEnricher:
        fetcher = DocumentFetcher(
            user_agent=self.headers['User-Agent'],
            timeout_sec=self.timeout_sec,
            log=log
        )
        parser = ContentParser(
            text_extractor=TextExtractor(log=log),
            pdf_extractor=PdfTextExtractor(log=log),
            log=log
        )
        return ResultEnricher(fetcher=fetcher, parser=parser, log=log)

    async def search(self, query: str, language: str = settings.SEARXNG_LANGUAGE) -> Dict[str, Any]:
        """
        Run a search.

        Args:
            query: Free-text query
            language: Result language code

        Returns:
            Decoded JSON response, or {'results': []} on any failure
        """
        params = {
            'q': query,
            'format': 'json',
            'language': language,
            'engines': ','.join(self.engines),
            'results': str(self.num_results)
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_sec)
        status = None

        self.logger.info(f'[searxng_client] Performing search with query "{query}"')
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{self.base_url}/search", headers=self.headers, params=params) as response:
                    status = response.status
                    if not 200 <= status < 300:
                        body = await response.text(errors='replace')
                        self.logger.error(
                            f"[searxng_client] Search request failed. Status code: {status}. "
                            f"Response data: {body[:500]}"
                        )
                        return {'results': []}

                    data = await response.json(content_type=None)

            self.logger.info(f"[searxng_client] Search request successful with status {status}")
            self.logger.debug(f"[searxng_client] Raw JSON response: {data}")
            return data

        except asyncio.TimeoutError:
            self.logger.error(f"[searxng_client] Search timed out after {self.timeout_sec}s. Status code: {status or 'N/A'}")
        except aiohttp.ClientError as e:
            self.logger.error(f"[searxng_client] HTTP client error during search: {e}. Status code: {status or 'N/A'}")
        except ValueError as e:
            self.logger.error(f"[searxng_client] Search response is not valid JSON: {e}")
        except Exception as e:
            self.logger.error(f"[searxng_client] Unexpected error during search: {e}")

        return {'results': []}

    async def fetch_and_parse_results(self, results: Any) -> List[Dict[str, Any]]:
        """
        Fetch and parse every result item.

        Args:
            results: List of result mappings, each with a 'url'

        Returns:
            Items with non-empty 'parsed_content', in input order
        """
        return await self.enricher.run(results)

    async def search_and_parse(self, query: str, language: str = settings.SEARXNG_LANGUAGE) -> List[Dict[str, Any]]:
        """
        Search, then enrich the results. Never raises.

        Args:
            query: Free-text query
            language: Result language code

        Returns:
            Enriched results, or [] on any failure
        """
        try:
            self.logger.info(f'[searxng_client] Starting search and parse for query "{query}"')
            search_results = await self.search(query, language)

            if not isinstance(search_results, Mapping):
                self.logger.error("[searxng_client] Invalid search response format received. Expected an object.")
                return []

            results = search_results.get('results')
            if not isinstance(results, list):
                self.logger.error("[searxng_client] Invalid search response 'results' format received. Expected a list.")
                return []

            parsed_results = await self.fetch_and_parse_results(results)
            self.logger.info(
                f'[searxng_client] Completed search and parse for query "{query}": '
                f"{len(parsed_results)}/{len(results)} results with content"
            )
            return parsed_results

        except Exception as e:
            self.logger.error(f'[searxng_client] Error during search_and_parse for query "{query}": {e}')
            return []

    def search_and_parse_sync(self, query: str, language: str = settings.SEARXNG_LANGUAGE) -> List[Dict[str, Any]]:
        """Blocking wrapper around search_and_parse() for callers without an event loop."""
        return asyncio.run(self.search_and_parse(query, language))


async def search_and_parse(query: str, language: str = settings.SEARXNG_LANGUAGE) -> List[Dict[str, Any]]:
    """Module-level entry point using a client built from settings."""
    return await SearXNGClient().search_and_parse(query, language)


async def fetch_and_parse_results(results: Any) -> List[Dict[str, Any]]:
    """Module-level entry point using a client built from settings."""
    return await SearXNGClient().fetch_and_parse_results(results)


if __name__ == "__main__":
    # For manual testing: python -m searxng_enricher.agents.searxng_client "query"
    import json
    import sys

    settings.configure_logging()
    query = ' '.join(sys.argv[1:]) or 'python asyncio'
    results = SearXNGClient().search_and_parse_sync(query)
    print(json.dumps(results, indent=2, ensure_ascii=False))
