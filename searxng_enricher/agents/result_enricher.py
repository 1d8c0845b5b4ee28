"""
Result enrichment pipeline.

LangGraph workflow run once per search result item:

N0: Validate → N1: Fetch → N2: Parse → N3: Attach → END
                 ↘ (any stage fails) → N4: Skip → END

Items run through a bounded worker pool; output order follows input order
and a failing or slow item never affects its siblings.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, TypedDict
from urllib.parse import urlparse

from langgraph.graph import StateGraph, END

from ..config import settings
from ..extractors import ContentParser, DocumentFetcher, ExtractedContent, FetchedDocument

logger = logging.getLogger(__name__)

# Failure reason codes
INVALID_ITEM = 'invalid_item'
INVALID_URL = 'invalid_url'
FETCH_FAILED = 'fetch_failed'
EXTRACT_FAILED = 'extract_failed'
TIMEOUT = 'timeout'
ERROR = 'error'


class ItemState(TypedDict):
    """LangGraph state for one result item."""
    index: int
    total: int
    item: Any  # Original result item, never mutated
    url: Optional[str]

    # Shared resources
    fetcher: DocumentFetcher
    parser: ContentParser

    # Stage outputs
    document: Optional[FetchedDocument]
    extracted: Optional[ExtractedContent]
    enriched: Optional[Dict[str, Any]]
    failure_reason: Optional[str]


def is_valid_url(url: Any) -> bool:
    """True for an absolute http(s) URL with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def node_0_validate(state: ItemState) -> ItemState:
    """
    N0: Validate

    Check the item is a mapping carrying a well-formed URL.
    """
    item = state['item']

    if not isinstance(item, Mapping):
        logger.warning("[enricher N0] Skipping invalid result item: not an object")
        _record_failure(state, INVALID_ITEM)
        return state

    url = item.get('url')
    if not is_valid_url(url):
        logger.warning(f"[enricher N0] Skipping result with invalid URL: {url!r}")
        _record_failure(state, INVALID_URL)
        return state

    logger.info(f"[enricher N0] Processing [{state['index'] + 1}/{state['total']}]: {url}")
    state['url'] = url
    return state


async def node_1_fetch(state: ItemState) -> ItemState:
    """
    N1: Fetch

    Retrieve raw bytes and content type.
    """
    document = await state['fetcher'].fetch(state['url'])

    if document is None:
        _record_failure(state, FETCH_FAILED)
        return state

    state['document'] = document
    return state


async def node_2_parse(state: ItemState) -> ItemState:
    """
    N2: Parse

    Classify the document and extract readable text.
    """
    extracted = await state['parser'].parse(state['document'])

    # The document is consumed once
    state['document'] = None

    if extracted is None or not extracted.content:
        _record_failure(state, EXTRACT_FAILED)
        return state

    state['extracted'] = extracted
    return state


def node_3_attach(state: ItemState) -> ItemState:
    """
    N3: Attach

    Merge parsed_content into a copy of the original item.
    """
    extracted = state['extracted']
    state['enriched'] = {**state['item'], 'parsed_content': extracted.content}

    logger.info(
        f"[enricher N3] Successfully parsed content from {state['url']} "
        f"({len(extracted.content)} chars, {extracted.method})"
    )
    return state


def node_4_skip(state: ItemState) -> ItemState:
    """N4: Skip"""
    logger.debug(
        f"[enricher N4] Skipped item {state['index'] + 1} "
        f"({state['failure_reason']}): {state['url'] or '-'}"
    )
    return state


def _record_failure(state: ItemState, reason: str) -> None:
    state['failure_reason'] = reason


def _route(next_node: str):
    def route(state: ItemState) -> str:
        return 'skip' if state['failure_reason'] else next_node
    return route


route_from_validate = _route('fetch')
route_from_fetch = _route('parse')
route_from_parse = _route('attach')


def build_workflow():
    """
    Build the per-item LangGraph workflow.

    Returns:
        Compiled StateGraph
    """
    workflow = StateGraph(ItemState)

    workflow.add_node("validate", node_0_validate)
    workflow.add_node("fetch", node_1_fetch)
    workflow.add_node("parse", node_2_parse)
    workflow.add_node("attach", node_3_attach)
    workflow.add_node("skip", node_4_skip)

    workflow.set_entry_point("validate")

    workflow.add_conditional_edges("validate", route_from_validate)
    workflow.add_conditional_edges("fetch", route_from_fetch)
    workflow.add_conditional_edges("parse", route_from_parse)
    workflow.add_edge("attach", END)
    workflow.add_edge("skip", END)

    return workflow.compile()


class ResultEnricher:
    """
    Fetches and parses every result item, keeping only those with content.
    """

    def __init__(
        self,
        fetcher: Optional[DocumentFetcher] = None,
        parser: Optional[ContentParser] = None,
        max_workers: int = settings.ENRICHER_MAX_WORKERS,
        item_timeout_sec: Optional[float] = settings.ENRICHER_ITEM_TIMEOUT_SEC,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize ResultEnricher.

        Args:
            fetcher: Document fetcher, defaults to DocumentFetcher()
            parser: Content parser, defaults to ContentParser()
            max_workers: Items processed concurrently (1 = sequential)
            item_timeout_sec: Deadline for one item end to end, None to disable
            log: Diagnostic sink, defaults to the module logger
        """
        self.fetcher = fetcher or DocumentFetcher(log=log)
        self.parser = parser or ContentParser(log=log)
        self.max_workers = max(1, int(max_workers))
        self.item_timeout_sec = item_timeout_sec
        self.logger = log or logger
        self.workflow = build_workflow()
        self.last_stats: Dict[str, Any] = {}

    async def run(self, results: Any) -> List[Dict[str, Any]]:
        """
        Enrich a batch of result items.

        Args:
            results: List of result mappings, each with a 'url'

        Returns:
            Copies of the successfully parsed items with 'parsed_content' added,
            in input order
        """
        if not isinstance(results, list):
            self.logger.error("[enricher] Invalid results format received. Expected a list.")
            self.last_stats = self._new_stats(0)
            return []

        start_time = time.time()
        total = len(results)
        semaphore = asyncio.Semaphore(self.max_workers)

        async def worker(index: int, item: Any) -> Dict[str, Any]:
            async with semaphore:
                return await self._process_item(index, total, item)

        outcomes = await asyncio.gather(*(worker(i, item) for i, item in enumerate(results)))

        stats = self._new_stats(total)
        enriched = []
        for outcome in outcomes:
            if outcome.get('enriched'):
                enriched.append(outcome['enriched'])
                stats['succeeded'] += 1
                method = outcome['extracted'].method
                stats['by_method'][method] = stats['by_method'].get(method, 0) + 1
            else:
                reason = outcome.get('failure_reason') or EXTRACT_FAILED
                stats['failed_by_reason'][reason] = stats['failed_by_reason'].get(reason, 0) + 1

        stats['failed'] = total - stats['succeeded']
        stats['attempted'] = total - sum(
            stats['failed_by_reason'].get(reason, 0) for reason in (INVALID_ITEM, INVALID_URL)
        )
        stats['elapsed_sec'] = round(time.time() - start_time, 2)
        self.last_stats = stats

        self.logger.info(
            f"[enricher] Stats: {stats['succeeded']} succeeded of {stats['attempted']} attempted ({total} total), "
            f"{stats['failed']} skipped {stats['failed_by_reason']} ({stats['elapsed_sec']}s)"
        )
        return enriched

    async def _process_item(self, index: int, total: int, item: Any) -> Dict[str, Any]:
        initial_state = ItemState(
            index=index,
            total=total,
            item=item,
            url=None,
            fetcher=self.fetcher,
            parser=self.parser,
            document=None,
            extracted=None,
            enriched=None,
            failure_reason=None
        )
        url = item.get('url') if isinstance(item, Mapping) else None

        try:
            if self.item_timeout_sec:
                return await asyncio.wait_for(self.workflow.ainvoke(initial_state), timeout=self.item_timeout_sec)
            return await self.workflow.ainvoke(initial_state)

        except asyncio.TimeoutError:
            self.logger.error(f"[enricher] Processing timed out after {self.item_timeout_sec}s for URL {url}")
            return {'enriched': None, 'failure_reason': TIMEOUT}

        except Exception as e:
            self.logger.error(f"[enricher] Error processing result for URL {url}: {e}")
            return {'enriched': None, 'failure_reason': ERROR}

    @staticmethod
    def _new_stats(total: int) -> Dict[str, Any]:
        return {
            'total': total,
            'attempted': 0,
            'succeeded': 0,
            'failed': 0,
            'failed_by_reason': {},
            'by_method': {}
        }
