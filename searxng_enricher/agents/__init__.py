from .result_enricher import ResultEnricher, build_workflow, is_valid_url
from .searxng_client import SearXNGClient, fetch_and_parse_results, search_and_parse

__all__ = [
    'ResultEnricher', 'build_workflow', 'is_valid_url',
    'SearXNGClient', 'fetch_and_parse_results', 'search_and_parse',
]
