"""
Fetch SearXNG results and enrich each one with the readable text of the linked page.
"""

from .agents import ResultEnricher, SearXNGClient, fetch_and_parse_results, search_and_parse

__version__ = '0.1.0'

__all__ = ['ResultEnricher', 'SearXNGClient', 'fetch_and_parse_results', 'search_and_parse']
