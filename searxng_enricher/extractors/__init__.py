"""
Extractors package for search-result content acquisition.

Provides utilities for:
- Document fetching with timeout and size cap (document_fetcher)
- PDF text extraction via an external converter (pdf_extractor)
- Main-content extraction from HTML (text_extractor)
- Content-type dispatch (content_parser)
"""

from .models import FetchedDocument, ExtractedContent
from .document_fetcher import DocumentFetcher
from .pdf_extractor import ConverterResult, PdfTextExtractor, SubprocessConverter, TextConverter
from .text_extractor import TextExtractor
from .content_parser import ContentParser

__all__ = [
    'FetchedDocument', 'ExtractedContent',
    'DocumentFetcher',
    'ConverterResult', 'PdfTextExtractor', 'SubprocessConverter', 'TextConverter',
    'TextExtractor',
    'ContentParser',
]
