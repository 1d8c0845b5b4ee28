import logging
import os
import tempfile
from typing import Optional

# ===== SearXNG upstream =====
SEARXNG_BASE_URL = os.getenv('SEARXNG_BASE_URL', 'http://localhost:8888')
SEARXNG_API_KEY = os.getenv('SEARXNG_API_KEY', '')
SEARXNG_API_KEY_HEADER = os.getenv('SEARXNG_API_KEY_HEADER', 'X-Searx-API-Key')
SEARXNG_USER_AGENT = os.getenv(
    'SEARXNG_USER_AGENT',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
)
SEARXNG_ENGINES = [e.strip() for e in os.getenv('SEARXNG_ENGINES', 'google,bing,duckduckgo,brave').split(',') if e.strip()]
SEARXNG_NUM_RESULTS = int(os.getenv('SEARXNG_NUM_RESULTS', '10'))
SEARXNG_LANGUAGE = os.getenv('SEARXNG_LANGUAGE', 'en')

# ===== Fetching =====
ENRICHER_HTTP_TIMEOUT_SEC = float(os.getenv('ENRICHER_HTTP_TIMEOUT_SEC', '10'))
ENRICHER_MAX_BODY_BYTES = int(os.getenv('ENRICHER_MAX_BODY_BYTES', str(5 * 1024 * 1024)))  # 5 MiB

# ===== Extraction =====
ENRICHER_PARSING_TIMEOUT_SEC = float(os.getenv('ENRICHER_PARSING_TIMEOUT_SEC', '15'))
ENRICHER_EXTRACTOR_SEQUENCE = [e.strip() for e in os.getenv('ENRICHER_EXTRACTOR_SEQUENCE', 'readability').split(',') if e.strip()]
ENRICHER_MAX_CONTENT_LENGTH = int(os.getenv('ENRICHER_MAX_CONTENT_LENGTH', '50000'))

# PDF conversion (pdf2txt.py ships with pdfminer.six)
ENRICHER_PDF_TIMEOUT_SEC = float(os.getenv('ENRICHER_PDF_TIMEOUT_SEC', '30'))
ENRICHER_PDF_COMMAND = os.getenv('ENRICHER_PDF_COMMAND', 'pdf2txt.py')
ENRICHER_TMP_DIR = os.getenv('ENRICHER_TMP_DIR', tempfile.gettempdir())

# ===== Orchestration =====
ENRICHER_MAX_WORKERS = int(os.getenv('ENRICHER_MAX_WORKERS', '5'))
ENRICHER_ITEM_TIMEOUT_SEC = float(os.getenv('ENRICHER_ITEM_TIMEOUT_SEC', '60'))

# ===== Logging =====
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = os.getenv('LOG_FORMAT', '%(asctime)s %(levelname)s %(name)s: %(message)s')


def configure_logging(level: Optional[str] = None) -> None:
    """Initialize the process-wide log sink. Call once at startup."""
    logging.basicConfig(level=getattr(logging, (level or LOG_LEVEL), logging.INFO), format=LOG_FORMAT)
