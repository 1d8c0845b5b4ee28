import asyncio
import socket

import pytest

from searxng_enricher.extractors import (
    ContentParser,
    ConverterResult,
    FetchedDocument,
    PdfTextExtractor,
    TextConverter,
    TextExtractor,
)


ARTICLE_HTML = b"<html><body><article>Hello world</article></body></html>"


class FakeConverter(TextConverter):
    """Converter double returning a canned result, optionally after a delay."""

    def __init__(self, stdout=b'', stderr=b'', returncode=0, delay=0.0):
        self.result = ConverterResult(returncode, stdout, stderr)
        self.delay = delay
        self.paths = []
        self.contents = []

    async def convert(self, path):
        self.paths.append(path)
        with open(path, 'rb') as f:
            self.contents.append(f.read())
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


class FakeFetcher:
    """
    Fetcher double keyed by URL. Values may be a FetchedDocument, None,
    an exception instance (raised) or an async callable (awaited).
    """

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        value = self.responses.get(url)
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return await value()
        return value


def html_doc(url, body=ARTICLE_HTML, content_type='text/html; charset=utf-8'):
    return FetchedDocument(url=url, content_type=content_type, body=body)


def pdf_doc(url, body=b'%PDF-1.4 fake'):
    return FetchedDocument(url=url, content_type='application/pdf', body=body)


@pytest.fixture
def fake_converter():
    return FakeConverter(stdout=b'\n  Document text  \n')


@pytest.fixture
def parser(fake_converter, tmp_path):
    return ContentParser(
        text_extractor=TextExtractor(timeout_sec=5),
        pdf_extractor=PdfTextExtractor(converter=fake_converter, tmp_dir=str(tmp_path)),
    )


@pytest.fixture
def closed_port():
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(('127.0.0.1', 0))
        return sock.getsockname()[1]
