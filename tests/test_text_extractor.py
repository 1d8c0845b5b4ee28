import time

import pytest

from searxng_enricher.extractors import TextExtractor
from searxng_enricher.extractors.text_extractor import FALLBACK_METHOD


NOISY_HTML = """
<html>
  <head><title>Page</title><style>p { color: red; }</style></head>
  <body>
    <header>Site header</header>
    <nav>Home | About</nav>
    <p>Main   text
       here</p>
    <script>var tracking = 1;</script>
    <footer>Copyright</footer>
  </body>
</html>
"""

LONG_ARTICLE = """
<html><body>
  <div class="sidebar"><a href="/a">Link one</a> <a href="/b">Link two</a></div>
  <article class="post-content">
    <p>The quick brown fox jumps over the lazy dog, again and again, for the benefit of the parser.</p>
    <p>Readability scores paragraphs by length and commas, so this one has several, many, in fact.</p>
    <p>A third paragraph makes the article region clearly the best candidate on the page, by far.</p>
  </article>
</body></html>
"""

EMPTY_HTML = "<html><head><title></title></head><body><script>var a = 1;</script><style>p {}</style></body></html>"


def test_simple_article_text():
    extracted = TextExtractor().extract_sync("<html><body><article>Hello world</article></body></html>", "https://a.test")

    assert extracted.content == "Hello world"
    assert extracted.url == "https://a.test"


def test_readability_finds_article_body():
    extracted = TextExtractor(extractor_sequence=['readability']).extract_sync(LONG_ARTICLE, "https://a.test/post")

    assert extracted is not None
    assert "quick brown fox" in extracted.content
    assert "third paragraph" in extracted.content


def test_fallback_strips_noise_and_collapses_whitespace(monkeypatch):
    extractor = TextExtractor()
    monkeypatch.setattr(extractor, '_extract_structured', lambda html, url: None)

    extracted = extractor.extract_sync(NOISY_HTML, "https://a.test")

    assert extracted.content == "Main text here"
    assert extracted.method == FALLBACK_METHOD


def test_fallback_runs_when_structured_tier_is_empty(monkeypatch):
    extractor = TextExtractor(extractor_sequence=['readability'])
    calls = []

    def empty_readability(html, url):
        calls.append('readability')
        return ''

    original_fallback = extractor._extract_fallback

    def tracking_fallback(html):
        calls.append('fallback')
        return original_fallback(html)

    monkeypatch.setattr(extractor, '_extract_readability', empty_readability)
    monkeypatch.setattr(extractor, '_extract_fallback', tracking_fallback)

    extracted = extractor.extract_sync("<html><body><p>Body text</p></body></html>", "https://a.test")

    assert calls == ['readability', 'fallback']
    assert extracted.content == "Body text"


def test_fallback_not_used_when_structured_tier_succeeds(monkeypatch):
    extractor = TextExtractor(extractor_sequence=['readability'])
    monkeypatch.setattr(extractor, '_extract_readability', lambda html, url: 'Structured text')
    monkeypatch.setattr(extractor, '_extract_fallback', lambda html: pytest.fail('fallback should not run'))

    extracted = extractor.extract_sync(NOISY_HTML, "https://a.test")

    assert extracted.content == 'Structured text'
    assert extracted.method == 'readability'


def test_structured_extractor_error_falls_through(monkeypatch):
    extractor = TextExtractor(extractor_sequence=['readability'])

    def explode(html, url):
        raise ValueError('unparseable')

    monkeypatch.setattr(extractor, '_extract_readability', explode)

    assert extractor.extract_sync(NOISY_HTML, "https://a.test").method == FALLBACK_METHOD


def test_extractor_sequence_order(monkeypatch):
    extractor = TextExtractor(extractor_sequence=['readability', 'trafilatura'])
    monkeypatch.setattr(extractor, '_extract_readability', lambda html, url: None)
    monkeypatch.setattr(extractor, '_extract_trafilatura', lambda html, url: 'From trafilatura')

    extracted = extractor.extract_sync(NOISY_HTML, "https://a.test")

    assert extracted.content == 'From trafilatura'
    assert extracted.method == 'trafilatura'


def test_trafilatura_extractor(monkeypatch):
    import trafilatura

    seen = {}

    def fake_extract(html, **kwargs):
        seen.update(kwargs)
        return '  Article body  '

    monkeypatch.setattr(trafilatura, 'extract', fake_extract)
    extracted = TextExtractor(extractor_sequence=['trafilatura']).extract_sync(NOISY_HTML, "https://a.test/x")

    assert extracted.content == 'Article body'
    assert seen['url'] == "https://a.test/x"


def test_unknown_extractor_is_ignored():
    extracted = TextExtractor(extractor_sequence=['goose3']).extract_sync(NOISY_HTML, "https://a.test")

    assert extracted.method == FALLBACK_METHOD


def test_both_tiers_empty_returns_none():
    assert TextExtractor().extract_sync(EMPTY_HTML, "https://a.test") is None


def test_output_is_truncated():
    html = "<html><body><p>" + "word " * 500 + "</p></body></html>"

    extracted = TextExtractor(max_chars=100).extract_sync(html, "https://a.test")

    assert len(extracted.content) == 100


def test_extraction_is_deterministic():
    extractor = TextExtractor()

    first = extractor.extract_sync(LONG_ARTICLE, "https://a.test/post")
    second = extractor.extract_sync(LONG_ARTICLE, "https://a.test/post")

    assert first == second


@pytest.mark.asyncio
async def test_async_extract_returns_text():
    text = await TextExtractor().extract("<html><body><article>Hello world</article></body></html>", "https://a.test")

    assert text == "Hello world"


@pytest.mark.asyncio
async def test_async_extract_times_out(caplog):
    extractor = TextExtractor(timeout_sec=0.05)

    def slow_parse(html, url):
        time.sleep(0.5)
        return None

    extractor.extract_sync = slow_parse

    started = time.monotonic()
    assert await extractor.extract(NOISY_HTML, "https://a.test/slow") is None
    assert time.monotonic() - started < 0.4
    assert 'Parsing timed out' in caplog.text


@pytest.mark.asyncio
async def test_async_extract_empty_returns_none():
    assert await TextExtractor().extract(EMPTY_HTML, "https://a.test") is None
