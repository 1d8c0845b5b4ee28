from fastapi.testclient import TestClient

from searxng_enricher import server


class StubClient:
    def __init__(self, results):
        self.results = results
        self.calls = []

    async def search_and_parse(self, query, language):
        self.calls.append((query, language))
        return self.results


def test_health():
    with TestClient(server.app) as client:
        assert client.get('/').json() == {'ok': True}


def test_search_endpoint(monkeypatch):
    stub = StubClient([{'url': 'https://a.test', 'parsed_content': 'Hello world'}])
    monkeypatch.setattr(server, '_client', stub)

    with TestClient(server.app) as client:
        response = client.post('/search', json={'query': 'hello', 'language': 'fr'})

    assert response.status_code == 200
    assert response.json() == {
        'query': 'hello',
        'count': 1,
        'results': [{'url': 'https://a.test', 'parsed_content': 'Hello world'}],
    }
    assert stub.calls == [('hello', 'fr')]


def test_search_endpoint_default_language(monkeypatch):
    stub = StubClient([])
    monkeypatch.setattr(server, '_client', stub)

    with TestClient(server.app) as client:
        response = client.post('/search', json={'query': 'hello'})

    assert response.json()['count'] == 0
    assert stub.calls == [('hello', 'en')]


def test_search_endpoint_requires_query():
    with TestClient(server.app) as client:
        assert client.post('/search', json={}).status_code == 422
