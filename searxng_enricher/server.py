# ./searxng_enricher/server.py
from typing import Optional

from fastapi import FastAPI
from pydantic import BaseModel

from .agents import SearXNGClient
from .config import settings

settings.configure_logging()

app = FastAPI()
_client: Optional[SearXNGClient] = None


class SearchRequest(BaseModel):
    query: str
    language: str = settings.SEARXNG_LANGUAGE


def get_client() -> SearXNGClient:
    global _client
    if _client is None:
        _client = SearXNGClient()
    return _client


@app.get("/")
def health():
    return {"ok": True}


@app.post("/search")
async def search(request: SearchRequest):
    results = await get_client().search_and_parse(request.query, request.language)
    return {"query": request.query, "count": len(results), "results": results}
