"""
FastAPI dependencies
"""

from fastapi import Request

from seedgen.services.corpus import CorpusStore


def get_corpus_store(request: Request) -> CorpusStore:
    """Corpus store created in the app lifespan"""
    store = getattr(request.app.state, "corpus_store", None)
    if store is None:
        store = CorpusStore()
        request.app.state.corpus_store = store
    return store
