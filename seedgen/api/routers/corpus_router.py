"""
Corpus Router - corpus initialization endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from seedgen.dependencies import get_corpus_store
from seedgen.services.corpus import CorpusStore
from seedgen.services.errors import EmptyCorpusError
from seedgen.utils.logger import setup_logger

logger = setup_logger(__name__)
router = APIRouter()


class InitRequest(BaseModel):
    text: Optional[str] = Field(None, description="Full corpus text, chunked by the service")
    chunks: Optional[List[str]] = Field(None, description="Pre-chunked corpus pieces")


class CorpusResponse(BaseModel):
    ok: bool = True
    data: dict


@router.post("/init", response_model=CorpusResponse)
async def init_corpus(
    request: InitRequest,
    store: CorpusStore = Depends(get_corpus_store),
):
    """
    Replace the current corpus.

    - **text**: full corpus text
    - **chunks**: corpus already split by the host (used when `text` is absent)

    Returns a log-style acknowledgement with the corpus size and chunk count.
    """
    if request.text is None and request.chunks is None:
        raise HTTPException(status_code=400, detail="either text or chunks is required")

    if request.text is not None:
        summary = store.load_text(request.text)
    else:
        summary = store.load_chunks(request.chunks or [])

    logger.info(f"[CORPUS] Initialized: {summary.message}")
    return {"ok": True, "data": summary.to_event()}


@router.get("", response_model=CorpusResponse)
async def corpus_info(store: CorpusStore = Depends(get_corpus_store)):
    """Summary of the loaded corpus"""
    try:
        handle = store.require()
    except EmptyCorpusError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    return {"ok": True, "data": handle.summary().to_event()}
