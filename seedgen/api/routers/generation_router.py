"""
Generation Router - seed-phrase text generation (JSON and SSE streaming)
"""

import json
from typing import Any, AsyncIterator, Optional
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from seedgen.dependencies import get_corpus_store
from seedgen.services.cancellation import CancellationToken
from seedgen.services.corpus import CorpusStore
from seedgen.services.errors import EmptyCorpusError, SeedgenError
from seedgen.services.generator import GenerationPipeline, generate_text
from seedgen.utils.logger import setup_logger

logger = setup_logger(__name__)
router = APIRouter()


class GenerateRequest(BaseModel):
    # type-checked by GenerationPipeline, which reports INVALID_PARAMETER
    seed: Any = Field("", description="Seed phrase")
    options: Optional[Any] = Field(
        None, description="N, power, threshold, ngram, genLength, maxExtend, delay, ..."
    )


class GenerateResponse(BaseModel):
    ok: bool = True
    data: dict


def _error_response(exc: SeedgenError) -> JSONResponse:
    status = 409 if isinstance(exc, EmptyCorpusError) else 400
    return JSONResponse(status_code=status, content={"ok": False, "error": exc.to_dict()})


def _format_sse(data: str, *, event: Optional[str] = None) -> str:
    lines = data.rstrip("\n").splitlines() or [""]
    payload = []
    if event:
        payload.append(f"event: {event}")
    for line in lines:
        payload.append(f"data: {line}")
    payload.append("")
    return "\n".join(payload) + "\n"


async def _event_stream(pipeline: GenerationPipeline) -> AsyncIterator[str]:
    finished = False
    try:
        async for event in pipeline.stream():
            yield _format_sse(json.dumps(event.to_dict(), ensure_ascii=False), event=event.type)
        finished = True
    finally:
        # Starlette cancels the response task when the client goes away
        if not finished:
            pipeline.cancel.cancel("client disconnected")
            logger.info("[GEN] Stream closed before completion")


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    request: GenerateRequest,
    store: CorpusStore = Depends(get_corpus_store),
):
    """Generate text for a seed phrase and return it in one response"""
    logger.info(f"[GEN] Generate request: seed={request.seed!r}")
    try:
        result = await generate_text(store.handle, request.seed, request.options)
    except SeedgenError as exc:
        logger.warning(f"[GEN] Generate failed: {exc.code}")
        return _error_response(exc)

    return {
        "ok": True,
        "data": {"text": result.text, "tokens": len(result.tokens), "reason": result.reason},
    }


@router.post("/generate/stream")
async def generate_stream(
    request: GenerateRequest,
    store: CorpusStore = Depends(get_corpus_store),
) -> StreamingResponse:
    """
    Stream generated tokens as Server-Sent Events.

    Emits one `stream_token` event per token followed by a single
    `stream_end` event, or a single `error` event.
    """
    logger.info(f"[GEN] Stream request: seed={request.seed!r}")
    pipeline = GenerationPipeline(
        store.handle, request.seed, request.options, cancel=CancellationToken()
    )
    headers = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    return StreamingResponse(
        _event_stream(pipeline),
        media_type="text/event-stream",
        headers=headers,
    )
