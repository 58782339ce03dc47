"""
Seedgen Service
Main application entry point

Streams text generated from a reference corpus, biased toward the contexts
in which a seed phrase occurs.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from seedgen.config import settings
from seedgen.services.corpus import CorpusStore
from seedgen.services.errors import InvalidParameterError
from seedgen.utils.logger import setup_logger

# Setup logging; service modules log through the "seedgen" parent
setup_logger("seedgen")
logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for service initialization"""
    logger.info("[BOOT] Starting Seedgen service...")

    try:
        store = CorpusStore(chunk_size=settings.CORPUS_CHUNK_SIZE)

        if settings.CORPUS_PATH:
            corpus_path = Path(settings.CORPUS_PATH)
            if corpus_path.exists():
                summary = store.load_file(corpus_path)
                logger.info(f"[BOOT] Corpus loaded from {corpus_path}: {summary.message}")
            else:
                logger.warning(f"[BOOT] CORPUS_PATH not found: {corpus_path}")

        app.state.corpus_store = store
        logger.info("[BOOT] Seedgen service ready!")
        yield

    except Exception as e:
        logger.error(f"[ERR] Failed to initialize: {e}", exc_info=True)
        raise
    finally:
        logger.info("[SHUTDOWN] Seedgen service stopped")


# Create FastAPI app
app = FastAPI(
    title="Seedgen Service",
    description="Context-weighted n-gram text generation with token streaming",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request body validation
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.warning(f"[ERR] Invalid request body for {request.url.path}: {problems}")
    return JSONResponse(
        status_code=400,
        content={"ok": False, "error": InvalidParameterError(problems).to_dict()},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"[ERR] Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": {
                "code": "SEEDGEN_SERVICE_ERROR",
                "message": "Internal server error occurred",
                "details": {"type": type(exc).__name__},
            },
        },
    )


# Health check
@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    store = getattr(request.app.state, "corpus_store", None)
    handle = store.handle if store else None
    return {
        "ok": True,
        "data": {
            "status": "healthy",
            "corpus_loaded": handle is not None,
            "corpus_chars": handle.chars if handle else 0,
        },
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "corpus": "/corpus/*",
            "generate": "/generate",
            "stream": "/generate/stream",
        },
    }


from seedgen.api.routers import corpus_router, generation_router

app.include_router(corpus_router.router, prefix="/corpus", tags=["Corpus"])
app.include_router(generation_router.router, tags=["Generation"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seedgen.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
