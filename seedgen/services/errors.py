"""
Error taxonomy for the generation pipeline.

Every error carries a machine-readable ``code`` that is forwarded to the
host as the ``code`` field of an error event.
"""
from __future__ import annotations


class SeedgenError(Exception):
    """Base class for all pipeline errors."""

    code = "SEEDGEN_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class EmptyCorpusError(SeedgenError):
    """No corpus has been initialized, or it tokenizes to zero tokens."""

    code = "EMPTY_CORPUS"


class EmptySeedError(SeedgenError):
    """Seed phrase is empty or whitespace-only."""

    code = "EMPTY_SEED"


class EmptyModelError(SeedgenError):
    """Transition table has no keys."""

    code = "EMPTY_MODEL"


class DeadEndError(SeedgenError):
    """Markov key has no recorded successor."""

    code = "DEAD_END"


class InvalidParameterError(SeedgenError):
    """Configuration value outside its valid domain."""

    code = "INVALID_PARAMETER"


class GenerationCancelled(SeedgenError):
    """Generation was cancelled by the host."""

    code = "CANCELLED"


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        EmptyCorpusError,
        EmptySeedError,
        EmptyModelError,
        DeadEndError,
        InvalidParameterError,
        GenerationCancelled,
    )
}


def error_for(code: str, message: str = "") -> SeedgenError:
    """Rebuild an error from its ``code``."""
    return ERRORS_BY_CODE.get(code, SeedgenError)(message)
