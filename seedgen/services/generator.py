"""
Streaming generation pipeline.

One request runs the whole pipeline on its own state:

    tokenize corpus -> context counts around seed targets -> feature scores
    -> embedded corpus -> Markov chain -> sample body -> boundary correction
    -> token events

The stream is an async iterator of events. Control returns to the event
loop between corpus tokenization batches, every BODY_BATCH_STEPS body
sampling steps and after every emitted token; the cancellation token is
checked at each of those points.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from seedgen.config import Settings, settings as default_settings

from .boundary import fix_end_tokens, fix_start_tokens
from .cancellation import CancellationToken
from .context_stats import build_context_counts, focus_tokens
from .corpus import CorpusHandle
from .embedder import embed
from .errors import (
    DeadEndError,
    EmptyCorpusError,
    EmptyModelError,
    InvalidParameterError,
    SeedgenError,
    error_for,
)
from .features import compute_scores, select_features
from .markov import MarkovChain, MarkovKey
from .sampler import TokenSampler
from .tokenizer import seed_targets
from .tokens import Token

logger = logging.getLogger(__name__)

# Sampling steps between event-loop yields while building the body
BODY_BATCH_STEPS = 64


class GenerationConfig(BaseModel):
    """Per-request options. Accepts field names or their camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    window: int = Field(50, ge=0, alias="N")
    power: float = Field(4.0, gt=0)
    threshold: float = Field(1e-7, ge=0.0, le=1.0)
    ngram: int = Field(2, ge=1)
    gen_length: int = Field(200, ge=1, alias="genLength")
    max_extend: int = Field(150, ge=0, alias="maxExtend")
    delay: float = Field(0.0, ge=0.0)
    weighted: bool = True
    feature_strategy: Literal["global", "local"] = Field("global", alias="featureStrategy")
    target_boost: float = Field(4.0, ge=0.0, alias="targetBoost")
    feature_boost: float = Field(5.0, ge=0.0, alias="featureBoost")
    focus: Optional[int] = Field(None, ge=1)
    random_seed: Optional[int] = Field(None, alias="randomSeed")

    @classmethod
    def defaults(cls, cfg: Settings = default_settings) -> dict:
        return {
            "window": cfg.DEFAULT_WINDOW,
            "power": cfg.DEFAULT_POWER,
            "threshold": cfg.DEFAULT_THRESHOLD,
            "ngram": cfg.DEFAULT_NGRAM,
            "gen_length": cfg.DEFAULT_GEN_LENGTH,
            "max_extend": cfg.DEFAULT_MAX_EXTEND,
            "delay": cfg.DEFAULT_DELAY,
            "weighted": cfg.DEFAULT_WEIGHTED,
            "feature_strategy": cfg.DEFAULT_FEATURE_STRATEGY,
            "target_boost": cfg.DEFAULT_TARGET_BOOST,
            "feature_boost": cfg.DEFAULT_FEATURE_BOOST,
        }

    @classmethod
    def from_options(
        cls,
        options: Optional[Mapping[str, object]] = None,
        cfg: Settings = default_settings,
    ) -> "GenerationConfig":
        """
        Merge request options over the configured defaults.

        Raises:
            InvalidParameterError: if any option is outside its domain
        """
        if options is not None and not isinstance(options, Mapping):
            raise InvalidParameterError("options must be an object")

        names = {info.alias: name for name, info in cls.model_fields.items() if info.alias}
        data = cls.defaults(cfg)
        for key, value in (options or {}).items():
            data[names.get(key, key)] = value

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise InvalidParameterError(problems) from exc


# ===== Events =====

@dataclass
class TokenEvent:
    token: str
    type: str = field(default="stream_token", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "token": self.token}


@dataclass
class CompleteEvent:
    reason: str = "ok"
    tokens: int = 0
    type: str = field(default="stream_end", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "reason": self.reason, "tokens": self.tokens}


@dataclass
class ErrorEvent:
    code: str
    message: str = ""
    type: str = field(default="error", init=False)

    @classmethod
    def from_error(cls, exc: SeedgenError) -> "ErrorEvent":
        return cls(code=exc.code, message=exc.message)

    def to_dict(self) -> dict:
        return {"type": self.type, "code": self.code, "message": self.message}


Event = Union[TokenEvent, CompleteEvent, ErrorEvent]


@dataclass
class GenerationState:
    """Mutable state of one run."""
    buffer: List[Token] = field(default_factory=list)
    start: int = 0
    body_tokens: int = 0
    extension_count: int = 0

    def window(self, chain: MarkovChain) -> MarkovKey:
        return chain.key_for(self.buffer)

    @property
    def output(self) -> List[Token]:
        return self.buffer[self.start:]


@dataclass
class GenerationResult:
    text: str
    tokens: List[str]
    reason: str = "ok"


# ===== Pipeline =====

class GenerationPipeline:
    """
    Generation run for one seed phrase over one corpus handle.

    Args:
        corpus: Corpus handle, or None when no corpus is loaded
        seed: Seed phrase
        options: Raw options mapping or a GenerationConfig
        cfg: Service settings providing defaults and tokenizer limits
        cancel: Cancellation token checked at every yield point
    """

    def __init__(
        self,
        corpus: Optional[CorpusHandle],
        seed: str,
        options: Union[GenerationConfig, Mapping[str, object], None] = None,
        cfg: Settings = default_settings,
        cancel: Optional[CancellationToken] = None,
    ):
        self.corpus = corpus
        self.seed = seed
        self.options = options
        self.cfg = cfg
        self.cancel = cancel or CancellationToken()

    def _resolve_config(self) -> GenerationConfig:
        if isinstance(self.options, GenerationConfig):
            return self.options
        return GenerationConfig.from_options(self.options, self.cfg)

    def build_chain(self, tokens, targets, config: GenerationConfig) -> MarkovChain:
        stats = build_context_counts(tokens, targets, config.window)
        features = select_features(compute_scores(stats, config.power), config.threshold)
        embedded = embed(tokens, targets, features, config.feature_strategy)

        if config.focus:
            start, end = focus_tokens(tokens, targets, config.focus)
            embedded = embedded[start:end]

        chain = MarkovChain.build(embedded, config.ngram)
        chain_stats = chain.stats()
        logger.info(
            f"[GEN] targets={len(targets)} occurrences={stats.occurrences} "
            f"features={len(features)} keys={chain_stats.keys} start_keys={chain_stats.start_keys}"
        )
        return chain

    async def run_body(
        self, chain: MarkovChain, sampler: TokenSampler, config: GenerationConfig
    ) -> GenerationState:
        """Sample the body, then apply start and end correction."""
        state = GenerationState(buffer=list(chain.start_key(sampler.rng)))

        steps = 0
        while len(state.buffer) < config.gen_length:
            if steps % BODY_BATCH_STEPS == 0:
                await self.cancel.checkpoint()
            steps += 1
            try:
                nxt = sampler(chain.successors(state.window(chain)))
            except DeadEndError:
                logger.debug(f"[GEN] Dead end after {len(state.buffer)} body tokens")
                break
            state.buffer.append(nxt)
        state.body_tokens = len(state.buffer)

        state.start = fix_start_tokens(state.buffer)
        state.buffer = fix_end_tokens(state.buffer, chain, sampler, config.max_extend)
        state.extension_count = len(state.buffer) - state.body_tokens
        return state

    async def stream(self) -> AsyncIterator[Event]:
        try:
            config = self._resolve_config()
            if self.corpus is None or not self.corpus.chunks:
                raise EmptyCorpusError("no corpus has been initialized")
            targets = seed_targets(self.seed, self.cfg.SEED_MAX_TOKEN_LEN)
            tokens = await self.corpus.tokens(
                self.cfg.CORPUS_MAX_TOKEN_LEN,
                self.cfg.TOKENIZE_BATCH_CHUNKS,
                self.cancel,
            )
            chain = self.build_chain(tokens, targets, config)
            sampler = TokenSampler(
                targets,
                random.Random(config.random_seed),
                weighted=config.weighted,
                target_boost=config.target_boost,
                feature_boost=config.feature_boost,
            )
            try:
                state = await self.run_body(chain, sampler, config)
            except EmptyModelError:
                logger.info("[GEN] Transition table is empty, nothing to generate")
                yield CompleteEvent(reason="empty_model", tokens=0)
                return
        except SeedgenError as exc:
            logger.warning(f"[GEN] Generation rejected: {exc.code} {exc.message}")
            yield ErrorEvent.from_error(exc)
            return

        output = state.output
        logger.info(
            f"[GEN] body={state.body_tokens} trimmed={state.start} "
            f"extended={state.extension_count} emitting={len(output)}"
        )

        for tok in output:
            yield TokenEvent(tok.text)
            try:
                await self.cancel.checkpoint(config.delay)
            except SeedgenError as exc:
                logger.info(f"[GEN] Stream stopped: {exc.message}")
                yield ErrorEvent.from_error(exc)
                return

        yield CompleteEvent(reason="ok", tokens=len(output))


async def generate_text(
    corpus: Optional[CorpusHandle],
    seed: str,
    options: Union[GenerationConfig, Mapping[str, object], None] = None,
    cfg: Settings = default_settings,
    cancel: Optional[CancellationToken] = None,
) -> GenerationResult:
    """
    Run a pipeline to completion and collect its tokens.

    Raises:
        SeedgenError: the error carried by a terminal error event
    """
    pieces: List[str] = []
    pipeline = GenerationPipeline(corpus, seed, options, cfg, cancel)
    async for event in pipeline.stream():
        if isinstance(event, TokenEvent):
            pieces.append(event.token)
        elif isinstance(event, ErrorEvent):
            raise error_for(event.code, event.message)
        else:
            return GenerationResult(text="".join(pieces), tokens=pieces, reason=event.reason)
    return GenerationResult(text="".join(pieces), tokens=pieces)
