"""
processing_config.py
- Purpose: Explicit configuration handed to the document processor and the poller.
- Design: The processor never reads `settings` itself; build one of these
  with `from_settings()` at the edge (router dependency, Celery task) and pass it in.
"""

from dataclasses import dataclass, replace

from docportal.core.config import settings


@dataclass(frozen=True)
class ProcessingConfig:
    api_key: str | None
    max_poll_attempts: int = 12
    poll_interval_ms: int = 5000

    provider: str = "openai"
    model: str = "gpt-4o"
    base_url: str | None = None
    max_retries: int = 2
    timeout_seconds: int = 60
    temperature: float = 0.3
    max_output_tokens: int = 2048

    prompt_version: str = "v1"
    max_input_chars: int = 15000
    min_confidence: float = 0.5

    embeddings_enabled: bool = False
    embedding_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"
    embedding_base_url: str | None = None
    embedding_chunk_chars: int = 4000
    embedding_overlap_chars: int = 400
    max_embedding_chunks: int = 100

    @classmethod
    def from_settings(cls) -> "ProcessingConfig":
        provider = (settings.LLM_PROVIDER or "openai").strip().lower()
        if provider == "gemini":
            api_key, model, base_url = settings.GEMINI_API_KEY, settings.GEMINI_MODEL, None
        else:
            api_key, model, base_url = settings.OPENAI_API_KEY, settings.OPENAI_MODEL, settings.OPENAI_BASE_URL
        return cls(
            api_key=api_key,
            max_poll_attempts=settings.MAX_POLL_ATTEMPTS,
            poll_interval_ms=settings.POLL_INTERVAL_MS,
            provider=provider,
            model=model,
            base_url=base_url,
            max_retries=settings.LLM_MAX_RETRIES,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
            temperature=settings.LLM_TEMPERATURE,
            max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
            prompt_version=settings.ANALYSIS_PROMPT_VERSION,
            max_input_chars=settings.ANALYSIS_MAX_INPUT_CHARS,
            min_confidence=settings.ANALYSIS_MIN_CONFIDENCE,
            embeddings_enabled=settings.EMBEDDINGS_ENABLED,
            embedding_api_key=settings.OPENAI_API_KEY,
            embedding_model=settings.EMBEDDING_MODEL,
            embedding_base_url=settings.OPENAI_BASE_URL,
            embedding_chunk_chars=settings.EMBEDDING_CHUNK_CHARS,
            embedding_overlap_chars=settings.EMBEDDING_CHUNK_OVERLAP_CHARS,
            max_embedding_chunks=settings.EMBEDDING_MAX_CHUNKS,
        )

    def with_overrides(self, **changes) -> "ProcessingConfig":
        return replace(self, **changes)
