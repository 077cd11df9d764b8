# docportal/llm/embeddings.py
"""
Text embeddings through the OpenAI embeddings endpoint.

One request per batch of chunks, no retries: the processor stores
embeddings on a best-effort basis after a document is COMPLETED.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import openai
from openai import OpenAI

from docportal.llm.errors import LLMNonRetryableError
from docportal.llm.providers.openai_provider import classify_openai_error

logger = logging.getLogger("docportal.llm")


class TextEmbedder(Protocol):
    model: str

    def embed(self, texts: list[str]) -> list[list[float]]: ...


@dataclass
class OpenAIEmbedder:
    api_key: Optional[str] = None
    model: str = "text-embedding-3-small"
    base_url: Optional[str] = None
    timeout_seconds: int = 60
    batch_size: int = 64
    _client: Optional[OpenAI] = None

    name = "openai"

    def _get_client(self) -> OpenAI:
        if not self.api_key:
            raise LLMNonRetryableError("OPENAI_API_KEY is missing", provider=self.name)
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, max_retries=0)
        return self._client

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Vectors in input order."""
        if not texts:
            return []
        client = self._get_client()

        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            started = time.time()
            try:
                resp = client.embeddings.create(model=self.model, input=batch, timeout=self.timeout_seconds)
            except (openai.APIConnectionError, openai.APIStatusError) as e:
                raise classify_openai_error(e, self.name) from e

            data = sorted(resp.data, key=lambda item: item.index)
            if len(data) != len(batch):
                raise LLMNonRetryableError(
                    f"Embedding count mismatch: sent {len(batch)}, got {len(data)}", provider=self.name
                )
            vectors.extend(list(item.embedding) for item in data)

            logger.info(
                "llm.embed",
                extra={
                    "model": self.model,
                    "inputs": len(batch),
                    "latency_ms": int((time.time() - started) * 1000),
                },
            )
        return vectors


def build_embedder(config) -> OpenAIEmbedder | None:
    """None when embeddings are switched off or no OpenAI key is configured."""
    if not config.embeddings_enabled:
        return None
    if not config.embedding_api_key:
        logger.info("llm.embeddings_disabled", extra={"reason": "OPENAI_API_KEY is not set"})
        return None
    return OpenAIEmbedder(
        api_key=config.embedding_api_key,
        model=config.embedding_model,
        base_url=config.embedding_base_url,
        timeout_seconds=config.timeout_seconds,
    )
