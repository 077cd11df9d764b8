# docportal/llm/providers/openai_provider.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import openai
from openai import OpenAI

from docportal.llm.errors import LLMError, LLMNonRetryableError, LLMRetryableError
from docportal.llm.types import LLMRequest, LLMResponse

# 408/409 are transient on the OpenAI API; 429 + 5xx always are
RETRYABLE_STATUS = frozenset({408, 409, 429})


def classify_openai_error(exc: Exception, provider: str = "openai") -> LLMError:
    """Timeouts, connection errors, 408/409/429 and 5xx are retryable; other statuses are not."""
    if isinstance(exc, openai.APITimeoutError):
        return LLMRetryableError(f"OpenAI call timed out: {exc}", provider=provider)
    if isinstance(exc, openai.APIConnectionError):
        return LLMRetryableError(f"OpenAI connection error: {exc}", provider=provider)

    status = getattr(exc, "status_code", None)
    msg = getattr(exc, "message", None) or str(exc)
    if status is not None and (status in RETRYABLE_STATUS or status >= 500):
        return LLMRetryableError(msg, status_code=status, provider=provider)
    return LLMNonRetryableError(msg, status_code=status, provider=provider)


@dataclass
class OpenAIProvider:
    """
    OpenAI chat completions provider (works with any OpenAI-compatible base_url).
    Single-attempt. Retries/backoff handled by docportal/llm/client.py,
    so the SDK's own retries are disabled.
    """
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    _client: Optional[OpenAI] = None

    name = "openai"

    def _get_client(self) -> OpenAI:
        if not self.api_key:
            raise LLMNonRetryableError("OPENAI_API_KEY is missing", provider=self.name)
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, max_retries=0)
        return self._client

    def generate(self, req: LLMRequest, prompt: str) -> LLMResponse:
        client = self._get_client()
        start_ms = int(time.time() * 1000)

        messages = []
        if req.system_instruction:
            messages.append({"role": "system", "content": req.system_instruction})
        messages.append({"role": "user", "content": prompt})

        kwargs = {}
        if req.response_mime_type == "application/json":
            kwargs["response_format"] = {"type": "json_object"}

        try:
            resp = client.chat.completions.create(
                model=req.model,
                messages=messages,
                temperature=req.temperature,
                max_tokens=req.max_output_tokens,
                timeout=req.timeout_seconds,
                **kwargs,
            )
        except (openai.APIConnectionError, openai.APIStatusError) as e:
            raise classify_openai_error(e, self.name) from e

        text = ""
        if resp.choices:
            text = (resp.choices[0].message.content or "").strip()

        input_tokens = None
        output_tokens = None
        usage = getattr(resp, "usage", None)
        if usage is not None:
            input_tokens = getattr(usage, "prompt_tokens", None)
            output_tokens = getattr(usage, "completion_tokens", None)

        finish_reason = resp.choices[0].finish_reason if resp.choices else None

        return LLMResponse(
            trace_id=req.trace_id,
            provider=req.provider,
            model=getattr(resp, "model", None) or req.model,
            output_text=text,
            latency_ms=int(time.time() * 1000) - start_ms,
            retries=0,
            response_id=getattr(resp, "id", None),
            finish_reason=finish_reason,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
