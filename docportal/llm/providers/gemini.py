# docportal/llm/providers/gemini.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from docportal.llm.errors import LLMError, LLMNonRetryableError, LLMRetryableError
from docportal.llm.types import LLMRequest, LLMResponse


def _generation_config(req: LLMRequest) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=req.temperature,
        max_output_tokens=req.max_output_tokens,
        response_mime_type=req.response_mime_type,
        system_instruction=req.system_instruction,
        # milliseconds
        http_options=types.HttpOptions(timeout=int(req.timeout_seconds * 1000)),
    )


def _classify(exc: Exception, provider: str) -> LLMError:
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return LLMRetryableError(f"Gemini call timed out: {exc}", provider=provider)
    if isinstance(exc, httpx.HTTPError):
        return LLMRetryableError(f"Gemini transport error: {exc}", provider=provider)

    status = getattr(exc, "code", None)
    msg = getattr(exc, "message", None) or str(exc)
    if status is not None and (status == 429 or status >= 500):
        return LLMRetryableError(msg, status_code=status, provider=provider)
    return LLMNonRetryableError(msg, status_code=status, provider=provider)


def _block_reason(resp) -> Optional[str]:
    feedback = getattr(resp, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback is not None else None
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)


def _finish_reason(resp) -> Optional[str]:
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    return getattr(reason, "name", None) or (str(reason) if reason is not None else None)


@dataclass
class GeminiProvider:
    """
    Google Gen AI SDK (google-genai) provider. One attempt per call;
    LLMClient owns retries.
    """
    api_key: Optional[str] = None
    base_url: Optional[str] = None  # unused; keeps the provider constructors uniform
    _client: Optional[genai.Client] = None

    name = "gemini"

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise LLMNonRetryableError("GEMINI_API_KEY is missing", provider=self.name)
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, req: LLMRequest, prompt: str) -> LLMResponse:
        client = self._get_client()
        start_ms = int(time.time() * 1000)

        try:
            resp = client.models.generate_content(
                model=req.model,
                contents=prompt,
                config=_generation_config(req),
            )
        except (httpx.HTTPError, TimeoutError, genai_errors.APIError) as e:
            raise _classify(e, self.name) from e

        text = (getattr(resp, "text", None) or "").strip()
        blocked = _block_reason(resp)
        if not text and blocked:
            raise LLMNonRetryableError(f"Gemini blocked the prompt: {blocked}", provider=self.name)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            trace_id=req.trace_id,
            provider=req.provider,
            model=req.model,
            output_text=text,
            latency_ms=int(time.time() * 1000) - start_ms,
            retries=0,
            response_id=getattr(resp, "response_id", None),
            finish_reason=_finish_reason(resp),
            input_tokens=getattr(usage, "prompt_token_count", None),
            output_tokens=getattr(usage, "candidates_token_count", None),
        )
