# docportal/llm/client.py


import json
import re
import time
import uuid
from typing import Callable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from docportal.llm.errors import LLMError, LLMNonRetryableError, LLMResponseParseError, LLMRetryableError
from docportal.llm.prompts.registry import get_prompt, render
from docportal.llm.providers.gemini import GeminiProvider
from docportal.llm.providers.openai_provider import OpenAIProvider
from docportal.llm.telemetry import LLMCallLog, log_llm_call, log_prompt, now_ms
from docportal.llm.types import LLMRequest, LLMResponse

T = TypeVar("T", bound=BaseModel)

PROVIDERS = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_provider(name: str, *, api_key: str | None, base_url: str | None = None):
    try:
        cls = PROVIDERS[name]
    except KeyError:
        raise LLMNonRetryableError(f"Unsupported provider: {name}", provider=name) from None
    return cls(api_key=api_key, base_url=base_url)


def backoff_seconds(attempt: int) -> float:
    return min(2.0, 0.25 * (2 ** attempt))


def _strip_code_fence(text: str) -> str:
    m = _FENCE_RE.match(text.strip())
    return m.group(1) if m else text


class LLMClient:
    """
    Provider-agnostic entry point: renders a registered prompt, calls the
    provider, retries retryable failures with capped exponential backoff and
    logs one `llm.call` record per logical call.
    """

    def __init__(
        self,
        *,
        provider: str,
        model: str,
        api_key: str | None,
        base_url: str | None = None,
        max_retries: int = 2,
        timeout_seconds: int = 60,
        temperature: float = 0.3,
        max_output_tokens: int = 2048,
        backend=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max(0, max_retries)
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._backend = backend
        self._sleep = sleep

    @classmethod
    def from_config(cls, config) -> "LLMClient":
        """Build from a ProcessingConfig."""
        return cls(
            provider=config.provider,
            model=config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout_seconds=config.timeout_seconds,
            temperature=config.temperature,
            max_output_tokens=config.max_output_tokens,
        )

    @property
    def backend(self):
        if self._backend is None:
            self._backend = build_provider(self.provider, api_key=self.api_key, base_url=self.base_url)
        return self._backend

    def generate(
        self,
        *,
        purpose: str,
        prompt_name: str,
        prompt_version: str,
        variables: dict,
        response_mime_type: str | None = "application/json",
    ) -> LLMResponse:
        trace_id = str(uuid.uuid4())
        tmpl = get_prompt(prompt_name, prompt_version)
        rendered = render(tmpl, variables)

        req = LLMRequest(
            trace_id=trace_id,
            purpose=purpose,
            prompt_name=prompt_name,
            prompt_version=prompt_version,
            variables=dict(variables),
            provider=self.provider,
            model=self.model,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            timeout_seconds=self.timeout_seconds,
            response_mime_type=response_mime_type,
            system_instruction=tmpl.system,
        )
        log_prompt(trace_id, rendered)

        start_ms = now_ms()
        retries = 0
        last_err: LLMError | None = None

        def _log(ok: bool, err: LLMError | None = None, resp: LLMResponse | None = None) -> None:
            log_llm_call(
                LLMCallLog(
                    trace_id=trace_id,
                    provider=req.provider,
                    model=resp.model if resp else req.model,
                    purpose=purpose,
                    prompt=f"{prompt_name}@{prompt_version}",
                    latency_ms=(now_ms() - start_ms),
                    retries=retries,
                    ok=ok,
                    error_type=type(err).__name__ if err else None,
                    status_code=err.status_code if err else None,
                    finish_reason=resp.finish_reason if resp else None,
                    input_tokens=resp.input_tokens if resp else None,
                    output_tokens=resp.output_tokens if resp else None,
                )
            )

        for attempt in range(self.max_retries + 1):
            try:
                resp = self.backend.generate(req, rendered)
                _log(True, resp=resp)
                return LLMResponse(
                    trace_id=resp.trace_id,
                    provider=resp.provider,
                    model=resp.model,
                    output_text=resp.output_text,
                    latency_ms=(now_ms() - start_ms),
                    retries=retries,
                    response_id=resp.response_id,
                    finish_reason=resp.finish_reason,
                    input_tokens=resp.input_tokens,
                    output_tokens=resp.output_tokens,
                )

            except LLMRetryableError as e:
                last_err = e
                if attempt >= self.max_retries:
                    break
                retries += 1
                self._sleep(backoff_seconds(attempt))

            except LLMNonRetryableError as e:
                _log(False, e)
                raise

        if last_err is None:
            last_err = LLMRetryableError("LLM failed after retries", provider=self.provider)
        _log(False, last_err)
        raise last_err

    def generate_structured(
        self,
        *,
        purpose: str,
        prompt_name: str,
        prompt_version: str,
        variables: dict,
        schema: Type[T],
    ) -> tuple[T, LLMResponse]:
        """
        One call, one parse. A malformed body raises LLMResponseParseError
        carrying the raw text verbatim; there is no repair round-trip.
        """
        resp = self.generate(
            purpose=purpose,
            prompt_name=prompt_name,
            prompt_version=prompt_version,
            variables=variables,
            response_mime_type="application/json",
        )

        if not resp.output_text.strip():
            raise LLMResponseParseError("LLM returned an empty response", raw_text=resp.output_text, response=resp)

        try:
            data = json.loads(_strip_code_fence(resp.output_text))
        except json.JSONDecodeError as e:
            raise LLMResponseParseError(
                f"LLM response is not valid JSON: {e.msg} (line {e.lineno} column {e.colno})",
                raw_text=resp.output_text,
                response=resp,
            ) from e

        try:
            return schema.model_validate(data), resp
        except ValidationError as e:
            raise LLMResponseParseError(
                f"LLM response does not match {schema.__name__}: {e.error_count()} validation error(s)",
                raw_text=resp.output_text,
                response=resp,
            ) from e
