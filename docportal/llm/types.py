# docportal/llm/types.py
from dataclasses import dataclass
from typing import Any

JsonDict = dict[str, Any]


@dataclass(frozen=True)
class LLMRequest:
    """One provider call, fully resolved: prompt identity, model and limits."""

    trace_id: str
    purpose: str
    prompt_name: str
    prompt_version: str
    variables: JsonDict

    provider: str
    model: str

    temperature: float
    max_output_tokens: int
    timeout_seconds: int

    # "application/json" asks the provider for a bare JSON object
    response_mime_type: str | None = None
    system_instruction: str | None = None


@dataclass(frozen=True)
class LLMResponse:
    trace_id: str
    provider: str
    model: str
    output_text: str
    latency_ms: int
    retries: int

    response_id: str | None = None
    finish_reason: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None

    def usage(self) -> JsonDict:
        """Token accounting as stored alongside an analysis."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "finish_reason": self.finish_reason,
        }
