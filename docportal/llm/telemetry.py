# docportal/llm/telemetry.py
"""
One structured log line per provider call (after retries), plus optional
prompt logging behind LLM_LOG_PROMPTS.
"""

import logging
import time
from dataclasses import asdict, dataclass

from docportal.core.config import settings

logger = logging.getLogger("docportal.llm")


@dataclass
class LLMCallLog:
    trace_id: str
    provider: str
    model: str
    purpose: str
    prompt: str  # name@version
    latency_ms: int
    retries: int
    ok: bool
    error_type: str | None = None
    status_code: int | None = None
    finish_reason: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None


def now_ms() -> int:
    return int(time.time() * 1000)


def log_llm_call(item: LLMCallLog) -> None:
    fields = {k: v for k, v in asdict(item).items() if v is not None}
    if item.ok:
        logger.info("llm.call", extra=fields)
    else:
        logger.warning("llm.call_failed", extra=fields)


def log_prompt(trace_id: str, prompt: str) -> None:
    if settings.LLM_LOG_PROMPTS:
        logger.debug("llm.prompt", extra={"trace_id": trace_id, "chars": len(prompt), "prompt": prompt})
