# docportal/routers/llm_health.py
from fastapi import APIRouter, Depends

from docportal.api.deps import get_llm_client
from docportal.auth.deps import require_admin_token
from docportal.core import AppError, ErrorCode, ErrorReason
from docportal.llm.client import LLMClient
from docportal.llm.errors import LLMError

router = APIRouter(prefix="/api/llm", tags=["llm"], dependencies=[Depends(require_admin_token)])

@router.get("/health")
def llm_health(llm: LLMClient = Depends(get_llm_client)):
    """Live round-trip to the configured provider with a tiny document."""
    try:
        resp = llm.generate(
            purpose="healthcheck",
            prompt_name="analyze_document",
            prompt_version="v1",
            variables={
                "title": "Health check",
                "document_type": "OTHER",
                "text": "This memo confirms the quarterly review is scheduled for 2024-03-01.",
            },
        )
    except LLMError as e:
        raise AppError(
            code=ErrorCode.LLM_ERROR,
            reason=ErrorReason.LLM_FAILED,
            message=e.message,
            status_code=502,
            details={"provider": llm.provider, "model": llm.model, "provider_status": e.status_code},
        ) from e
    return {"ok": True, "provider": resp.provider, "model": resp.model, "latency_ms": resp.latency_ms, "sample": resp.output_text[:200]}
