"""
document.py (schemas)
- Purpose: Request/response DTOs for the document processing domain.
- Design: Keep API DTOs stable; include helper constructors for DRY mapping.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, Literal, List
from uuid import UUID
from datetime import datetime

from docportal.constants.statuses import ProcessingStatus


StatusLiteral = Literal["PENDING", "QUEUED", "PROCESSING", "WARNING", "COMPLETED", "FAILED", "ERROR"]


def _status_url(document_id) -> str:
    return f"/api/documents/{document_id}/status"


class DocumentSubmitResponse(BaseModel):
    """
    API response after upload and after re-submission.
    """
    analysis_id: UUID
    document_id: UUID
    status: StatusLiteral
    attempt: int
    status_url: str

    @classmethod
    def from_document(cls, doc, version) -> "DocumentSubmitResponse":
        return cls(
            analysis_id=version.id,
            document_id=doc.id,
            status=str(doc.status),
            attempt=doc.attempt,
            status_url=_status_url(doc.id),
        )


class DocumentStatusResponse(BaseModel):
    document_id: UUID
    analysis_id: Optional[UUID] = None
    status: StatusLiteral
    attempt: int
    ai_metadata: Optional[dict[str, Any]] = None
    error_detail: Optional[dict[str, Any]] = None
    updated_at: datetime

    @classmethod
    def from_document(cls, doc, version=None) -> "DocumentStatusResponse":
        return cls(
            document_id=doc.id,
            analysis_id=version.id if version is not None else None,
            status=str(doc.status),
            attempt=doc.attempt,
            ai_metadata=doc.ai_metadata,
            error_detail=doc.error_detail,
            updated_at=doc.updated_at,
        )

    @classmethod
    def from_version(cls, version) -> "DocumentStatusResponse":
        """
        Status of one specific attempt. Older attempts only keep the
        summary/key insights or the error, not the full metadata blob.
        """
        status = ProcessingStatus(version.status)
        ai_metadata = None
        error_detail = None
        if status == ProcessingStatus.COMPLETED:
            ai_metadata = {"summary": version.summary, "key_insights": version.key_insights or []}
        elif status in (ProcessingStatus.FAILED, ProcessingStatus.ERROR):
            error_detail = {"type": version.error_type, "message": version.error_message}
            if version.raw_response is not None:
                error_detail["raw_response"] = version.raw_response
        return cls(
            document_id=version.document_id,
            analysis_id=version.id,
            status=status.value,
            attempt=version.attempt,
            ai_metadata=ai_metadata,
            error_detail=error_detail,
            updated_at=version.updated_at,
        )


class DocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    title: Optional[str] = None
    description: Optional[str] = None
    filename: str
    original_filename: str
    mime_type: str
    file_size: int
    checksum: str
    document_type: str
    tags: Optional[List[str]] = None
    is_confidential: bool
    uploaded_by: Optional[str] = None
    status: StatusLiteral
    attempt: int
    ai_processed: bool
    ai_metadata: Optional[dict[str, Any]] = None
    error_detail: Optional[dict[str, Any]] = None
    processing_started_at: Optional[datetime] = None
    processing_completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class DocumentAnalysisResponse(BaseModel):
    document_id: UUID
    ai_processed: bool
    status: StatusLiteral
    ai_metadata: Optional[dict[str, Any]] = None

    @classmethod
    def from_document(cls, doc) -> "DocumentAnalysisResponse":
        return cls(
            document_id=doc.id,
            ai_processed=bool(doc.ai_processed),
            status=str(doc.status),
            ai_metadata=doc.ai_metadata,
        )


class AnalysisVersionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: UUID
    document_id: UUID
    attempt: int
    status: StatusLiteral
    provider: Optional[str] = None
    model: Optional[str] = None
    prompt_version: Optional[str] = None
    latency_ms: Optional[int] = None
    summary: Optional[str] = None
    key_insights: Optional[List[str]] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StatusEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    attempt: int
    from_status: Optional[str] = None
    to_status: str
    created_at: datetime


class BatchItemResult(BaseModel):
    document_id: UUID
    outcome: Literal["succeeded", "failed", "skipped"]
    status: Optional[StatusLiteral] = None
    error_type: Optional[str] = None


class BatchProcessResponse(BaseModel):
    processed: int = Field(ge=0)
    succeeded: int = Field(ge=0)
    failed: int = Field(ge=0)
    skipped: int = Field(default=0, ge=0)
    results: List[BatchItemResult] = Field(default_factory=list)
