"""
documents.py
- Purpose: API routes for uploading documents and driving their processing lifecycle.
- Design: Keep router thin. Delegate business logic to services.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import RedirectResponse

from docportal.api.deps import get_document_service, get_processor, get_tenant
from docportal.auth.deps import require_admin_token
from docportal.core.config import settings
from docportal.models.tenant import Tenant
from docportal.schemas.document import (
    AnalysisVersionRead,
    BatchItemResult,
    BatchProcessResponse,
    DocumentAnalysisResponse,
    DocumentRead,
    DocumentStatusResponse,
    DocumentSubmitResponse,
    StatusEventRead,
)
from docportal.services.document_service import DocumentService
from docportal.services.processing_service import DocumentProcessor

router = APIRouter(
    prefix="/api/documents",
    tags=["Documents"],
    dependencies=[Depends(require_admin_token)],
)


@router.post("", response_model=DocumentSubmitResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    file: UploadFile = File(...),
    title: str | None = Form(None),
    description: str | None = Form(None),
    document_type: str | None = Form(None),
    tags: str | None = Form(None),
    is_confidential: bool = Form(False),
    tenant: Tenant = Depends(get_tenant),
    admin: dict = Depends(require_admin_token),
    svc: DocumentService = Depends(get_document_service),
):
    doc, version = svc.upload_document(
        tenant,
        file,
        title=title,
        description=description,
        document_type=document_type,
        tags=tags,
        is_confidential=is_confidential,
        uploaded_by=admin.get("sub"),
    )
    return DocumentSubmitResponse.from_document(doc, version)


@router.get("", response_model=list[DocumentRead])
def list_documents(
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    return svc.list_documents(tenant_id=tenant.id, status=status_filter, limit=limit, offset=offset)


@router.post("/process-pending", response_model=BatchProcessResponse)
def process_pending(
    limit: int | None = Query(None, ge=1, le=500),
    tenant: Tenant = Depends(get_tenant),
    processor: DocumentProcessor = Depends(get_processor),
):
    """Run every PENDING/QUEUED document of this tenant through processing, oldest first."""
    summary = processor.process_pending(
        limit=limit if limit is not None else settings.BATCH_PROCESS_LIMIT,
        tenant_id=tenant.id,
    )
    return BatchProcessResponse(
        processed=summary.processed,
        succeeded=summary.succeeded,
        failed=summary.failed,
        skipped=summary.skipped,
        results=[
            BatchItemResult(
                document_id=item.document_id,
                outcome=item.outcome,
                status=item.status.value if item.status else None,
                error_type=item.error_type.value if item.error_type else None,
            )
            for item in summary.results
        ],
    )


@router.get("/{document_id}", response_model=DocumentRead)
def get_document(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    return svc.get_document(document_id, tenant_id=tenant.id)


@router.get("/{document_id}/status", response_model=DocumentStatusResponse)
def get_document_status(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    doc, version = svc.get_status(document_id, tenant_id=tenant.id)
    return DocumentStatusResponse.from_document(doc, version)


@router.post("/{document_id}/process", response_model=DocumentRead)
def process_document(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    processor: DocumentProcessor = Depends(get_processor),
    svc: DocumentService = Depends(get_document_service),
):
    """Synchronously process one PENDING/QUEUED document and return it in its terminal state."""
    processor.process_document(document_id, tenant_id=tenant.id)
    return svc.get_document(document_id, tenant_id=tenant.id)


@router.post("/{document_id}/resubmit", response_model=DocumentSubmitResponse, status_code=status.HTTP_202_ACCEPTED)
def resubmit_document(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    doc, version = svc.resubmit(document_id, tenant_id=tenant.id)
    return DocumentSubmitResponse.from_document(doc, version)


@router.get("/{document_id}/analysis", response_model=DocumentAnalysisResponse)
def get_document_analysis(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    doc = svc.get_document(document_id, tenant_id=tenant.id)
    return DocumentAnalysisResponse.from_document(doc)


@router.get("/{document_id}/versions", response_model=list[AnalysisVersionRead])
def list_analysis_versions(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    return svc.list_versions(document_id, tenant_id=tenant.id)


@router.get("/{document_id}/events", response_model=list[StatusEventRead])
def list_status_events(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    return svc.list_status_events(document_id, tenant_id=tenant.id)


@router.get("/{document_id}/download")
def download_document(
    document_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    doc, url, content = svc.get_download(document_id, tenant_id=tenant.id)
    if url:
        return RedirectResponse(url=url, status_code=302)
    return Response(
        content=content,
        media_type=doc.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{doc.filename}"'},
    )
