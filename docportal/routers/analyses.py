from uuid import UUID

from fastapi import APIRouter, Depends

from docportal.api.deps import get_document_service, get_tenant
from docportal.auth.deps import require_admin_token
from docportal.models.tenant import Tenant
from docportal.schemas.document import DocumentStatusResponse
from docportal.services.document_service import DocumentService

router = APIRouter(
    prefix="/api/analyses",
    tags=["Analyses"],
    dependencies=[Depends(require_admin_token)],
)


@router.get("/{analysis_id}/status", response_model=DocumentStatusResponse)
def get_analysis_status(
    analysis_id: UUID,
    tenant: Tenant = Depends(get_tenant),
    svc: DocumentService = Depends(get_document_service),
):
    """Status of one processing attempt, addressed by the analysis_id from upload/resubmit."""
    version, doc = svc.get_analysis(analysis_id, tenant_id=tenant.id)
    if version.attempt == doc.attempt:
        return DocumentStatusResponse.from_document(doc, version)
    return DocumentStatusResponse.from_version(version)
