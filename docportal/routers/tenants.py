from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from docportal.api.deps import get_tenant_service
from docportal.auth.deps import require_admin_token
from docportal.schemas.tenant import TenantCreateRequest, TenantRead
from docportal.services.tenant_service import TenantService

router = APIRouter(
    prefix="/api/tenants",
    tags=["Tenants"],
    dependencies=[Depends(require_admin_token)],
)


class TenantActiveRequest(BaseModel):
    is_active: bool


@router.post("", response_model=TenantRead, status_code=status.HTTP_201_CREATED)
def create_tenant(req: TenantCreateRequest, svc: TenantService = Depends(get_tenant_service)):
    return svc.create_tenant(req.slug, name=req.name, is_active=req.is_active)


@router.get("", response_model=list[TenantRead])
def list_tenants(svc: TenantService = Depends(get_tenant_service)):
    return svc.list_tenants()


@router.patch("/{slug}", response_model=TenantRead)
def set_tenant_active(slug: str, req: TenantActiveRequest, svc: TenantService = Depends(get_tenant_service)):
    return svc.set_active(slug, req.is_active)
