# docportal/services/tenant_service.py
"""
tenant_service.py
- Purpose: Tenant resolution for every document request, plus tenant admin.
- Rules: no header -> default tenant (created on first use);
  unknown slug -> 403 TENANT_INVALID; inactive -> 403 TENANT_INACTIVE.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from docportal.core import ErrorCode, ErrorReason, conflict, forbidden, not_found
from docportal.core.config import settings
from docportal.models.tenant import Tenant
from docportal.repos.tenant.read import TenantReadRepo
from docportal.repos.tenant.write import TenantWriteRepo

logger = logging.getLogger("docportal.tenant_service")


class TenantService:
    def __init__(self, db: Session):
        self.db = db
        self.read = TenantReadRepo(db)
        self.write = TenantWriteRepo(db)

    def resolve(self, slug: str | None) -> Tenant:
        requested = (slug or "").strip().lower()
        if not requested:
            return self._default_tenant()

        tenant = self.read.get_by_slug(requested)
        if tenant is None:
            logger.warning("tenant.invalid", extra={"tenant_slug": requested})
            raise forbidden(
                ErrorReason.TENANT_INVALID,
                code=ErrorCode.TENANT_INVALID,
                message=f"Unknown tenant: {requested}",
            )
        if not tenant.is_active:
            logger.warning("tenant.inactive", extra={"tenant_slug": requested})
            raise forbidden(
                ErrorReason.TENANT_INACTIVE,
                code=ErrorCode.TENANT_INACTIVE,
                message=f"Tenant is inactive: {requested}",
            )
        return tenant

    def _default_tenant(self) -> Tenant:
        slug = settings.DEFAULT_TENANT_SLUG
        tenant = self.read.get_by_slug(slug)
        if tenant is None:
            try:
                tenant = self.write.create(slug, name="Default")
                logger.info("tenant.default_provisioned", extra={"tenant_slug": slug})
            except IntegrityError:
                # created concurrently by another request
                self.db.rollback()
                tenant = self.read.get_by_slug(slug)
        if not tenant.is_active:
            raise forbidden(
                ErrorReason.TENANT_INACTIVE,
                code=ErrorCode.TENANT_INACTIVE,
                message=f"Tenant is inactive: {slug}",
            )
        return tenant

    def create_tenant(self, slug: str, *, name: str | None = None, is_active: bool = True) -> Tenant:
        slug = slug.strip().lower()
        if self.read.get_by_slug(slug) is not None:
            raise conflict(message=f"Tenant already exists: {slug}", details={"slug": slug})
        tenant = self.write.create(slug, name=name, is_active=is_active)
        logger.info("tenant.created", extra={"tenant_slug": slug})
        return tenant

    def list_tenants(self) -> list[Tenant]:
        return self.read.list_all()

    def set_active(self, slug: str, is_active: bool) -> Tenant:
        tenant = self.read.get_by_slug(slug.strip().lower())
        if tenant is None:
            raise not_found(message="Tenant not found")
        return self.write.set_active(tenant, is_active)
