"""
tenant/write.py
- Purpose: Write-side DB operations for Tenant.
- Design: No business logic. Only persistence and minimal mapping.
"""

from sqlalchemy.orm import Session
from docportal.models.tenant import Tenant


class TenantWriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, slug: str, *, name: str | None = None, is_active: bool = True) -> Tenant:
        tenant = Tenant(
            slug=slug,
            name=name.strip() if name and name.strip() else None,
            is_active=is_active,
        )
        self.db.add(tenant)
        self.db.commit()
        self.db.refresh(tenant)
        return tenant

    def set_active(self, tenant: Tenant, is_active: bool) -> Tenant:
        tenant.is_active = is_active
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
