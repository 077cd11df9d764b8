"""
tenant/read.py
- Purpose: Read-side DB operations for Tenant.
"""

from sqlalchemy.orm import Session
from docportal.models.tenant import Tenant


class TenantReadRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id) -> Tenant | None:
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_by_slug(self, slug: str) -> Tenant | None:
        return self.db.query(Tenant).filter(Tenant.slug == slug).first()

    def list_all(self) -> list[Tenant]:
        return self.db.query(Tenant).order_by(Tenant.created_at.asc()).all()
