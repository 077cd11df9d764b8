"""
base.py (storage)
- Purpose: Shared storage contract + object key convention.
- Design: Adapters are infrastructure only; no business logic.
"""

import uuid
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    bucket: str
    path: str


def build_document_path(tenant_id, filename: str) -> str:
    """
    Storage key convention:
    tenants/{tenant_id}/documents/{uuid}/{filename}

    - Independent of the document id (upload happens before the DB row exists).
    - Unique enough to prevent collisions.
    """
    return f"tenants/{tenant_id}/documents/{uuid.uuid4()}/{filename}"


class DocumentStorage(Protocol):
    bucket: str

    def upload_document(self, tenant_id, filename: str, content: bytes, content_type: str) -> StoredObject: ...

    def download_bytes(self, obj: StoredObject) -> bytes: ...

    def create_signed_download_url(self, obj: StoredObject, expires_in_seconds: int = 600) -> str | None: ...

    def delete(self, obj: StoredObject) -> None: ...
