import uuid
from types import SimpleNamespace

import pytest

from docportal.core import AppError, ErrorCode
from docportal.core.config import settings
from docportal.services.storage.base import StoredObject, build_document_path
from docportal.services.storage.factory import get_storage
from docportal.services.storage.local_storage import LocalStorage
from docportal.services.storage.supabase_storage import SupabaseStorage


def test_document_path_layout():
    tid = uuid.uuid4()
    path = build_document_path(tid, "report.pdf")
    parts = path.split("/")
    assert parts[:3] == ["tenants", str(tid), "documents"]
    assert parts[-1] == "report.pdf"
    uuid.UUID(parts[3])


def test_local_roundtrip(storage):
    obj = storage.upload_document(uuid.uuid4(), "a.txt", b"abc", "text/plain")
    assert obj.bucket == "documents"
    assert storage.download_bytes(obj) == b"abc"
    assert storage.create_signed_download_url(obj) is None

    storage.delete(obj)
    with pytest.raises(AppError) as exc:
        storage.download_bytes(obj)
    assert exc.value.code == ErrorCode.STORAGE_ERROR


def test_local_refuses_paths_outside_bucket(tmp_path):
    storage = LocalStorage(root=tmp_path)
    with pytest.raises(AppError):
        storage.download_bytes(StoredObject(bucket="documents", path="../../etc/passwd"))


class _FakeBucket:
    def __init__(self):
        self.uploads = []

    def upload(self, path, file, file_options):
        self.uploads.append((path, file, file_options))

    def create_signed_url(self, path, expires_in):
        return {"signedURL": f"https://cdn.test/{path}?e={expires_in}"}

    def remove(self, paths):
        pass


def test_supabase_adapter_uses_injected_client():
    bucket = _FakeBucket()
    client = SimpleNamespace(storage=SimpleNamespace(from_=lambda name: bucket))
    storage = SupabaseStorage(client=client, bucket="docs")

    obj = storage.upload_document(uuid.uuid4(), "memo.txt", b"hi", "text/plain")

    assert obj.bucket == "docs"
    assert bucket.uploads[0][0] == obj.path
    assert storage.create_signed_download_url(obj, 60).startswith("https://cdn.test/")


def test_unknown_storage_backend_is_a_config_error(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "ftp")

    with pytest.raises(AppError) as exc:
        get_storage()

    assert exc.value.code == ErrorCode.CONFIG_ERROR
    assert exc.value.status_code == 500
    assert "ftp" in str(exc.value)
