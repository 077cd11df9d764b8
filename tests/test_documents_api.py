import io
import json
import uuid

import pytest

from tests.conftest import GOOD_ANALYSIS

CONTRACT = b"This services agreement is made between Acme Corp and Globex on 2024-01-15."


def _upload(client, headers, content=CONTRACT, *, filename="contract.txt", content_type="text/plain", **form):
    files = {"file": (filename, io.BytesIO(content), content_type)}
    return client.post("/api/documents", files=files, data=form, headers=headers)


@pytest.fixture
def acme_headers(auth_headers, tenant):
    return {**auth_headers, "X-Tenant-ID": tenant.slug}


def test_upload_queues_document(client, acme_headers, enqueued):
    resp = _upload(client, acme_headers, title="MSA", document_type="contract", tags="Legal, msa")
    assert resp.status_code == 201, resp.text

    body = resp.json()
    assert body["status"] == "QUEUED"
    assert body["attempt"] == 1
    assert body["status_url"] == f"/api/documents/{body['document_id']}/status"
    assert enqueued == [body["document_id"]]

    doc = client.get(f"/api/documents/{body['document_id']}", headers=acme_headers).json()
    assert doc["title"] == "MSA"
    assert doc["document_type"] == "CONTRACT"
    assert doc["tags"] == ["legal", "msa"]
    assert doc["mime_type"] == "text/plain"
    assert doc["file_size"] == len(CONTRACT)
    assert doc["ai_processed"] is False


def test_upload_rejects_disallowed_type(client, acme_headers):
    resp = _upload(client, acme_headers, b"MZ\x90", filename="setup.exe", content_type="application/x-msdownload")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_FILE_TYPE"


def test_upload_rejects_empty_file(client, acme_headers):
    resp = _upload(client, acme_headers, b"")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "FILE_EMPTY"


def test_upload_rejects_unknown_document_type(client, acme_headers):
    resp = _upload(client, acme_headers, document_type="recipe")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_DOCUMENT_TYPE"


def test_process_then_poll_status(client, acme_headers):
    document_id = _upload(client, acme_headers).json()["document_id"]

    processed = client.post(f"/api/documents/{document_id}/process", headers=acme_headers)
    assert processed.status_code == 200, processed.text
    assert processed.json()["status"] == "COMPLETED"

    status = client.get(f"/api/documents/{document_id}/status", headers=acme_headers).json()
    assert status["status"] == "COMPLETED"
    assert status["ai_metadata"]["summary"] == GOOD_ANALYSIS["summary"]
    assert status["error_detail"] is None

    analysis = client.get(f"/api/documents/{document_id}/analysis", headers=acme_headers).json()
    assert analysis["ai_processed"] is True
    assert analysis["ai_metadata"]["categories"] == GOOD_ANALYSIS["categories"]

    events = client.get(f"/api/documents/{document_id}/events", headers=acme_headers).json()
    assert [e["to_status"] for e in events] == ["PENDING", "QUEUED", "PROCESSING", "COMPLETED"]


def test_processing_twice_conflicts(client, acme_headers):
    document_id = _upload(client, acme_headers).json()["document_id"]
    client.post(f"/api/documents/{document_id}/process", headers=acme_headers)

    again = client.post(f"/api/documents/{document_id}/process", headers=acme_headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "DOCUMENT_NOT_CLAIMABLE"


def test_resubmit_opens_new_attempt(client, acme_headers, enqueued):
    first = _upload(client, acme_headers).json()
    document_id = first["document_id"]

    # not terminal yet
    early = client.post(f"/api/documents/{document_id}/resubmit", headers=acme_headers)
    assert early.status_code == 409
    assert early.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"

    client.post(f"/api/documents/{document_id}/process", headers=acme_headers)
    resp = client.post(f"/api/documents/{document_id}/resubmit", headers=acme_headers)
    assert resp.status_code == 202, resp.text

    second = resp.json()
    assert second["attempt"] == 2
    assert second["status"] == "QUEUED"
    assert second["analysis_id"] != first["analysis_id"]
    assert enqueued == [document_id, document_id]

    status = client.get(f"/api/documents/{document_id}/status", headers=acme_headers).json()
    assert status["ai_metadata"] is None

    old = client.get(f"/api/analyses/{first['analysis_id']}/status", headers=acme_headers).json()
    assert old["status"] == "COMPLETED"
    assert old["attempt"] == 1
    assert old["ai_metadata"]["summary"] == GOOD_ANALYSIS["summary"]

    current = client.get(f"/api/analyses/{second['analysis_id']}/status", headers=acme_headers).json()
    assert current["status"] == "QUEUED"
    assert current["attempt"] == 2

    versions = client.get(f"/api/documents/{document_id}/versions", headers=acme_headers).json()
    assert [v["attempt"] for v in versions] == [2, 1]


def test_failed_document_reports_error_detail(client, acme_headers, fake_backend):
    fake_backend.outputs = ["definitely not json"]
    document_id = _upload(client, acme_headers).json()["document_id"]

    client.post(f"/api/documents/{document_id}/process", headers=acme_headers)
    status = client.get(f"/api/documents/{document_id}/status", headers=acme_headers).json()

    assert status["status"] == "ERROR"
    assert status["error_detail"]["type"] == "PARSE_ERROR"
    assert status["error_detail"]["raw_response"] == "definitely not json"
    assert status["ai_metadata"] is None


def test_process_pending_endpoint(client, acme_headers):
    ids = [_upload(client, acme_headers).json()["document_id"] for _ in range(2)]

    resp = client.post("/api/documents/process-pending", headers=acme_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["processed"] == 2
    assert body["succeeded"] == 2
    assert sorted(r["document_id"] for r in body["results"]) == sorted(ids)

    assert client.post("/api/documents/process-pending", headers=acme_headers).json()["processed"] == 0


def test_list_documents_filters_by_status(client, acme_headers):
    done = _upload(client, acme_headers).json()["document_id"]
    _upload(client, acme_headers)
    client.post(f"/api/documents/{done}/process", headers=acme_headers)

    completed = client.get("/api/documents", params={"status": "completed"}, headers=acme_headers).json()
    assert [d["id"] for d in completed] == [done]

    bad = client.get("/api/documents", params={"status": "DONE"}, headers=acme_headers)
    assert bad.status_code == 422


def test_download_streams_local_file(client, acme_headers):
    document_id = _upload(client, acme_headers).json()["document_id"]
    resp = client.get(f"/api/documents/{document_id}/download", headers=acme_headers)
    assert resp.status_code == 200
    assert resp.content == CONTRACT


def test_unknown_document_is_404(client, acme_headers):
    resp = client.get(f"/api/documents/{uuid.uuid4()}/status", headers=acme_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


# ---- tenancy ----


def test_missing_tenant_header_uses_default_tenant(client, auth_headers):
    resp = _upload(client, auth_headers)
    assert resp.status_code == 201

    tenants = client.get("/api/tenants", headers=auth_headers).json()
    assert "default" in [t["slug"] for t in tenants]


def test_unknown_tenant_is_forbidden(client, auth_headers):
    resp = client.get("/api/documents", headers={**auth_headers, "X-Tenant-ID": "nobody"})
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "TENANT_INVALID"


def test_inactive_tenant_is_forbidden(client, auth_headers, tenant):
    client.patch(f"/api/tenants/{tenant.slug}", json={"is_active": False}, headers=auth_headers)
    resp = client.get("/api/documents", headers={**auth_headers, "X-Tenant-ID": tenant.slug})
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "TENANT_INACTIVE"


def test_documents_are_isolated_between_tenants(client, auth_headers, acme_headers):
    client.post("/api/tenants", json={"slug": "globex"}, headers=auth_headers)
    document_id = _upload(client, acme_headers).json()["document_id"]

    other = {**auth_headers, "X-Tenant-ID": "globex"}
    assert client.get(f"/api/documents/{document_id}", headers=other).status_code == 404
    assert client.get("/api/documents", headers=other).json() == []


# ---- auth ----


def test_requires_bearer_token(client):
    resp = client.get("/api/documents")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"


def test_rejects_garbage_token(client):
    resp = client.get("/api/documents", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_login_issues_usable_token(client):
    from docportal.core.config import settings

    resp = client.post("/auth/login", json={"username": settings.ADMIN_USERNAME, "password": settings.ADMIN_PASSWORD})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    assert client.get("/api/documents", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_login_rejects_bad_password(client):
    resp = client.post("/auth/login", json={"username": "admin", "password": "wrong-password"})
    assert resp.status_code == 401
