"""
Document portal client.
Encapsulates all HTTP communication with the document processing API.
"""
import httpx
from typing import Any, Dict, Optional

from docportal.client.poller import PollResult, StatusPoller


class PortalClientError(Exception):
    """Non-2xx response; carries the API's {"error": {...}} body when present."""

    def __init__(self, status_code: int, code: str | None, message: str, payload: Any = None):
        super().__init__(f"{status_code} {code or 'ERROR'}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.payload = payload


def is_transient_error(exc: Exception) -> bool:
    """Connection problems, 429 and 5xx are worth another poll; other 4xx are not."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, PortalClientError):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


class DocumentPortalClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        tenant: Optional[str] = None,
        timeout: float = 30.0,
        max_poll_attempts: int = 12,
        poll_interval_ms: int = 5000,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.tenant = tenant
        self.max_poll_attempts = max_poll_attempts
        self.poll_interval_ms = poll_interval_ms
        self._http = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "DocumentPortalClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.tenant:
            headers["X-Tenant-ID"] = self.tenant
        return headers

    def _request(self, method: str, url: str, **kwargs) -> Any:
        resp = self._http.request(method, url, headers=self._headers(), **kwargs)
        if resp.is_error:
            code, message, payload = None, resp.reason_phrase, None
            try:
                payload = resp.json()
                err = payload.get("error") or {}
                code = err.get("code")
                message = err.get("message") or message
            except (ValueError, AttributeError):
                pass
            raise PortalClientError(resp.status_code, code, message, payload)
        return resp.json()

    # --- Auth ---
    def login(self, username: str, password: str) -> str:
        data = self._request("POST", "/auth/login", json={"username": username, "password": password})
        self.token = data["access_token"]
        return self.token

    # --- Documents ---
    def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        document_type: Optional[str] = None,
        tags: Optional[list[str]] = None,
        is_confidential: bool = False,
    ) -> Dict[str, Any]:
        """Returns {analysis_id, document_id, status, attempt, status_url}."""
        form: Dict[str, str] = {"is_confidential": "true" if is_confidential else "false"}
        if title:
            form["title"] = title
        if description:
            form["description"] = description
        if document_type:
            form["document_type"] = document_type
        if tags:
            form["tags"] = ",".join(tags)
        return self._request(
            "POST",
            "/api/documents",
            data=form,
            files={"file": (filename, content, content_type)},
        )

    def get_document(self, document_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/documents/{document_id}")

    def get_status(self, document_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/documents/{document_id}/status")

    def get_analysis_status(self, analysis_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/analyses/{analysis_id}/status")

    def process(self, document_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/api/documents/{document_id}/process")

    def process_pending(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit is not None else {}
        return self._request("POST", "/api/documents/process-pending", params=params)

    def resubmit(self, document_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/api/documents/{document_id}/resubmit")

    # --- Polling ---
    def make_poller(self) -> StatusPoller:
        return StatusPoller(max_attempts=self.max_poll_attempts, interval_ms=self.poll_interval_ms)

    def wait_for_document(self, document_id: str, *, poller: Optional[StatusPoller] = None) -> PollResult:
        """
        Poll the status endpoint until COMPLETED / FAILED / ERROR or the
        attempt ceiling. A transient fetch error counts as a non-terminal
        attempt. Pass your own poller to be able to cancel() it.
        """
        poller = poller or self.make_poller()
        return poller.poll(lambda: self.get_status(document_id), is_transient=is_transient_error)
