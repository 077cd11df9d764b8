import json
import uuid

import pytest

from docportal.constants.statuses import ErrorType, ProcessingStatus
from docportal.core import AppError, ErrorCode
from docportal.llm.errors import LLMNonRetryableError, LLMRetryableError
from docportal.repos.document.read import DocumentReadRepo
from docportal.services.processing_service import DocumentProcessor
from docportal.services.storage.factory import stored_object_for

from tests.conftest import GOOD_ANALYSIS, FakeBackend, make_llm


def _processor(db_session, storage, processing_config, backend):
    return DocumentProcessor(db_session, storage, processing_config, llm=make_llm(backend))


def _events(db_session, doc):
    return [(e.from_status, e.to_status) for e in DocumentReadRepo(db_session).list_status_events(doc.id)]


def test_completes_and_stores_analysis(db_session, storage, processing_config, make_document):
    doc = make_document()
    backend = FakeBackend(json.dumps(GOOD_ANALYSIS))

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.succeeded
    db_session.refresh(doc)
    assert doc.status == "COMPLETED"
    assert doc.ai_processed is True
    assert doc.error_detail is None
    assert doc.processing_started_at is not None
    assert doc.processing_completed_at is not None
    assert doc.ai_metadata["summary"] == GOOD_ANALYSIS["summary"]
    assert doc.ai_metadata["key_insights"] == GOOD_ANALYSIS["keyInsights"]
    assert doc.ai_metadata["warnings"] == []
    assert doc.ai_metadata["source"]["strategy"] == "utf-8"
    assert set(doc.ai_metadata["usage"]) == {"input_tokens", "output_tokens", "finish_reason"}

    req, prompt = backend.calls[0]
    assert "Acme and Globex" in prompt
    assert req.prompt_name == "analyze_document"

    assert _events(db_session, doc) == [
        (None, "PENDING"),
        ("PENDING", "PROCESSING"),
        ("PROCESSING", "COMPLETED"),
    ]

    version = DocumentReadRepo(db_session).get_current_analysis(doc)
    assert version.status == "COMPLETED"
    assert version.summary == GOOD_ANALYSIS["summary"]
    assert version.provider == "openai"


def test_partial_analysis_passes_through_warning(db_session, storage, processing_config, make_document):
    doc = make_document(status=ProcessingStatus.QUEUED)
    partial = {"summary": "Short memo.", "confidence": 0.2}
    backend = FakeBackend(json.dumps(partial))

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.status == ProcessingStatus.COMPLETED
    assert set(outcome.warnings) == {"no_key_insights", "low_confidence"}
    db_session.refresh(doc)
    assert doc.ai_metadata["warnings"] == list(outcome.warnings)
    assert _events(db_session, doc)[-3:] == [
        ("QUEUED", "PROCESSING"),
        ("PROCESSING", "WARNING"),
        ("WARNING", "COMPLETED"),
    ]


def test_long_input_is_truncated(db_session, storage, processing_config, make_document):
    doc = make_document(b"word " * 100)
    backend = FakeBackend(json.dumps(GOOD_ANALYSIS))
    config = processing_config.with_overrides(max_input_chars=20)

    DocumentProcessor(db_session, storage, config, llm=make_llm(backend)).process_document(doc.id)

    req, _ = backend.calls[0]
    assert req.variables["text"] == ("word " * 4) + "..."
    db_session.refresh(doc)
    assert "input_truncated" in doc.ai_metadata["warnings"]
    assert doc.ai_metadata["source"]["truncated"] is True


def test_unsupported_content_is_failed(db_session, storage, processing_config, make_document):
    doc = make_document(b"\x89PNG\r\n", mime_type="image/png", filename="scan.png")
    backend = FakeBackend()

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.status == ProcessingStatus.FAILED
    assert outcome.error_type == ErrorType.INPUT_ERROR
    assert backend.calls == []
    db_session.refresh(doc)
    assert doc.status == "FAILED"
    assert doc.error_detail["type"] == "INPUT_ERROR"
    assert doc.ai_metadata is None
    assert doc.ai_processed is False


def test_undecodable_text_is_failed(db_session, storage, processing_config, make_document):
    doc = make_document(b"\xff\xfe\xfa not utf-8")

    outcome = _processor(db_session, storage, processing_config, FakeBackend()).process_document(doc.id)

    assert outcome.status == ProcessingStatus.FAILED
    db_session.refresh(doc)
    assert "UTF-8" in doc.error_detail["message"]


def test_provider_error_is_error_with_provider_message(db_session, storage, processing_config, make_document):
    doc = make_document()
    backend = FakeBackend(LLMNonRetryableError("Incorrect API key provided", status_code=401, provider="openai"))

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.status == ProcessingStatus.ERROR
    assert outcome.error_type == ErrorType.UPSTREAM_ERROR
    db_session.refresh(doc)
    assert doc.error_detail == {
        "type": "UPSTREAM_ERROR",
        "message": "Incorrect API key provided",
        "provider_status": 401,
    }
    version = DocumentReadRepo(db_session).get_current_analysis(doc)
    assert version.status == "ERROR"
    assert version.error_type == "UPSTREAM_ERROR"


def test_transient_provider_errors_are_retried(db_session, storage, processing_config, make_document):
    doc = make_document()
    backend = FakeBackend(
        LLMRetryableError("rate limited", status_code=429),
        json.dumps(GOOD_ANALYSIS),
    )

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.succeeded
    assert len(backend.calls) == 2


def test_unparseable_response_keeps_raw_text(db_session, storage, processing_config, make_document):
    doc = make_document()
    raw = '{"summary": "cut off mid'
    backend = FakeBackend(raw)

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.status == ProcessingStatus.ERROR
    assert outcome.error_type == ErrorType.PARSE_ERROR
    db_session.refresh(doc)
    assert doc.error_detail["type"] == "PARSE_ERROR"
    assert doc.error_detail["raw_response"] == raw
    assert len(backend.calls) == 1


def test_schema_mismatch_is_parse_error(db_session, storage, processing_config, make_document):
    doc = make_document()
    backend = FakeBackend(json.dumps({"keyInsights": ["no summary"]}))

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.error_type == ErrorType.PARSE_ERROR


def test_missing_object_is_storage_error(db_session, storage, processing_config, make_document):
    doc = make_document()
    storage.delete(stored_object_for(storage, doc.storage_key))

    outcome = _processor(db_session, storage, processing_config, FakeBackend()).process_document(doc.id)

    assert outcome.status == ProcessingStatus.ERROR
    assert outcome.error_type == ErrorType.STORAGE_ERROR


def test_unexpected_exception_is_internal_error(db_session, storage, processing_config, make_document):
    doc = make_document()
    backend = FakeBackend(RuntimeError("boom"))

    outcome = _processor(db_session, storage, processing_config, backend).process_document(doc.id)

    assert outcome.status == ProcessingStatus.ERROR
    assert outcome.error_type == ErrorType.INTERNAL_ERROR
    db_session.refresh(doc)
    assert "boom" in doc.error_detail["message"]


def test_terminal_document_is_not_claimable(db_session, storage, processing_config, make_document):
    doc = make_document()
    processor = _processor(db_session, storage, processing_config, FakeBackend())
    processor.process_document(doc.id)

    with pytest.raises(AppError) as exc:
        processor.process_document(doc.id)
    assert exc.value.status_code == 409
    assert exc.value.code == ErrorCode.DOCUMENT_NOT_CLAIMABLE


def test_unknown_document_is_not_found(db_session, storage, processing_config):
    processor = _processor(db_session, storage, processing_config, FakeBackend())
    with pytest.raises(AppError) as exc:
        processor.process_document(uuid.uuid4())
    assert exc.value.status_code == 404


def test_other_tenants_document_is_not_found(db_session, storage, processing_config, make_document):
    doc = make_document()
    processor = _processor(db_session, storage, processing_config, FakeBackend())
    with pytest.raises(AppError) as exc:
        processor.process_document(doc.id, tenant_id=uuid.uuid4())
    assert exc.value.status_code == 404


def test_accepts_string_ids(db_session, storage, processing_config, make_document):
    doc = make_document()
    outcome = _processor(db_session, storage, processing_config, FakeBackend()).process_document(str(doc.id))
    assert outcome.succeeded
