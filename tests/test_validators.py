import pytest

from docportal.core import AppError, ErrorCode
from docportal.validations.document_validators import normalize_document_type, normalize_status_filter, parse_tags
from docportal.validations.file_validators import normalize_content_type, sanitize_filename, validate_file_size


def test_tags_from_csv_and_json():
    assert parse_tags(" Legal, MSA ,legal,, ") == ["legal", "msa"]
    assert parse_tags('["Finance", "q3"]') == ["finance", "q3"]
    assert parse_tags(None) == []


@pytest.mark.parametrize("raw", ['["unterminated', '["ok", 3]', "[1, 2]", ",".join(f"t{i}" for i in range(21)), "x" * 51])
def test_bad_tags(raw):
    with pytest.raises(AppError) as exc:
        parse_tags(raw)
    assert exc.value.code == ErrorCode.INVALID_TAGS


def test_document_type_defaults_and_normalizes():
    assert normalize_document_type(None) == "OTHER"
    assert normalize_document_type(" invoice ") == "INVOICE"


def test_status_filter():
    assert normalize_status_filter("warning") == "WARNING"
    assert normalize_status_filter("") is None
    with pytest.raises(AppError):
        normalize_status_filter("DONE")


def test_size_limits():
    validate_file_size(10, max_bytes=10)
    with pytest.raises(AppError) as exc:
        validate_file_size(11, max_bytes=10)
    assert exc.value.status_code == 413
    with pytest.raises(AppError) as exc:
        validate_file_size(0, max_bytes=10)
    assert exc.value.code == ErrorCode.FILE_EMPTY


def test_filenames_are_sanitized():
    assert sanitize_filename("../../Q3 Report (final).PDF") == "q3_report_final.pdf"
    assert sanitize_filename("C:\\Users\\me\\notes.txt") == "notes.txt"
    assert sanitize_filename(None) == "upload.bin"


def test_content_type_parameters_are_dropped():
    assert normalize_content_type("Text/Plain; charset=UTF-8") == "text/plain"
