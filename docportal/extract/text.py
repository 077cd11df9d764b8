"""docportal/extract/text.py

Deterministic document -> text extraction (no LLM).

PDF strategy, first backend that parses wins:
1) PyMuPDF (fitz)
2) pdfplumber
3) pypdf (very basic)

Text-like types (text/*, JSON, XML) are decoded as UTF-8.

Failures that are the document's fault raise AppError with reason
UNSUPPORTED_CONTENT / EMPTY_CONTENT / INVALID_INPUT; the processor maps
those to FAILED. A missing PDF backend is a CONFIG_ERROR.
"""

import io
import logging

from docportal.core import AppError, ErrorCode, ErrorReason, internal_error
from docportal.extract.types import ExtractedText

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = frozenset({"application/pdf"})
TEXT_MIME_TYPES = frozenset({
    "application/json",
    "application/xml",
    "text/xml",
    "text/csv",
    "text/markdown",
    "text/plain",
})

# Reasons that mean "bad input" rather than a fault on our side
INPUT_ERROR_REASONS = frozenset({
    ErrorReason.UNSUPPORTED_CONTENT,
    ErrorReason.EMPTY_CONTENT,
    ErrorReason.INVALID_INPUT,
})


def is_supported(mime_type: str) -> bool:
    mt = (mime_type or "").lower()
    return mt in PDF_MIME_TYPES or mt in TEXT_MIME_TYPES or mt.startswith("text/")


def _empty(message: str) -> AppError:
    return AppError(
        code=ErrorCode.VALIDATION_ERROR,
        reason=ErrorReason.EMPTY_CONTENT,
        message=message,
        status_code=422,
    )


def extract_text(content: bytes, mime_type: str) -> ExtractedText:
    mt = (mime_type or "").lower()

    if not content:
        raise _empty("Document is empty")

    if not is_supported(mt):
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.UNSUPPORTED_CONTENT,
            message=f"Text extraction is not supported for {mt or 'unknown'} documents",
            status_code=422,
            details={"mime_type": mt},
        )

    if mt in PDF_MIME_TYPES:
        extracted = extract_text_from_pdf(content)
    else:
        extracted = decode_text(content)

    if not extracted.text.strip():
        raise _empty("No text could be extracted from the document")
    return extracted


def decode_text(content: bytes) -> ExtractedText:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT,
            message=f"Document is not valid UTF-8 text: {e.reason} at byte {e.start}",
            status_code=422,
        ) from e
    return ExtractedText(text=text, strategy="utf-8")


def extract_text_from_pdf(pdf_bytes: bytes) -> ExtractedText:
    backends_available = 0
    last_error: Exception | None = None

    # 1) PyMuPDF
    try:
        import fitz  # type: ignore
    except ImportError:
        fitz = None
    if fitz is not None:
        backends_available += 1
        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
            try:
                texts: list[str] = []
                pages_with_text = 0
                for page in doc:
                    t = page.get_text("text") or ""
                    if t.strip():
                        pages_with_text += 1
                    texts.append(t)
                return ExtractedText(
                    text="\n\n".join(texts),
                    strategy="pymupdf",
                    page_count=doc.page_count,
                    pages_with_text=pages_with_text,
                )
            finally:
                doc.close()
        except Exception as e:
            logger.debug("pdf.extract pymupdf failed: %s", e)
            last_error = e

    # 2) pdfplumber
    try:
        import pdfplumber  # type: ignore
    except ImportError:
        pdfplumber = None
    if pdfplumber is not None:
        backends_available += 1
        try:
            texts = []
            pages_with_text = 0
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                page_count = len(pdf.pages)
                for p in pdf.pages:
                    t = p.extract_text() or ""
                    if t.strip():
                        pages_with_text += 1
                    texts.append(t)
            return ExtractedText(
                text="\n\n".join(texts),
                strategy="pdfplumber",
                page_count=page_count,
                pages_with_text=pages_with_text,
            )
        except Exception as e:
            logger.debug("pdf.extract pdfplumber failed: %s", e)
            last_error = e

    # 3) pypdf (weak fallback)
    try:
        from pypdf import PdfReader  # type: ignore
    except ImportError:
        PdfReader = None
    if PdfReader is not None:
        backends_available += 1
        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            texts = []
            pages_with_text = 0
            for p in reader.pages:
                t = p.extract_text() or ""
                if t.strip():
                    pages_with_text += 1
                texts.append(t)
            return ExtractedText(
                text="\n\n".join(texts),
                strategy="pypdf",
                page_count=len(reader.pages),
                pages_with_text=pages_with_text,
            )
        except Exception as e:
            logger.debug("pdf.extract pypdf failed: %s", e)
            last_error = e

    if backends_available == 0:
        raise internal_error(
            ErrorReason.MISSING_DEPENDENCY,
            code=ErrorCode.CONFIG_ERROR,
            message="No PDF extraction backend available. Install PyMuPDF (fitz) or pdfplumber.",
        )

    raise AppError(
        code=ErrorCode.VALIDATION_ERROR,
        reason=ErrorReason.INVALID_INPUT,
        message=f"PDF could not be read: {last_error}",
        status_code=422,
    ) from last_error
