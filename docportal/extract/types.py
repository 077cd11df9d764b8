"""docportal/extract/types.py

Lightweight dataclasses for document -> text extraction outputs.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractedText:
    text: str
    strategy: str  # "pymupdf" | "pdfplumber" | "pypdf" | "utf-8"
    page_count: int | None = None
    pages_with_text: int | None = None

    @property
    def char_count(self) -> int:
        return len(self.text)
