"""
chunking.py
- Purpose: Split extracted document text into overlapping chunks for embeddings.
- Design: Whole paragraphs are packed up to `chunk_chars`; each new chunk
  starts with the word-aligned tail (`overlap_chars`) of the previous one.
  Paragraphs are split on whitespace into pieces small enough that tail
  plus piece still fits. Only a single word longer than that can overflow.
  Deterministic: the same text always yields the same chunks.
"""

import re
from dataclasses import dataclass
from typing import Iterator

DEFAULT_CHUNK_CHARS = 4000  # ~1000 tokens
DEFAULT_OVERLAP_CHARS = 400

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class TextChunk:
    index: int
    text: str


def _pieces(paragraph: str, piece_chars: int) -> Iterator[str]:
    piece = ""
    for word in paragraph.split(" "):
        if piece and len(piece) + 1 + len(word) > piece_chars:
            yield piece
            piece = word
        else:
            piece = f"{piece} {word}" if piece else word
    if piece:
        yield piece


def _overlap(chunk: str, overlap_chars: int) -> str:
    if overlap_chars <= 0:
        return ""
    tail = chunk[-overlap_chars:]
    if len(tail) == len(chunk):
        return tail
    # drop the partial word at the cut
    cut = tail.find(" ")
    return tail[cut + 1 :] if cut != -1 else tail


def split_into_chunks(
    text: str,
    *,
    chunk_chars: int = DEFAULT_CHUNK_CHARS,
    overlap_chars: int = DEFAULT_OVERLAP_CHARS,
) -> list[TextChunk]:
    if chunk_chars <= 0:
        raise ValueError("chunk_chars must be > 0")
    if not 0 <= overlap_chars < chunk_chars:
        raise ValueError("overlap_chars must be >= 0 and smaller than chunk_chars")

    piece_chars = max(1, chunk_chars - overlap_chars - 1) if overlap_chars else chunk_chars
    chunks: list[str] = []
    current = ""
    for paragraph in _PARAGRAPH_BREAK.split(text or ""):
        paragraph = " ".join(paragraph.split())
        if not paragraph:
            continue
        for piece in _pieces(paragraph, piece_chars):
            if current and len(current) + 1 + len(piece) > chunk_chars:
                chunks.append(current)
                carry = _overlap(current, overlap_chars)
                current = f"{carry} {piece}" if carry else piece
            else:
                current = f"{current} {piece}" if current else piece

    if current:
        chunks.append(current)
    return [TextChunk(index=i, text=c) for i, c in enumerate(chunks)]
