import pytest

from docportal.extract.chunking import split_into_chunks


def _words(n: int) -> str:
    return " ".join(f"w{i:02d}" for i in range(n))


def test_empty_text_has_no_chunks():
    assert split_into_chunks("") == []
    assert split_into_chunks("  \n\n  \n") == []


def test_short_text_is_one_chunk_with_normalized_whitespace():
    chunks = split_into_chunks("Payment   terms:\nnet 30.\n\nAuto-renews yearly.")

    assert len(chunks) == 1
    assert chunks[0].index == 0
    assert chunks[0].text == "Payment terms: net 30. Auto-renews yearly."


def test_chunks_respect_size_and_carry_overlap():
    chunks = split_into_chunks(_words(40), chunk_chars=50, overlap_chars=10)

    assert len(chunks) > 1
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(len(c.text) <= 50 for c in chunks)
    # "w07 w08" style tail of the previous chunk opens the next one
    assert chunks[1].text.split()[:2] == chunks[0].text.split()[-2:]


def test_every_word_survives_in_order():
    chunks = split_into_chunks(_words(60), chunk_chars=40, overlap_chars=0)

    joined = " ".join(c.text for c in chunks).split()
    assert joined == _words(60).split()


def test_long_paragraph_is_split_on_spaces():
    paragraph = _words(30)
    chunks = split_into_chunks(paragraph, chunk_chars=30, overlap_chars=0)

    assert len(chunks) >= 3
    assert all(not c.text.startswith(" ") and not c.text.endswith(" ") for c in chunks)


def test_paragraphs_are_packed_together():
    text = "First clause.\n\nSecond clause.\n\nThird clause."
    chunks = split_into_chunks(text, chunk_chars=30, overlap_chars=0)

    assert [c.text for c in chunks] == ["First clause. Second clause.", "Third clause."]


@pytest.mark.parametrize(
    "chunk_chars, overlap_chars",
    [(0, 0), (-5, 0), (100, 100), (100, -1)],
)
def test_bad_sizes_are_rejected(chunk_chars, overlap_chars):
    with pytest.raises(ValueError):
        split_into_chunks("text", chunk_chars=chunk_chars, overlap_chars=overlap_chars)


def test_chunking_is_deterministic():
    text = "\n\n".join(_words(25) for _ in range(4))

    assert split_into_chunks(text, chunk_chars=80, overlap_chars=12) == split_into_chunks(
        text, chunk_chars=80, overlap_chars=12
    )
