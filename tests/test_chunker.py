import pytest

from aurora.services.rag.chunker import DEFAULT_MAX_CHARS, chunk_text, split_paragraphs


def _normalized(text: str) -> str:
    return " ".join(text.split())


def test_split_paragraphs_trims_and_drops_blank_lines() -> None:
    assert split_paragraphs("  first \n\n\n second\r\n\r\nthird  \n   \n") == [
        "first",
        "second",
        "third",
    ]


def test_chunk_text_joins_small_paragraphs_with_blank_line() -> None:
    assert chunk_text("alpha\nbeta\n\ngamma", max_chars=100) == ["alpha\n\nbeta\n\ngamma"]


def test_chunk_text_flushes_when_next_paragraph_does_not_fit() -> None:
    chunks = chunk_text("aaaa\nbbbb\ncccc", max_chars=10)

    # "aaaa\n\nbbbb" is exactly 10 characters
    assert chunks == ["aaaa\n\nbbbb", "cccc"]


def test_chunk_text_slices_oversized_paragraph() -> None:
    paragraph = "x" * 25

    chunks = chunk_text(f"head\n{paragraph}\ntail", max_chars=10)

    assert chunks == ["head", "x" * 10, "x" * 10, "xxxxx", "tail"]


def test_chunk_text_slices_at_fixed_offsets() -> None:
    # the space after "aaaaa" starts the second slice instead of being dropped
    assert chunk_text("aaaaa bbbbb", max_chars=5) == ["aaaaa", "bbbb", "b"]
    assert chunk_text("abcd  efgh", max_chars=4) == ["abcd", "ef", "gh"]


def test_chunk_text_sliced_tail_absorbs_next_paragraph_when_it_fits() -> None:
    chunks = chunk_text("y" * 23 + "\nend", max_chars=10)

    assert chunks == ["y" * 10, "y" * 10, "yyy\n\nend"]


def test_chunk_text_empty_input_yields_no_chunks() -> None:
    assert chunk_text("") == []
    assert chunk_text(" \n\n \r\n") == []


def test_chunk_text_default_max_chars() -> None:
    text = "\n".join(f"paragraph {index} " + "word " * 40 for index in range(40))

    chunks = chunk_text(text)

    assert len(chunks) > 1
    assert all(len(chunk) <= DEFAULT_MAX_CHARS for chunk in chunks)


@pytest.mark.parametrize("max_chars", [1, 7, 32, 120])
def test_chunk_text_respects_bound_and_preserves_content(max_chars: int) -> None:
    text = (
        "Robotics cells need predictive maintenance.\n\n"
        "Spare parts are ordered weekly.\n"
        + "longparagraphwithoutanyspaces" * 6
        + "\nfinal note"
    )

    chunks = chunk_text(text, max_chars=max_chars)

    assert chunks
    assert all(0 < len(chunk) <= max_chars for chunk in chunks)
    assert _normalized("".join(chunks)).replace(" ", "") == _normalized(text).replace(" ", "")


def test_chunk_text_rejects_non_positive_bound() -> None:
    with pytest.raises(ValueError, match="max_chars must be > 0"):
        chunk_text("hello", max_chars=0)
