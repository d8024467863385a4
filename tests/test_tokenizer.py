import re

from aurora.services.rag.tokenizer import STOP_WORDS, tokenize


def test_tokenize_lowercases_and_strips_punctuation() -> None:
    assert tokenize("Predictive-Maintenance, for FACTORY robots!") == [
        "predictive",
        "maintenance",
        "factory",
        "robots",
    ]


def test_tokenize_drops_short_tokens_and_stop_words() -> None:
    assert tokenize("The cat is on the mat with you and an ox") == ["cat", "mat"]


def test_tokenize_treats_line_breaks_as_spaces() -> None:
    assert tokenize("alpha\r\nbeta\ngamma\rdelta") == ["alpha", "beta", "gamma", "delta"]


def test_tokenize_keeps_digits_and_drops_non_ascii_letters() -> None:
    assert tokenize("Model X500 costs 1200 euros, café") == ["model", "x500", "costs", "1200", "euros", "caf"]


def test_tokenize_returns_empty_for_stop_words_only() -> None:
    assert tokenize("the and of") == []
    assert tokenize("") == []


def test_tokenize_output_tokens_are_normalized_terms() -> None:
    samples = [
        "Hello, World! This is a TEST of the tokenizer.",
        "Ünïcödé — text\twith\ttabs & symbols #42 @home",
        "a an of to is",
        "x" * 3 + " yy zzz",
    ]
    for sample in samples:
        for token in tokenize(sample):
            assert len(token) > 2
            assert re.fullmatch(r"[a-z0-9]+", token)
            assert token not in STOP_WORDS


def test_tokenize_is_idempotent_on_joined_output() -> None:
    tokens = tokenize("Industrial robots, predictive maintenance and the 2024 roadmap.")

    assert tokenize(" ".join(tokens)) == tokens
