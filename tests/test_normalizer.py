import re

import pytest

from nutrition_tables.normalizer import (
    DESCRIPTORS,
    UNIT_TOKENS,
    contains_unit_token,
    normalize_phrase,
    singularize,
)


def _plain_word(token: str) -> str:
    return re.sub(r"\(\?:es\)\?|s\?$", "", token)


VOCABULARY = sorted({_plain_word(token) for token in UNIT_TOKENS} | set(DESCRIPTORS))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2 cups chopped Tomatoes", "tomato"),
        ("½ tsp salt, to taste", "salt"),
        ("200g rolled oats", "rolled oat"),
        ("1 1/2 tbsp extra-virgin olive oil", "extra-virgin olive oil"),
        ("1-2 cloves garlic, minced", "garlic"),
        ("3 eggs", "egg"),
        ("salt - to taste", "salt"),
        ("1.5 kg chicken breasts", "chicken breast"),
    ],
)
def test_normalizes_common_ingredient_lines(raw: str, expected: str) -> None:
    assert normalize_phrase(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "2 cups chopped Tomatoes",
        "Molasses",
        "glass noodles",
        "hummus",
        "1 can chickpeas, drained and rinsed",
        "fresh basil leaves (optional)",
        "Apples",
        "coffee grounds",
        "candy canes",
        "2 cups coffee grounds",
        "fresh-ground peppers",
    ],
)
def test_normalization_reaches_a_fixed_point(raw: str) -> None:
    once = normalize_phrase(raw)
    assert normalize_phrase(once) == once


def test_output_is_lowercase_letters_spaces_and_hyphens() -> None:
    result = normalize_phrase("  2 (14-oz) cans Diced TOMATOES!!  ")
    assert re.fullmatch(r"[a-z\- ]*", result)
    assert "  " not in result
    assert result == result.strip()


def test_empty_input_normalizes_to_empty_string() -> None:
    assert normalize_phrase("") == ""
    assert normalize_phrase(None) == ""
    assert normalize_phrase("2 cups") == ""


def test_units_inside_words_are_kept() -> None:
    assert normalize_phrase("1 glass milk") == "glass milk"
    assert normalize_phrase("2 large eggs") == "egg"


def test_singularize_strips_one_suffix() -> None:
    assert singularize("tomatoes") == "tomato"
    assert singularize("oats") == "oat"
    assert singularize("glass") == "glass"
    assert singularize("molasses") == "molasse"
    # Heuristic, not morphology.
    assert singularize("apples") == "appl"


def test_contains_unit_token() -> None:
    assert contains_unit_token("200g flour")
    assert contains_unit_token("1 Cup milk")
    assert not contains_unit_token("2 eggs")
    assert not contains_unit_token("")


@pytest.mark.parametrize("word", VOCABULARY)
@pytest.mark.parametrize("suffix", ["s", "es"])
def test_plural_of_a_vocabulary_word_reaches_a_fixed_point(word: str, suffix: str) -> None:
    once = normalize_phrase(f"beans {word}{suffix}")
    assert normalize_phrase(once) == once


def test_singular_that_exposes_a_token_is_stripped_too() -> None:
    assert normalize_phrase("coffee grounds") == "coffee"
    assert normalize_phrase("candy canes") == "candy"


def test_ambiguous_words_alone_are_not_units() -> None:
    assert not contains_unit_token("You can make this ahead")
    assert not contains_unit_token("l")
    assert contains_unit_token("2 cans beans")
    assert contains_unit_token("1 L water, 1 cup rice")
