"""Tests for generated usernames and modification codes."""

import re

import pytest

from src.codestack.core.validators import is_valid_modification_code
from src.codestack.services.usernames import (
    ADJECTIVES,
    NOUNS,
    generate_modification_code,
    generate_username,
)

pytestmark = pytest.mark.unit


def test_username_is_adjective_followed_by_noun() -> None:
    for _ in range(50):
        name = generate_username()
        adjective = next(
            (a for a in ADJECTIVES if name.startswith(a) and name[len(a) :] in NOUNS), None
        )
        assert adjective is not None, name


def test_username_fits_column() -> None:
    longest = max(map(len, ADJECTIVES)) + max(map(len, NOUNS))
    assert longest <= 50


def test_word_lists_are_capitalized_words() -> None:
    for word in (*ADJECTIVES, *NOUNS):
        assert re.fullmatch(r"[A-Z][A-Za-z]*", word), word


def test_modification_code_is_twelve_hex_characters() -> None:
    code = generate_modification_code()

    assert re.fullmatch(r"[0-9a-f]{12}", code)
    assert is_valid_modification_code(code)


def test_modification_codes_differ() -> None:
    codes = {generate_modification_code() for _ in range(100)}
    assert len(codes) == 100
