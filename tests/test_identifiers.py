"""
Unit tests for session ids, entry ids and edit tokens.
"""
import re

import pytest

from fasting_sync.identifiers import (
    ADJECTIVES,
    NOUNS,
    generate_edit_token,
    generate_entry_id,
    generate_session_id,
    is_valid_email,
    is_valid_session_id,
    validate_edit_token,
)


class TestSessionIds:
    """Human-readable adjective-noun-number ids."""

    def test_generated_ids_are_valid(self):
        for _ in range(200):
            session_id = generate_session_id()
            assert is_valid_session_id(session_id), session_id

    def test_generated_ids_use_word_lists(self):
        adjective, noun, number = generate_session_id().split("-")
        assert adjective in ADJECTIVES
        assert noun in NOUNS
        assert 0 <= int(number) <= 999

    def test_word_lists_give_expected_space(self):
        assert len(ADJECTIVES) == 21
        assert len(NOUNS) == 21

    @pytest.mark.parametrize("session_id", ["fast-eagle-42", "calm-tiger-0", "brave-rocket-999"])
    def test_valid_ids(self, session_id):
        assert is_valid_session_id(session_id)

    @pytest.mark.parametrize(
        "session_id",
        ["abc", "abc-123", "ABC-def-12", "fast-eagle-1000", "fast-eagle-", "fast--12",
         "fast-eagle-12\n", "", None],
    )
    def test_invalid_ids(self, session_id):
        assert not is_valid_session_id(session_id)


class TestEditTokens:
    """Four-digit numeric edit tokens."""

    def test_tokens_are_four_digits_in_range(self):
        for _ in range(200):
            token = generate_edit_token()
            assert re.fullmatch(r"\d{4}", token)
            assert 1000 <= int(token) <= 9999

    def test_matching_tokens_validate(self):
        assert validate_edit_token("4821", "4821")
        assert validate_edit_token("x", "x")

    def test_missing_tokens_do_not_validate(self):
        assert not validate_edit_token(None, "4821")
        assert not validate_edit_token("4821", None)
        assert not validate_edit_token("", "")

    def test_mismatched_tokens_do_not_validate(self):
        assert not validate_edit_token("4821", "9999")
        assert not validate_edit_token("4821", "04821")


class TestEntryIds:

    def test_entry_id_shape(self):
        entry_id = generate_entry_id()
        assert re.fullmatch(r"\d{13}-[0-9a-z]{9}", entry_id)

    def test_entry_ids_differ(self):
        assert len({generate_entry_id() for _ in range(50)}) == 50


class TestEmailValidation:

    @pytest.mark.parametrize("email", ["me@example.com", "A.B@sub.example.org"])
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["", "me@", "me@example", "me @example.com", None])
    def test_invalid(self, email):
        assert not is_valid_email(email)
