"""Unit tests for query normalization.

Tests whitespace canonicalization, head/tail truncation, FNV-1a hashing and
keyword extraction used to build search queries.
"""

import pytest

from decision_research.utils.query_normalizer import (
    TRUNCATION_MARKER,
    extract_keywords,
    fnv1a_hash,
    normalize_query,
    truncate_query,
)


class TestNormalizeQuery:
    def test_collapses_whitespace_runs(self) -> None:
        assert normalize_query("  python\n\n asyncio\t tips ") == "python asyncio tips"

    def test_removes_nul_characters(self) -> None:
        assert normalize_query("heat\x00pump") == "heatpump"

    def test_empty_and_none(self) -> None:
        assert normalize_query("") == ""
        assert normalize_query(None) == ""
        assert normalize_query(" \t\n ") == ""

    def test_idempotent(self) -> None:
        once = normalize_query("  a   b\n c ")
        assert normalize_query(once) == once

    def test_preserves_case_and_punctuation(self) -> None:
        assert normalize_query("What's NEW in Python 3.11?!") == "What's NEW in Python 3.11?!"


class TestFnv1aHash:
    def test_empty_string_is_offset_basis(self) -> None:
        assert fnv1a_hash("") == "fnv1a32:811c9dc5"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("a", "fnv1a32:e40c292c"),
            ("foobar", "fnv1a32:bf9cf968"),
        ],
    )
    def test_known_vectors(self, text: str, expected: str) -> None:
        assert fnv1a_hash(text) == expected

    def test_format_is_fixed_width_hex(self) -> None:
        value = fnv1a_hash("decision research")
        prefix, digest = value.split(":")
        assert prefix == "fnv1a32"
        assert len(digest) == 8
        int(digest, 16)

    def test_stable_across_calls(self) -> None:
        assert fnv1a_hash("same input") == fnv1a_hash("same input")
        assert fnv1a_hash("same input") != fnv1a_hash("same input!")


class TestTruncateQuery:
    def test_short_query_unchanged(self) -> None:
        trace = truncate_query("  heat   pump costs ")

        assert trace.q == "heat pump costs"
        assert trace.truncated is False
        assert trace.original_length == trace.used_length == len("heat pump costs")

    def test_exactly_max_length_is_not_truncated(self) -> None:
        trace = truncate_query("x" * 400, 400)

        assert trace.truncated is False
        assert trace.used_length == 400

    def test_long_query_keeps_head_and_tail(self) -> None:
        """
        Given: A 2500-character query
        When: Truncated to 400 characters
        Then: 285 head chars + marker + 112 tail chars are kept
        """
        query = "H" * 1000 + "M" * 500 + "T" * 1000

        trace = truncate_query(query, 400)

        assert trace.truncated is True
        assert trace.original_length == 2500
        assert trace.used_length == 400
        assert trace.q == "H" * 285 + TRUNCATION_MARKER + "T" * 112

    def test_used_length_never_exceeds_max(self) -> None:
        for max_length in (20, 50, 128, 400):
            trace = truncate_query("word " * 300, max_length)
            assert trace.used_length <= max_length
            assert len(trace.q) == trace.used_length
            assert TRUNCATION_MARKER in trace.q

    def test_hash_is_taken_from_untruncated_text(self) -> None:
        query = "z" * 900

        trace = truncate_query(query, 400)

        assert trace.hash == fnv1a_hash(query)
        assert trace.hash != fnv1a_hash(trace.q)

    def test_deterministic(self) -> None:
        query = "compare heat pumps " * 50

        assert truncate_query(query) == truncate_query(query)


class TestExtractKeywords:
    def test_orders_by_frequency_then_alphabetically(self) -> None:
        text = "Solar panels: solar costs vs. wind costs"

        assert extract_keywords(text, 3) == ["costs", "solar", "panels"]

    def test_skips_short_tokens_and_stop_words(self) -> None:
        text = "The evidence about cost and risk should be weighed with research"

        keywords = extract_keywords(text, 10)

        assert "evidence" not in keywords
        assert "research" not in keywords
        assert "about" not in keywords
        assert "cost" in keywords
        assert "risk" in keywords
        assert all(len(k) >= 4 for k in keywords)

    def test_keeps_hyphenated_tokens(self) -> None:
        assert extract_keywords("trade-offs trade-offs latency", 2) == ["trade-offs", "latency"]

    def test_respects_max_keywords(self) -> None:
        text = "alpha bravo charlie delta echoes foxtrot"

        assert len(extract_keywords(text, 4)) == 4

    def test_empty_input(self) -> None:
        assert extract_keywords("", 10) == []
        assert extract_keywords("!!! ??? ...", 10) == []
        assert extract_keywords("meaningful words", 0) == []
