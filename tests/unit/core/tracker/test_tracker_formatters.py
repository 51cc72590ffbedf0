# tests/unit/core/tracker/test_tracker_formatters.py
"""Tests for tracker value conversion helpers."""

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest

from telebugs_mcp.core.tracker.formatters import escape_like, fts_phrase_query, lenient_json, utc_timestamp


class TestLenientJson:
    def test_null_and_empty_are_none(self) -> None:
        assert lenient_json(None) is None
        assert lenient_json("") is None

    def test_valid_object(self) -> None:
        assert lenient_json('{"os": "linux", "cores": 4}') == {"os": "linux", "cores": 4}

    def test_valid_array(self) -> None:
        assert lenient_json('["a", "b"]') == ["a", "b"]

    def test_malformed_text_returned_verbatim(self) -> None:
        assert lenient_json("{not json") == "{not json"

    def test_plain_text_returned_verbatim(self) -> None:
        assert lenient_json("user=42&debug=1") == "user=42&debug=1"

    @pytest.mark.parametrize("raw", ['{"v": NaN}', '{"v": Infinity}', "[-Infinity]", "NaN"])
    def test_non_standard_constants_returned_verbatim(self, raw: str) -> None:
        assert lenient_json(raw) == raw

    def test_decoded_value_reencodes_as_strict_json(self) -> None:
        payload = {"contexts": lenient_json('{"v": NaN, "w": 1.5}')}

        assert json.loads(json.dumps(payload, allow_nan=False)) == {"contexts": '{"v": NaN, "w": 1.5}'}

    def test_deep_nesting_returned_verbatim(self) -> None:
        raw = "[" * 100_000 + "]" * 100_000

        assert lenient_json(raw) == raw


class TestUtcTimestamp:
    def test_rails_layout(self) -> None:
        moment = datetime(2024, 3, 9, 7, 5, 3, 120000, tzinfo=UTC)
        assert utc_timestamp(moment) == "2024-03-09 07:05:03.120000"

    def test_converts_to_utc(self) -> None:
        moment = datetime(2024, 3, 9, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert utc_timestamp(moment) == "2024-03-09 07:00:00.000000"

    def test_default_is_now(self) -> None:
        stamp = utc_timestamp()
        assert len(stamp) == len("2024-03-09 07:05:03.120000")
        assert stamp[4] == "-" and stamp[10] == " "


class TestEscapeLike:
    def test_plain_text_unchanged(self) -> None:
        assert escape_like("TypeError") == "TypeError"

    def test_wildcards_escaped(self) -> None:
        assert escape_like("100%_done") == "100\\%\\_done"

    def test_backslash_escaped_first(self) -> None:
        assert escape_like("C:\\tmp_%") == "C:\\\\tmp\\_\\%"


class TestFtsPhraseQuery:
    def test_terms_quoted(self) -> None:
        assert fts_phrase_query("undefined reading") == '"undefined" "reading"'

    def test_embedded_quotes_doubled(self) -> None:
        assert fts_phrase_query('say "hi"') == '"say" """hi"""'

    def test_operators_are_literal(self) -> None:
        assert fts_phrase_query("a OR NEAR(b") == '"a" "OR" "NEAR(b"'

    def test_trailing_star_is_prefix(self) -> None:
        assert fts_phrase_query("Type* err**") == '"Type"* "err"*'

    def test_inner_star_is_literal(self) -> None:
        assert fts_phrase_query("a*b") == '"a*b"'

    def test_bare_star_dropped(self) -> None:
        assert fts_phrase_query("* **") == ""

    def test_whitespace_only_is_empty(self) -> None:
        assert fts_phrase_query("   \t ") == ""
