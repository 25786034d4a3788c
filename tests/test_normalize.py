"""Unit tests for webstash.normalize — recovering JSON from model replies."""

from __future__ import annotations

import json

import pytest

from webstash.normalize import (
    JsonBlockScanner,
    PlainText,
    StructuredSequence,
    normalize_response,
    parse_json_lines,
    strip_code_fence,
)


class TestNativeValues:
    def test_list_passthrough(self) -> None:
        assert normalize_response([{"a": 1}, {"b": 2}]) == StructuredSequence([{"a": 1}, {"b": 2}])

    def test_object_wrapped(self) -> None:
        assert normalize_response({"a": 1}) == StructuredSequence([{"a": 1}])

    def test_scalar_wrapped(self) -> None:
        assert normalize_response(42) == StructuredSequence([42])

    def test_none_is_empty_text(self) -> None:
        assert normalize_response(None) == PlainText("")


class TestDirectParse:
    def test_object(self) -> None:
        assert normalize_response('{"a": 1}') == StructuredSequence([{"a": 1}])

    def test_array(self) -> None:
        assert normalize_response('  [1, {"b": 2}]  ') == StructuredSequence([1, {"b": 2}])

    def test_empty_array(self) -> None:
        assert normalize_response("[]") == StructuredSequence([])

    def test_bare_scalar_json_is_text(self) -> None:
        assert normalize_response("42") == PlainText("42")
        assert normalize_response('"quoted"') == PlainText('"quoted"')

    def test_bom_stripped(self) -> None:
        assert normalize_response('\ufeff{"a": 1}') == StructuredSequence([{"a": 1}])

    def test_nan_rejected(self) -> None:
        assert normalize_response("[NaN]") == PlainText("[NaN]")


class TestCodeFences:
    def test_json_fence(self) -> None:
        assert normalize_response('```json\n{"a":1}\n```') == StructuredSequence([{"a": 1}])

    def test_untagged_and_uppercase_fence(self) -> None:
        assert normalize_response("```\n[1]\n```") == StructuredSequence([1])
        assert normalize_response('```JSON\n{"a":1}\n```') == StructuredSequence([{"a": 1}])

    def test_javascript_fence(self) -> None:
        assert normalize_response('```javascript\n{"a":1}\n```') == StructuredSequence([{"a": 1}])

    def test_fence_only_at_start(self) -> None:
        text = 'Here:\n```json\n{"a":1}\n```'
        assert strip_code_fence(text) == text
        assert normalize_response(text) == StructuredSequence([{"a": 1}])

    def test_fenced_prose_is_text(self) -> None:
        raw = "```\nno json here\n```"
        assert normalize_response(raw) == PlainText(raw)


class TestJsonLines:
    def test_roundtrip(self) -> None:
        records = [{"id": "1", "tags": ["a"]}, {"id": "2", "n": 2.5}, {"x": None}]
        raw = "\n".join(json.dumps(r) for r in records)
        assert normalize_response(raw) == StructuredSequence(records)

    def test_non_qualifying_lines_dropped(self) -> None:
        raw = 'Results:\n{"a": 1}\nnot json\n{"b": 2}\n{broken}\n[1, 2]'
        assert normalize_response(raw) == StructuredSequence([{"a": 1}, {"b": 2}])

    def test_crlf(self) -> None:
        assert parse_json_lines('{"a":1}\r\n{"b":2}\r\n') == [{"a": 1}, {"b": 2}]

    def test_none_when_nothing_qualifies(self) -> None:
        assert parse_json_lines("one\ntwo") is None
        assert parse_json_lines("") is None


class TestEmbedded:
    def test_object_in_prose(self) -> None:
        assert normalize_response('prefix text {"a": [1,2]} suffix') == StructuredSequence(
            [{"a": [1, 2]}]
        )

    def test_array_in_prose(self) -> None:
        assert normalize_response("The ids are [1, 2, 3]. Based on: #space") == StructuredSequence(
            [1, 2, 3]
        )

    def test_first_bracket_wins(self) -> None:
        raw = 'see [{"a": 1}] and {"b": 2}'
        assert normalize_response(raw) == StructuredSequence([{"a": 1}])

    def test_brackets_inside_strings(self) -> None:
        raw = 'Answer: {"text": "a } tricky { value", "n": 1} done'
        assert normalize_response(raw) == StructuredSequence(
            [{"text": "a } tricky { value", "n": 1}]
        )

    def test_escaped_quotes(self) -> None:
        raw = r'Answer: {"q": "she said \"}\" ok", "m": "c:\\"} end'
        assert normalize_response(raw) == StructuredSequence(
            [{"q": 'she said "}" ok', "m": "c:\\"}]
        )

    def test_single_attempt_only(self) -> None:
        raw = 'first {not valid} then {"a": 1}'
        assert normalize_response(raw) == PlainText(raw)

    def test_unbalanced(self) -> None:
        raw = 'oops {"a": [1, 2'
        assert normalize_response(raw) == PlainText(raw)


class TestPlainText:
    def test_raw_reply_returned_unchanged(self) -> None:
        assert normalize_response("not json at all") == PlainText("not json at all")

    def test_whitespace_preserved(self) -> None:
        raw = "  Your favorite tag is #space.\nBased on: #space\n"
        assert normalize_response(raw) == PlainText(raw)

    def test_empty(self) -> None:
        assert normalize_response("") == PlainText("")

    @pytest.mark.parametrize(
        "raw",
        ["{", "[[[", '"unterminated', "}{", "```", "\\", '{"a": "\\'],
    )
    def test_never_raises(self, raw: str) -> None:
        assert isinstance(normalize_response(raw), (PlainText, StructuredSequence))


class TestJsonBlockScanner:
    def test_state_after_scan(self) -> None:
        scanner = JsonBlockScanner('x {"a": "}"} y')
        assert scanner.find_block() == '{"a": "}"}'
        assert scanner.depth == 0
        assert not scanner.in_string

    def test_other_bracket_type_ignored(self) -> None:
        assert JsonBlockScanner("{ ] [ }").find_block() == "{ ] [ }"

    def test_no_brackets(self) -> None:
        assert JsonBlockScanner("plain").find_block() is None

    def test_feed_tracks_escape_state(self) -> None:
        scanner = JsonBlockScanner("")
        scanner.in_string = True
        assert scanner.feed("\\", "{", "}") is False
        assert scanner.escaped
        scanner.feed('"', "{", "}")
        assert scanner.in_string and not scanner.escaped
        scanner.feed('"', "{", "}")
        assert not scanner.in_string
