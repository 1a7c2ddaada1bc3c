"""Tests for Claude CLI output decoding."""

import json

import pytest

from hint_bot.decoder import (
    decode_content,
    decode_output,
    decode_text,
    escape_string_newlines,
    extract_fenced_block,
    parse_last_object,
    parse_variant_array,
    unwrap_envelope,
)
from hint_bot.domain.errors import DecodeError
from hint_bot.domain.models import GeneratedContent, OutputShape


def _variants(n):
    return [{"linkedin": f"LinkedIn post {i}\n\nSecond paragraph.", "x": f"Tweet {i}"} for i in range(1, n + 1)]


def _envelope(result: str) -> str:
    return json.dumps({"type": "result", "is_error": False, "result": result})


class TestUnwrapEnvelope:
    def test_result_field_replaces_text(self):
        assert unwrap_envelope(_envelope("hello")) == "hello"

    def test_not_json_is_kept(self):
        assert unwrap_envelope("plain words") == "plain words"

    def test_json_without_result_is_kept(self):
        raw = '{"linkedin": "a", "x": "b"}'
        assert unwrap_envelope(raw) == raw


class TestFencedBlock:
    def test_with_language_tag(self):
        assert extract_fenced_block('intro\n```json\n{"a": 1}\n```\nbye') == '{"a": 1}'

    def test_without_language_tag(self):
        assert extract_fenced_block('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_absent(self):
        assert extract_fenced_block('{"a": 1}') is None


class TestEscapeStringNewlines:
    def test_newline_inside_string_escaped(self):
        text = '{\n"linkedin": "line one\nline two"\n}'
        escaped = escape_string_newlines(text)
        assert json.loads(escaped) == {"linkedin": "line one\nline two"}

    def test_structural_newlines_untouched(self):
        text = '{\n  "a": "b"\n}'
        assert escape_string_newlines(text) == text

    def test_escaped_quote_does_not_end_string(self):
        text = '{"a": "say \\"hi\\"\nthere"}'
        assert json.loads(escape_string_newlines(text)) == {"a": 'say "hi"\nthere'}


class TestStrategies:
    def test_array_requires_exact_count(self):
        text = json.dumps(_variants(2))
        assert parse_variant_array(text, 3) is None
        assert len(parse_variant_array(text, 2)) == 2

    def test_array_rejects_item_missing_field(self):
        items = _variants(2)
        del items[1]["x"]
        assert parse_variant_array(json.dumps(items), 2) is None

    def test_array_skipped_for_single_variant(self):
        assert parse_variant_array(json.dumps(_variants(1)), 1) is None

    def test_array_skips_bracketed_prose(self):
        text = "See [1] and [2, 3]:\n" + json.dumps(_variants(3))
        assert len(parse_variant_array(text, 3)) == 3

    def test_array_skips_list_with_wrong_count(self):
        text = json.dumps(_variants(2)) + "\nRevised:\n" + json.dumps(_variants(3))
        assert len(parse_variant_array(text, 3)) == 3

    def test_last_object_wins(self):
        text = 'Draft: {"linkedin": "old", "x": "old"} Final: {"linkedin": "new", "x": "new"}'
        assert parse_last_object(text, 1) == [GeneratedContent("new", "new")]

    def test_strategies_never_raise(self):
        for text in ["", "{", "[", "{{{]]]", "null", '{"linkedin": }']:
            assert parse_variant_array(text, 2) is None
            assert parse_last_object(text, 1) is None


class TestDecodeContent:
    @pytest.mark.parametrize("count", [1, 2, 3])
    def test_returns_requested_cardinality(self, count):
        items = _variants(count)
        body = json.dumps(items if count > 1 else items[0], indent=2)
        raw = _envelope(f"Here you go:\n```json\n{body}\n```")
        result = decode_content(raw, count)
        assert len(result) == count
        for item in result:
            assert item.linkedin and item.x

    def test_round_trip_through_fenced_envelope(self):
        expected = GeneratedContent(linkedin="Edge computing matters.\n\nHere is why.", x="Edge > cloud?")
        inner = json.dumps({"linkedin": expected.linkedin, "x": expected.x})
        raw = _envelope(f"```json\n{inner}\n```")
        assert decode_content(raw) == [expected]

    def test_literal_newlines_inside_strings(self):
        """Literal newlines in string values (after unwrapping) are re-escaped."""
        inner = '{"linkedin": "para one\n\npara two", "x": "short"}'
        raw = _envelope(f"```json\n{inner}\n```")
        assert decode_content(raw) == [GeneratedContent("para one\n\npara two", "short")]

    def test_trailing_prose_ignored(self):
        raw = '{"linkedin": "a", "x": "b"}\n\nLet me know if you want changes {or not}.'
        assert decode_content(raw) == [GeneratedContent("a", "b")]

    def test_unfenced_enveloped_object(self):
        raw = _envelope('{"linkedin": "a", "x": "b"}')
        assert decode_content(raw) == [GeneratedContent("a", "b")]

    def test_footnote_before_variant_array(self):
        raw = _envelope("Notes [1]:\n" + json.dumps(_variants(3)))
        result = decode_content(raw, 3)
        assert [item.x for item in result] == ["Tweet 1", "Tweet 2", "Tweet 3"]

    def test_wrong_array_count_falls_back_to_single_object(self):
        raw = json.dumps(_variants(2))
        result = decode_content(raw, 3)
        assert result == [GeneratedContent("LinkedIn post 2\n\nSecond paragraph.", "Tweet 2")]

    @pytest.mark.parametrize("payload", [
        {"linkedin": "only linkedin"},
        {"x": "only x"},
        {"linkedin": "", "x": "empty linkedin"},
        {"linkedin": "a", "x": None},
    ])
    def test_missing_field_is_hard_failure(self, payload):
        with pytest.raises(DecodeError):
            decode_content(_envelope(f"```json\n{json.dumps(payload)}\n```"))

    def test_error_carries_bounded_excerpt(self):
        raw = "no json here " * 1000
        with pytest.raises(DecodeError) as exc_info:
            decode_content(raw)
        assert len(exc_info.value.raw_excerpt) < 600
        assert len(str(exc_info.value)) < 700


class TestDecodeText:
    def test_unwraps_and_strips(self):
        assert decode_text(_envelope("  Sure, here's my answer.\n")) == "Sure, here's my answer."

    def test_json_in_plain_mode_is_verbatim(self):
        raw = _envelope('{"linkedin": "a", "x": "b"}')
        assert decode_output(raw, shape=OutputShape.PLAIN_TEXT) == '{"linkedin": "a", "x": "b"}'

    def test_empty_is_error(self):
        with pytest.raises(DecodeError):
            decode_text(_envelope("   "))
