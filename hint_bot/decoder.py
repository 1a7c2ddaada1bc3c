"""Decode Claude CLI output into GeneratedContent or plain text.

The CLI may wrap its answer in a ``{"result": ...}`` envelope, the answer may
be fenced in a markdown code block, and the model sometimes adds prose around
the JSON. Decoding runs an ordered list of strategies over a list of
candidate texts and stops at the first strategy that returns a value. Every
strategy is total: it returns ``None`` rather than raising.
"""

import json
import re
from typing import Callable, Iterator, List, Optional, Union

from hint_bot.domain.errors import DecodeError
from hint_bot.domain.models import GeneratedContent, OutputShape
from hint_bot.log import log


REQUIRED_FIELDS = ("linkedin", "x")

_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\r?\n?(.*?)```", re.DOTALL)
_STRING_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}

_decoder = json.JSONDecoder()

Strategy = Callable[[str, int], Optional[List[GeneratedContent]]]


def _log(msg: str, level: str = "info", **fields):
    log("Decoder", msg, level, **fields)


# ---------------------------------------------------------------------------
# Pre-processing
# ---------------------------------------------------------------------------

def unwrap_envelope(raw: str) -> str:
    """Return the ``result`` field of a JSON envelope, or ``raw`` unchanged."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return raw
    if isinstance(data, dict) and "result" in data:
        result = data["result"]
        return result if isinstance(result, str) else json.dumps(result)
    return raw


def extract_fenced_block(text: str) -> Optional[str]:
    """Inner contents of the first ``` fenced block, with or without a language tag."""
    m = _FENCE_RE.search(text)
    if not m:
        return None
    return m.group(1).strip()


def escape_string_newlines(text: str) -> str:
    """Re-escape raw newlines/tabs that sit inside JSON string literals.

    Envelope unwrapping turns ``\\n`` escapes into real newlines, which are
    illegal inside a JSON string. Newlines between tokens are left alone.
    """
    out = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch in _STRING_ESCAPES:
                out.append(_STRING_ESCAPES[ch])
                continue
        elif ch == '"':
            in_string = True
        out.append(ch)
    return "".join(out)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _to_content(item) -> Optional[GeneratedContent]:
    if not isinstance(item, dict):
        return None
    values = [item.get(f) for f in REQUIRED_FIELDS]
    if not all(isinstance(v, str) and v for v in values):
        return None
    return GeneratedContent(linkedin=values[0], x=values[1])


def _iter_json_values(text: str, opener: str) -> Iterator[object]:
    """Yield top-level JSON values that start with ``opener``, left to right."""
    pos = text.find(opener)
    while pos != -1:
        try:
            value, end = _decoder.raw_decode(text, pos)
        except json.JSONDecodeError:
            pos = text.find(opener, pos + 1)
            continue
        yield value
        pos = text.find(opener, end)


def parse_variant_array(text: str, variant_count: int) -> Optional[List[GeneratedContent]]:
    """First JSON array in ``text`` with exactly ``variant_count`` valid items."""
    if variant_count <= 1:
        return None
    for value in _iter_json_values(text, "["):
        if not isinstance(value, list):
            continue
        contents = [_to_content(item) for item in value]
        if len(contents) != variant_count or not all(contents):
            continue
        return contents
    return None


def parse_last_object(text: str, variant_count: int) -> Optional[List[GeneratedContent]]:
    """Last top-level JSON object in ``text`` carrying both required fields."""
    found = None
    for value in _iter_json_values(text, "{"):
        content = _to_content(value)
        if content is not None:
            found = content
    return [found] if found else None


STRATEGIES: List[Strategy] = [parse_variant_array, parse_last_object]


def _candidates(working: str) -> List[str]:
    ordered = []
    fenced = extract_fenced_block(working)
    if fenced is not None:
        ordered.extend([escape_string_newlines(fenced), fenced])
    ordered.extend([working, escape_string_newlines(working)])
    unique = []
    for text in ordered:
        if text not in unique:
            unique.append(text)
    return unique


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode_output(
    raw: str,
    variant_count: int = 1,
    shape: OutputShape = OutputShape.JSON_CONTENT,
) -> Union[List[GeneratedContent], str]:
    """Decode raw CLI stdout. Raises DecodeError when nothing matches."""
    working = unwrap_envelope(raw)

    if shape == OutputShape.PLAIN_TEXT:
        text = working.strip()
        if not text:
            raise DecodeError("empty response", raw)
        return text

    for candidate in _candidates(working):
        for strategy in STRATEGIES:
            result = strategy(candidate, variant_count)
            if result:
                if len(result) != variant_count:
                    _log("Variant count mismatch, using fallback result", "warn",
                         requested=variant_count, got=len(result), strategy=strategy.__name__)
                return result

    raise DecodeError("no JSON with linkedin and x fields found", raw)


def decode_content(raw: str, variant_count: int = 1) -> List[GeneratedContent]:
    return decode_output(raw, variant_count, OutputShape.JSON_CONTENT)


def decode_text(raw: str) -> str:
    return decode_output(raw, shape=OutputShape.PLAIN_TEXT)
