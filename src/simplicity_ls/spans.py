"""Conversion between compiler spans and editor positions.

Compiler positions are 1-based and spans include their end column. Editor
positions are 0-based and bounded by the protocol's ``uinteger`` type.
Every conversion between the two goes through this module; nothing else
adds or subtracts one from a coordinate.
"""

from __future__ import annotations

from typing import Sequence

from lsprotocol import types

from .errors import ConversionFailed
from .syntax import SourcePosition, Span

# Largest value of the LSP ``uinteger`` type. Compiler coordinates share the
# bound so both directions stay a bijection over editor values 0..MAX-1.
UINTEGER_MAX = 2**31 - 1


def span_to_editor_range(span: Span) -> types.Range:
    return types.Range(
        start=_to_editor(span.start),
        end=_to_editor(span.end),
    )


def editor_position_to_span(position: types.Position) -> Span:
    """Build the zero-width span used for point containment queries."""
    point = _to_compiler(position)
    return Span(point, point)


def editor_range_to_span(rng: types.Range) -> Span:
    # Order is taken as given; ``rng.start`` becomes the span start.
    return Span(_to_compiler(rng.start), _to_compiler(rng.end))


def declaration_line(span: Span) -> int:
    """Return the 0-based line index where ``span`` starts."""
    return _editor_value(span.start.line, "line")


def _to_editor(position: SourcePosition) -> types.Position:
    return types.Position(
        line=_editor_value(position.line, "line"),
        character=_editor_value(position.col, "column"),
    )


def _to_compiler(position: types.Position) -> SourcePosition:
    return SourcePosition(
        line=_compiler_value(position.line, "line"),
        col=_compiler_value(position.character, "character"),
    )


def _editor_value(value: int, what: str) -> int:
    if value < 1:
        raise ConversionFailed(f"{what} underflow: compiler {what} must be at least 1, got {value}")
    if value > UINTEGER_MAX:
        raise ConversionFailed(f"{what} overflow: {value} does not fit an editor position")
    return value - 1


def _compiler_value(value: int, what: str) -> int:
    if value < 0:
        raise ConversionFailed(f"{what} underflow: editor {what} must not be negative, got {value}")
    if value >= UINTEGER_MAX:
        raise ConversionFailed(f"{what} overflow: {value} + 1 does not fit a source position")
    return value + 1


# Editors count columns in UTF-16 code units; the frontend counts code
# points. The two differ only after characters outside the BMP.


def span_to_utf16_range(span: Span, lines: Sequence[str]) -> types.Range:
    """Translate ``span`` and re-encode its columns as UTF-16 offsets."""
    rng = span_to_editor_range(span)
    return types.Range(
        start=_encode_utf16(rng.start, lines),
        end=_encode_utf16(rng.end, lines),
    )


def decode_utf16_position(position: types.Position, lines: Sequence[str]) -> types.Position:
    """Turn a UTF-16 editor position into a code point editor position."""
    if not 0 <= position.line < len(lines):
        return position
    line = lines[position.line]
    units = 0
    for index, char in enumerate(line):
        if units >= position.character:
            return types.Position(line=position.line, character=index)
        units += _utf16_width(char)
    return types.Position(line=position.line, character=len(line) + max(position.character - units, 0))


def _encode_utf16(position: types.Position, lines: Sequence[str]) -> types.Position:
    if not 0 <= position.line < len(lines):
        return position
    line = lines[position.line]
    prefix = line[: position.character]
    character = sum(_utf16_width(char) for char in prefix) + max(position.character - len(line), 0)
    if character >= UINTEGER_MAX:
        raise ConversionFailed(f"character overflow: {character} does not fit an editor position")
    return types.Position(line=position.line, character=character)


def _utf16_width(char: str) -> int:
    return 2 if ord(char) > 0xFFFF else 1
