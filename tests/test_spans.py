import pytest
from lsprotocol import types

from simplicity_ls.errors import ConversionFailed
from simplicity_ls.spans import (
    UINTEGER_MAX,
    declaration_line,
    decode_utf16_position,
    editor_position_to_span,
    editor_range_to_span,
    span_to_editor_range,
    span_to_utf16_range,
)
from simplicity_ls.syntax import SourcePosition, Span


def _pos(line: int, character: int) -> types.Position:
    return types.Position(line=line, character=character)


def test_span_to_editor_range_subtracts_one():
    span = Span(SourcePosition(3, 5), SourcePosition(4, 1))
    rng = span_to_editor_range(span)
    assert rng.start == _pos(2, 4)
    assert rng.end == _pos(3, 0)


def test_editor_position_to_span_is_zero_width():
    span = editor_position_to_span(_pos(0, 7))
    assert span.start == span.end == SourcePosition(1, 8)


@pytest.mark.parametrize(
    ("line", "character"),
    [(0, 0), (0, 12), (41, 3), (UINTEGER_MAX - 1, UINTEGER_MAX - 1)],
)
def test_point_round_trip(line: int, character: int):
    position = _pos(line, character)
    rng = span_to_editor_range(editor_position_to_span(position))
    assert rng.start == position
    assert rng.end == position


def test_editor_range_to_span_keeps_given_order():
    rng = types.Range(start=_pos(5, 2), end=_pos(1, 0))
    span = editor_range_to_span(rng)
    assert span.start == SourcePosition(6, 3)
    assert span.end == SourcePosition(2, 1)


@pytest.mark.parametrize(
    "span",
    [
        Span(SourcePosition(0, 1), SourcePosition(1, 1)),
        Span(SourcePosition(1, 0), SourcePosition(1, 1)),
        Span(SourcePosition(1, 1), SourcePosition(UINTEGER_MAX + 1, 1)),
    ],
)
def test_span_conversion_fails_instead_of_wrapping(span: Span):
    with pytest.raises(ConversionFailed):
        span_to_editor_range(span)


def test_position_overflow_fails():
    with pytest.raises(ConversionFailed):
        editor_position_to_span(_pos(UINTEGER_MAX, 0))


def test_conversion_error_maps_to_invalid_params():
    with pytest.raises(ConversionFailed) as excinfo:
        editor_position_to_span(_pos(0, UINTEGER_MAX))
    error = excinfo.value.to_rpc_error()
    assert error.code == -32602
    assert str(excinfo.value).startswith("1: ")


def test_declaration_line_is_zero_based():
    assert declaration_line(Span.point(3, 1)) == 2


def test_span_contains_orders_by_line_then_column():
    outer = Span(SourcePosition(2, 10), SourcePosition(4, 1))
    assert outer.contains(Span.point(3, 1))
    assert outer.contains(Span.point(2, 10))
    assert not outer.contains(Span.point(2, 9))
    assert not outer.contains(Span.point(4, 2))


SMILE = "\U0001F642"


@pytest.mark.parametrize(
    ("line", "character", "column"),
    [
        ("abc", 2, 2),
        (f"/* {SMILE} */ x", 3, 3),
        (f"/* {SMILE} */ x", 5, 4),
        (f"/* {SMILE} */ x", 9, 8),
        ("ab", 6, 6),
    ],
)
def test_decode_utf16_position(line: str, character: int, column: int):
    decoded = decode_utf16_position(_pos(0, character), [line])
    assert decoded == _pos(0, column)


def test_decode_leaves_unknown_lines_alone():
    assert decode_utf16_position(_pos(3, 7), ["abc"]) == _pos(3, 7)


def test_span_to_utf16_range_counts_surrogate_pairs():
    lines = [f"/* {SMILE} */ add(1, 2)"]
    column = lines[0].index("add") + 1
    rng = span_to_utf16_range(Span.point(1, column), lines)
    assert rng.start == _pos(0, column)
    assert span_to_utf16_range(Span.point(1, 2), lines).start == _pos(0, 1)
