import pytest

from simplicity_ls.parser import parse, tokenize
from simplicity_ls.syntax import (
    ArrayExpr,
    Call,
    CallKind,
    Function,
    Match,
    ModuleItem,
    ParseError,
    SourcePosition,
    TypeAlias,
    Variable,
    pre_order,
)


def _calls(func: Function) -> list[Call]:
    return [node for node in pre_order(func.body) if isinstance(node, Call)]


def test_parses_items_in_order(sample_source):
    source = "type Amount = u64;\nmod witness { const A: u32 = 1; }\n" + sample_source
    program = parse(source)
    kinds = [type(item) for item in program.items]
    assert kinds == [TypeAlias, ModuleItem, Function, Function]
    assert [func.name for func in program.functions] == ["add", "main"]


def test_function_signature_and_span(sample_source):
    add = parse(sample_source).functions[0]
    assert [str(param) for param in add.params] == ["a: u32", "b: u32"]
    assert add.ret == "u32"
    assert add.signature() == "fn add(a: u32, b: u32) -> u32"
    assert add.span.start == SourcePosition(3, 1)
    assert add.span.end == SourcePosition(6, 1)


def test_call_kinds_in_pre_order(sample_source):
    main = parse(sample_source).functions[1]
    calls = [(call.kind, call.name) for call in _calls(main)]
    assert calls == [
        (CallKind.CUSTOM, "add"),
        (CallKind.JET, "max_32"),
        (CallKind.BUILTIN, "assert!"),
        (CallKind.JET, "eq_32"),
    ]


def test_call_span_covers_name_through_closing_paren():
    source = "fn main() {\n    jet::verify(true)\n}\n"
    call = _calls(parse(source).functions[0])[0]
    line = source.split("\n")[1]
    assert call.span.start == SourcePosition(2, line.index("jet") + 1)
    assert call.span.end == SourcePosition(2, line.index(")") + 1)
    assert call.qualified_name == "jet::verify"


def test_generic_builtins_and_casts():
    source = """\
fn step(acc: u8, ctx: u8) -> u8 { acc }
fn main() {
    let a: u32 = unwrap_left::<u32>(e);
    let b: bool = is_none::<u8>(o);
    let c: u8 = fold::<step, 4>(list![1, 2], 0);
    let d: u16 = <(u8, u8)>::into((1, 2));
    let f: u8 = unwrap(o);
    panic!()
}
"""
    main = parse(source).functions[1]
    calls = {call.name: call for call in _calls(main)}
    assert calls["unwrap_left"].generics == ("u32",)
    assert calls["is_none"].kind is CallKind.BUILTIN
    assert calls["fold"].generics == ("step", "4")
    assert isinstance(calls["fold"].args[0], ArrayExpr)
    assert calls["fold"].args[0].is_list
    assert calls["into"].kind is CallKind.TYPE_CAST
    assert calls["into"].generics == ("(u8, u8)",)
    assert calls["unwrap"].kind is CallKind.BUILTIN
    assert calls["panic!"].args == ()


def test_match_arms_and_paths():
    source = """\
fn main() {
    match witness::CHOICE {
        Left(x: u32) => jet::verify(jet::is_zero_32(x)),
        Right(y: u16) => {
            jet::verify(jet::is_one_16(y))
        },
    }
}
"""
    main = parse(source).functions[0]
    match = next(node for node in pre_order(main.body) if isinstance(node, Match))
    assert isinstance(match.scrutinee, Variable)
    assert match.scrutinee.name == "witness::CHOICE"
    assert [arm.constructor for arm in match.arms] == ["Left", "Right"]
    assert match.arms[0].pattern.names == ("x",)
    assert match.arms[1].ty == "u16"


def test_comments_are_skipped():
    source = "/// doc\n/* block\ncomment */ fn main() { // trailing\n}\n"
    main = parse(source).functions[0]
    assert main.span.start == SourcePosition(3, 12)


def test_tokens_carry_inclusive_end_columns():
    tokens = tokenize("fn  add")
    assert tokens[1].start == SourcePosition(1, 5)
    assert tokens[1].end == SourcePosition(1, 7)
    assert tokens[-1].kind == "eof"


@pytest.mark.parametrize(
    ("source", "position", "fragment"),
    [
        ("fn main() {\n    let x = ;\n}\n", SourcePosition(2, 13), "Expected expression"),
        ("fn main( {}", SourcePosition(1, 10), "Expected parameter name"),
        ("fn main() {\n  jet::verify(true)\n", SourcePosition(3, 1), "end of file"),
        ("let x = 1;", SourcePosition(1, 1), "Expected `fn`"),
        ("fn main() { 1 - 2 }", SourcePosition(1, 15), "Unexpected character"),
    ],
)
def test_parse_errors_are_positioned(source, position, fragment):
    with pytest.raises(ParseError) as excinfo:
        parse(source)
    assert excinfo.value.span.start == position
    assert fragment in str(excinfo.value)
    assert excinfo.value.source == source


def test_error_excerpt_underlines_span():
    with pytest.raises(ParseError) as excinfo:
        parse("fn main() {\n    let x = ;\n}\n")
    assert excinfo.value.excerpt() == "      let x = ;\n              ^"


@pytest.mark.parametrize("newline", ["\n", "\r\n", "\r"])
def test_line_endings_agree_with_document_lines(newline):
    source = newline.join(["/// Doc", "// note", "fn main() {", "    jet::verify(true)", "}", ""])
    main = parse(source).functions[0]
    assert main.name == "main"
    assert main.span.start == SourcePosition(3, 1)
    call = next(node for node in pre_order(main.body) if isinstance(node, Call))
    assert call.span.start == SourcePosition(4, 5)


def test_block_comment_line_breaks_are_counted():
    source = "/* one\rtwo\r\nthree */ fn main() {}"
    assert parse(source).functions[0].span.start == SourcePosition(3, 10)


def test_error_excerpt_with_carriage_returns():
    source = "fn main() {\r    let x = ;\r}\r"
    with pytest.raises(ParseError) as excinfo:
        parse(source)
    assert excinfo.value.span.start == SourcePosition(2, 13)
    assert excinfo.value.excerpt() == "      let x = ;\n              ^"
