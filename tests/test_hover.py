import pytest
from lsprotocol import types

from simplicity_ls.documents import Document
from simplicity_ls.errors import InternalError
from simplicity_ls.hover import hover_for_call, hover_markdown
from simplicity_ls.parser import parse
from simplicity_ls.resolver import iter_calls
from simplicity_ls.syntax import Call, CallKind, Span


def _document(source: str) -> Document:
    return Document.build("file:///hover.simf", source, parse(source).functions)


def _calls(document: Document, function: str) -> dict:
    func = next(func for func in document.functions if func.name == function)
    return {call.name: call for call in iter_calls(func)}


def test_custom_function_hover(sample_source):
    document = _document(sample_source)
    call = _calls(document, "main")["add"]
    hover = hover_for_call(call, document)
    assert hover is not None
    assert hover.contents.kind == types.MarkupKind.Markdown
    assert hover.contents.value == (
        "```simplicityhl\nfn add(a: u32, b: u32) -> u32\n```\n---\nAdds two numbers. Returns the sum without carry."
    )
    line = sample_source.split("\n")[8]
    assert hover.range.start == types.Position(line=8, character=line.index("add"))
    assert hover.range.end == types.Position(line=8, character=line.rindex(")", 0, line.rindex(";")))


def test_custom_function_without_docs_has_no_separator():
    document = _document("fn helper() -> u8 { 1 }\nfn main() {\n    let x: u8 = helper();\n}\n")
    call = _calls(document, "main")["helper"]
    assert hover_markdown(call, document) == "```simplicityhl\nfn helper() -> u8\n```"


def test_jet_hover(sample_source):
    document = _document(sample_source)
    value = hover_markdown(_calls(document, "main")["max_32"], document)
    assert value.startswith("```simplicityhl\nfn jet::max_32(u32, u32) -> u32\n```")
    assert "\n---\nReturn the larger of two integers." in value


def test_builtin_hover(sample_source):
    document = _document(sample_source)
    value = hover_markdown(_calls(document, "main")["assert!"], document)
    assert value == "```simplicityhl\nfn assert!(bool) -> ()\n```\n---\nFails program if argument is `false`."


def test_generic_builtin_hover_uses_display_name():
    document = _document("fn main() {\n    let a: u32 = unwrap_left::<u32>(witness::E);\n}\n")
    value = hover_markdown(_calls(document, "main")["unwrap_left"], document)
    assert value.startswith("```simplicityhl\nfn unwrap_left::<T>(Either<T, U>) -> T\n```")


def test_type_cast_has_no_hover():
    document = _document("fn main() {\n    let a: u16 = <(u8, u8)>::into((1, 2));\n}\n")
    call = _calls(document, "main")["into"]
    assert call.kind is CallKind.TYPE_CAST
    assert hover_for_call(call, document) is None


def test_unknown_names_have_no_hover():
    document = _document("fn main() {\n    ghost(jet::nope())\n}\n")
    calls = _calls(document, "main")
    assert hover_markdown(calls["ghost"], document) is None
    assert hover_markdown(calls["nope"], document) is None


def test_unhandled_call_kind_is_internal_error():
    document = _document("fn main() {}")
    call = Call("other", "x", (), Span.point(1, 1))
    with pytest.raises(InternalError):
        hover_markdown(call, document)
