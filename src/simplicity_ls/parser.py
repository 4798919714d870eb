from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, NoReturn, Optional, Tuple

from .syntax import (
    LINE_BREAK_RE,
    ArrayExpr,
    Block,
    Call,
    CallKind,
    Expression,
    Function,
    Item,
    Let,
    Literal,
    Match,
    MatchArm,
    ModuleItem,
    Param,
    ParseError,
    Pattern,
    Program,
    SourcePosition,
    Span,
    TupleExpr,
    TypeAlias,
    Variable,
    Wrapped,
)

TOKEN_RE = re.compile(
    r"""
    (?P<space>[ \t\f]+)
    |(?P<newline>\r\n|\r|\n)
    |(?P<line_comment>//[^\r\n]*)
    |(?P<block_comment>/\*[\s\S]*?\*/)
    |(?P<number>0x[0-9A-Fa-f_]+|0b[01_]+|[0-9][0-9_]*)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<punct>->|=>|::|[(){}\[\]<>,;:=!])
    """,
    re.VERBOSE,
)

MACRO_BUILTINS = {"assert", "panic", "dbg"}
GENERIC_BUILTINS = {"unwrap_left", "unwrap_right", "is_none", "fold", "array_fold", "for_while"}
WRAPPERS = {"Left", "Right", "Some"}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start: SourcePosition
    end: SourcePosition

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)


def tokenize(text: str) -> List[Token]:
    tokens: list[Token] = []
    line, line_start, offset = 1, 0, 0
    while offset < len(text):
        match = TOKEN_RE.match(text, offset)
        if match is None:
            pos = SourcePosition(line, offset - line_start + 1)
            raise ParseError(f"Unexpected character `{text[offset]}`", Span(pos, pos))
        kind = match.lastgroup or ""
        value = match.group(0)
        if kind in ("number", "ident", "punct"):
            start = SourcePosition(line, offset - line_start + 1)
            end = SourcePosition(line, offset - line_start + len(value))
            tokens.append(Token(kind, value, start, end))
        breaks = list(LINE_BREAK_RE.finditer(value))
        if breaks:
            line += len(breaks)
            line_start = match.start() + breaks[-1].end()
        offset = match.end()
    eof = SourcePosition(line, max(offset - line_start, 0) + 1)
    tokens.append(Token("eof", "", eof, eof))
    return tokens


def parse(text: str) -> Program:
    """Parse SimplicityHL source into a :class:`Program`.

    Raises :class:`ParseError` with the span of the offending token.
    """
    try:
        return _Parser(tokenize(text)).parse_program()
    except ParseError as exc:
        exc.source = text
        raise


class _Parser:
    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._index = 0

    # token helpers

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._index + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind != "eof":
            self._index += 1
        return token

    def _at(self, text: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token.kind in ("punct", "ident") and token.text == text

    def _expect(self, text: str) -> Token:
        if not self._at(text):
            self._fail(f"Expected `{text}`")
        return self._advance()

    def _expect_kind(self, kind: str, what: str) -> Token:
        if self._peek().kind != kind:
            self._fail(f"Expected {what}")
        return self._advance()

    def _fail(self, message: str) -> NoReturn:
        token = self._peek()
        found = "end of file" if token.kind == "eof" else f"`{token.text}`"
        raise ParseError(f"{message}, found {found}", token.span)

    # items

    def parse_program(self) -> Program:
        items: list[Item] = []
        while self._peek().kind != "eof":
            if self._at("fn"):
                items.append(self._parse_function())
            elif self._at("type"):
                items.append(self._parse_type_alias())
            elif self._at("mod"):
                items.append(self._parse_module())
            else:
                self._fail("Expected `fn`, `type` or `mod`")
        return Program(tuple(items))

    def _parse_function(self) -> Function:
        start = self._expect("fn")
        name = self._expect_kind("ident", "function name").text
        self._expect("(")
        params: list[Param] = []
        while not self._at(")"):
            param_name = self._expect_kind("ident", "parameter name").text
            self._expect(":")
            params.append(Param(param_name, self._parse_type()))
            if not self._at(")"):
                self._expect(",")
        self._expect(")")
        ret = None
        if self._at("->"):
            self._advance()
            ret = self._parse_type()
        body = self._parse_block()
        return Function(name, tuple(params), ret, body, Span(start.start, body.span.end))

    def _parse_type_alias(self) -> TypeAlias:
        start = self._expect("type")
        name = self._expect_kind("ident", "type name").text
        self._expect("=")
        ty = self._parse_type()
        end = self._expect(";")
        return TypeAlias(name, ty, Span(start.start, end.end))

    def _parse_module(self) -> ModuleItem:
        start = self._expect("mod")
        name = self._expect_kind("ident", "module name").text
        self._expect("{")
        depth = 1
        while depth:
            token = self._advance()
            if token.kind == "eof":
                self._fail("Unclosed module body")
            if token.text == "{":
                depth += 1
            elif token.text == "}":
                depth -= 1
        end = self._tokens[self._index - 1]
        return ModuleItem(name, Span(start.start, end.end))

    # types

    def _parse_type(self) -> str:
        if self._at("("):
            self._advance()
            elements = self._comma_separated(")", self._parse_type)
            self._expect(")")
            return f"({', '.join(elements)})"
        if self._at("["):
            self._advance()
            element = self._parse_type()
            self._expect(";")
            size = self._expect_kind("number", "array size").text
            self._expect("]")
            return f"[{element}; {size}]"
        name = self._expect_kind("ident", "type").text
        if self._at("<"):
            self._advance()
            args = self._comma_separated(">", self._parse_type_arg)
            self._expect(">")
            return f"{name}<{', '.join(args)}>"
        return name

    def _parse_type_arg(self) -> str:
        if self._peek().kind == "number":
            return self._advance().text
        return self._parse_type()

    def _comma_separated(self, closer: str, parse_one) -> list:
        values = []
        while not self._at(closer):
            values.append(parse_one())
            if not self._at(closer):
                self._expect(",")
        return values

    # statements

    def _parse_block(self) -> Block:
        start = self._expect("{")
        statements: list[Expression] = []
        result: Optional[Expression] = None
        while not self._at("}"):
            if self._at("let"):
                statements.append(self._parse_let())
                continue
            expr = self._parse_expression()
            if self._at(";"):
                self._advance()
                statements.append(expr)
            elif self._at("}"):
                result = expr
            elif isinstance(expr, (Block, Match)):
                statements.append(expr)
            else:
                self._fail("Expected `;` or `}`")
        end = self._expect("}")
        return Block(tuple(statements), result, Span(start.start, end.end))

    def _parse_let(self) -> Let:
        start = self._expect("let")
        pattern = self._parse_pattern()
        ty = None
        if self._at(":"):
            self._advance()
            ty = self._parse_type()
        self._expect("=")
        value = self._parse_expression()
        end = self._expect(";")
        return Let(pattern, ty, value, Span(start.start, end.end))

    def _parse_pattern(self) -> Pattern:
        if self._at("(") or self._at("["):
            opener = self._advance()
            closer = ")" if opener.text == "(" else "]"
            parts = self._comma_separated(closer, self._parse_pattern)
            end = self._expect(closer)
            names = tuple(name for part in parts for name in part.names)
            text = f"{opener.text}{', '.join(part.text for part in parts)}{closer}"
            return Pattern(text, names, Span(opener.start, end.end))
        token = self._expect_kind("ident", "pattern")
        names = () if token.text == "_" else (token.text,)
        return Pattern(token.text, names, token.span)

    # expressions

    def _parse_expression(self) -> Expression:
        token = self._peek()
        if token.kind == "number":
            self._advance()
            return Literal(token.text, token.span)
        if token.kind == "punct":
            if token.text == "{":
                return self._parse_block()
            if token.text == "(":
                return self._parse_parenthesized()
            if token.text == "[":
                self._advance()
                elements = self._comma_separated("]", self._parse_expression)
                end = self._expect("]")
                return ArrayExpr(tuple(elements), Span(token.start, end.end))
            if token.text == "<":
                return self._parse_type_cast()
            self._fail("Expected expression")
        if token.kind != "ident":
            self._fail("Expected expression")

        name = token.text
        if name in ("true", "false", "None"):
            self._advance()
            return Literal(name, token.span)
        if name == "match":
            return self._parse_match()
        if name == "list" and self._at("!", 1):
            self._advance()
            self._advance()
            self._expect("[")
            elements = self._comma_separated("]", self._parse_expression)
            end = self._expect("]")
            return ArrayExpr(tuple(elements), Span(token.start, end.end), is_list=True)
        if name in WRAPPERS and self._at("(", 1):
            self._advance()
            self._advance()
            inner = self._parse_expression()
            end = self._expect(")")
            return Wrapped(name, inner, Span(token.start, end.end))
        if name in MACRO_BUILTINS and self._at("!", 1):
            self._advance()
            self._advance()
            return self._parse_call(token, CallKind.BUILTIN, f"{name}!")
        if name == "jet" and self._at("::", 1):
            self._advance()
            self._advance()
            jet_name = self._expect_kind("ident", "jet name").text
            return self._parse_call(token, CallKind.JET, jet_name)
        if self._at("::", 1):
            if self._at("<", 2):
                if name not in GENERIC_BUILTINS:
                    self._fail(f"`{name}` does not accept generic arguments")
                self._advance()
                self._advance()
                self._advance()
                generics = self._comma_separated(">", self._parse_type_arg)
                self._expect(">")
                return self._parse_call(token, CallKind.BUILTIN, name, tuple(generics))
            return self._parse_path(token)
        if self._at("(", 1):
            self._advance()
            kind = CallKind.BUILTIN if name == "unwrap" else CallKind.CUSTOM
            return self._parse_call(token, kind, name)
        self._advance()
        return Variable(name, token.span)

    def _parse_call(
        self,
        start: Token,
        kind: CallKind,
        name: str,
        generics: Tuple[str, ...] = (),
    ) -> Call:
        self._expect("(")
        args = self._comma_separated(")", self._parse_expression)
        end = self._expect(")")
        return Call(kind, name, tuple(args), Span(start.start, end.end), generics)

    def _parse_path(self, start: Token) -> Variable:
        parts = [self._advance().text]
        end = start
        while self._at("::"):
            self._advance()
            end = self._expect_kind("ident", "path segment")
            parts.append(end.text)
        return Variable("::".join(parts), Span(start.start, end.end))

    def _parse_parenthesized(self) -> Expression:
        start = self._expect("(")
        elements: list[Expression] = []
        trailing_comma = False
        while not self._at(")"):
            elements.append(self._parse_expression())
            trailing_comma = False
            if not self._at(")"):
                self._expect(",")
                trailing_comma = True
        end = self._expect(")")
        if not elements:
            return Literal("()", Span(start.start, end.end))
        if len(elements) == 1 and not trailing_comma:
            return elements[0]
        return TupleExpr(tuple(elements), Span(start.start, end.end))

    def _parse_type_cast(self) -> Call:
        start = self._expect("<")
        target = self._parse_type()
        self._expect(">")
        self._expect("::")
        self._expect("into")
        return self._parse_call(start, CallKind.TYPE_CAST, "into", (target,))

    def _parse_match(self) -> Match:
        start = self._expect("match")
        scrutinee = self._parse_expression()
        self._expect("{")
        arms: list[MatchArm] = []
        while not self._at("}"):
            arms.append(self._parse_arm())
            if self._at(","):
                self._advance()
        end = self._expect("}")
        return Match(scrutinee, tuple(arms), Span(start.start, end.end))

    def _parse_arm(self) -> MatchArm:
        start = self._peek()
        constructor = self._expect_kind("ident", "match arm").text
        pattern = None
        ty = None
        if constructor in WRAPPERS:
            self._expect("(")
            pattern = self._parse_pattern()
            if self._at(":"):
                self._advance()
                ty = self._parse_type()
            self._expect(")")
        elif constructor not in ("None", "true", "false"):
            raise ParseError(f"Unknown match arm `{constructor}`", start.span)
        self._expect("=>")
        body = self._parse_expression()
        return MatchArm(constructor, pattern, ty, body, Span(start.start, body.span.end))
