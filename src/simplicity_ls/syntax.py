"""Program model produced by the compiler frontend.

Positions here are compiler coordinates: 1-based lines and columns, spans
inclusive on both ends. Editor coordinates never appear in this module;
conversions live in :mod:`simplicity_ls.spans`.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Tuple, Union

# Line breaks as editors count them. The tokenizer and the document line
# model both split on this.
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, order=True)
class SourcePosition:
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


@dataclass(frozen=True)
class Span:
    start: SourcePosition
    end: SourcePosition

    @classmethod
    def point(cls, line: int, col: int) -> "Span":
        pos = SourcePosition(line, col)
        return cls(pos, pos)

    def contains(self, other: "Span") -> bool:
        return self.start <= other.start and self.end >= other.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


class FrontendError(Exception):
    """Positioned error raised by the parser or the analyzer."""

    def __init__(self, message: str, span: Span):
        super().__init__(message)
        self.message = message
        self.span = span
        self.source: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def excerpt(self) -> str:
        """Return the offending source line with the span underlined."""
        if self.source is None:
            return ""
        lines = LINE_BREAK_RE.split(self.source)
        index = self.span.start.line - 1
        if not 0 <= index < len(lines):
            return ""
        line = lines[index]
        width = 1
        if self.span.end.line == self.span.start.line:
            width = max(self.span.end.col - self.span.start.col + 1, 1)
        marker = " " * (self.span.start.col - 1) + "^" * width
        return f"  {line}\n  {marker}"


class ParseError(FrontendError):
    pass


class AnalysisError(FrontendError):
    pass


class CallKind(enum.Enum):
    JET = "jet"
    BUILTIN = "builtin"
    TYPE_CAST = "type_cast"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Param:
    name: str
    ty: str

    def __str__(self) -> str:
        return f"{self.name}: {self.ty}"


# Expression nodes. Every node carries its own span; children are exposed
# through ``children()`` so traversal stays independent of node layout.


@dataclass(frozen=True)
class Literal:
    value: str
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return ()


@dataclass(frozen=True)
class Variable:
    name: str
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return ()


@dataclass(frozen=True)
class Call:
    kind: CallKind
    name: str
    args: Tuple["Expression", ...]
    span: Span
    generics: Tuple[str, ...] = ()

    def children(self) -> Tuple["Expression", ...]:
        return self.args

    @property
    def qualified_name(self) -> str:
        if self.kind is CallKind.JET:
            return f"jet::{self.name}"
        return self.name


@dataclass(frozen=True)
class TupleExpr:
    elements: Tuple["Expression", ...]
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return self.elements


@dataclass(frozen=True)
class ArrayExpr:
    elements: Tuple["Expression", ...]
    span: Span
    is_list: bool = False

    def children(self) -> Tuple["Expression", ...]:
        return self.elements


@dataclass(frozen=True)
class Wrapped:
    """``Left(e)``, ``Right(e)`` and ``Some(e)``."""

    constructor: str
    inner: "Expression"
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return (self.inner,)


@dataclass(frozen=True)
class Pattern:
    text: str
    names: Tuple[str, ...]
    span: Span


@dataclass(frozen=True)
class Let:
    pattern: Pattern
    ty: Optional[str]
    value: "Expression"
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return (self.value,)


@dataclass(frozen=True)
class Block:
    statements: Tuple["Expression", ...]
    result: Optional["Expression"]
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        if self.result is None:
            return self.statements
        return self.statements + (self.result,)


@dataclass(frozen=True)
class MatchArm:
    constructor: str
    pattern: Optional[Pattern]
    ty: Optional[str]
    body: "Expression"
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return (self.body,)


@dataclass(frozen=True)
class Match:
    scrutinee: "Expression"
    arms: Tuple[MatchArm, ...]
    span: Span

    def children(self) -> Tuple["Expression", ...]:
        return (self.scrutinee,) + self.arms


Expression = Union[Literal, Variable, Call, TupleExpr, ArrayExpr, Wrapped, Let, Block, MatchArm, Match]


def pre_order(root: Expression) -> Iterator[Expression]:
    """Yield ``root`` and its descendants, parents before children.

    Nodes are yielded as-is; the tree is never copied or modified.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children()))


@dataclass(frozen=True)
class Function:
    name: str
    params: Tuple[Param, ...]
    ret: Optional[str]
    body: Block
    span: Span

    def signature(self) -> str:
        params = ", ".join(str(param) for param in self.params)
        return f"fn {self.name}({params}) -> {self.ret or '()'}"


@dataclass(frozen=True)
class TypeAlias:
    name: str
    ty: str
    span: Span


@dataclass(frozen=True)
class ModuleItem:
    name: str
    span: Span


Item = Union[Function, TypeAlias, ModuleItem]


@dataclass(frozen=True)
class Program:
    items: Tuple[Item, ...] = field(default_factory=tuple)

    @property
    def functions(self) -> Sequence[Function]:
        return [item for item in self.items if isinstance(item, Function)]
