from __future__ import annotations

from typing import Protocol

from . import analyzer, parser
from .syntax import Program


class Frontend(Protocol):
    """Compiler frontend consumed by the language server.

    Both methods raise :class:`~simplicity_ls.syntax.FrontendError` with a
    source span on failure.
    """

    def parse(self, text: str) -> Program: ...

    def analyze(self, program: Program, text: str) -> None: ...


class SimplicityFrontend:
    """Frontend backed by the bundled SimplicityHL parser and analyzer."""

    def parse(self, text: str) -> Program:
        return parser.parse(text)

    def analyze(self, program: Program, text: str) -> None:
        analyzer.analyze(program, text)
