from __future__ import annotations

import logging
from typing import Dict, List, Set

from .intrinsics import HIGHER_ORDER_BUILTINS, builtin_template, module_names
from .jets import get_jet
from .syntax import (
    AnalysisError,
    Block,
    Call,
    CallKind,
    Expression,
    Function,
    FrontendError,
    Let,
    Match,
    MatchArm,
    Program,
    Span,
    Variable,
)

log = logging.getLogger(__name__)


def analyze(program: Program, text: str) -> None:
    """Check name resolution and call arity of a parsed program.

    Raises :class:`AnalysisError` for the first problem found. The source
    text is attached to the error for rendering.
    """
    try:
        _analyze(program)
    except FrontendError as exc:
        exc.source = text
        raise


def _analyze(program: Program) -> None:
    functions: Dict[str, Function] = {}
    for func in program.functions:
        if func.name in functions:
            raise AnalysisError(f"Function `{func.name}` was defined multiple times", func.span)
        functions[func.name] = func
    if "main" not in functions:
        raise AnalysisError("Program must contain a `main` function", Span.point(1, 1))
    for func in program.functions:
        log.debug("Analyzing function %s", func.name)
        _ScopeChecker(functions).check_function(func)


class _ScopeChecker:
    def __init__(self, functions: Dict[str, Function]):
        self._functions = functions
        self._scopes: List[Set[str]] = []
        self._modules = set(module_names())

    def check_function(self, func: Function) -> None:
        self._scopes = [{param.name for param in func.params}]
        self.visit(func.body)

    def visit(self, node: Expression) -> None:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        method(node)

    def generic_visit(self, node: Expression) -> None:
        for child in node.children():
            self.visit(child)

    def visit_Block(self, node: Block) -> None:
        self._scopes.append(set())
        try:
            self.generic_visit(node)
        finally:
            self._scopes.pop()

    def visit_Let(self, node: Let) -> None:
        self.visit(node.value)
        self._scopes[-1].update(node.pattern.names)

    def visit_Match(self, node: Match) -> None:
        self.visit(node.scrutinee)
        for arm in node.arms:
            self.visit(arm)

    def visit_MatchArm(self, node: MatchArm) -> None:
        self._scopes.append(set(node.pattern.names) if node.pattern else set())
        try:
            self.visit(node.body)
        finally:
            self._scopes.pop()

    def visit_Variable(self, node: Variable) -> None:
        if "::" in node.name:
            module = node.name.split("::", 1)[0]
            if module not in self._modules:
                raise AnalysisError(f"Unknown module `{module}`", node.span)
            return
        if not any(node.name in scope for scope in self._scopes):
            raise AnalysisError(f"Variable `{node.name}` is not defined", node.span)

    def visit_Call(self, node: Call) -> None:
        if node.kind is CallKind.CUSTOM:
            func = self._functions.get(node.name)
            if func is None:
                raise AnalysisError(f"Function `{node.name}` is not defined", node.span)
            self._check_arity(node, len(func.params))
        elif node.kind is CallKind.JET:
            jet = get_jet(node.name)
            if jet is None:
                raise AnalysisError(f"Unknown jet `{node.name}`", node.span)
            self._check_arity(node, len(jet.source))
        elif node.kind is CallKind.BUILTIN:
            template = builtin_template(node.name)
            if template is None:
                raise AnalysisError(f"Unknown builtin `{node.name}`", node.span)
            self._check_arity(node, len(template.args))
            if node.name in HIGHER_ORDER_BUILTINS:
                target = node.generics[0] if node.generics else ""
                if target not in self._functions:
                    raise AnalysisError(f"Function `{target}` is not defined", node.span)
        elif node.kind is CallKind.TYPE_CAST:
            self._check_arity(node, 1)
        self.generic_visit(node)

    def _check_arity(self, node: Call, expected: int) -> None:
        if len(node.args) != expected:
            raise AnalysisError(
                f"`{node.qualified_name}` expects {expected} arguments, found {len(node.args)}",
                node.span,
            )
