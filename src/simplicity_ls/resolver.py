from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence

from .errors import CallNotFound, FunctionNotFound
from .syntax import Call, CallKind, Function, Span, pre_order

log = logging.getLogger(__name__)


def find_enclosing_function(functions: Sequence[Function], target: Span) -> Optional[Function]:
    for func in functions:
        if func.span.contains(target):
            return func
    return None


def iter_calls(func: Function) -> Iterator[Call]:
    """Yield every call in ``func``'s body in pre-order."""
    for node in pre_order(func.body):
        if isinstance(node, Call):
            yield node


def locate_call(functions: Sequence[Function], target: Span) -> Call:
    """Return the innermost call whose span contains ``target``.

    In pre-order an outer call is always visited before the calls nested in
    its arguments, so the last containing call is the most specific one.
    Sibling calls that both contain a zero-width target resolve to the one
    that appears last in the source.
    """
    func = find_enclosing_function(functions, target)
    if func is None:
        raise FunctionNotFound(f"no function contains {target}")

    found: Optional[Call] = None
    for call in iter_calls(func):
        if call.span.contains(target):
            found = call
    if found is None:
        raise CallNotFound(f"no call in `{func.name}` contains {target}")
    return found


def find_enclosing_call(functions: Sequence[Function], target: Span) -> Optional[Call]:
    try:
        return locate_call(functions, target)
    except (FunctionNotFound, CallNotFound) as exc:
        log.debug("No call resolved: %s", exc.description)
        return None


def find_function(functions: Sequence[Function], name: str) -> Optional[Function]:
    """Return the last declaration named ``name``, matching doc lookup."""
    found = None
    for func in functions:
        if func.name == name:
            found = func
    return found


def resolve_definition(call: Call, functions: Sequence[Function]) -> Optional[Span]:
    # Jets, builtins and casts are intrinsics with no source declaration.
    if call.kind is not CallKind.CUSTOM:
        return None
    func = find_function(functions, call.name)
    return func.span if func is not None else None
