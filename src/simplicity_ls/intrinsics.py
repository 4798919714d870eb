"""Completion templates for builtin functions and namespace modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class FunctionTemplate:
    """Renders the label, signature and snippet of a callable."""

    display_name: str
    snippet_base: str
    generics: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()
    return_type: str = ""
    description: str = ""

    @classmethod
    def simple(cls, name: str, args: Sequence[str], return_type: str, description: str = "") -> "FunctionTemplate":
        return cls(name, name, (), tuple(args), return_type, description)

    def snippet_name(self) -> str:
        placeholders = ", ".join(f"${{{index}:{item}}}" for index, item in enumerate(self.generics, start=1))
        return f"{self.snippet_base}::<{placeholders}>"

    def insert_text(self) -> str:
        base = self.snippet_name() if self.generics else self.snippet_base
        offset = len(self.generics) + 1
        placeholders = ", ".join(f"${{{index}:{item}}}" for index, item in enumerate(self.args, start=offset))
        return f"{base}({placeholders})"

    def signature(self) -> str:
        return f"fn({', '.join(self.args)}) -> {self.return_type or '()'}"

    def declaration(self) -> str:
        return f"fn {self.display_name}({', '.join(self.args)}) -> {self.return_type or '()'}"


@dataclass(frozen=True)
class ModuleTemplate:
    name: str
    detail: str


BUILTIN_TEMPLATES: Tuple[FunctionTemplate, ...] = (
    FunctionTemplate.simple("assert!", ["bool"], "", "Fails program if argument is `false`."),
    FunctionTemplate.simple("dbg!", ["type"], "type", "Print value and return it."),
    FunctionTemplate.simple("panic!", [], "", "Fails program."),
    FunctionTemplate.simple("unwrap", ["Option<T>"], "T", "Unwrap the value of an Option. Fails program on `None`."),
    FunctionTemplate("unwrap_left::<T>", "unwrap_left", ("T",), ("Either<T, U>",), "T", "Unwrap left side of Either."),
    FunctionTemplate("unwrap_right::<U>", "unwrap_right", ("U",), ("Either<T, U>",), "U", "Unwrap right side of Either."),
    FunctionTemplate("is_none::<T>", "is_none", ("T",), ("Option<T>",), "bool", "Check if Option is None."),
    FunctionTemplate("fold::<F, B>", "fold", ("F", "B"), ("iter", "init"), "B", "Fold operation over a list."),
    FunctionTemplate(
        "array_fold::<F, N>",
        "array_fold",
        ("F", "N"),
        ("array", "init"),
        "B",
        "Fold operation over an array of size N.",
    ),
    FunctionTemplate("for_while::<F>", "for_while", ("F",), ("condition", "body"), "()", "While loop with a function."),
)

# Builtins whose first generic argument names a user function.
HIGHER_ORDER_BUILTINS = frozenset({"fold", "array_fold", "for_while"})

MODULE_TEMPLATES: Tuple[ModuleTemplate, ...] = (
    ModuleTemplate("jet", "Module which contains jets"),
    ModuleTemplate("param", "Module which contains parameters"),
    ModuleTemplate("witness", "Module which contains witnesses"),
)

_BUILTIN_INDEX: Dict[str, FunctionTemplate] = {template.snippet_base: template for template in BUILTIN_TEMPLATES}


def builtin_template(name: str) -> Optional[FunctionTemplate]:
    return _BUILTIN_INDEX.get(name)


def module_names() -> List[str]:
    return [module.name for module in MODULE_TEMPLATES]
