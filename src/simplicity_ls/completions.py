from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence

from lsprotocol import types

from .config import CompletionSettings
from .intrinsics import BUILTIN_TEMPLATES, MODULE_TEMPLATES, FunctionTemplate, ModuleTemplate
from .jets import JET_NAMESPACE, Jet, all_jets
from .syntax import Function

log = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = "::"
JET_PREFIX = f"{JET_NAMESPACE}{NAMESPACE_SEPARATOR}"
# Anything that cannot be part of an identifier or a ``::`` path ends a segment.
SEGMENT_BREAK_RE = re.compile(r"[^A-Za-z0-9_:]")


class ContextKind(enum.Enum):
    NAMESPACED = "namespaced"
    GENERAL = "general"
    NONE = "none"


@dataclass(frozen=True)
class CompletionContext:
    kind: ContextKind
    namespace: Optional[str] = None


GENERAL = CompletionContext(ContextKind.GENERAL)
NO_COMPLETIONS = CompletionContext(ContextKind.NONE)


def classify(prefix: str) -> CompletionContext:
    """Decide which candidate set applies to the text before the cursor."""
    trimmed = prefix.rstrip()
    segment = SEGMENT_BREAK_RE.split(trimmed)[-1]
    if segment.startswith(JET_PREFIX) and not segment[len(JET_PREFIX):].startswith(":"):
        return CompletionContext(ContextKind.NAMESPACED, JET_NAMESPACE)
    if trimmed.endswith(":"):
        # Half-typed path such as ``witness:`` or ``jet:::``.
        return NO_COMPLETIONS
    return GENERAL


def function_template(func: Function, doc: str) -> FunctionTemplate:
    return FunctionTemplate.simple(
        func.name,
        [str(param) for param in func.params],
        func.ret or "()",
        doc,
    )


def jet_template(jet: Jet) -> FunctionTemplate:
    return FunctionTemplate.simple(jet.name, jet.source, jet.target, jet.doc)


def template_to_completion(template: FunctionTemplate) -> types.CompletionItem:
    return types.CompletionItem(
        label=template.display_name,
        kind=types.CompletionItemKind.Function,
        detail=template.signature(),
        documentation=types.MarkupContent(kind=types.MarkupKind.Markdown, value=template.description),
        insert_text=template.insert_text(),
        insert_text_format=types.InsertTextFormat.Snippet,
    )


def module_to_completion(module: ModuleTemplate) -> types.CompletionItem:
    return types.CompletionItem(
        label=module.name,
        kind=types.CompletionItemKind.Module,
        detail=module.detail,
        insert_text=module.name,
        insert_text_format=types.InsertTextFormat.PlainText,
    )


class CompletionProvider:
    """Holds the fixed candidate sets, built once per server."""

    def __init__(self, settings: Optional[CompletionSettings] = None):
        self._settings = settings or CompletionSettings()
        self._jets = [template_to_completion(jet_template(jet)) for jet in all_jets()]
        self._builtins = [template_to_completion(template) for template in BUILTIN_TEMPLATES]
        self._modules = [module_to_completion(module) for module in MODULE_TEMPLATES]

    @property
    def settings(self) -> CompletionSettings:
        return self._settings

    @settings.setter
    def settings(self, settings: CompletionSettings) -> None:
        self._settings = settings

    @property
    def jets(self) -> List[types.CompletionItem]:
        return list(self._jets)

    @property
    def builtins(self) -> List[types.CompletionItem]:
        return list(self._builtins)

    @property
    def modules(self) -> List[types.CompletionItem]:
        return list(self._modules)

    @staticmethod
    def function_completions(functions: Sequence[Function], docs: Mapping[str, str]) -> List[types.CompletionItem]:
        return [template_to_completion(function_template(func, docs.get(func.name, ""))) for func in functions]

    def completions_for_prefix(
        self,
        prefix: str,
        functions: Sequence[Function],
        docs: Mapping[str, str],
    ) -> List[types.CompletionItem]:
        context = classify(prefix)
        log.debug("Completion context %s for prefix %r", context.kind.value, prefix[-20:])
        if context.kind is ContextKind.NAMESPACED:
            return self.jets
        if context.kind is ContextKind.NONE:
            return []

        items = self.function_completions(functions, docs)
        if self._settings.builtins:
            items.extend(self._builtins)
        if self._settings.modules:
            items.extend(self._modules)
        return items
