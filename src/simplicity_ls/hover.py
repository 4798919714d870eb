from __future__ import annotations

import logging
from typing import Optional

from lsprotocol import types

from .documents import Document
from .errors import InternalError
from .intrinsics import builtin_template
from .jets import get_jet
from .resolver import find_function
from .spans import span_to_utf16_range
from .syntax import Call, CallKind

log = logging.getLogger(__name__)

LANGUAGE_ID = "simplicityhl"


def hover_for_call(call: Call, document: Document) -> Optional[types.Hover]:
    """Build hover markdown for ``call``.

    Raises :class:`~simplicity_ls.errors.ConversionFailed` when the call
    span cannot be expressed as an editor range.
    """
    contents = hover_markdown(call, document)
    if contents is None:
        return None
    return types.Hover(
        contents=types.MarkupContent(kind=types.MarkupKind.Markdown, value=contents),
        range=span_to_utf16_range(call.span, document.lines),
    )


def hover_markdown(call: Call, document: Document) -> Optional[str]:
    if call.kind is CallKind.JET:
        jet = get_jet(call.name)
        if jet is None:
            return None
        return _format(jet.declaration(), jet.doc)
    if call.kind is CallKind.CUSTOM:
        func = find_function(document.functions, call.name)
        if func is None:
            return None
        return _format(func.signature(), document.doc_for(func.name))
    if call.kind is CallKind.BUILTIN:
        template = builtin_template(call.name)
        if template is None:
            return None
        return _format(template.declaration(), template.description)
    if call.kind is CallKind.TYPE_CAST:
        log.debug("Hover for type cast to %s is not representable", ", ".join(call.generics))
        return None
    raise InternalError(f"unhandled call kind {call.kind}")


def _format(signature: str, doc: str) -> str:
    contents = f"```{LANGUAGE_ID}\n{signature}\n```"
    if doc:
        contents += f"\n---\n{doc}"
    return contents
