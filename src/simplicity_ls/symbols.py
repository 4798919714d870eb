from __future__ import annotations

import logging
from typing import List

from lsprotocol import types

from .documents import Document
from .errors import ConversionFailed
from .spans import span_to_utf16_range

log = logging.getLogger(__name__)


def document_symbols(document: Document) -> List[types.DocumentSymbol]:
    symbols: list[types.DocumentSymbol] = []
    for func in document.functions:
        try:
            rng = span_to_utf16_range(func.span, document.lines)
        except ConversionFailed as exc:
            log.warning("Skipping symbol %s: %s", func.name, exc)
            continue
        symbols.append(
            types.DocumentSymbol(
                name=func.name,
                detail=func.signature(),
                kind=types.SymbolKind.Function,
                range=rng,
                selection_range=rng,
            )
        )
    return symbols
