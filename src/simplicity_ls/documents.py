from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .docs import extract_docs
from .errors import DocumentNotFound, InternalError
from .frontend import Frontend
from .spans import declaration_line
from .syntax import LINE_BREAK_RE, FrontendError, Function

log = logging.getLogger(__name__)


def split_lines(text: str) -> Tuple[str, ...]:
    return tuple(LINE_BREAK_RE.split(text))


@dataclass(frozen=True)
class Document:
    """Snapshot of one open buffer.

    ``functions`` and ``function_docs`` always come from the same successful
    parse. Snapshots are never mutated; updates build a new instance.
    """

    uri: str
    text: str
    lines: Tuple[str, ...]
    functions: Tuple[Function, ...] = ()
    function_docs: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, uri: str, text: str, functions: Iterable[Function]) -> "Document":
        lines = split_lines(text)
        functions = tuple(functions)
        docs: Dict[str, str] = {}
        for func in functions:
            # Later declarations overwrite earlier ones with the same name.
            docs[func.name] = extract_docs(declaration_line(func.span), lines)
        return cls(uri, text, lines, functions, MappingProxyType(docs))

    def with_text(self, text: str) -> "Document":
        return replace(self, text=text, lines=split_lines(text))

    def line(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None

    def doc_for(self, name: str) -> str:
        return self.function_docs.get(name, "")


class DocumentStore:
    """Map of URI to the current :class:`Document` snapshot.

    Readers take a reference to the current snapshot without locking.
    Writers serialize on a lock and swap whole snapshots, so a reader sees
    either the previous or the next document and never a mix.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, Document] = {}
        self._write_lock = threading.Lock()

    def get(self, uri: str) -> Optional[Document]:
        return self._documents.get(uri)

    def require(self, uri: str) -> Document:
        document = self._documents.get(uri)
        if document is None:
            raise DocumentNotFound(uri)
        return document

    def replace(self, document: Document) -> None:
        with self._write_lock:
            self._documents[document.uri] = document

    def patch_text(self, uri: str, text: str) -> Optional[Document]:
        """Swap in new text while keeping the previous symbol data."""
        with self._write_lock:
            current = self._documents.get(uri)
            if current is None:
                return None
            patched = current.with_text(text)
            self._documents[uri] = patched
            return patched

    def remove(self, uri: str) -> None:
        with self._write_lock:
            self._documents.pop(uri, None)

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents


@dataclass(frozen=True)
class EditResult:
    document: Optional[Document]
    error: Optional[FrontendError] = None
    refreshed: bool = False


def apply_edit(store: DocumentStore, frontend: Frontend, uri: str, text: str) -> EditResult:
    """Re-parse ``text`` and update the store entry for ``uri``.

    A syntax error keeps the previous functions and docs and only replaces
    the text. A successful parse always replaces the entry before analysis
    runs, so the new symbols are stored even when the analyzer reports an
    error or crashes; the analysis error is returned for reporting.
    Parsing runs before the store is touched.
    """
    try:
        program = frontend.parse(text)
    except FrontendError as exc:
        log.debug("Parse failed for %s: %s", uri, exc)
        return EditResult(store.patch_text(uri, text), exc, refreshed=False)
    except Exception as exc:
        raise InternalError(f"parser failed on {uri}: {exc}") from exc

    document = Document.build(uri, text, program.functions)
    store.replace(document)
    log.debug("Stored %s with %d functions", uri, len(document.functions))

    error: Optional[FrontendError] = None
    try:
        frontend.analyze(program, text)
    except FrontendError as exc:
        log.debug("Analysis failed for %s: %s", uri, exc)
        error = exc
    except Exception as exc:
        raise InternalError(f"analyzer failed on {uri}: {exc}") from exc
    return EditResult(document, error, refreshed=True)
