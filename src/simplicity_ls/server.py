from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from . import __version__
from .completions import CompletionProvider
from .config import SimplicityLSConfig, apply_settings, load_config
from .diagnostics import error_to_diagnostic
from .documents import Document, DocumentStore, EditResult, apply_edit
from .errors import ConversionFailed, DocumentNotFound, InternalError
from .frontend import Frontend, SimplicityFrontend
from .hover import hover_for_call
from .resolver import find_enclosing_call, resolve_definition
from .spans import decode_utf16_position, editor_position_to_span, span_to_utf16_range
from .symbols import document_symbols
from .syntax import Call, FrontendError

log = logging.getLogger(__name__)


class SimplicityLanguageServer(LanguageServer):
    def __init__(self, frontend: Optional[Frontend] = None):
        super().__init__(
            "simplicity-ls",
            __version__,
            text_document_sync_kind=types.TextDocumentSyncKind.Full,
        )
        self.frontend: Frontend = frontend or SimplicityFrontend()
        self.documents = DocumentStore()
        self._config = SimplicityLSConfig.default(Path.cwd())
        self.completion_provider = CompletionProvider(self._config.completion)

    @property
    def config(self) -> SimplicityLSConfig:
        return self._config

    def load_workspace(self, root: Path, options: Optional[Dict[str, Any]] = None) -> None:
        config, warnings = load_config(root)
        if options:
            apply_settings(config, options, warnings)
        for warning in warnings:
            log.warning(warning)
        self._config = config
        self.completion_provider.settings = config.completion
        log.info("Loaded workspace %s", root)


def create_server(frontend: Optional[Frontend] = None) -> SimplicityLanguageServer:
    server = SimplicityLanguageServer(frontend)
    server.feature(types.INITIALIZE)(on_initialize)
    server.feature(types.TEXT_DOCUMENT_DID_OPEN)(did_open)
    server.feature(types.TEXT_DOCUMENT_DID_CHANGE)(did_change)
    server.feature(types.TEXT_DOCUMENT_DID_SAVE)(did_save)
    server.feature(types.TEXT_DOCUMENT_DID_CLOSE)(did_close)
    server.feature(
        types.TEXT_DOCUMENT_COMPLETION,
        types.CompletionOptions(trigger_characters=[":"], resolve_provider=False),
    )(on_completion)
    server.feature(types.TEXT_DOCUMENT_HOVER)(on_hover)
    server.feature(types.TEXT_DOCUMENT_DEFINITION)(on_definition)
    server.feature(types.TEXT_DOCUMENT_DOCUMENT_SYMBOL)(on_document_symbol)
    return server


def on_initialize(server: SimplicityLanguageServer, params: types.InitializeParams) -> None:
    options = params.initialization_options if isinstance(params.initialization_options, dict) else None
    server.load_workspace(_workspace_root(params), options)


def did_open(server: SimplicityLanguageServer, params: types.DidOpenTextDocumentParams) -> None:
    doc = params.text_document
    process_edit(server, doc.uri, doc.text, doc.version)


def did_change(server: SimplicityLanguageServer, params: types.DidChangeTextDocumentParams) -> None:
    if not params.content_changes:
        return
    # Full sync: the last change carries the whole buffer.
    text = params.content_changes[-1].text
    process_edit(server, params.text_document.uri, text, params.text_document.version)


def did_save(server: SimplicityLanguageServer, params: types.DidSaveTextDocumentParams) -> None:
    uri = params.text_document.uri
    text = params.text
    if text is None:
        try:
            text = server.documents.require(uri).text
        except DocumentNotFound as exc:
            log.debug("Save without text: %s", exc.description)
            return
    process_edit(server, uri, text, None)


def did_close(server: SimplicityLanguageServer, params: types.DidCloseTextDocumentParams) -> None:
    uri = params.text_document.uri
    if uri not in server.documents:
        log.debug("Close for untracked document %s", uri)
        return
    server.documents.remove(uri)
    log.debug("Closed %s", uri)


def process_edit(
    server: SimplicityLanguageServer,
    uri: str,
    text: str,
    version: Optional[int] = None,
) -> Optional[EditResult]:
    try:
        result = apply_edit(server.documents, server.frontend, uri, text)
    except InternalError as exc:
        log.error("Failed to process %s: %s", uri, exc)
        return None
    publish_diagnostics(server, uri, result.error, version)
    return result


def publish_diagnostics(
    server: SimplicityLanguageServer,
    uri: str,
    error: Optional[FrontendError],
    version: Optional[int] = None,
) -> None:
    settings = server.config.diagnostics
    if not settings.enabled:
        return
    diagnostics: list[types.Diagnostic] = []
    if error is not None:
        try:
            diagnostics.append(error_to_diagnostic(error, settings.source))
        except ConversionFailed as exc:
            log.error("Dropping diagnostic for %s: %s", uri, exc)
            return
    server.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics, version=version)
    )


def on_completion(server: SimplicityLanguageServer, params: types.CompletionParams) -> List[types.CompletionItem]:
    document = server.documents.get(params.text_document.uri)
    if document is None:
        return []
    line = document.line(params.position.line)
    if line is None:
        return []
    position = decode_utf16_position(params.position, document.lines)
    prefix = line[: position.character]
    return server.completion_provider.completions_for_prefix(prefix, document.functions, document.function_docs)


def on_hover(server: SimplicityLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
    if not server.config.hover.enabled:
        return None
    document = server.documents.get(params.text_document.uri)
    if document is None:
        return None
    call = _call_at(document, params.position)
    if call is None:
        return None
    try:
        return hover_for_call(call, document)
    except ConversionFailed as exc:
        raise exc.to_rpc_error() from exc


def on_definition(server: SimplicityLanguageServer, params: types.DefinitionParams) -> Optional[types.Location]:
    uri = params.text_document.uri
    document = server.documents.get(uri)
    if document is None:
        return None
    call = _call_at(document, params.position)
    if call is None:
        return None
    span = resolve_definition(call, document.functions)
    if span is None:
        return None
    try:
        return types.Location(uri=uri, range=span_to_utf16_range(span, document.lines))
    except ConversionFailed as exc:
        raise exc.to_rpc_error() from exc


def on_document_symbol(
    server: SimplicityLanguageServer,
    params: types.DocumentSymbolParams,
) -> List[types.DocumentSymbol]:
    document = server.documents.get(params.text_document.uri)
    if document is None:
        return []
    return document_symbols(document)


def _call_at(document: Document, position: types.Position) -> Optional[Call]:
    try:
        target = editor_position_to_span(decode_utf16_position(position, document.lines))
    except ConversionFailed as exc:
        raise exc.to_rpc_error() from exc
    return find_enclosing_call(document.functions, target)


def _workspace_root(params: types.InitializeParams) -> Path:
    uri = None
    if params.workspace_folders:
        uri = params.workspace_folders[0].uri
    elif params.root_uri:
        uri = params.root_uri
    if uri:
        path = to_fs_path(uri)
        if path:
            return Path(path)
    if params.root_path:
        return Path(params.root_path)
    return Path.cwd()
