from __future__ import annotations

from pygls.exceptions import JsonRpcException, JsonRpcInternalError, JsonRpcInvalidParams


class LspError(Exception):
    """Base class for failures inside the language server core.

    ``code`` values stay within 1..5000 so they can be forwarded as
    JSON-RPC error codes without clashing with reserved ranges.
    """

    code = 100

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description

    def __str__(self) -> str:
        return f"{self.code}: {self.description}"

    def to_rpc_error(self) -> JsonRpcException:
        return JsonRpcInternalError(message=str(self))


class ConversionFailed(LspError):
    """A coordinate does not fit the target coordinate system."""

    code = 1

    def to_rpc_error(self) -> JsonRpcException:
        return JsonRpcInvalidParams(message=str(self))


class FunctionNotFound(LspError):
    code = 2


class CallNotFound(LspError):
    code = 3


class DocumentNotFound(LspError):
    code = 4

    def __init__(self, uri: str):
        super().__init__(f"Document not found: {uri}")
        self.uri = uri


class InternalError(LspError):
    code = 100
