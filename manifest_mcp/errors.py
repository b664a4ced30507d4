"""
Error taxonomy for the manifest adapter.

Startup errors are fatal and carry the process exit status the CLI uses.
Dispatch errors are McpError subclasses, so the protocol session turns them
into JSON-RPC error responses when they escape a request handler.
"""

from typing import List, Optional

from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ErrorData,
)

from .handlers import CapabilityKind


# -----------------------------------------------------------------------------
# Startup
# -----------------------------------------------------------------------------
class StartupError(Exception):
    """Raised while building a plugin; the server never reaches a serving state."""

    exit_code = 1


class ManifestLoadError(StartupError):
    exit_code = 2

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not load manifest '{source}': {reason}")


class StartupIntegrityError(StartupError):
    """One or more manifest entries have no handler."""

    exit_code = 3

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        listing = "\n - ".join(self.missing)
        super().__init__(
            f"Missing handlers for:\n - {listing}\n"
            "Please add these to your handler table."
        )


# -----------------------------------------------------------------------------
# Dispatch
# -----------------------------------------------------------------------------
class DispatchError(McpError):
    code = INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(ErrorData(code=self.code if code is None else code, message=message))

    @property
    def message(self) -> str:
        return self.error.message


class CapabilityNotFound(DispatchError):
    def __init__(self, kind: CapabilityKind, identifier: str):
        self.kind = kind
        self.identifier = identifier
        # Unknown resources are reported as InvalidRequest, tools and prompts as MethodNotFound.
        code = INVALID_REQUEST if kind is CapabilityKind.RESOURCE else METHOD_NOT_FOUND
        super().__init__(f"{kind.label} {identifier} not found", code=code)


class InvalidArguments(DispatchError):
    code = INVALID_PARAMS

    def __init__(self, tool: str, errors_text: str):
        self.tool = tool
        self.errors_text = errors_text
        super().__init__(f"Invalid arguments: {errors_text}")


class HandlerFailure(DispatchError):
    code = INTERNAL_ERROR

    def __init__(self, kind: CapabilityKind, identifier: str, cause: BaseException):
        self.kind = kind
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"{kind.label} {identifier} failed: {cause}")
