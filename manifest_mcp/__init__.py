"""Manifest-driven MCP adapter: declare capabilities in JSON, bind Python handlers."""

from .config import DEFAULT_SERVER_VERSION as __version__
from .errors import (
    CapabilityNotFound,
    DispatchError,
    HandlerFailure,
    InvalidArguments,
    ManifestLoadError,
    StartupError,
    StartupIntegrityError,
)
from .handlers import ActionHandler, CapabilityKind, HandlerTable, load_handlers
from .manifest import Manifest, load_manifest
from .plugin import ManifestPlugin
from .results import Image, Json, Text

__all__ = [
    "__version__",
    "ActionHandler",
    "CapabilityKind",
    "CapabilityNotFound",
    "DispatchError",
    "HandlerFailure",
    "HandlerTable",
    "Image",
    "InvalidArguments",
    "Json",
    "Manifest",
    "ManifestLoadError",
    "ManifestPlugin",
    "StartupError",
    "StartupIntegrityError",
    "Text",
    "load_handlers",
    "load_manifest",
]
