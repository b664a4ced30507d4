"""Startup check that every manifest entry has a handler."""

import logging
from typing import List

from .errors import StartupIntegrityError
from .handlers import CapabilityKind, HandlerTable
from .manifest import Manifest

logger = logging.getLogger(__name__)


def _declared(manifest: Manifest):
    for name in manifest.tool_names():
        yield CapabilityKind.TOOL, name
    for uri in manifest.resource_uris():
        yield CapabilityKind.RESOURCE, uri
    for name in manifest.prompt_names():
        yield CapabilityKind.PROMPT, name


def missing_handlers(manifest: Manifest, handlers: HandlerTable) -> List[str]:
    return [
        f"{kind.label}: {identifier}"
        for kind, identifier in _declared(manifest)
        if handlers.lookup(kind, identifier) is None
    ]


def unbound_handlers(manifest: Manifest, handlers: HandlerTable) -> List[str]:
    """Handlers that no manifest entry points at. They can never be called."""
    declared = set(_declared(manifest))
    return [
        f"{kind.label}: {identifier}"
        for kind, identifier in handlers
        if (kind, identifier) not in declared
    ]


def check_integrity(manifest: Manifest, handlers: HandlerTable) -> None:
    """Raise StartupIntegrityError listing every entry without a handler."""
    missing = missing_handlers(manifest, handlers)
    if missing:
        raise StartupIntegrityError(missing)

    for entry in unbound_handlers(manifest, handlers):
        logger.warning(f"Handler registered but not declared in manifest: {entry}")
