"""
Handler table: the executable side of a manifest.

Tools, resources and prompts each get their own mapping, so a tool and a
prompt may share a name without shadowing each other. A handler takes one
positional arguments mapping and returns a value, either directly or as an
awaitable.
"""

import importlib
import importlib.util
import inspect
import logging
import os
import sys
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]


class CapabilityKind(str, Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class HandlerTable:
    """Per-kind mapping from capability identifier to handler.

    Usage:
        handlers = HandlerTable()

        @handlers.tool("get_employee")
        def get_employee(args):
            ...

        @handlers.resource("employee://all")
        async def all_employees(args):
            ...
    """

    def __init__(
        self,
        tools: Optional[Mapping[str, ActionHandler]] = None,
        resources: Optional[Mapping[str, ActionHandler]] = None,
        prompts: Optional[Mapping[str, ActionHandler]] = None,
    ):
        self._tables: Dict[CapabilityKind, Dict[str, ActionHandler]] = {
            CapabilityKind.TOOL: {},
            CapabilityKind.RESOURCE: {},
            CapabilityKind.PROMPT: {},
        }
        for kind, entries in (
            (CapabilityKind.TOOL, tools),
            (CapabilityKind.RESOURCE, resources),
            (CapabilityKind.PROMPT, prompts),
        ):
            for identifier, handler in (entries or {}).items():
                self.register(kind, identifier, handler)

    def register(self, kind: CapabilityKind, identifier: str, handler: ActionHandler) -> None:
        if not callable(handler):
            raise TypeError(f"{kind.label} handler for '{identifier}' is not callable")
        table = self._tables[kind]
        if identifier in table:
            raise ValueError(f"{kind.label} handler for '{identifier}' is already registered")
        table[identifier] = handler
        logger.debug(f"Registered {kind.value} handler '{identifier}' -> {_describe(handler)}")

    def _decorator(self, kind: CapabilityKind, identifier: str):
        def inner(func: ActionHandler) -> ActionHandler:
            self.register(kind, identifier, func)
            return func

        return inner

    def tool(self, name: str):
        return self._decorator(CapabilityKind.TOOL, name)

    def resource(self, uri: str):
        return self._decorator(CapabilityKind.RESOURCE, uri)

    def prompt(self, name: str):
        return self._decorator(CapabilityKind.PROMPT, name)

    def lookup(self, kind: CapabilityKind, identifier: str) -> Optional[ActionHandler]:
        return self._tables[kind].get(identifier)

    def identifiers(self, kind: CapabilityKind) -> Tuple[str, ...]:
        return tuple(self._tables[kind])

    def __iter__(self) -> Iterator[Tuple[CapabilityKind, str]]:
        for kind, table in self._tables.items():
            for identifier in table:
                yield kind, identifier

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())

    def __repr__(self) -> str:
        return (
            f"HandlerTable(tools={len(self._tables[CapabilityKind.TOOL])}, "
            f"resources={len(self._tables[CapabilityKind.RESOURCE])}, "
            f"prompts={len(self._tables[CapabilityKind.PROMPT])})"
        )


async def invoke_handler(handler: ActionHandler, arguments: Dict[str, Any]) -> Any:
    """Call a handler and wait for it, whether it is sync or async."""
    result = handler(arguments)
    if inspect.isawaitable(result):
        result = await result
    return result


def load_handlers(target: str) -> HandlerTable:
    """Import a HandlerTable from 'package.module:attr' or 'path/to/file.py:attr'.

    The attribute may be a HandlerTable or a zero-argument callable returning one.
    """
    module_ref, sep, attr = target.rpartition(":")
    if not sep or not module_ref or not attr:
        raise ValueError(f"Handler target must look like 'module:attribute', got '{target}'")

    if module_ref.endswith(".py") or os.sep in module_ref:
        path = os.path.abspath(module_ref)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Handler module not found: {path}")
        module_name = os.path.splitext(os.path.basename(path))[0]
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import handlers from {path}")
        module = importlib.util.module_from_spec(spec)
        # Sibling modules of the handler file must be importable.
        sys.path.insert(0, os.path.dirname(path))
        try:
            spec.loader.exec_module(module)
        finally:
            sys.path.remove(os.path.dirname(path))
    else:
        module = importlib.import_module(module_ref)

    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"'{module_ref}' has no attribute '{attr}'") from e

    if not isinstance(obj, HandlerTable) and callable(obj):
        obj = obj()
    if not isinstance(obj, HandlerTable):
        raise TypeError(f"'{target}' is not a HandlerTable (got {type(obj).__name__})")
    logger.info(f"Loaded handlers from {target}: {obj!r}")
    return obj


def _describe(handler: ActionHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
