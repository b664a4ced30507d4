# -*- coding: utf-8 -*-
"""
Manifest-driven MCP plugin.

Workflow overview:
1) Load the capability manifest (tools, resources, prompts) from JSON.
2) Check that every declared capability has a handler; refuse to start otherwise.
3) Compile each tool's inputSchema once, up front.
4) Register one responder per MCP request category on a low-level SDK server.
5) Per request: resolve the handler, validate tool arguments, await the
   handler, and shape its return value into an MCP result.

Tool failures are reported in-band (``isError: true``) because they are
business errors the calling model can react to. Resource and prompt failures
are protocol errors: the client asked for content the server could not build.
"""

import logging
import time
import traceback
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import anyio
from jsonschema.exceptions import SchemaError
from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl

from .config import DEFAULT_SERVER_NAME, DEFAULT_SERVER_VERSION
from .errors import CapabilityNotFound, HandlerFailure, InvalidArguments, ManifestLoadError
from .handlers import CapabilityKind, HandlerTable, invoke_handler
from .integrity import check_integrity
from .manifest import Manifest, load_manifest
from .results import prompt_result, resource_result, tool_error, tool_result
from .schema import SchemaValidator, errors_text

logger = logging.getLogger(__name__)


def _time_call() -> Tuple[float, callable]:
    """Simple wall-clock timer for execution duration."""
    start = time.perf_counter()

    def done() -> float:
        return time.perf_counter() - start

    return start, done


def _call_id() -> str:
    return uuid.uuid4().hex[:12]


class ManifestPlugin:
    """Serves the capabilities declared in a manifest with the given handlers."""

    def __init__(
        self,
        manifest: Union[str, Path, Manifest],
        handlers: HandlerTable,
        name: str = DEFAULT_SERVER_NAME,
        version: str = DEFAULT_SERVER_VERSION,
    ):
        if isinstance(manifest, Manifest):
            self.source = "<memory>"
            self.manifest = manifest
        else:
            self.source = str(manifest)
            self.manifest = load_manifest(manifest)

        self.handlers = handlers
        self.name = name
        self.version = version

        # STARTUP CHECK: every manifest entry must have a matching handler.
        check_integrity(self.manifest, self.handlers)

        self._schemas = SchemaValidator()
        self._compile_schemas()

        # Incoming resource URIs arrive URL-normalised; map them back to manifest keys.
        self._resource_keys = {str(AnyUrl(uri)): uri for uri in self.manifest.resource_uris()}

        self.server = self._build_server()
        logger.info(f"Plugin {self.name} {self.version} ready: {self.handlers!r}")

    def _compile_schemas(self) -> None:
        problems = []
        for tool in self.manifest.tools:
            if tool.input_schema is None:
                continue
            try:
                self._schemas.compile(tool.name, tool.input_schema)
            except SchemaError as e:
                problems.append(f"tool '{tool.name}' has an invalid inputSchema ({e.message})")
        if problems:
            raise ManifestLoadError(self.source, "; ".join(problems))

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------
    def list_tools(self) -> List[Dict[str, Any]]:
        return self.manifest.tool_listing()

    def list_resources(self) -> List[Dict[str, Any]]:
        return self.manifest.resource_listing()

    def list_prompts(self) -> List[Dict[str, Any]]:
        return self.manifest.prompt_listing()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------
    async def call_tool(self, name: str, arguments: Optional[Any] = None) -> types.CallToolResult:
        call_id = _call_id()
        logger.debug(f"[{call_id}] call_tool {name} arguments={arguments!r}")

        entry = self.manifest.tool_entry(name)
        handler = self.handlers.lookup(CapabilityKind.TOOL, name) if entry else None
        if handler is None:
            logger.warning(f"[{call_id}] unknown tool {name}")
            raise CapabilityNotFound(CapabilityKind.TOOL, name)

        args = {} if arguments is None else arguments

        # INPUT VALIDATION: check args against the manifest schema.
        schema = self._schemas.get(name)
        if schema is not None:
            errors = schema.validate(args)
            if errors:
                text = errors_text(errors)
                logger.warning(f"[{call_id}] {name} rejected arguments: {text}")
                raise InvalidArguments(name, text)

        _, done = _time_call()
        try:
            result = tool_result(await invoke_handler(handler, args))
        except Exception as e:
            tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
            logger.error(f"[{call_id}] {name} failed after {done():.6f}s:\n{tb}")
            return tool_error(e)

        logger.info(f"[{call_id}] {name} success in {done():.6f}s")
        return result

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        call_id = _call_id()
        logger.debug(f"[{call_id}] read_resource {uri}")

        handler = self.handlers.lookup(CapabilityKind.RESOURCE, uri) if self.manifest.has_resource(uri) else None
        if handler is None:
            logger.warning(f"[{call_id}] unknown resource {uri}")
            raise CapabilityNotFound(CapabilityKind.RESOURCE, uri)

        _, done = _time_call()
        try:
            result = resource_result(uri, await invoke_handler(handler, {}))
        except McpError:
            raise
        except Exception as e:
            logger.error(f"[{call_id}] resource {uri} failed after {done():.6f}s: {e}", exc_info=True)
            raise HandlerFailure(CapabilityKind.RESOURCE, uri, e) from e

        logger.info(f"[{call_id}] resource {uri} read in {done():.6f}s")
        return result

    async def get_prompt(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> types.GetPromptResult:
        call_id = _call_id()
        logger.debug(f"[{call_id}] get_prompt {name} arguments={arguments!r}")

        entry = self.manifest.prompt_entry(name)
        handler = self.handlers.lookup(CapabilityKind.PROMPT, name) if entry else None
        if handler is None:
            logger.warning(f"[{call_id}] unknown prompt {name}")
            raise CapabilityNotFound(CapabilityKind.PROMPT, name)

        _, done = _time_call()
        try:
            result = prompt_result(await invoke_handler(handler, arguments or {}), entry.description)
        except McpError:
            raise
        except Exception as e:
            logger.error(f"[{call_id}] prompt {name} failed after {done():.6f}s: {e}", exc_info=True)
            raise HandlerFailure(CapabilityKind.PROMPT, name, e) from e

        logger.info(f"[{call_id}] prompt {name} rendered in {done():.6f}s")
        return result

    # -------------------------------------------------------------------------
    # MCP server wiring
    # -------------------------------------------------------------------------
    def _build_server(self) -> Server:
        server = Server(self.name, version=self.version)
        server.request_handlers[types.ListToolsRequest] = self._on_list_tools
        server.request_handlers[types.CallToolRequest] = self._on_call_tool
        server.request_handlers[types.ListResourcesRequest] = self._on_list_resources
        server.request_handlers[types.ReadResourceRequest] = self._on_read_resource
        server.request_handlers[types.ListPromptsRequest] = self._on_list_prompts
        server.request_handlers[types.GetPromptRequest] = self._on_get_prompt
        return server

    async def _on_list_tools(self, _req: types.ListToolsRequest) -> types.ServerResult:
        tools = []
        for entry in self.list_tools():
            if entry.get("inputSchema") is None:
                # MCP requires an inputSchema on every listed tool.
                entry["inputSchema"] = {"type": "object"}
            tools.append(types.Tool.model_validate(entry))
        return types.ServerResult(types.ListToolsResult(tools=tools))

    async def _on_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        return types.ServerResult(await self.call_tool(req.params.name, req.params.arguments))

    async def _on_list_resources(self, _req: types.ListResourcesRequest) -> types.ServerResult:
        resources = []
        for entry in self.list_resources():
            if not entry.get("name"):
                entry["name"] = entry["uri"]
            resources.append(types.Resource.model_validate(entry))
        return types.ServerResult(types.ListResourcesResult(resources=resources))

    async def _on_read_resource(self, req: types.ReadResourceRequest) -> types.ServerResult:
        uri = str(req.params.uri)
        return types.ServerResult(await self.read_resource(self._resource_keys.get(uri, uri)))

    async def _on_list_prompts(self, _req: types.ListPromptsRequest) -> types.ServerResult:
        prompts = [types.Prompt.model_validate(entry) for entry in self.list_prompts()]
        return types.ServerResult(types.ListPromptsResult(prompts=prompts))

    async def _on_get_prompt(self, req: types.GetPromptRequest) -> types.ServerResult:
        return types.ServerResult(await self.get_prompt(req.params.name, req.params.arguments))

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def run_stdio(self) -> None:
        """Serve over stdin/stdout until the client disconnects."""
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"{self.name} running on stdio")
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())

    def start(self) -> None:
        anyio.run(self.run_stdio)

    def __repr__(self) -> str:
        return f"ManifestPlugin(name='{self.name}', source='{self.source}', handlers={self.handlers!r})"
