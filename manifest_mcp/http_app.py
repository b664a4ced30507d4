"""
HTTP mode: the plugin's capabilities as a small FastAPI app.

Same dispatch as the stdio server, different envelope:
  GET  /health
  GET  /tools                 POST /tools/{name}        (JSON body = arguments)
  GET  /resources             GET  /resources/read?uri=...
  GET  /prompts               POST /prompts/{name}      (JSON body = arguments)

Unknown capabilities are 404, rejected arguments 400, resource/prompt
failures 500. Tool failures stay in-band: 200 with "isError": true.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from .errors import CapabilityNotFound, DispatchError, HandlerFailure, InvalidArguments
from .plugin import ManifestPlugin

logger = logging.getLogger(__name__)

_STATUS = {CapabilityNotFound: 404, InvalidArguments: 400, HandlerFailure: 500}


def _dump(result) -> Dict[str, Any]:
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


def build_http_app(plugin: ManifestPlugin) -> FastAPI:
    app = FastAPI(title=f"{plugin.name} HTTP", version=plugin.version)

    @app.exception_handler(DispatchError)
    async def dispatch_error(_request: Request, exc: DispatchError):
        call_id = uuid.uuid4().hex[:12]
        status = _STATUS.get(type(exc), 500)
        logger.warning(f"[{call_id}] HTTP {status}: {exc.message}")
        return JSONResponse(
            status_code=status,
            content={"error": exc.message, "code": exc.error.code, "call_id": call_id},
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "service": plugin.name, "version": plugin.version}

    @app.get("/tools")
    def list_tools():
        return {"tools": plugin.list_tools()}

    @app.post("/tools/{name}")
    async def call_tool(name: str, arguments: Optional[Any] = Body(default=None)):
        return _dump(await plugin.call_tool(name, arguments))

    @app.get("/resources")
    def list_resources():
        return {"resources": plugin.list_resources()}

    @app.get("/resources/read")
    async def read_resource(uri: str = Query(..., description="Resource URI as declared in the manifest")):
        return _dump(await plugin.read_resource(uri))

    @app.get("/prompts")
    def list_prompts():
        return {"prompts": plugin.list_prompts()}

    @app.post("/prompts/{name}")
    async def get_prompt(name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)):
        return _dump(await plugin.get_prompt(name, arguments))

    return app
