"""
Command-line probe for a running (or launchable) manifest MCP server.

  manifest-mcp-probe --target http://127.0.0.1:8000/mcp
  manifest-mcp-probe --target examples/employee_directory/server.py --tool get_employee --args '{"id": "1"}'
  manifest-mcp-probe --target examples/employee_directory/server.py --resource employee://all
"""

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from fastmcp import Client

from .logging_setup import setup_logging
from .results import to_json

log = logging.getLogger(__name__)


def _content_text(blocks) -> str:
    parts = []
    for block in blocks or []:
        text = getattr(block, "text", None)
        if text is None:
            mime = getattr(block, "mimeType", "?")
            text = f"<{getattr(block, 'type', 'content')} {mime}, {len(getattr(block, 'data', '') or '')} bytes b64>"
        parts.append(text)
    return "\n".join(parts)


async def probe(
    target: str,
    tool: Optional[str] = None,
    resource: Optional[str] = None,
    prompt: Optional[str] = None,
    arguments: Optional[Dict[str, Any]] = None,
    timeout_s: float = 10.0,
) -> Dict[str, Any]:
    """Connect to `target`, list its capabilities and run at most one call of each kind."""
    log.debug("Preparing Client with target: %s", target)
    report: Dict[str, Any] = {}

    async with Client(target) as client:
        tools = await asyncio.wait_for(client.list_tools(), timeout=timeout_s)
        resources = await asyncio.wait_for(client.list_resources(), timeout=timeout_s)
        prompts = await asyncio.wait_for(client.list_prompts(), timeout=timeout_s)
        report["tools"] = [t.name for t in tools]
        report["resources"] = [str(r.uri) for r in resources]
        report["prompts"] = [p.name for p in prompts]
        log.info("Server exposes %d tools, %d resources, %d prompts", len(tools), len(resources), len(prompts))

        if tool:
            log.debug("Calling tool '%s' with %r", tool, arguments)
            result = await asyncio.wait_for(client.call_tool_mcp(tool, arguments or {}), timeout=timeout_s)
            report["tool"] = {"isError": bool(result.isError), "text": _content_text(result.content)}

        if resource:
            contents = await asyncio.wait_for(client.read_resource(resource), timeout=timeout_s)
            report["resource"] = [getattr(c, "text", None) for c in contents]

        if prompt:
            rendered = await asyncio.wait_for(client.get_prompt(prompt, arguments or {}), timeout=timeout_s)
            report["prompt"] = [_content_text([m.content]) for m in rendered.messages]

    return report


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List and exercise the capabilities of an MCP server.")
    parser.add_argument(
        "--target",
        default="http://127.0.0.1:8000/mcp",
        help="Server URL or path to a Python server script (default: %(default)s)",
    )
    parser.add_argument("--tool", help="Tool to call")
    parser.add_argument("--resource", help="Resource URI to read")
    parser.add_argument("--prompt", help="Prompt to render")
    parser.add_argument("--args", default="{}", help="JSON object passed as tool/prompt arguments")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds (default: %(default)s)")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def run_entry() -> None:
    args = build_arg_parser().parse_args()
    setup_logging(args.log_level)
    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as e:
        raise SystemExit(f"--args is not valid JSON: {e}")

    try:
        report = asyncio.run(
            probe(args.target, args.tool, args.resource, args.prompt, arguments, timeout_s=args.timeout)
        )
    except asyncio.TimeoutError:
        log.error("Timed out after %.1f seconds waiting for the server.", args.timeout)
        raise SystemExit(1)
    print(to_json(report))


if __name__ == "__main__":
    run_entry()
