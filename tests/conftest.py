import json

import pytest

from manifest_mcp import HandlerTable, Manifest, ManifestPlugin


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def manifest_data():
    return {
        "tools": [
            {
                "name": "needs_x",
                "description": "Echo x back",
                "inputSchema": {"type": "object", "required": ["x"]},
            },
            {"name": "free"},
            {"name": "boom"},
            {"name": "picture"},
            {"name": "slow"},
        ],
        "resources": [{"uri": "config://settings", "name": "Settings"}],
        "prompts": [{"name": "greet", "arguments": [{"name": "who", "required": False}]}],
    }


@pytest.fixture
def calls():
    """Invocation counter per handler."""
    return {}


@pytest.fixture
def handlers(calls):
    table = HandlerTable()

    def count(name):
        calls[name] = calls.get(name, 0) + 1

    @table.tool("needs_x")
    def needs_x(args):
        count("needs_x")
        return {"x": args["x"]}

    @table.tool("free")
    def free(args):
        count("free")
        return args

    @table.tool("boom")
    def boom(args):
        count("boom")
        raise Exception("boom")

    @table.tool("picture")
    def picture(args):
        return {"type": "image", "data": "iVBORw0KGgo=", "mimeType": "image/png"}

    @table.tool("slow")
    async def slow(args):
        count("slow")
        return "done"

    @table.resource("config://settings")
    async def settings(args):
        return {"version": "1.0.0", "args": args}

    @table.prompt("greet")
    def greet(args):
        return f"Say hello to {args.get('who', 'everyone')}"

    return table


@pytest.fixture
def plugin(manifest_data, handlers):
    return ManifestPlugin(Manifest.from_dict(manifest_data), handlers, name="test-server", version="9.9.9")


@pytest.fixture
def manifest_file(tmp_path, manifest_data):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(manifest_data), encoding="utf-8")
    return path
