"""Round trips through a real MCP client session (in-memory transport)."""

import json

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND
from pydantic import AnyUrl

from manifest_mcp import HandlerTable, Manifest, ManifestPlugin

pytestmark = pytest.mark.anyio


async def test_listing_over_the_wire(plugin):
    async with create_connected_server_and_client_session(plugin.server) as client:
        tools = (await client.list_tools()).tools
        assert [t.name for t in tools] == ["needs_x", "free", "boom", "picture", "slow"]
        assert tools[0].inputSchema == {"type": "object", "required": ["x"]}
        assert tools[1].inputSchema == {"type": "object"}

        resources = (await client.list_resources()).resources
        assert [str(r.uri) for r in resources] == ["config://settings"]
        assert resources[0].name == "Settings"

        prompts = (await client.list_prompts()).prompts
        assert prompts[0].name == "greet"
        assert prompts[0].arguments[0].name == "who"


async def test_tool_calls_over_the_wire(plugin, calls):
    async with create_connected_server_and_client_session(plugin.server) as client:
        ok = await client.call_tool("needs_x", {"x": "hi"})
        assert not ok.isError
        assert json.loads(ok.content[0].text) == {"x": "hi"}

        failed = await client.call_tool("boom", {})
        assert failed.isError
        assert "boom" in failed.content[0].text

        image = await client.call_tool("picture", {})
        assert image.content[0].type == "image"

        with pytest.raises(McpError) as info:
            await client.call_tool("needs_x", {})
        assert info.value.error.code == INVALID_PARAMS
        assert calls["needs_x"] == 1

        with pytest.raises(McpError) as info:
            await client.call_tool("missing", {})
        assert info.value.error.code == METHOD_NOT_FOUND

        # The session keeps serving after every kind of failure.
        assert not (await client.call_tool("slow", {})).isError


async def test_resources_and_prompts_over_the_wire(plugin):
    async with create_connected_server_and_client_session(plugin.server) as client:
        read = await client.read_resource(AnyUrl("config://settings"))
        assert json.loads(read.contents[0].text)["version"] == "1.0.0"

        with pytest.raises(McpError) as info:
            await client.read_resource(AnyUrl("config://missing"))
        assert info.value.error.code == INVALID_REQUEST

        prompt = await client.get_prompt("greet", {"who": "Grace"})
        assert prompt.messages[0].content.text == "Say hello to Grace"

        with pytest.raises(McpError) as info:
            await client.get_prompt("unknown")
        assert info.value.error.code == METHOD_NOT_FOUND


async def test_resource_uri_normalisation_is_undone():
    table = HandlerTable(resources={"https://example.com": lambda args: {"ok": True}})
    plugin = ManifestPlugin(Manifest.from_dict({"resources": [{"uri": "https://example.com"}]}), table)
    async with create_connected_server_and_client_session(plugin.server) as client:
        read = await client.read_resource(AnyUrl("https://example.com"))
        assert json.loads(read.contents[0].text) == {"ok": True}


async def test_resource_handler_failure_is_protocol_error():
    def broken(args):
        raise OSError("disk gone")

    plugin = ManifestPlugin(
        Manifest.from_dict({"resources": [{"uri": "data://broken"}]}),
        HandlerTable(resources={"data://broken": broken}),
    )
    async with create_connected_server_and_client_session(plugin.server) as client:
        with pytest.raises(McpError) as info:
            await client.read_resource(AnyUrl("data://broken"))
        assert info.value.error.code == INTERNAL_ERROR
        assert "disk gone" in info.value.error.message
