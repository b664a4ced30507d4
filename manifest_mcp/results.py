"""
Shaping handler return values into MCP result models.

Tool handlers can be explicit about what they return by using ``Text``,
``Image`` or ``Json``. Plain values are still accepted: a mapping shaped like
``{"type": "image", "data": ..., "mimeType": ...}`` becomes image content and
everything else is rendered as indented JSON text.
"""

import base64
import json
from dataclasses import dataclass
from typing import Any, List, Mapping, Union

from mcp import types
from pydantic_core import to_jsonable_python

RESOURCE_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Image:
    data: Union[bytes, str]
    mime_type: str

    @property
    def base64_data(self) -> str:
        if isinstance(self.data, (bytes, bytearray)):
            return base64.b64encode(self.data).decode("ascii")
        return self.data


@dataclass(frozen=True)
class Json:
    value: Any


ToolOutput = Union[Text, Image, Json]


def to_json(value: Any, indent: Union[int, None] = 2) -> str:
    if indent is None:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=to_jsonable_python)
    return json.dumps(value, indent=indent, ensure_ascii=False, default=to_jsonable_python)


def classify(value: Any) -> ToolOutput:
    """Map a raw handler result onto Text, Image or Json."""
    if isinstance(value, (Text, Image, Json)):
        return value
    if (
        isinstance(value, Mapping)
        and value.get("type") == "image"
        and isinstance(value.get("data"), str)
        and isinstance(value.get("mimeType"), str)
    ):
        return Image(data=value["data"], mime_type=value["mimeType"])
    return Json(value)


def tool_content(value: Any) -> List[types.ContentBlock]:
    output = classify(value)
    if isinstance(output, Image):
        return [types.ImageContent(type="image", data=output.base64_data, mimeType=output.mime_type)]
    if isinstance(output, Text):
        return [types.TextContent(type="text", text=output.text)]
    return [types.TextContent(type="text", text=to_json(output.value))]


def tool_result(value: Any) -> types.CallToolResult:
    return types.CallToolResult(content=tool_content(value))


def tool_error(error: BaseException) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"Error: {error}")],
        isError=True,
    )


def resource_result(uri: str, value: Any) -> types.ReadResourceResult:
    return types.ReadResourceResult(
        contents=[types.TextResourceContents(uri=uri, mimeType=RESOURCE_MIME_TYPE, text=to_json(value))]
    )


def prompt_result(value: Any, description: Union[str, None] = None) -> types.GetPromptResult:
    text = value if isinstance(value, str) else to_json(value, indent=None)
    return types.GetPromptResult(
        description=description,
        messages=[types.PromptMessage(role="user", content=types.TextContent(type="text", text=text))],
    )
