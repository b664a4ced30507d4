import json
import sys
from pathlib import Path

import pytest

from manifest_mcp import InvalidArguments, ManifestPlugin, load_handlers

pytestmark = pytest.mark.anyio

EXAMPLE = Path(__file__).resolve().parents[1] / "examples" / "employee_directory"


@pytest.fixture
def directory():
    handlers = load_handlers(f"{EXAMPLE / 'server.py'}:handlers")
    # The example keeps its rows in a module-level list shared across loads.
    employees = sys.modules["data"].employees
    snapshot = list(employees)
    yield ManifestPlugin(EXAMPLE / "manifest.json", handlers, name="employee-directory", version="1.0.0")
    employees[:] = snapshot


async def test_get_employee(directory):
    result = await directory.call_tool("get_employee", {"id": "1"})
    assert json.loads(result.content[0].text)["name"] == "Alice Johnson"


async def test_unknown_employee_is_an_in_band_error(directory):
    result = await directory.call_tool("get_employee", {"id": "999"})
    assert result.isError
    assert "Employee with ID 999 not found" in result.content[0].text


async def test_add_employee_requires_all_fields(directory):
    with pytest.raises(InvalidArguments):
        await directory.call_tool("add_employee", {"name": "Eve"})


async def test_add_then_list(directory):
    before = json.loads((await directory.read_resource("employee://all")).contents[0].text)
    result = await directory.call_tool(
        "add_employee",
        {"name": "Eve Adams", "role": "SRE", "department": "Engineering", "email": "eve@org.com"},
    )
    created = json.loads(result.content[0].text)
    assert created == {"success": True, "id": str(len(before) + 1), "message": "Created"}

    after = json.loads((await directory.read_resource("employee://all")).contents[0].text)
    assert after[-1]["name"] == "Eve Adams"


async def test_each_test_starts_from_the_seed_rows(directory):
    rows = json.loads((await directory.read_resource("employee://all")).contents[0].text)
    assert [row["id"] for row in rows] == ["1", "2", "3", "4"]


async def test_summarize_team_prompt(directory):
    result = await directory.get_prompt("summarize_team", {"department": "design"})
    assert result.messages[0].content.text == "Analyze this team: Charlie Davis"

    default = await directory.get_prompt("summarize_team")
    assert default.messages[0].content.text.startswith("Analyze this team: Alice Johnson")
