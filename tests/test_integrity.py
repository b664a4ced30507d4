import logging

import pytest

from manifest_mcp import HandlerTable, Manifest, ManifestPlugin, StartupIntegrityError
from manifest_mcp.integrity import check_integrity, missing_handlers, unbound_handlers

MANIFEST = Manifest.from_dict(
    {
        "tools": [{"name": "a"}, {"name": "b"}],
        "resources": [{"uri": "r://one"}],
        "prompts": [{"name": "p"}],
    }
)


def test_every_missing_entry_is_reported():
    handlers = HandlerTable(tools={"a": lambda args: None})
    with pytest.raises(StartupIntegrityError) as info:
        check_integrity(MANIFEST, handlers)
    assert info.value.missing == ["Tool: b", "Resource: r://one", "Prompt: p"]
    message = str(info.value)
    for entry in info.value.missing:
        assert entry in message
    assert info.value.exit_code == 3


def test_handler_of_the_wrong_kind_does_not_count():
    handlers = HandlerTable(
        tools={"a": lambda args: None, "b": lambda args: None, "p": lambda args: None},
        resources={"r://one": lambda args: None},
    )
    assert missing_handlers(MANIFEST, handlers) == ["Prompt: p"]


def test_complete_table_passes_and_warns_about_extras(caplog):
    handlers = HandlerTable(
        tools={"a": lambda args: None, "b": lambda args: None, "extra": lambda args: None},
        resources={"r://one": lambda args: None},
        prompts={"p": lambda args: None},
    )
    with caplog.at_level(logging.WARNING):
        check_integrity(MANIFEST, handlers)
    assert unbound_handlers(MANIFEST, handlers) == ["Tool: extra"]
    assert "Tool: extra" in caplog.text


def test_plugin_construction_fails_before_serving():
    with pytest.raises(StartupIntegrityError) as info:
        ManifestPlugin(MANIFEST, HandlerTable())
    assert len(info.value.missing) == 4
