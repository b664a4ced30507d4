"""
Capability manifest: the declarative list of tools, resources and prompts.

A manifest is a JSON object with optional ``tools``, ``resources`` and
``prompts`` arrays. Entries are validated when the document is loaded, so a
missing ``name``/``uri`` or a duplicate identifier fails at startup instead of
surfacing later as a dispatch error. Fields the adapter does not use
(descriptions, prompt arguments, annotations...) are kept and listed back to
clients unchanged.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ManifestLoadError

logger = logging.getLogger(__name__)


class _Entry(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    def listing(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ToolEntry(_Entry):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = Field(default=None, alias="inputSchema")


class ResourceEntry(_Entry):
    uri: str = Field(..., min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")

    @field_validator("uri")
    @classmethod
    def _absolute_uri(cls, value: str) -> str:
        try:
            AnyUrl(value)
        except ValueError as e:
            raise ValueError(f"'{value}' is not an absolute URI") from e
        return value


class PromptArgument(_Entry):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    required: Optional[bool] = None


class PromptEntry(_Entry):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    arguments: Optional[List[PromptArgument]] = None


class Manifest(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    tools: List[ToolEntry] = Field(default_factory=list)
    resources: List[ResourceEntry] = Field(default_factory=list)
    prompts: List[PromptEntry] = Field(default_factory=list)

    @field_validator("tools", "resources", "prompts", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return [] if value is None else value

    @classmethod
    def from_dict(cls, data: Any, source: str = "<memory>") -> "Manifest":
        if not isinstance(data, dict):
            raise ManifestLoadError(source, f"expected a JSON object, got {type(data).__name__}")
        try:
            manifest = cls.model_validate(data)
        except ValidationError as e:
            raise ManifestLoadError(source, _format_validation_error(e)) from e

        duplicates = manifest._duplicates()
        if duplicates:
            raise ManifestLoadError(source, "duplicate entries: " + ", ".join(duplicates))
        manifest._log_cross_kind_collisions()
        return manifest

    # -- lookups ---------------------------------------------------------------
    def tool_entry(self, name: str) -> Optional[ToolEntry]:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def has_resource(self, uri: str) -> bool:
        return any(resource.uri == uri for resource in self.resources)

    def prompt_entry(self, name: str) -> Optional[PromptEntry]:
        for prompt in self.prompts:
            if prompt.name == name:
                return prompt
        return None

    def tool_names(self) -> List[str]:
        return [tool.name for tool in self.tools]

    def resource_uris(self) -> List[str]:
        return [resource.uri for resource in self.resources]

    def prompt_names(self) -> List[str]:
        return [prompt.name for prompt in self.prompts]

    # -- listings --------------------------------------------------------------
    def tool_listing(self) -> List[Dict[str, Any]]:
        return [tool.listing() for tool in self.tools]

    def resource_listing(self) -> List[Dict[str, Any]]:
        return [resource.listing() for resource in self.resources]

    def prompt_listing(self) -> List[Dict[str, Any]]:
        return [prompt.listing() for prompt in self.prompts]

    def _duplicates(self) -> List[str]:
        found = []
        for label, identifiers in (
            ("Tool", self.tool_names()),
            ("Resource", self.resource_uris()),
            ("Prompt", self.prompt_names()),
        ):
            found.extend(f"{label}: {ident}" for ident, n in Counter(identifiers).items() if n > 1)
        return found

    def _log_cross_kind_collisions(self) -> None:
        shared = set(self.tool_names()) & set(self.prompt_names())
        shared |= set(self.resource_uris()) & (set(self.tool_names()) | set(self.prompt_names()))
        for identifier in sorted(shared):
            logger.debug(f"Identifier '{identifier}' is declared by more than one capability kind")


def load_manifest(path: Union[str, Path]) -> Manifest:
    """Read and validate a manifest file."""
    source = str(path)
    try:
        raw = Path(path).read_bytes().decode("utf-8")
    except OSError as e:
        raise ManifestLoadError(source, f"unreadable ({e.strerror or e})") from e
    except UnicodeDecodeError as e:
        raise ManifestLoadError(source, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestLoadError(source, f"invalid JSON ({e})") from e

    manifest = Manifest.from_dict(data, source=source)
    logger.info(
        f"Loaded manifest {source}: {len(manifest.tools)} tools, "
        f"{len(manifest.resources)} resources, {len(manifest.prompts)} prompts"
    )
    return manifest


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"])
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
