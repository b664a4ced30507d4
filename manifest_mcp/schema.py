"""JSON Schema validation for tool arguments."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import SchemaError, ValidationError, validators
from referencing.exceptions import Unresolvable

logger = logging.getLogger(__name__)


class CompiledSchema:
    """A checked schema document bound to the validator class it declares."""

    def __init__(self, schema: Dict[str, Any]):
        validator_cls = validators.validator_for(schema)
        validator_cls.check_schema(schema)
        self.schema = schema
        self._validator = validator_cls(schema)
        # $ref targets are only looked up while validating; surface dangling ones now.
        try:
            self._validator.is_valid({})
        except Unresolvable as e:
            raise SchemaError(f"unresolvable reference ({e})") from e

    def validate(self, value: Any) -> List[ValidationError]:
        """Return every violation, ordered by location. Empty means valid."""
        return sorted(self._validator.iter_errors(value), key=lambda e: list(map(str, e.absolute_path)))

    def is_valid(self, value: Any) -> bool:
        return self._validator.is_valid(value)


class SchemaValidator:
    """Compiles schemas once and caches them by key (the tool name)."""

    def __init__(self):
        self._cache: Dict[str, CompiledSchema] = {}

    def compile(self, key: str, schema: Dict[str, Any]) -> CompiledSchema:
        compiled = self._cache.get(key)
        if compiled is None:
            compiled = CompiledSchema(schema)
            self._cache[key] = compiled
            logger.debug(f"Compiled input schema for '{key}'")
        return compiled

    def get(self, key: str) -> Optional[CompiledSchema]:
        return self._cache.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def errors_text(errors: Iterable[ValidationError]) -> str:
    """Render validation errors as one readable line, e.g. "$: 'id' is a required property"."""
    return ", ".join(f"{error.json_path}: {error.message}" for error in errors)
