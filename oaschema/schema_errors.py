"""Errors raised while checking values against schemas, and array uniqueness."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

# Leave out the schema and value dump from SchemaError messages when true.
SCHEMA_ERROR_DETAILS_DISABLED = False

SCHEMA_MISMATCH_MESSAGE = "Input does not match the schema"
NAN_NOT_ALLOWED_MESSAGE = "NaN is not allowed"
INF_NOT_ALLOWED_MESSAGE = "Inf is not allowed"


def _encode_detail(obj: Any) -> str:
    if hasattr(obj, "to_dict"):
        obj = obj.to_dict()
    text = json.dumps(obj, indent=2, ensure_ascii=False, default=str)
    text = text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")
    return text.replace("\n", "\n  ") + "\n"


class SchemaError(Exception):
    """A value does not satisfy a schema."""

    def __init__(
        self,
        value: Any = None,
        schema: Any = None,
        schema_field: str = "",
        reason: str = "",
        origin: BaseException | None = None,
    ) -> None:
        super().__init__(reason or schema_field)
        self.value = value
        self.schema = schema
        self.schema_field = schema_field
        self.reason = reason
        self.origin = origin
        self.reverse_path: list[str] = []

    def mark_key(self, key: str) -> SchemaError:
        """Record that the failing value sits under object key *key*."""
        self.reverse_path.append(key)
        return self

    def mark_index(self, index: int) -> SchemaError:
        """Record that the failing value sits at array position *index*."""
        self.reverse_path.append(str(index))
        return self

    def json_pointer(self) -> list[str]:
        """The path from the root value to the failing value."""
        return list(reversed(self.reverse_path))

    def __str__(self) -> str:
        if self.origin is not None:
            return str(self.origin)
        parts: list[str] = []
        if self.reverse_path:
            path = "".join("/" + part for part in reversed(self.reverse_path))
            parts.append(f'Error at "{path}":')
        if self.reason:
            parts.append(self.reason)
        else:
            parts.append(f"Doesn't match schema \"{self.schema_field}\"")
        if not SCHEMA_ERROR_DETAILS_DISABLED:
            parts.append("\nSchema:\n  ")
            parts.append(_encode_detail(self.schema))
            parts.append("\nValue:\n  ")
            parts.append(_encode_detail(self.value))
        return "".join(parts)


class SchemaInputError(ValueError):
    """The input is not a value that JSON can carry, such as NaN or infinity."""


class UnresolvedRefError(LookupError):
    """A schema reference was never resolved to a schema."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"Found unresolved ref: '{ref}'")
        self.ref = ref


class SchemaDefinitionError(ValueError):
    """A schema itself is malformed."""


def _canonical(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def is_slice_of_unique_items(items: Sequence[Any]) -> bool:
    """True when no two items have the same JSON encoding."""
    keys = {
        json.dumps(_canonical(item), sort_keys=True, separators=(",", ":"), default=repr)
        for item in items
    }
    return len(keys) == len(items)


_unique_items_checker: Callable[[Sequence[Any]], bool] = is_slice_of_unique_items


def register_array_unique_items_checker(fn: Callable[[Sequence[Any]], bool]) -> None:
    """Replace the function used to decide whether array items are unique."""
    global _unique_items_checker
    _unique_items_checker = fn


def items_are_unique(items: Sequence[Any]) -> bool:
    """Check uniqueness with the currently registered checker."""
    return _unique_items_checker(items)