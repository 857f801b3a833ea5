"""The schema object: building, serializing and checking its definition."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .formats import SCHEMA_STRING_FORMATS
from .schema_errors import SchemaDefinitionError, UnresolvedRefError

# Accept any string, number or integer format when true.
SCHEMA_FORMAT_VALIDATION_DISABLED = False

_NUMBER_FORMATS = frozenset({"float", "double"})
_INTEGER_FORMATS = frozenset({"int32", "int64"})
_STRING_FORMATS = frozenset(
    {
        # OpenAPI 3.0.1
        "byte", "binary", "date", "date-time", "password",
        # JSON Schema draft-07, accepted but not checked
        "regex", "time", "email", "idn-email",
        "hostname", "idn-hostname", "ipv4", "ipv6",
        "uri", "uri-reference", "iri", "iri-reference", "uri-template",
        "json-pointer", "relative-json-pointer",
    }
)


def _num(value: float) -> float | int:
    """Render integral floats as integers, as JSON encoders usually do."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _plain(value: Any) -> Any:
    return value.to_dict() if hasattr(value, "to_dict") else value


def _unsupported_format(fmt: str) -> SchemaDefinitionError:
    return SchemaDefinitionError(f"Unsupported 'format' value '{fmt}'")


@dataclass
class SchemaRef:
    """A schema given inline or by a ``$ref`` reference."""

    ref: str = ""
    value: Schema | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.ref:
            return {"$ref": self.ref}
        if self.value is None:
            return {}
        return self.value.to_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SchemaRef:
        if not isinstance(data, dict):
            raise SchemaDefinitionError("A schema must be a JSON object")
        if "$ref" in data:
            return cls(ref=data["$ref"])
        return cls(value=Schema.from_dict(data))

    def resolved(self) -> Schema:
        """The referenced schema; raises when the reference was never resolved."""
        if self.value is None:
            raise UnresolvedRefError(self.ref)
        return self.value


def _ref_or_none(data: Any) -> SchemaRef | None:
    return None if data is None else SchemaRef.from_dict(data)


def _opt_float(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    return None if value is None else float(value)


def _opt_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    return None if value is None else int(value)


@dataclass
class Schema:
    """An OpenAPI 3.0 schema object."""

    one_of: list[SchemaRef] = field(default_factory=list)
    any_of: list[SchemaRef] = field(default_factory=list)
    all_of: list[SchemaRef] = field(default_factory=list)
    not_: SchemaRef | None = None
    type: str = ""
    title: str = ""
    format: str = ""
    description: str = ""
    enum: list[Any] = field(default_factory=list)
    default: Any = None
    example: Any = None
    external_docs: Any = None

    additional_properties_allowed: bool | None = None
    unique_items: bool = False
    exclusive_min: bool = False
    exclusive_max: bool = False
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    xml: Any = None

    min: float | None = None
    max: float | None = None
    multiple_of: float | None = None

    min_length: int = 0
    max_length: int | None = None
    pattern: str = ""

    min_items: int = 0
    max_items: int | None = None
    items: SchemaRef | None = None

    required: list[str] = field(default_factory=list)
    properties: dict[str, SchemaRef] = field(default_factory=dict)
    min_props: int = 0
    max_props: int | None = None
    additional_properties: SchemaRef | None = None
    discriminator: Any = None

    extensions: dict[str, Any] = field(default_factory=dict)
    _compiled_pattern: Any = field(default=None, init=False, repr=False, compare=False)

    # ----- building -----

    def new_ref(self) -> SchemaRef:
        """An inline reference to this schema."""
        return SchemaRef(value=self)

    def with_nullable(self) -> Schema:
        self.nullable = True
        return self

    def with_min(self, value: float) -> Schema:
        self.min = float(value)
        return self

    def with_max(self, value: float) -> Schema:
        self.max = float(value)
        return self

    def with_exclusive_min(self, value: bool) -> Schema:
        self.exclusive_min = value
        return self

    def with_exclusive_max(self, value: bool) -> Schema:
        self.exclusive_max = value
        return self

    def with_enum(self, *values: Any) -> Schema:
        self.enum = list(values)
        return self

    def with_default(self, value: Any) -> Schema:
        self.default = value
        return self

    def with_format(self, value: str) -> Schema:
        self.format = value
        return self

    def with_length(self, n: int) -> Schema:
        self.min_length = n
        self.max_length = n
        return self

    def with_min_length(self, n: int) -> Schema:
        self.min_length = n
        return self

    def with_max_length(self, n: int) -> Schema:
        self.max_length = n
        return self

    def with_length_decoded_base64(self, n: int) -> Schema:
        encoded = (n * 8 + 5) // 6
        self.min_length = encoded
        self.max_length = encoded
        return self

    def with_min_length_decoded_base64(self, n: int) -> Schema:
        self.min_length = (n * 8 + 5) // 6
        return self

    def with_max_length_decoded_base64(self, n: int) -> Schema:
        # Sets the minimum length, exactly as the reference behaviour does.
        self.min_length = (n * 8 + 5) // 6
        return self

    def with_pattern(self, pattern: str) -> Schema:
        self.pattern = pattern
        return self

    def with_items(self, schema: Schema) -> Schema:
        self.items = SchemaRef(value=schema)
        return self

    def with_min_items(self, n: int) -> Schema:
        self.min_items = n
        return self

    def with_max_items(self, n: int) -> Schema:
        self.max_items = n
        return self

    def with_unique_items(self, unique: bool) -> Schema:
        self.unique_items = unique
        return self

    def with_property(self, name: str, schema: Schema) -> Schema:
        return self.with_property_ref(name, SchemaRef(value=schema))

    def with_property_ref(self, name: str, ref: SchemaRef) -> Schema:
        self.properties[name] = ref
        return self

    def with_properties(self, properties: dict[str, Schema]) -> Schema:
        self.properties = {k: SchemaRef(value=v) for k, v in properties.items()}
        return self

    def with_min_properties(self, n: int) -> Schema:
        self.min_props = n
        return self

    def with_max_properties(self, n: int) -> Schema:
        self.max_props = n
        return self

    def with_any_additional_properties(self) -> Schema:
        self.additional_properties = None
        self.additional_properties_allowed = True
        return self

    def with_additional_properties(self, schema: Schema | None) -> Schema:
        self.additional_properties = None if schema is None else SchemaRef(value=schema)
        return self

    # ----- inspection -----

    def is_empty(self) -> bool:
        """True when the schema accepts every value, null included."""
        if (
            self.type or self.format or self.enum
            or self.unique_items or self.exclusive_min or self.exclusive_max
            or not self.nullable
            or self.min is not None or self.max is not None or self.multiple_of is not None
            or self.min_length != 0 or self.max_length is not None or self.pattern
            or self.min_items != 0 or self.max_items is not None
            or self.required
            or self.min_props != 0 or self.max_props is not None
        ):
            return False
        if self.not_ is not None and not self.not_.resolved().is_empty():
            return False
        if (
            self.additional_properties is not None
            and not self.additional_properties.resolved().is_empty()
        ):
            return False
        if self.additional_properties_allowed is False:
            return False
        if self.items is not None and not self.items.resolved().is_empty():
            return False
        nested: Iterable[SchemaRef] = [
            *self.properties.values(), *self.one_of, *self.any_of, *self.all_of
        ]
        return all(ref.resolved().is_empty() for ref in nested)

    def validate(self) -> None:
        """Check that the schema itself is well formed; raises on the first problem."""
        self._validate([])

    def _validate(self, stack: list[Schema]) -> None:
        if any(existing is self for existing in stack):
            return
        stack = [*stack, self]
        pending: Exception | None = None

        for ref in self.one_of:
            try:
                ref.resolved()._validate(stack)
            except UnresolvedRefError as err:
                if ref.value is None:
                    raise
                pending = err
            except SchemaDefinitionError as err:
                pending = err
            else:
                return

        later: list[SchemaRef] = [*self.any_of, *self.all_of]
        if self.not_ is not None:
            later.append(self.not_)
        for ref in later:
            ref.resolved()._validate(stack)
            pending = None

        self._validate_type()

        nested: list[SchemaRef] = []
        if self.items is not None:
            nested.append(self.items)
        nested.extend(self.properties.values())
        if self.additional_properties is not None:
            nested.append(self.additional_properties)
        for ref in nested:
            ref.resolved()._validate(stack)
            pending = None

        if pending is not None:
            raise pending

    def _validate_type(self) -> None:
        fmt = self.format
        if self.type in ("", "boolean", "object"):
            return
        if self.type == "number":
            if fmt and fmt not in _NUMBER_FORMATS and not SCHEMA_FORMAT_VALIDATION_DISABLED:
                raise _unsupported_format(fmt)
        elif self.type == "integer":
            if fmt and fmt not in _INTEGER_FORMATS and not SCHEMA_FORMAT_VALIDATION_DISABLED:
                raise _unsupported_format(fmt)
        elif self.type == "string":
            if (
                fmt
                and fmt not in _STRING_FORMATS
                and fmt not in SCHEMA_STRING_FORMATS
                and not SCHEMA_FORMAT_VALIDATION_DISABLED
            ):
                raise _unsupported_format(fmt)
        elif self.type == "array":
            if self.items is None:
                raise SchemaDefinitionError(
                    "When schema type is 'array', schema 'items' must be non-null"
                )
        else:
            raise SchemaDefinitionError(f"Unsupported 'type' value '{self.type}'")

    # ----- serialization -----

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extensions)
        for key, refs in (("oneOf", self.one_of), ("anyOf", self.any_of), ("allOf", self.all_of)):
            if refs:
                out[key] = [ref.to_dict() for ref in refs]
        if self.not_ is not None:
            out["not"] = self.not_.to_dict()
        for key, text in (
            ("type", self.type), ("title", self.title),
            ("format", self.format), ("description", self.description),
        ):
            if text:
                out[key] = text
        if self.enum:
            out["enum"] = list(self.enum)
        for key, value in (
            ("default", self.default), ("example", self.example),
            ("externalDocs", self.external_docs),
        ):
            if value is not None:
                out[key] = _plain(value)
        if self.additional_properties is not None:
            out["additionalProperties"] = self.additional_properties.to_dict()
        elif self.additional_properties_allowed is not None:
            out["additionalProperties"] = self.additional_properties_allowed
        for key, flag in (
            ("uniqueItems", self.unique_items), ("exclusiveMinimum", self.exclusive_min),
            ("exclusiveMaximum", self.exclusive_max), ("nullable", self.nullable),
            ("readOnly", self.read_only), ("writeOnly", self.write_only),
        ):
            if flag:
                out[key] = True
        if self.xml is not None:
            out["xml"] = _plain(self.xml)
        for key, number in (
            ("minimum", self.min), ("maximum", self.max), ("multipleOf", self.multiple_of),
        ):
            if number is not None:
                out[key] = _num(number)
        if self.min_length:
            out["minLength"] = self.min_length
        if self.max_length is not None:
            out["maxLength"] = self.max_length
        if self.pattern:
            out["pattern"] = self.pattern
        if self.min_items:
            out["minItems"] = self.min_items
        if self.max_items is not None:
            out["maxItems"] = self.max_items
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.required:
            out["required"] = list(self.required)
        if self.properties:
            out["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.min_props:
            out["minProperties"] = self.min_props
        if self.max_props is not None:
            out["maxProperties"] = self.max_props
        if self.discriminator is not None:
            out["discriminator"] = _plain(self.discriminator)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Schema:
        if not isinstance(data, dict):
            raise SchemaDefinitionError("A schema must be a JSON object")
        additional = data.get("additionalProperties")
        allowed: bool | None = None
        additional_ref: SchemaRef | None = None
        if isinstance(additional, bool):
            allowed = additional
        elif additional is not None:
            additional_ref = SchemaRef.from_dict(additional)
        return cls(
            one_of=[SchemaRef.from_dict(d) for d in data.get("oneOf") or []],
            any_of=[SchemaRef.from_dict(d) for d in data.get("anyOf") or []],
            all_of=[SchemaRef.from_dict(d) for d in data.get("allOf") or []],
            not_=_ref_or_none(data.get("not")),
            type=data.get("type") or "",
            title=data.get("title") or "",
            format=data.get("format") or "",
            description=data.get("description") or "",
            enum=list(data.get("enum") or []),
            default=data.get("default"),
            example=data.get("example"),
            external_docs=data.get("externalDocs"),
            additional_properties_allowed=allowed,
            unique_items=bool(data.get("uniqueItems", False)),
            exclusive_min=bool(data.get("exclusiveMinimum", False)),
            exclusive_max=bool(data.get("exclusiveMaximum", False)),
            nullable=bool(data.get("nullable", False)),
            read_only=bool(data.get("readOnly", False)),
            write_only=bool(data.get("writeOnly", False)),
            xml=data.get("xml"),
            min=_opt_float(data, "minimum"),
            max=_opt_float(data, "maximum"),
            multiple_of=_opt_float(data, "multipleOf"),
            min_length=int(data.get("minLength") or 0),
            max_length=_opt_int(data, "maxLength"),
            pattern=data.get("pattern") or "",
            min_items=int(data.get("minItems") or 0),
            max_items=_opt_int(data, "maxItems"),
            items=_ref_or_none(data.get("items")),
            required=list(data.get("required") or []),
            properties={
                k: SchemaRef.from_dict(v) for k, v in (data.get("properties") or {}).items()
            },
            min_props=int(data.get("minProperties") or 0),
            max_props=_opt_int(data, "maxProperties"),
            additional_properties=additional_ref,
            discriminator=data.get("discriminator"),
            extensions={k: v for k, v in data.items() if k.startswith("x-")},
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str | bytes) -> Schema:
        return cls.from_dict(json.loads(text))


def new_one_of_schema(*schemas: Schema) -> Schema:
    return Schema(one_of=[SchemaRef(value=s) for s in schemas])


def new_any_of_schema(*schemas: Schema) -> Schema:
    return Schema(any_of=[SchemaRef(value=s) for s in schemas])


def new_all_of_schema(*schemas: Schema) -> Schema:
    return Schema(all_of=[SchemaRef(value=s) for s in schemas])


def new_bool_schema() -> Schema:
    return Schema(type="boolean")


def new_float64_schema() -> Schema:
    return Schema(type="number")


def new_integer_schema() -> Schema:
    return Schema(type="integer")


def new_int32_schema() -> Schema:
    return Schema(type="integer", format="int32")


def new_int64_schema() -> Schema:
    return Schema(type="integer", format="int64")


def new_string_schema() -> Schema:
    return Schema(type="string")


def new_date_time_schema() -> Schema:
    return Schema(type="string", format="date-time")


def new_uuid_schema() -> Schema:
    return Schema(type="string", format="uuid")


def new_bytes_schema() -> Schema:
    return Schema(type="string", format="byte")


def new_array_schema() -> Schema:
    return Schema(type="array")


def new_object_schema() -> Schema:
    return Schema(type="object", properties={})