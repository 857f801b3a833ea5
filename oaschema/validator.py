"""Checking JSON values against schemas."""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

from .formats import SCHEMA_STRING_FORMATS, _compile
from .schema import Schema
from .schema_errors import (
    INF_NOT_ALLOWED_MESSAGE,
    NAN_NOT_ALLOWED_MESSAGE,
    SCHEMA_MISMATCH_MESSAGE,
    SchemaDefinitionError,
    SchemaError,
    SchemaInputError,
    UnresolvedRefError,
    items_are_unique,
)

_VALIDATION_ERRORS = (SchemaError, SchemaInputError, UnresolvedRefError, SchemaDefinitionError)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_g(x: float) -> str:
    """Format a number with the shortest digits, switching to exponent form like ``%g``."""
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    d = Decimal(repr(x)).normalize()
    sign, digits, exponent = d.as_tuple()
    if d.is_zero():
        return "-0" if sign else "0"
    count = len(digits)
    exp10 = count + exponent - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = "".join(str(digit) for digit in digits)
        text = mantissa[0] + ("." + mantissa[1:] if count > 1 else "")
        text += "e" + ("-" if exp10 < 0 else "+") + f"{abs(exp10):02d}"
        return ("-" if sign else "") + text
    return f"{d:f}"


def _json_equal(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_json_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_json_equal(x, y) for x, y in zip(a, b))
    return a == b


def _fail(
    schema: Schema,
    value: Any,
    field: str,
    reason: str = "",
    *,
    fast: bool,
    origin: BaseException | None = None,
) -> SchemaError:
    if fast:
        return SchemaError(reason=SCHEMA_MISMATCH_MESSAGE)
    return SchemaError(
        value=value, schema=schema, schema_field=field, reason=reason, origin=origin
    )


def _expected_type(schema: Schema, typ: str, fast: bool) -> SchemaError:
    return _fail(
        schema,
        typ,
        "type",
        f"Field must be set to {schema.type} or not be present",
        fast=fast,
    )


def visit_json(schema: Schema, value: Any) -> None:
    """Check *value* against *schema*; raises a SchemaError describing the first mismatch."""
    _visit(schema, value, fast=False)


def is_matching(schema: Schema, value: Any) -> bool:
    """True when *value* satisfies *schema*."""
    try:
        _visit(schema, value, fast=True)
    except _VALIDATION_ERRORS:
        return False
    return True


def visit_json_boolean(schema: Schema, value: bool) -> None:
    """Check a boolean against the type-specific rules of *schema*."""
    _visit_boolean(schema, value, fast=False)


def visit_json_number(schema: Schema, value: float) -> None:
    """Check a number against the type-specific rules of *schema*."""
    _visit_number(schema, value, fast=False)


def visit_json_string(schema: Schema, value: str) -> None:
    """Check a string against the type-specific rules of *schema*."""
    _visit_string(schema, value, fast=False)


def visit_json_array(schema: Schema, value: list[Any]) -> None:
    """Check an array against the type-specific rules of *schema*."""
    _visit_array(schema, value, fast=False)


def visit_json_object(schema: Schema, value: dict[str, Any]) -> None:
    """Check an object against the type-specific rules of *schema*."""
    _visit_object(schema, value, fast=False)


def _visit(schema: Schema, value: Any, fast: bool) -> None:
    if value is None:
        _visit_null(schema, fast)
        return
    if isinstance(value, float):
        if math.isnan(value):
            raise SchemaInputError(NAN_NOT_ALLOWED_MESSAGE)
        if math.isinf(value):
            raise SchemaInputError(INF_NOT_ALLOWED_MESSAGE)

    if schema.is_empty():
        return
    _visit_set_operations(schema, value, fast)

    if isinstance(value, bool):
        _visit_boolean(schema, value, fast)
    elif _is_number(value):
        _visit_number(schema, value, fast)
    elif isinstance(value, str):
        _visit_string(schema, value, fast)
    elif isinstance(value, (list, tuple)):
        _visit_array(schema, value, fast)
    elif isinstance(value, dict):
        _visit_object(schema, value, fast)
    else:
        raise SchemaError(
            value=value,
            schema=schema,
            schema_field="type",
            reason=f"Not a JSON value: {type(value).__name__}",
        )


def _visit_set_operations(schema: Schema, value: Any, fast: bool) -> None:
    if schema.enum:
        if any(_json_equal(value, allowed) for allowed in schema.enum):
            return
        raise _fail(
            schema, value, "enum", "JSON value is not one of the allowed values", fast=fast
        )

    if schema.not_ is not None:
        if is_matching(schema.not_.resolved(), value):
            raise _fail(schema, value, "not", fast=fast)

    if schema.one_of:
        matches = sum(is_matching(ref.resolved(), value) for ref in schema.one_of)
        if matches != 1:
            raise _fail(schema, value, "oneOf", fast=fast)

    if schema.any_of:
        matched = False
        for ref in schema.any_of:
            if is_matching(ref.resolved(), value):
                matched = True
                break
        if not matched:
            raise _fail(schema, value, "anyOf", fast=fast)

    for ref in schema.all_of:
        sub = ref.resolved()
        try:
            _visit(sub, value, fast=False)
        except _VALIDATION_ERRORS as err:
            raise _fail(schema, value, "allOf", fast=fast, origin=err) from err


def _visit_null(schema: Schema, fast: bool) -> None:
    if schema.nullable:
        return
    raise _fail(schema, None, "nullable", "Value is not nullable", fast=fast)


def _visit_boolean(schema: Schema, value: bool, fast: bool) -> None:
    if schema.type not in ("", "boolean"):
        raise _expected_type(schema, "boolean", fast)


def _visit_number(schema: Schema, value: float, fast: bool) -> None:
    if schema.type == "integer":
        integral = isinstance(value, int) or float(value).is_integer()
        if not integral:
            raise _fail(schema, value, "type", "Value must be an integer", fast=fast)
    elif schema.type not in ("", "number"):
        raise _expected_type(schema, "number, integer", fast)

    if schema.exclusive_min and schema.min is not None and not schema.min < value:
        raise _fail(
            schema,
            value,
            "exclusiveMinimum",
            f"Number must be more than {_format_g(schema.min)}",
            fast=fast,
        )
    if schema.exclusive_max and schema.max is not None and not schema.max > value:
        raise _fail(
            schema,
            value,
            "exclusiveMaximum",
            f"Number must be less than {_format_g(schema.max)}",
            fast=fast,
        )
    if schema.min is not None and not schema.min <= value:
        raise _fail(
            schema,
            value,
            "minimum",
            f"Number must be at least {_format_g(schema.min)}",
            fast=fast,
        )
    if schema.max is not None and not schema.max >= value:
        raise _fail(
            schema,
            value,
            "maximum",
            f"Number must be most {_format_g(schema.max)}",
            fast=fast,
        )
    if schema.multiple_of is not None:
        # Valid only when dividing by multipleOf gives an integer.
        if schema.multiple_of == 0:
            integral = False
        else:
            quotient = float(value) / schema.multiple_of
            integral = math.isfinite(quotient) and quotient.is_integer()
        if not integral:
            raise _fail(schema, value, "multipleOf", fast=fast)


def _utf16_length(value: str) -> int:
    return sum(2 if 0xD800 <= ord(ch) <= 0xDFFF else 1 for ch in value)


def _string_matcher(schema: Schema) -> tuple[re.Pattern[str], str] | None:
    cached = schema._compiled_pattern
    if cached is not None:
        return cached
    if schema.pattern:
        try:
            regex = _compile(schema.pattern)
        except re.error as err:
            raise SchemaDefinitionError(
                f"Error while compiling regular expression '{schema.pattern}': {err}"
            ) from err
        cached = (
            regex,
            f"JSON string doesn't match the regular expression '{schema.pattern}'",
        )
    elif schema.format:
        regex = SCHEMA_STRING_FORMATS.get(schema.format)
        if regex is None:
            return None
        cached = (
            regex,
            f"JSON string doesn't match the format '{schema.format} "
            f"(regular expression `{regex.pattern}`)'",
        )
    else:
        return None
    schema._compiled_pattern = cached
    return cached


def _visit_string(schema: Schema, value: str, fast: bool) -> None:
    if schema.type not in ("", "string"):
        raise _expected_type(schema, "string", fast)

    min_length = schema.min_length
    max_length = schema.max_length
    if min_length != 0 or max_length is not None:
        # String lengths are counted in UTF-16 units.
        length = _utf16_length(value)
        if min_length != 0 and length < min_length:
            raise _fail(
                schema, value, "minLength", f"Minimum string length is {min_length}", fast=fast
            )
        if max_length is not None and length > max_length:
            raise _fail(
                schema, value, "maxLength", f"Maximum string length is {max_length}", fast=fast
            )

    matcher = _string_matcher(schema)
    if matcher is not None:
        regex, reason = matcher
        if not regex.search(value):
            raise SchemaError(
                value=value,
                schema=schema,
                schema_field="pattern" if schema.pattern else "format",
                reason=reason,
            )


def _visit_array(schema: Schema, value: list[Any], fast: bool) -> None:
    if schema.type not in ("", "array"):
        raise _expected_type(schema, "array", fast)

    count = len(value)
    if schema.min_items != 0 and count < schema.min_items:
        raise _fail(
            schema,
            value,
            "minItems",
            f"Minimum number of items is {schema.min_items}",
            fast=fast,
        )
    if schema.max_items is not None and count > schema.max_items:
        raise _fail(
            schema,
            value,
            "maxItems",
            f"Maximum number of items is {schema.max_items}",
            fast=fast,
        )
    if schema.unique_items and not items_are_unique(value):
        raise _fail(schema, value, "uniqueItems", "Duplicate items found", fast=fast)

    if schema.items is not None:
        item_schema = schema.items.resolved()
        for index, item in enumerate(value):
            try:
                visit_json(item_schema, item)
            except SchemaError as err:
                raise err.mark_index(index)


def _visit_property(sub: Schema, key: str, item: Any, fast: bool) -> None:
    try:
        visit_json(sub, item)
    except _VALIDATION_ERRORS as err:
        if fast:
            raise SchemaError(reason=SCHEMA_MISMATCH_MESSAGE) from err
        if isinstance(err, SchemaError):
            raise err.mark_key(key)
        raise


def _visit_object(schema: Schema, value: dict[str, Any], fast: bool) -> None:
    if schema.type not in ("", "object"):
        raise _expected_type(schema, "object", fast)

    count = len(value)
    if schema.min_props != 0 and count < schema.min_props:
        raise _fail(
            schema,
            value,
            "minProperties",
            f"There must be at least {schema.min_props} properties",
            fast=fast,
        )
    if schema.max_props is not None and count > schema.max_props:
        raise _fail(
            schema,
            value,
            "maxProperties",
            f"There must be at most {schema.max_props} properties",
            fast=fast,
        )

    additional = (
        schema.additional_properties.value if schema.additional_properties is not None else None
    )
    allowed = schema.additional_properties_allowed
    for key, item in value.items():
        property_ref = schema.properties.get(key)
        if property_ref is not None:
            _visit_property(property_ref.resolved(), key, item, fast)
            continue
        if additional is not None or allowed is None or allowed:
            if additional is not None:
                _visit_property(additional, key, item, fast)
            continue
        raise _fail(
            schema, value, "properties", f"Property '{key}' is unsupported", fast=fast
        )

    for key in schema.required:
        if key not in value:
            raise _fail(
                schema, value, "required", f"Property '{key}' is missing", fast=fast
            )