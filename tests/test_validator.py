import base64
import json
import math

import pytest

from oaschema.formats import FORMAT_OF_STRING_FOR_UUID_OF_RFC4122, define_string_format
from oaschema.schema import (
    Schema,
    SchemaRef,
    new_any_of_schema,
    new_bool_schema,
    new_bytes_schema,
    new_date_time_schema,
    new_float64_schema,
    new_int64_schema,
    new_integer_schema,
    new_string_schema,
    new_uuid_schema,
)
from oaschema.schema_errors import (
    SchemaDefinitionError,
    SchemaError,
    SchemaInputError,
    UnresolvedRefError,
    is_slice_of_unique_items,
    register_array_unique_items_checker,
)
from oaschema.validator import (
    is_matching,
    visit_json,
    visit_json_boolean,
    visit_json_number,
    visit_json_string,
)

define_string_format("uuid", FORMAT_OF_STRING_FOR_UUID_OF_RFC4122)

_BYTES = bytes(i % 256 for i in range(1024))


def _obj_items(key_schema):
    return Schema(
        type="array",
        unique_items=True,
        items=Schema(type="object", properties={"key1": key_schema}).new_ref(),
    )


EXAMPLES = {
    "empty": (
        lambda: Schema(),
        [False, True, 3.14, "", [], {}],
        [None],
    ),
    "just nullable": (
        lambda: Schema().with_nullable(),
        [None, False, True, 0, 0.0, 3.14, "", [], {}],
        [],
    ),
    "nullable boolean": (
        lambda: new_bool_schema().with_nullable(),
        [None, False, True],
        [0, 0.0, 3.14, "", [], {}],
    ),
    "nullable anyof": (
        lambda: new_any_of_schema(new_integer_schema(), new_float64_schema()).with_nullable(),
        [None, 42, 4.2],
        [True, [42], "bla", {}],
    ),
    "boolean": (
        new_bool_schema,
        [False, True],
        [None, 3.14, "", [], {}],
    ),
    "number": (
        lambda: new_float64_schema().with_min(2.5).with_max(3.5),
        [2.5, 3.14, 3.5],
        [None, False, True, 2.4, 3.6, "", [], {}],
    ),
    "integer": (
        lambda: new_int64_schema().with_min(2).with_max(5),
        [2, 5],
        [None, False, True, 1, 6, 3.5, "", [], {}],
    ),
    "string": (
        lambda: new_string_schema().with_min_length(2).with_max_length(3).with_pattern("^[abc]+$"),
        ["ab", "abc"],
        [None, False, True, 3.14, "a", "xy", "aaaa", [], {}],
    ),
    "uuid": (
        new_uuid_schema,
        [
            "dd7d8481-81a3-407f-95f0-a2f1cb382a4b",
            "dcba3901-2fba-48c1-9db2-00422055804e",
            "ace8e3be-c254-4c10-8859-1401d9a9d52a",
        ],
        [
            None,
            "g39840b1-d0ef-446d-e555-48fcca50a90a",
            "4cf3i040-ea14-4daa-b0b5-ea9329473519",
            "aaf85740-7e27-4b4f-b4554-a03a43b1f5e3",
            "56f5bff4-z4b6-48e6-a10d-b6cf66a83b04",
        ],
    ),
    "date-time": (
        new_date_time_schema,
        [
            "2017-12-31T11:59:59",
            "2017-12-31T11:59:59Z",
            "2017-12-31T11:59:59-11:30",
            "2017-12-31T11:59:59+11:30",
            "2017-12-31T11:59:59.999+11:30",
            "2017-12-31T11:59:59.999Z",
        ],
        [
            None,
            3.14,
            "2017-12-31",
            "2017-12-31T11:59:59\n",
            "2017-12-31T11:59:59.+11:30",
            "2017-12-31T11:59:59.Z",
        ],
    ),
    "byte": (
        new_bytes_schema,
        [
            "",
            base64.standard_b64encode(_BYTES).decode(),
            base64.urlsafe_b64encode(_BYTES).decode(),
        ],
        [None, " ", "\n", "%"],
    ),
    "array": (
        lambda: Schema(
            type="array",
            min_items=2,
            max_items=3,
            unique_items=True,
            items=new_float64_schema().new_ref(),
        ),
        [[1, 2], [1, 2, 3]],
        [None, 3.14, [1], [42, 42], [1, 2, 3, 4]],
    ),
    "array of objects": (
        lambda: _obj_items(new_float64_schema().new_ref()),
        [
            [{"key1": 1, "key2": 1}, {"key1": 1}],
            [{"key1": 1}, {"key1": 2}],
        ],
        [[{"key1": 1}, {"key1": 1}]],
    ),
    "array of objects holding arrays": (
        lambda: _obj_items(
            Schema(
                type="array", unique_items=True, items=new_float64_schema().new_ref()
            ).new_ref()
        ),
        [
            [{"key1": [1, 2]}, {"key1": [3, 4]}],
            [{"key1": [10, 9]}, {"key1": [9, 10]}],
        ],
        [
            [{"key1": [9, 9]}, {"key1": [9, 9]}],
            [{"key1": [9, 9]}, {"key1": [8, 8]}],
        ],
    ),
    "array of arrays": (
        lambda: Schema(
            type="array",
            unique_items=True,
            items=Schema(
                type="array", unique_items=True, items=new_float64_schema().new_ref()
            ).new_ref(),
        ),
        [[[1, 2], [3, 4]], [[1, 2], [2, 1]]],
        [[[8, 9], [8, 9]], [[9, 9], [8, 8]]],
    ),
    "array of arrays of objects": (
        lambda: Schema(
            type="array",
            unique_items=True,
            items=Schema(
                type="array",
                unique_items=True,
                items=Schema(
                    type="object", properties={"key1": new_float64_schema().new_ref()}
                ).new_ref(),
            ).new_ref(),
        ),
        [
            [[{"key1": 1}], [{"key1": 2}]],
            [[{"key1": 1}, {"key1": 2}], [{"key1": 2}, {"key1": 1}]],
        ],
        [
            [[{"key1": 1}, {"key1": 2}], [{"key1": 1}, {"key1": 2}]],
            [[{"key1": 1}, {"key1": 1}], [{"key1": 2}, {"key1": 2}]],
        ],
    ),
    "object": (
        lambda: Schema(
            type="object",
            max_props=2,
            properties={"numberProperty": new_float64_schema().new_ref()},
        ),
        [{}, {"numberProperty": 3.14}, {"numberProperty": 3.14, "some prop": None}],
        [
            None,
            False,
            True,
            3.14,
            "",
            [],
            {"numberProperty": "abc"},
            {"numberProperty": 3.14, "some prop": 42, "third": "prop"},
        ],
    ),
    "additional properties schema": (
        lambda: Schema(
            type="object", additional_properties=SchemaRef(value=Schema(type="number"))
        ),
        [{}, {"x": 3.14, "y": 3.14}],
        [{"x": "abc"}],
    ),
    "additional properties allowed": (
        lambda: Schema(type="object", additional_properties_allowed=True),
        [{}, {"x": False, "y": 3.14}],
        [],
    ),
    "not": (
        lambda: Schema(not_=SchemaRef(value=Schema(enum=[None, True, 3.14, "not this"]))),
        [False, 2, "abc"],
        [None, True, 3.14, "not this"],
    ),
    "any of": (
        lambda: Schema(
            any_of=[
                SchemaRef(value=new_float64_schema().with_min(1).with_max(2)),
                SchemaRef(value=new_float64_schema().with_min(2).with_max(3)),
            ]
        ),
        [1, 2, 3],
        [0, 4],
    ),
    "all of": (
        lambda: Schema(
            all_of=[
                SchemaRef(value=new_float64_schema().with_min(1).with_max(2)),
                SchemaRef(value=new_float64_schema().with_min(2).with_max(3)),
            ]
        ),
        [2],
        [0, 1, 3, 4],
    ),
    "one of": (
        lambda: Schema(
            one_of=[
                SchemaRef(value=new_float64_schema().with_min(1).with_max(2)),
                SchemaRef(value=new_float64_schema().with_min(2).with_max(3)),
            ]
        ),
        [1, 3],
        [0, 2, 4],
    ),
}


def _round_trip(value):
    return json.loads(json.dumps(value))


@pytest.mark.parametrize("name", sorted(EXAMPLES))
def test_examples_valid(name):
    factory, valid, _ = EXAMPLES[name]
    schema = factory()
    for value in valid:
        assert visit_json(schema, _round_trip(value)) is None
        assert is_matching(schema, _round_trip(value)) is True


@pytest.mark.parametrize("name", sorted(EXAMPLES))
def test_examples_invalid(name):
    factory, _, invalid = EXAMPLES[name]
    schema = factory()
    for value in invalid:
        with pytest.raises(SchemaError):
            visit_json(schema, _round_trip(value))
        assert is_matching(schema, _round_trip(value)) is False


@pytest.mark.parametrize("name", sorted(EXAMPLES))
@pytest.mark.parametrize("value", [math.nan, -math.inf, math.inf])
def test_nan_and_inf_rejected(name, value):
    schema = EXAMPLES[name][0]()
    with pytest.raises(SchemaInputError):
        visit_json(schema, value)


def test_nan_message():
    with pytest.raises(SchemaInputError, match="NaN is not allowed"):
        visit_json(Schema(), math.nan)


def test_register_array_unique_items_checker():
    schema = Schema(type="array", unique_items=True, items=new_string_schema().new_ref())
    values = ["1", "2", "3"]
    assert visit_json(schema, values) is None
    register_array_unique_items_checker(lambda items: False)
    try:
        with pytest.raises(SchemaError) as info:
            visit_json(schema, values)
        assert str(info.value).startswith("Duplicate items found")
    finally:
        register_array_unique_items_checker(is_slice_of_unique_items)
    assert visit_json(schema, values) is None


def test_error_path_through_array_and_object():
    schema = Schema(
        type="array",
        items=Schema(type="object", properties={"key1": new_float64_schema().new_ref()}).new_ref(),
    )
    with pytest.raises(SchemaError) as info:
        visit_json(schema, [{"key1": 1}, {"key1": "abc"}])
    assert info.value.json_pointer() == ["1", "key1"]
    assert 'Error at "/1/key1":' in str(info.value)


def test_required_property_missing():
    schema = Schema(type="object", required=["name"])
    with pytest.raises(SchemaError) as info:
        visit_json(schema, {"tag": "x"})
    assert info.value.schema_field == "required"
    assert info.value.reason == "Property 'name' is missing"


def test_additional_properties_forbidden():
    schema = Schema(
        type="object",
        additional_properties_allowed=False,
        properties={"a": new_string_schema().new_ref()},
    )
    assert visit_json(schema, {"a": "ok"}) is None
    with pytest.raises(SchemaError) as info:
        visit_json(schema, {"a": "ok", "x": 1})
    assert info.value.reason == "Property 'x' is unsupported"


def test_all_of_error_uses_origin_message():
    schema = Schema(all_of=[SchemaRef(value=new_float64_schema().with_min(2.5))])
    with pytest.raises(SchemaError) as info:
        visit_json(schema, 1)
    assert info.value.schema_field == "allOf"
    assert str(info.value) == str(info.value.origin)
    assert info.value.origin.reason == "Number must be at least 2.5"


def test_minimum_reason_formats_integral_number():
    with pytest.raises(SchemaError) as info:
        visit_json(new_integer_schema().with_min(2), 1)
    assert info.value.reason == "Number must be at least 2"


def test_exclusive_minimum():
    schema = new_float64_schema().with_min(1).with_exclusive_min(True)
    assert is_matching(schema, 1.5)
    with pytest.raises(SchemaError) as info:
        visit_json(schema, 1)
    assert info.value.schema_field == "exclusiveMinimum"
    assert info.value.reason == "Number must be more than 1"


def test_multiple_of():
    schema = Schema(type="number", multiple_of=0.5)
    assert is_matching(schema, 1.5)
    with pytest.raises(SchemaError) as info:
        visit_json(schema, 1.2)
    assert info.value.schema_field == "multipleOf"


def test_expected_type_message():
    with pytest.raises(SchemaError) as info:
        visit_json(new_bool_schema(), "x")
    assert info.value.schema_field == "type"
    assert info.value.reason == "Field must be set to boolean or not be present"


def test_enum_distinguishes_booleans_from_numbers():
    schema = Schema().with_enum(1)
    assert is_matching(schema, 1)
    assert is_matching(schema, 1.0)
    assert not is_matching(schema, True)


def test_not_a_json_value():
    with pytest.raises(SchemaError) as info:
        visit_json(Schema(), object())
    assert info.value.schema_field == "type"
    assert info.value.reason.startswith("Not a JSON value")


def test_string_length_counts_characters():
    schema = new_string_schema().with_max_length(1)
    assert visit_json_string(schema, "é") is None
    with pytest.raises(SchemaError) as info:
        visit_json_string(schema, "ab")
    assert info.value.reason == "Maximum string length is 1"


def test_pattern_mismatch_field():
    schema = new_string_schema().with_pattern("^[0-9]+$")
    with pytest.raises(SchemaError) as info:
        visit_json(schema, "12a")
    assert info.value.schema_field == "pattern"


def test_invalid_pattern():
    schema = new_string_schema().with_pattern("[")
    with pytest.raises(SchemaDefinitionError):
        visit_json(schema, "x")
    assert is_matching(schema, "x") is False


def test_unresolved_ref():
    schema = Schema(all_of=[SchemaRef(ref="#/components/schemas/Missing")])
    with pytest.raises(UnresolvedRefError):
        visit_json(schema, 1)
    assert is_matching(schema, 1) is False


def test_direct_number_visit_checks_integer():
    with pytest.raises(SchemaError) as info:
        visit_json_number(new_integer_schema(), 3.5)
    assert info.value.reason == "Value must be an integer"
    assert visit_json_number(new_integer_schema(), 3.0) is None


def test_direct_boolean_visit():
    with pytest.raises(SchemaError):
        visit_json_boolean(new_string_schema(), True)
    assert visit_json_boolean(new_bool_schema(), False) is None


def test_null_message():
    with pytest.raises(SchemaError) as info:
        visit_json(new_string_schema(), None)
    assert info.value.reason == "Value is not nullable"