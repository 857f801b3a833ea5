# oaschema

Models for parts of an OpenAPI 3 document (schemas, security schemes,
security requirements, servers and tags), with checks of the definitions
themselves and validation of JSON values against a schema.

## Installation

```
pip install oaschema
```

The package has no runtime dependencies.

## Schemas

`oaschema.schema` holds `Schema` and `SchemaRef`. Build schemas with the
`new_*_schema` helpers (`new_string_schema`, `new_float64_schema`,
`new_integer_schema`, `new_int32_schema`, `new_int64_schema`,
`new_bool_schema`, `new_array_schema`, `new_object_schema`,
`new_date_time_schema`, `new_uuid_schema`, `new_bytes_schema`,
`new_one_of_schema`, `new_any_of_schema`, `new_all_of_schema`) and the
chainable `with_*` methods. Check that the definition is well formed with
`validate()`, which raises `SchemaDefinitionError` (or `UnresolvedRefError`
for a reference that has no schema attached):

```python
from oaschema.schema import new_float64_schema, new_string_schema

price = new_float64_schema().with_min(0).with_max(1000)
code = new_string_schema().with_min_length(2).with_max_length(3).with_pattern("^[abc]+$")

price.validate()
```

Schemas convert to and from plain dicts and JSON with `to_dict`,
`from_dict`, `to_json` and `from_json`. `is_empty()` tells whether a schema
accepts every value, null included.

Unknown formats are rejected by `validate()`; set
`oaschema.schema.SCHEMA_FORMAT_VALIDATION_DISABLED = True` to accept them.

## Validating values

```python
from oaschema.validator import visit_json, is_matching
from oaschema.schema_errors import SchemaError

is_matching(price, 3.14)  # True
try:
    visit_json(code, "xyz")
except SchemaError as err:
    print(err.json_pointer(), err)
```

`visit_json` raises `SchemaError` describing the first mismatch;
`json_pointer()` gives the path from the root value to the failing one.
NaN and infinite numbers raise `SchemaInputError`. `is_matching` returns a
bool instead of raising. `visit_json_boolean`, `visit_json_number`,
`visit_json_string`, `visit_json_array` and `visit_json_object` apply only
the type-specific rules.

Error messages include a JSON dump of the schema and value; set
`oaschema.schema_errors.SCHEMA_ERROR_DETAILS_DISABLED = True` to leave it
out.

String formats `email`, `byte`, `date` and `date-time` are checked by
regular expression. Add or replace one with
`oaschema.formats.define_string_format(name, pattern)`; for example
`define_string_format("uuid", FORMAT_OF_STRING_FOR_UUID_OF_RFC4122)`. The
check used for `uniqueItems` can be replaced with
`oaschema.schema_errors.register_array_unique_items_checker(fn)`.

## Security

```python
from oaschema.security import SecurityRequirement, SecurityScheme, new_jwt_security_scheme

new_jwt_security_scheme().validate()
scheme = SecurityScheme.from_json('{"type": "apiKey", "name": "api_key", "in": "header"}')
scheme.validate()

requirement = SecurityRequirement().authenticate("provider", "scope1")
requirement.to_json()  # '{"provider":["scope1"]}'
```

`SecurityScheme.validate` checks the `apiKey`, `http` (basic or bearer) and
`oauth2` types, including their `OAuthFlows`; `openIdConnect` is reported as
unsupported. `new_csrf_security_scheme()` gives an API key read from the
`X-XSRF-TOKEN` header. `SecurityRequirements` is a list of alternative
requirements.

## Servers

```python
from oaschema.server import Server, Servers

server = Server(url="http://{x}.{y}.example.com")
server.parameter_names()  # ["x", "y"]
```

`Server.match_raw_url(url)` returns the template values and the remaining
path, or `None` when the URL does not belong to the server.
`Servers.match_url` ignores the query string and returns the first matching
server with its values and remaining path, or `None`.

## Tags and serialization styles

`oaschema.tag` has `Tag` and `Tags` (with `get(name)`).
`oaschema.serialization` has the `Style` enum and `SerializationMethod`.

## What it does not do

There is no model of a whole document (paths, operations, components) and
no loader: `$ref` references are not resolved from documents, files or
URLs. A `SchemaRef` that carries only a reference must have its `value`
set by the caller before the schema can be checked or used for validation.

## Running the tests

```
pip install -e ".[test]"
pytest
```