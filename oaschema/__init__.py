"""OpenAPI 3 schema, security, server and tag models with JSON value validation."""

__version__ = "0.1.0"

__all__ = [
    "formats",
    "schema",
    "schema_errors",
    "security",
    "serialization",
    "server",
    "tag",
    "validator",
]