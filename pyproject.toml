[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oaschema"
version = "0.1.0"
description = "OpenAPI 3 schema, security scheme and server models with JSON value validation"
requires-python = ">=3.10"
dependencies = []
keywords = ["openapi", "schema", "validation", "json", "security", "server"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["oaschema"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
