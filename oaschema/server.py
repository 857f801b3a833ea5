"""Servers, their URL templates and variables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ServerVariable:
    """A substitution variable in a server URL template."""

    enum: list[Any] = field(default_factory=list)
    default: Any = None
    description: str = ""

    def validate(self) -> None:
        if not _is_number_or_string(self.default):
            raise ValueError("Variable 'default' must be either JSON number or JSON string")
        if not all(_is_number_or_string(item) for item in self.enum):
            raise ValueError("Every variable 'enum' item must be number of string")


def _is_number_or_string(value: Any) -> bool:
    return isinstance(value, (int, float, str)) and not isinstance(value, bool)


@dataclass
class Server:
    """A server the API is reachable at."""

    url: str = ""
    description: str = ""
    variables: dict[str, ServerVariable] = field(default_factory=dict)

    def parameter_names(self) -> list[str]:
        """Names of the ``{...}`` placeholders in the URL, in order."""
        pattern = self.url
        params: list[str] = []
        while pattern:
            start = pattern.find("{")
            if start < 0:
                break
            pattern = pattern[start + 1 :]
            end = pattern.find("}")
            if end < 0:
                raise ValueError("Missing '}'")
            params.append(pattern[:end].strip())
            pattern = pattern[end + 1 :]
        return params

    def match_raw_url(self, url: str) -> tuple[list[str], str] | None:
        """Match *url* against the template.

        Returns the placeholder values and the remaining path, or None when
        the URL does not belong to this server.
        """
        pattern = self.url
        rest = url
        params: list[str] = []
        while pattern:
            c = pattern[0]
            if len(pattern) == 1 and c == "/":
                break
            if c == "{":
                end = pattern.find("}")
                if end < 0:
                    return None
                pattern = pattern[end + 1 :]
                next_char = rest.find(pattern[0]) if pattern else -1
                next_slash = rest.find("/")
                if next_char < 0:
                    cut = next_slash
                elif next_slash < 0:
                    cut = next_char
                else:
                    cut = min(next_char, next_slash)
                if cut < 0:
                    cut = len(rest)
                params.append(rest[:cut])
                rest = rest[cut:]
                continue
            if not rest or rest[0] != c:
                return None
            pattern = pattern[1:]
            rest = rest[1:]
        if not rest:
            rest = "/"
        if rest[0] != "/":
            return None
        return params, rest

    def validate(self) -> None:
        if not self.url:
            raise ValueError("Variable 'URL' must be a non-empty JSON string")
        for variable in self.variables.values():
            variable.validate()


class Servers(list):
    """A list of servers."""

    def validate(self) -> None:
        for server in self:
            server.validate()

    def match_url(self, url: Any) -> tuple[Server, list[str], str] | None:
        """Find the first server matching *url* (query string ignored)."""
        raw = url if isinstance(url, str) else url.geturl()
        raw = raw.split("?", 1)[0]
        for server in self:
            match = server.match_raw_url(raw)
            if match is not None:
                params, remaining = match
                return server, params, remaining
        return None