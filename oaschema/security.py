"""Security requirements, security schemes and OAuth flows."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any


def _extensions(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k.startswith("x-")}


def _drop_empty(pairs: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in pairs.items() if v not in ("", None)}


class SecurityRequirement(dict):
    """Maps a security scheme name to the scopes it requires."""

    def authenticate(self, provider: str, *scopes: str) -> SecurityRequirement:
        """Require *provider* with the given scopes; returns self."""
        self[provider] = list(scopes)
        return self

    def validate(self) -> None:
        """Check that every scheme name is a string with a list of string scopes."""
        for provider, scopes in self.items():
            if not isinstance(provider, str):
                raise ValueError(
                    f"Security requirement name must be a string, not {provider!r}"
                )
            if not isinstance(scopes, list) or not all(
                isinstance(scope, str) for scope in scopes
            ):
                raise ValueError(
                    f"Security requirement '{provider}' must list its scopes as strings"
                )

    def to_json(self) -> str:
        return json.dumps(self, separators=(",", ":"))


class SecurityRequirements(list):
    """Alternative security requirements; any one of them suffices."""

    def with_requirement(self, requirement: SecurityRequirement) -> SecurityRequirements:
        """Append *requirement*; returns self."""
        self.append(requirement)
        return self

    def validate(self) -> None:
        for requirement in self:
            requirement.validate()

    def to_json(self) -> str:
        return json.dumps(list(self), separators=(",", ":"))


class OAuthFlowType(enum.Enum):
    IMPLICIT = enum.auto()
    PASSWORD = enum.auto()
    CLIENT_CREDENTIALS = enum.auto()
    AUTHORIZATION_CODE = enum.auto()


@dataclass
class OAuthFlow:
    """Settings of a single OAuth flow."""

    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: dict[str, str] | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OAuthFlow:
        scopes = data.get("scopes")
        return cls(
            authorization_url=data.get("authorizationUrl", ""),
            token_url=data.get("tokenUrl", ""),
            refresh_url=data.get("refreshUrl", ""),
            scopes=dict(scopes) if scopes is not None else None,
            extensions=_extensions(data),
        )

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extensions)
        out.update(
            _drop_empty(
                {
                    "authorizationUrl": self.authorization_url,
                    "tokenUrl": self.token_url,
                    "refreshUrl": self.refresh_url,
                }
            )
        )
        out["scopes"] = self.scopes
        return out

    def validate(self, flow_type: OAuthFlowType) -> None:
        if flow_type in (OAuthFlowType.AUTHORIZATION_CODE, OAuthFlowType.IMPLICIT):
            if not self.authorization_url:
                raise ValueError(
                    "An OAuth flow is missing 'authorizationUrl in authorizationCode or implicit '"
                )
        if flow_type is not OAuthFlowType.IMPLICIT and not self.token_url:
            raise ValueError("An OAuth flow is missing 'tokenUrl in not implicit'")
        if self.scopes is None:
            raise ValueError("An OAuth flow is missing 'scopes'")


_FLOW_KEYS = (
    ("implicit", "implicit", OAuthFlowType.IMPLICIT),
    ("password", "password", OAuthFlowType.PASSWORD),
    ("client_credentials", "clientCredentials", OAuthFlowType.CLIENT_CREDENTIALS),
    ("authorization_code", "authorizationCode", OAuthFlowType.AUTHORIZATION_CODE),
)


@dataclass
class OAuthFlows:
    """The OAuth flows a security scheme supports."""

    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OAuthFlows:
        flows = {
            attr: OAuthFlow.from_dict(data[key])
            for attr, key, _ in _FLOW_KEYS
            if data.get(key) is not None
        }
        return cls(**flows, extensions=_extensions(data))

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extensions)
        for attr, key, _ in _FLOW_KEYS:
            flow = getattr(self, attr)
            if flow is not None:
                out[key] = flow.to_dict()
        return out

    def validate(self) -> None:
        """Check the first defined flow."""
        for attr, _, flow_type in _FLOW_KEYS:
            flow = getattr(self, attr)
            if flow is not None:
                flow.validate(flow_type)
                return
        raise ValueError("No OAuth flow is defined")


@dataclass
class SecurityScheme:
    """A way of authenticating against the API."""

    type: str = ""
    description: str = ""
    name: str = ""
    in_: str = ""
    scheme: str = ""
    bearer_format: str = ""
    flows: OAuthFlows | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SecurityScheme:
        if not isinstance(data, dict):
            raise ValueError("A security scheme must be a JSON object")
        flows = data.get("flows")
        return cls(
            type=data.get("type", ""),
            description=data.get("description", ""),
            name=data.get("name", ""),
            in_=data.get("in", ""),
            scheme=data.get("scheme", ""),
            bearer_format=data.get("bearerFormat", ""),
            flows=OAuthFlows.from_dict(flows) if flows is not None else None,
            extensions=_extensions(data),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> SecurityScheme:
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extensions)
        out.update(
            _drop_empty(
                {
                    "type": self.type,
                    "description": self.description,
                    "name": self.name,
                    "in": self.in_,
                    "scheme": self.scheme,
                    "bearerFormat": self.bearer_format,
                }
            )
        )
        if self.flows is not None:
            out["flows"] = self.flows.to_dict()
        return out

    def validate(self) -> None:
        has_in = has_bearer_format = has_flow = False
        if self.type == "apiKey":
            has_in = True
        elif self.type == "http":
            if self.scheme == "bearer":
                has_bearer_format = True
            elif self.scheme != "basic":
                raise ValueError(
                    "Security scheme of type 'http' has invalid 'scheme' value "
                    f"'{self.scheme}'"
                )
        elif self.type == "oauth2":
            has_flow = True
        elif self.type == "openIdConnect":
            raise ValueError(
                f"Support for security schemes with type '{self.type}' has not been implemented"
            )
        else:
            raise ValueError(f"Security scheme 'type' can't be '{self.type}'")

        if has_in:
            if self.in_ not in ("query", "header", "cookie"):
                raise ValueError(
                    "Security scheme of type 'apiKey' should have 'in'. It can be "
                    f"'query', 'header' or 'cookie', not '{self.in_}'"
                )
            if not self.name:
                raise ValueError("Security scheme of type 'apiKey' should have 'name'")
        elif self.in_:
            raise ValueError(f"Security scheme of type '{self.type}' can't have 'in'")
        elif self.name:
            raise ValueError("Security scheme of type 'apiKey' can't have 'name'")

        if not has_bearer_format and self.bearer_format:
            raise ValueError(
                f"Security scheme of type '{self.type}' can't have 'bearerFormat'"
            )

        if has_flow:
            if self.flows is None:
                raise ValueError(f"Security scheme of type '{self.type}' should have 'flows'")
            try:
                self.flows.validate()
            except ValueError as err:
                raise ValueError(f"Security scheme 'flow' is invalid: {err}") from err
        elif self.flows is not None:
            raise ValueError(f"Security scheme of type '{self.type}' can't have 'flows'")


def new_csrf_security_scheme() -> SecurityScheme:
    """An API key scheme read from the X-XSRF-TOKEN header."""
    return SecurityScheme(type="apiKey", in_="header", name="X-XSRF-TOKEN")


def new_jwt_security_scheme() -> SecurityScheme:
    """An HTTP bearer scheme carrying a JWT."""
    return SecurityScheme(type="http", scheme="bearer", bearer_format="JWT")