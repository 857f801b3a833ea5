"""Serialization styles of request parameters and bodies."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Style(str, enum.Enum):
    SIMPLE = "simple"
    LABEL = "label"
    MATRIX = "matrix"
    FORM = "form"
    SPACE_DELIMITED = "spaceDelimited"
    PIPE_DELIMITED = "pipeDelimited"
    DEEP_OBJECT = "deepObject"


@dataclass(frozen=True)
class SerializationMethod:
    """How a parameter or body is serialized: a style and whether it is exploded."""

    style: Style
    explode: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "style", Style(self.style))