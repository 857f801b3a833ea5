"""Tags grouping operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Tag:
    """A named group of operations."""

    name: str = ""
    description: str = ""
    external_docs: Any = None


class Tags(list):
    """A list of tags."""

    def get(self, name: str) -> Tag | None:
        """The first tag called *name*, or None."""
        return next((tag for tag in self if tag.name == name), None)