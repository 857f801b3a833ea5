"""Named string formats and the regular expressions that check them."""

from __future__ import annotations

import re

FORMAT_OF_STRING_FOR_UUID_OF_RFC4122 = (
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)

SCHEMA_STRING_FORMATS: dict[str, re.Pattern[str]] = {}


def _anchor_end_of_text(pattern: str) -> str:
    """Make ``$`` match only at the very end of the input, never before a final newline."""
    out: list[str] = []
    in_class = False
    i = 0
    length = len(pattern)
    while i < length:
        ch = pattern[i]
        if ch == "\\" and i + 1 < length:
            pair = pattern[i : i + 2]
            out.append(r"\Z" if pair == r"\z" and not in_class else pair)
            i += 2
            continue
        if not in_class and ch == "[":
            in_class = True
            out.append(ch)
            i += 1
            if i < length and pattern[i] == "^":
                out.append("^")
                i += 1
            if i < length and pattern[i] == "]":
                out.append(r"\]")
                i += 1
            continue
        if in_class and ch == "]":
            in_class = False
        elif not in_class and ch == "$":
            out.append(r"\Z")
            i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _compile(pattern: str) -> re.Pattern[str]:
    """Compile a pattern so that ``$`` anchors to the end of the text."""
    return re.compile(_anchor_end_of_text(pattern))


def define_string_format(name: str, pattern: str) -> None:
    """Register (or replace) the string format *name* checked by *pattern*."""
    try:
        compiled = _compile(pattern)
    except re.error as err:
        raise ValueError(
            f"Format '{name}' has invalid pattern '{pattern}': {err}"
        ) from err
    SCHEMA_STRING_FORMATS[name] = compiled


# Catches only some suspiciously wrong-looking addresses; define a stricter
# format if needed.
define_string_format("email", r'^[^@]+@[^@<>",\s]+$')

# Base64 and base64url, padding allowed.
define_string_format("byte", r"(^$|^[a-zA-Z0-9+/\-_]*=*$)")

define_string_format("date", r"^[0-9]{4}-(0[0-9]|10|11|12)-([0-2][0-9]|30|31)$")

define_string_format(
    "date-time",
    r"^[0-9]{4}-(0[0-9]|10|11|12)-([0-2][0-9]|30|31)T[0-9]{2}:[0-9]{2}:[0-9]{2}"
    r"(.[0-9]+)?(Z|(\+|-)[0-9]{2}:[0-9]{2})?$",
)