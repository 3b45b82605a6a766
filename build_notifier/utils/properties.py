"""Parser for Java-style ``.properties`` files.

Builds drop a ``notification.properties`` file in their workspace to attach
free-form data to notifications. Supported syntax:

- ``#`` and ``!`` comment lines
- ``key=value``, ``key: value`` and ``key value`` separators
- trailing backslash line continuation
- ``\\t``, ``\\n``, ``\\r``, ``\\f``, ``\\uXXXX`` and escaped separators
"""

import re
from typing import Dict, Iterator

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_KEY_TERMINATOR = re.compile(r"(?<!\\)(?:\\\\)*[=:\s]")


class PropertiesParseError(ValueError):
    """Raised when a properties file contains an invalid escape."""


def _logical_lines(text: str) -> Iterator[str]:
    """Join continuation lines and drop comments and blank lines."""
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue

        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue

        yield pending + line
        pending = ""

    if pending:
        yield pending


def _unescape(value: str) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch != "\\" or i + 1 >= len(value):
            out.append(ch)
            i += 1
            continue

        nxt = value[i + 1]
        if nxt == "u":
            digits = value[i + 2:i + 6]
            if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise PropertiesParseError(f"Malformed \\uXXXX escape: \\u{digits}")
            out.append(chr(int(digits, 16)))
            i += 6
        else:
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
    return "".join(out)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse properties text into a dict. Later keys override earlier ones.

    Raises:
        PropertiesParseError: On a malformed unicode escape
    """
    result: Dict[str, str] = {}
    for line in _logical_lines(text):
        match = _KEY_TERMINATOR.search(line)
        if match is None:
            key, rest = line, ""
        else:
            key = line[:match.end() - 1]
            rest = line[match.end() - 1:]
            # One '=' or ':' separator, optionally surrounded by whitespace
            rest = rest.lstrip(" \t\f")
            if rest[:1] in ("=", ":"):
                rest = rest[1:].lstrip(" \t\f")

        result[_unescape(key)] = _unescape(rest)
    return result
