"""
Properties files and ``${...}`` placeholder resolution.
"""
import re
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from sqlsession.core.common import ConfigParseError

_PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_ESCAPED_CHARS = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_WHITESPACE = " \t\f"


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parses the content of a ``.properties`` file.

    Follows the usual format: the key ends at the first unescaped ``=``,
    ``:`` or whitespace, ``#`` and ``!`` start comment lines, an odd
    number of trailing backslashes continues the entry on the next line,
    and ``\\t``, ``\\n``, ``\\uXXXX`` style escapes are decoded.

    Args:
        text: File content

    Returns:
        Dictionary of properties
    """
    properties: Dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def _logical_lines(text: str) -> Iterator[str]:
    pending: Optional[str] = None

    for raw_line in text.splitlines():
        line = raw_line.lstrip(_WHITESPACE)
        if pending is None and (not line or line[0] in "#!"):
            continue

        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2:
            pending = (pending or "") + line[:-1]
            continue
        yield (pending or "") + line
        pending = None

    if pending is not None:
        yield pending


def _split_entry(line: str) -> Tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=:" or char in _WHITESPACE:
            break
        index += 1

    key = line[:index]
    value = line[index:].lstrip(_WHITESPACE)
    if value[:1] in ("=", ":"):
        value = value[1:].lstrip(_WHITESPACE)
    return key, value


def _unescape(text: str) -> str:
    def _replace(match: "re.Match[str]") -> str:
        escaped = match.group(1)
        if escaped == "u":
            raise ConfigParseError(f"Malformed \\uxxxx escape in properties: {text!r}")
        if len(escaped) == 5:
            return chr(int(escaped[1:], 16))
        return _ESCAPED_CHARS.get(escaped, escaped)

    return _ESCAPE.sub(_replace, text)


def load_properties(path: Union[str, Path]) -> Dict[str, str]:
    """
    Loads a ``.properties`` file.

    Args:
        path: Path to the file

    Returns:
        Dictionary of properties
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return parse_properties(f.read())
    except OSError as e:
        raise ConfigParseError(f"Could not read properties resource {path}: {e}") from e


def resolve_placeholders(value: str, variables: Mapping[str, str]) -> str:
    """
    Substitutes ``${key}`` and ``${key:default}`` placeholders.

    Args:
        value: Raw attribute value
        variables: Resolved properties

    Returns:
        Value with every placeholder substituted
    """
    def _replace(match: "re.Match[str]") -> str:
        expression = match.group(1)
        key, separator, default = expression.partition(":")
        key = key.strip()
        if key in variables:
            return variables[key]
        if separator:
            return default
        raise ConfigParseError(f"Unresolved property reference: ${{{expression}}}")

    return _PLACEHOLDER.sub(_replace, value)
