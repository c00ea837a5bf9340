"""
Utilities for the sqlsession CLI.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlsession.config.model import Configuration

# Terminal color definitions
COLORS = {
    "default": "\033[0m",
    "bold": "\033[1m",
    "green": "\033[92m",
    "red": "\033[91m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
}

MASK = "******"


def print_colored(text: str, color: str = "default", return_str: bool = False) -> Optional[str]:
    """
    Prints colored text in the terminal or returns the colored text.

    Args:
        text: Text to color
        color: Color to use (default, green, red, yellow, blue, bold)
        return_str: If True, returns the colored text instead of printing it

    Returns:
        If return_str is True, returns the colored text, otherwise None
    """
    start_color = COLORS.get(color, COLORS["default"])
    colored_text = f"{start_color}{text}{COLORS['default']}"

    if return_str:
        return colored_text
    print(colored_text)
    return None


def parse_property_args(values: List[str]) -> Dict[str, str]:
    """
    Parses repeated ``KEY=VALUE`` command line arguments.

    Args:
        values: Raw argument values

    Returns:
        Dictionary of property overrides
    """
    properties: Dict[str, str] = {}
    for value in values:
        key, separator, item = value.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"Invalid property '{value}', expected KEY=VALUE")
        properties[key.strip()] = item
    return properties


def _is_secret(key: str) -> bool:
    return "password" in key.lower() or "secret" in key.lower()


def configuration_summary(configuration: Configuration) -> Dict[str, Any]:
    """
    JSON-compatible view of a configuration with secrets masked.

    Args:
        configuration: Resolved configuration

    Returns:
        Dictionary ready for json.dumps
    """
    data = configuration.model_dump(mode="json", exclude={"type_aliases"})
    data["type_aliases"] = {
        alias: f"{getattr(target, '__module__', '?')}.{getattr(target, '__qualname__', repr(target))}"
        for alias, target in configuration.type_aliases.items()
    }
    data["variables"] = {
        key: MASK if _is_secret(key) else value
        for key, value in data["variables"].items()
    }

    environment = data.get("environment")
    if environment and environment["data_source"].get("password") is not None:
        environment["data_source"]["password"] = MASK
    return data


def environment_status(configuration: Configuration) -> Tuple[str, str]:
    """Returns the environment id and database backend for status lines."""
    environment = configuration.environment
    if environment is None:
        return "none", "none"
    backend = environment.data_source.url.split(":", 1)[0]
    return environment.id, backend
