import os
from typing import Dict, Optional


_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: str = "0") -> bool:
    """
    Read a boolean flag from the environment.

    Accepts "1", "true", "yes" and "on" (case-insensitive, surrounding whitespace ignored)
    as true; anything else, including an empty value, is false.

    Args:
        name: Environment variable name.
        default: Raw value used when the variable is unset.

    Returns:
        The parsed flag.
    """
    return os.getenv(name, default).strip().lower() in _TRUTHY


def text_content(text: Optional[str]) -> Dict[str, str]:
    """Wrap a tool result as an MCP text content item."""
    if text is None:
        text = ""
    if not isinstance(text, str):
        raise TypeError("text_content expects a string input")
    return {"type": "text", "text": text}
