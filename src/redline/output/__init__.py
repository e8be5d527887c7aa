"""Output formatters for Redline."""

from typing import Any

from redline.output.base import Formatter
from redline.output.json import JSONFormatter
from redline.output.markdown import MarkdownFormatter
from redline.output.text import TextFormatter

_FORMATTERS: dict[str, type[Formatter]] = {
    "text": TextFormatter,
    "json": JSONFormatter,
    "markdown": MarkdownFormatter,
}


def get_formatter(name: str, **options: Any) -> Formatter:
    """Get a formatter by name.

    Args:
        name: Formatter name (text, json, markdown).
        **options: Constructor options of that formatter.

    Returns:
        Formatter instance.

    Raises:
        ValueError: If formatter name is unknown.
    """
    if name not in _FORMATTERS:
        raise ValueError(f"Unknown formatter: {name}")
    return _FORMATTERS[name](**options)


__all__ = [
    "Formatter",
    "TextFormatter",
    "JSONFormatter",
    "MarkdownFormatter",
    "get_formatter",
]
