"""Document data extraction for minisite.

Documents carry their attributes either as YAML front matter followed by a
body, or as a whole YAML/JSON file with no body.

Key functions:
- has_frontmatter: Sniff raw bytes for a leading front-matter block.
- extract_frontmatter: Split text into front-matter data and body.
- load_structured: Parse a whole YAML or JSON document.
- extract_document: Pick the right strategy for a document.
"""

from __future__ import annotations

import json
import re
from typing import Any

import yaml

from .errors import DataFormatError

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)


def has_frontmatter(contents: bytes) -> bool:
    """Check whether raw contents start with a front-matter block.

    Args:
        contents: Raw file contents.

    Returns:
        True if the contents open and close a ``---`` block.
    """
    if not contents.startswith(b"---"):
        return False
    try:
        text = contents.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return FRONTMATTER_RE.match(text) is not None


def extract_frontmatter(text: str, source: str) -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Args:
        text: Raw file content.
        source: Relative source path, used in error messages.

    Returns:
        Tuple of (front matter dict, remaining content). Text without front
        matter yields an empty dict and the text unchanged.

    Raises:
        DataFormatError: If the front matter is not valid YAML.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1) or "")
    except yaml.YAMLError as exc:
        raise DataFormatError(source, str(exc), exc) from exc
    if data is None:
        data = {}
    return data, text[match.end() :]


def load_structured(text: str, source: str, extension: str) -> Any:
    """Parse a whole document as JSON (``.json``) or YAML.

    Args:
        text: Document text.
        source: Relative source path, used in error messages.
        extension: File extension without the dot.

    Returns:
        Parsed value; an empty document yields an empty dict.

    Raises:
        DataFormatError: If the text cannot be parsed.
    """
    if extension.lower() == "json" and text.strip():
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DataFormatError(source, str(exc), exc) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DataFormatError(source, str(exc), exc) from exc
    return {} if data is None else data


def extract_document(contents: bytes, source: str, extension: str) -> tuple[Any, str]:
    """Extract data and body from a document's raw contents.

    Args:
        contents: Raw file contents.
        source: Relative source path, used in error messages.
        extension: File extension without the dot.

    Returns:
        Tuple of (data, body). Whole-file YAML/JSON documents have an empty body.

    Raises:
        DataFormatError: If the contents are not UTF-8 or cannot be parsed.
    """
    try:
        text = contents.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DataFormatError(source, str(exc), exc) from exc
    if FRONTMATTER_RE.match(text):
        return extract_frontmatter(text, source)
    return load_structured(text, source, extension), ""
