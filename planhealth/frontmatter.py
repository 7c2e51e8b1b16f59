"""Frontmatter handling for markdown planning documents."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Tuple

import yaml

logger = logging.getLogger("planhealth.frontmatter")

# A leading "---" line, an optional key/value block, and a closing "---" line.
_FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?:(?P<block>.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Separate a leading YAML metadata block from the document body.

    Returns ``(mapping, body)``. Text without a metadata block is returned
    unchanged with an empty mapping. A block that is not valid YAML, or that
    does not parse to a mapping, also yields an empty mapping; the body is
    still split off.
    """
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return {}, text

    body = text[match.end():]
    block = match.group("block")
    if not block or not block.strip():
        return {}, body

    try:
        parsed = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.debug(f"Ignoring unparseable frontmatter: {e}")
        return {}, body

    if not isinstance(parsed, dict):
        return {}, body

    return {str(key): value for key, value in parsed.items()}, body


def strip_frontmatter(text: str) -> str:
    """Return only the body of a document."""
    return split_frontmatter(text)[1]


def frontmatter_block(text: str) -> str:
    """Return the leading metadata block exactly as written, or ""."""
    match = _FRONTMATTER_PATTERN.match(text)
    return text[:match.end()] if match else ""
