"""YAML frontmatter handling for vault notes."""

from __future__ import annotations

import logging
from typing import Any

import frontmatter

log = logging.getLogger(__name__)


def split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split note text into (frontmatter metadata, body).

    Notes without frontmatter return an empty mapping and the text unchanged.
    Malformed frontmatter is logged and treated as absent.
    """
    try:
        metadata, body = frontmatter.parse(content)
    except Exception as e:
        log.debug("Ignoring malformed frontmatter: %s", e)
        return {}, content

    if not isinstance(metadata, dict):
        return {}, body
    return metadata, body


def frontmatter_aliases(metadata: dict[str, Any]) -> list[str]:
    """Return the note's aliases; accepts a list or a single string."""
    aliases = metadata.get("aliases") or metadata.get("alias") or []
    if isinstance(aliases, str):
        aliases = [aliases]
    if not isinstance(aliases, list):
        return []
    return [str(alias).strip() for alias in aliases if alias and str(alias).strip()]
