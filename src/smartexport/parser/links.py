"""Outgoing link extraction from note content."""

from __future__ import annotations

import re
from urllib.parse import unquote

from .markdown import split_frontmatter

# [[target]], [[target|alias]], [[target#heading]]; a leading "!" marks an embed
WIKILINK_PATTERN = r"(?P<embed>!?)\[\[(?P<wiki>[^\[\]\n]+?)\]\]"

# [text](path/to/note.md) internal markdown links
MDLINK_PATTERN = r"(?P<mdembed>!?)\[[^\[\]\n]*\]\((?P<md>[^()\s]+?)\)"

LINK_PATTERN = re.compile(f"{WIKILINK_PATTERN}|{MDLINK_PATTERN}")

# Fenced code blocks (an unclosed fence runs to the end) and inline code never contain links
FENCED_CODE_PATTERN = re.compile(r"^(```|~~~).*?(?:^\1[^\n]*$|\Z)", re.MULTILINE | re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r"`[^`\n]+`")

# Anything with a URI scheme (http:, mailto:, obsidian:) is external
URL_SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def _strip_code(text: str) -> str:
    text = FENCED_CODE_PATTERN.sub("", text)
    return INLINE_CODE_PATTERN.sub("", text)


def _wikilink_reference(raw: str) -> str | None:
    target = raw.split("|", 1)[0].strip()
    if not target or target.startswith("#"):
        # Same-note heading/block references
        return None
    return target


def _markdown_reference(raw: str) -> str | None:
    if URL_SCHEME_PATTERN.match(raw) or raw.startswith("#"):
        return None
    target = unquote(raw).strip()
    path_part = target.split("#", 1)[0]
    if not path_part.lower().endswith(".md"):
        return None
    return target


def extract_links(content: str) -> list[str]:
    """Extract outgoing note references from markdown content.

    Returns references in document order. Duplicates are preserved so that
    callers can see every occurrence; different spellings may resolve to the
    same note and deduplication belongs to resolution.

    Embeds, external URLs, links in frontmatter and links inside code are
    ignored. Aliases (``[[target|alias]]``) are dropped from the reference;
    heading and block subpaths are kept.

    Args:
        content: Raw note text, optionally starting with YAML frontmatter.

    Returns:
        List of reference strings.
    """
    _, body = split_frontmatter(content)
    body = _strip_code(body)

    links: list[str] = []
    for match in LINK_PATTERN.finditer(body):
        if match.group("wiki") is not None:
            if match.group("embed"):
                continue
            reference = _wikilink_reference(match.group("wiki"))
        else:
            if match.group("mdembed"):
                continue
            reference = _markdown_reference(match.group("md"))

        if reference:
            links.append(reference)

    return links


def normalize_link(link: str) -> str:
    """Normalize a reference for lookup.

    - Strips whitespace
    - Drops heading (#heading) and block (#^block) subpaths
    - Normalizes path separators
    - Removes a leading "./" and trailing slashes

    Args:
        link: Raw reference text.

    Returns:
        Link path without subpath (may still carry a .md extension).
    """
    link = link.strip()
    link = link.split("#", 1)[0]
    link = link.replace("\\", "/").strip()
    while link.startswith("./"):
        link = link[2:]
    return link.rstrip("/")
