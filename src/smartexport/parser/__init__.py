"""Markdown parsing: frontmatter, outgoing links and note resolution."""

from .links import extract_links, normalize_link
from .markdown import frontmatter_aliases, split_frontmatter
from .note_index import NoteIndex, build_note_index, resolve_link_target

__all__ = [
    "NoteIndex",
    "build_note_index",
    "extract_links",
    "frontmatter_aliases",
    "normalize_link",
    "resolve_link_target",
    "split_frontmatter",
]
