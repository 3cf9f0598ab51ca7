"""Name-to-path index for resolving wiki-style links.

Enables resolution of [[Note]], [[folder/Note]], [[../Note]] and
[[Alias]] style references to vault-relative note paths.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path

import frontmatter

from .links import normalize_link
from .markdown import frontmatter_aliases

log = logging.getLogger(__name__)


@dataclass
class NoteIndex:
    """Lookup tables over every markdown note in a vault.

    All keys are lowercase; values are vault-relative POSIX paths with the
    .md extension (the note identifiers).
    """

    by_path: dict[str, str] = field(default_factory=dict)
    by_basename: dict[str, list[str]] = field(default_factory=dict)
    by_alias: dict[str, str] = field(default_factory=dict)

    def add(self, identifier: str, aliases: list[str] | None = None) -> None:
        self.by_path.setdefault(identifier.lower(), identifier)

        stem = posixpath.splitext(posixpath.basename(identifier))[0].lower()
        self.by_basename.setdefault(stem, []).append(identifier)

        for alias in aliases or []:
            self.by_alias.setdefault(alias.lower(), identifier)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.lower() in self.by_path

    def __len__(self) -> int:
        return len(self.by_path)

    def lookup_path(self, path: str) -> str | None:
        return self.by_path.get(path.lower())

    def identifiers(self) -> list[str]:
        return sorted(self.by_path.values())


def _is_hidden(rel_path: Path) -> bool:
    return any(part.startswith(".") for part in rel_path.parts)


def build_note_index(vault_root: Path, *, include_aliases: bool = True) -> NoteIndex:
    """Build a note index for a vault.

    Scans all markdown files below vault_root, skipping hidden directories
    such as .obsidian and .trash.

    Args:
        vault_root: Root directory of the vault.
        include_aliases: Read frontmatter aliases (requires opening every file).

    Returns:
        NoteIndex covering every visible .md file.
    """
    index = NoteIndex()
    if not vault_root.exists() or not vault_root.is_dir():
        return index

    for md_file in sorted(vault_root.rglob("*.md")):
        rel_path = md_file.relative_to(vault_root)
        if _is_hidden(rel_path) or not md_file.is_file():
            continue

        aliases: list[str] = []
        if include_aliases:
            try:
                post = frontmatter.load(md_file)
                aliases = frontmatter_aliases(post.metadata)
            except Exception as e:
                log.debug("Skipping aliases of %s during index build: %s", md_file, e)

        index.add(rel_path.as_posix(), aliases)

    log.debug("Indexed %d notes under %s", len(index), vault_root)
    return index


def _ensure_md_extension(path: str) -> str:
    if path.lower().endswith(".md"):
        return path
    return f"{path}.md"


def _path_rank(identifier: str) -> tuple[int, str]:
    return (identifier.count("/"), identifier)


def _resolve_path_reference(linkpath: str, index: NoteIndex, source_dir: str) -> str | None:
    relative = posixpath.normpath(posixpath.join(source_dir, linkpath)) if source_dir else linkpath
    if not relative.startswith(".."):
        found = index.lookup_path(relative)
        if found:
            return found

    absolute = posixpath.normpath(linkpath.lstrip("/"))
    if not absolute.startswith(".."):
        found = index.lookup_path(absolute)
        if found:
            return found

    # Partial paths: [[folder/Note]] matches "area/folder/Note.md"
    stem = posixpath.splitext(posixpath.basename(absolute))[0].lower()
    suffix = "/" + absolute.lower()
    candidates = [
        identifier
        for identifier in index.by_basename.get(stem, [])
        if identifier.lower().endswith(suffix)
    ]
    if candidates:
        return min(candidates, key=_path_rank)
    return None


def resolve_link_target(
    target: str,
    index: NoteIndex,
    source_path: str | None = None,
) -> str | None:
    """Resolve a link target to a note identifier.

    Attempts resolution in order:
    1. Path match (if target contains "/"): relative to the source note's
       folder, then relative to the vault root, then as a path suffix
    2. Filename match (case-insensitive): a note in the source's folder wins,
       otherwise the shallowest path, ties broken alphabetically
    3. Frontmatter alias lookup (case-insensitive)

    Args:
        target: The link target from [[target]] or [text](target).
        index: Note index for the vault.
        source_path: Identifier of the note containing the link.

    Returns:
        Resolved identifier or None if not resolvable.
    """
    linkpath = normalize_link(target)
    if not linkpath:
        return None

    source_dir = posixpath.dirname(source_path) if source_path else ""
    with_ext = _ensure_md_extension(linkpath)

    if "/" in linkpath:
        found = _resolve_path_reference(with_ext, index, source_dir)
        if found:
            return found
    else:
        stem = posixpath.splitext(with_ext)[0].lower()
        candidates = index.by_basename.get(stem, [])
        if candidates:
            same_folder = [c for c in candidates if posixpath.dirname(c) == source_dir]
            if same_folder:
                return same_folder[0]
            return min(candidates, key=_path_rank)

    return index.by_alias.get(linkpath.lower())
