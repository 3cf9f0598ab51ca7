"""Note resolution providers.

The traversal engine only talks to a NoteProvider: six narrow operations for
resolving identifiers and references and for reading notes. VaultProvider
binds them to a folder of markdown files; CachingProvider memoizes another
provider's answers for the lifetime of one export.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import ProviderError
from .parser import NoteIndex, build_note_index, extract_links, resolve_link_target

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteRef:
    """Handle for a resolved note."""

    identifier: str  # Vault-relative path, stable and unique per note
    title: str  # Basename without extension

    @classmethod
    def from_identifier(cls, identifier: str) -> NoteRef:
        title = posixpath.splitext(posixpath.basename(identifier))[0]
        return cls(identifier=identifier, title=title)


@runtime_checkable
class NoteProvider(Protocol):
    """Interface the traversal engine consumes."""

    async def resolve_root(self, identifier: str) -> NoteRef | None:
        """Resolve an identifier to a note, or None if it does not exist."""
        ...

    async def read_content(self, note: NoteRef) -> str:
        """Return the full text of a note (may be empty)."""
        ...

    async def outgoing_references(self, note: NoteRef) -> list[str]:
        """Return the note's reference strings in document order."""
        ...

    async def resolve_reference(self, reference: str, source_identifier: str) -> NoteRef | None:
        """Resolve a reference in the context of its source note, or None."""
        ...

    def display_title(self, note: NoteRef) -> str:
        ...

    def identifier(self, note: NoteRef) -> str:
        ...


class VaultProvider:
    """NoteProvider over a directory of markdown files.

    The note index (filenames and frontmatter aliases) is built lazily on
    first use and kept for the provider's lifetime. Create a new provider to
    pick up vault changes.
    """

    def __init__(self, vault_root: Path, *, index: NoteIndex | None = None) -> None:
        self.vault_root = Path(vault_root)
        self._index = index

    @property
    def index(self) -> NoteIndex:
        if self._index is None:
            self._index = build_note_index(self.vault_root)
        return self._index

    @property
    def vault_name(self) -> str:
        return self.vault_root.resolve().name

    def list_notes(self) -> list[str]:
        return self.index.identifiers()

    async def resolve_root(self, identifier: str) -> NoteRef | None:
        candidate = identifier.replace("\\", "/").strip().lstrip("/")
        if not candidate:
            return None

        found = self.index.lookup_path(candidate)
        if found is None and not candidate.lower().endswith(".md"):
            found = self.index.lookup_path(f"{candidate}.md")
        if found is None:
            log.debug("Root note not found: %s", identifier)
            return None
        return NoteRef.from_identifier(found)

    def _read(self, note: NoteRef) -> str:
        path = self.vault_root / note.identifier
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ProviderError(note.identifier, str(e)) from e

    async def read_content(self, note: NoteRef) -> str:
        return self._read(note)

    async def outgoing_references(self, note: NoteRef) -> list[str]:
        return extract_links(self._read(note))

    async def resolve_reference(self, reference: str, source_identifier: str) -> NoteRef | None:
        resolved = resolve_link_target(reference, self.index, source_identifier)
        if resolved is None:
            return None
        return NoteRef.from_identifier(resolved)

    def display_title(self, note: NoteRef) -> str:
        return note.title

    def identifier(self, note: NoteRef) -> str:
        return note.identifier


class CachingProvider:
    """Read-through cache in front of another provider.

    Content, reference lists and reference resolutions are treated as
    immutable while the cache lives; traversal results are identical to the
    wrapped provider's. Failures are not cached.
    """

    def __init__(self, inner: NoteProvider) -> None:
        self.inner = inner
        self._content: dict[str, str] = {}
        self._references: dict[str, list[str]] = {}
        self._resolved: dict[tuple[str, str], NoteRef | None] = {}

    async def resolve_root(self, identifier: str) -> NoteRef | None:
        return await self.inner.resolve_root(identifier)

    async def read_content(self, note: NoteRef) -> str:
        key = self.inner.identifier(note)
        if key not in self._content:
            self._content[key] = await self.inner.read_content(note)
        return self._content[key]

    async def outgoing_references(self, note: NoteRef) -> list[str]:
        key = self.inner.identifier(note)
        if key not in self._references:
            self._references[key] = list(await self.inner.outgoing_references(note))
        return list(self._references[key])

    async def resolve_reference(self, reference: str, source_identifier: str) -> NoteRef | None:
        key = (reference, source_identifier)
        if key not in self._resolved:
            self._resolved[key] = await self.inner.resolve_reference(reference, source_identifier)
        return self._resolved[key]

    def display_title(self, note: NoteRef) -> str:
        return self.inner.display_title(note)

    def identifier(self, note: NoteRef) -> str:
        return self.inner.identifier(note)
