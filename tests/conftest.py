"""Shared test fixtures for smartexport test suite.

Design:
- tmp_vault: Creates isolated vault in temp directory (.obsidian marker)
- sample_vault: tmp_vault populated with the sample link graph
- FakeProvider: in-memory note graph for traversal tests, records calls
- runner: CliRunner with proper isolation
- Async helpers: pytest-asyncio with function scope
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from smartexport.errors import ProviderError
from smartexport.provider import NoteRef


# ─────────────────────────────────────────────────────────────────────────────
# In-memory Provider
# ─────────────────────────────────────────────────────────────────────────────


class FakeProvider:
    """NoteProvider over a dict of notes.

    notes maps identifier -> (content, references). A reference resolves to
    the note whose basename equals it, unless an explicit entry in
    ``aliases`` says otherwise. Identifiers in ``failing`` raise ProviderError
    on any read.
    """

    def __init__(
        self,
        notes: dict[str, tuple[str, list[str]]],
        aliases: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.notes = notes
        self.aliases = aliases or {}
        self.failing = failing or set()
        self.content_reads: list[str] = []
        self.reference_reads: list[str] = []
        self.resolutions: list[tuple[str, str]] = []

    def _check(self, identifier: str) -> None:
        if identifier in self.failing:
            raise ProviderError(identifier, "simulated read failure")

    async def resolve_root(self, identifier: str) -> NoteRef | None:
        if identifier not in self.notes:
            return None
        return NoteRef.from_identifier(identifier)

    async def read_content(self, note: NoteRef) -> str:
        self._check(note.identifier)
        self.content_reads.append(note.identifier)
        return self.notes[note.identifier][0]

    async def outgoing_references(self, note: NoteRef) -> list[str]:
        self._check(note.identifier)
        self.reference_reads.append(note.identifier)
        return list(self.notes[note.identifier][1])

    async def resolve_reference(self, reference: str, source_identifier: str) -> NoteRef | None:
        self.resolutions.append((reference, source_identifier))
        if reference in self.aliases:
            return NoteRef.from_identifier(self.aliases[reference])
        for identifier in self.notes:
            if posixpath.splitext(posixpath.basename(identifier))[0] == reference:
                return NoteRef.from_identifier(identifier)
        return None

    def display_title(self, note: NoteRef) -> str:
        return note.title

    def identifier(self, note: NoteRef) -> str:
        return note.identifier


def sample_graph() -> dict[str, tuple[str, list[str]]]:
    """root -> A, B, missing; A -> C, D; D -> A; cycle1 <-> cycle2."""
    return {
        "root.md": ("[[A]] [[B]] [[missing]]", ["A", "B", "missing"]),
        "A.md": ("[[C]] [[D]]", ["C", "D"]),
        "B.md": ("", []),
        "C.md": ("", []),
        "D.md": ("[[A]]", ["A"]),
        "cycle1.md": ("[[cycle2]]", ["cycle2"]),
        "cycle2.md": ("[[cycle1]]", ["cycle1"]),
    }


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider(sample_graph())


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo --quiet level changes so tests stay independent."""
    package_logger = logging.getLogger("smartexport")
    level = package_logger.level
    yield
    package_logger.setLevel(level)


@pytest.fixture
def tmp_vault(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create isolated vault directory.

    Sets SMARTEXPORT_VAULT_ROOT to the temp vault and yields its path.

    Usage:
        def test_something(tmp_vault):
            create_note(tmp_vault, "a.md", "See [[b]]")
    """
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / ".obsidian").mkdir()

    monkeypatch.setenv("SMARTEXPORT_VAULT_ROOT", str(vault))
    monkeypatch.delenv("SMARTEXPORT_QUIET", raising=False)

    yield vault


@pytest.fixture
def sample_vault(tmp_vault: Path) -> Path:
    """Vault mirroring sample_graph() as real files.

    Creates:
    - root.md -> A, B, missing
    - notes/A.md -> C, D
    - notes/B.md, notes/C.md
    - notes/D.md -> A
    - cycle1.md <-> cycle2.md
    """
    create_note(tmp_vault, "root.md", "# Root\n\nSee [[A]], [[B]] and [[missing]].\n")
    create_note(tmp_vault, "notes/A.md", "Links to [[C]] and [[D]].\n", aliases=["Alpha"])
    create_note(tmp_vault, "notes/B.md", "Plain note B.\n")
    create_note(tmp_vault, "notes/C.md", "Plain note C.\n")
    create_note(tmp_vault, "notes/D.md", "Back to [[A]].\n")
    create_note(tmp_vault, "cycle1.md", "[[cycle2]]\n")
    create_note(tmp_vault, "cycle2.md", "[[cycle1]]\n")
    return tmp_vault


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def create_note(
    vault: Path,
    path: str,
    content: str,
    aliases: list[str] | None = None,
) -> Path:
    """Helper to create a vault note, with frontmatter only when aliases are given.

    Usage in tests:
        from conftest import create_note
        note = create_note(tmp_vault, "a.md", "See [[b]]", aliases=["Alpha"])
    """
    note_path = vault / path
    note_path.parent.mkdir(parents=True, exist_ok=True)

    if aliases:
        alias_lines = "\n".join(f"  - {alias}" for alias in aliases)
        content = f"---\naliases:\n{alias_lines}\n---\n\n{content}"

    note_path.write_text(content, encoding="utf-8")
    return note_path
