"""Pydantic models for vault exports."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .config import (
    DEFAULT_CONTENT_DEPTH,
    DEFAULT_TITLE_DEPTH,
    MAX_CONTENT_DEPTH,
    MAX_TITLE_DEPTH,
    MIN_DEPTH,
)

ExportFormat = Literal["xml", "llm-markdown", "print-friendly-markdown"]

EXPORT_FORMATS: tuple[str, ...] = ("xml", "llm-markdown", "print-friendly-markdown")


class ExportNode(BaseModel):
    """One note admitted into the export tree.

    Nodes form a strict tree rooted at the traversal root: each note appears
    once, at the shallowest depth it was discovered. ``content`` is None when
    the note lies beyond the content depth; an empty note has content "".
    """

    identifier: str  # Vault-relative path, e.g. "projects/alpha.md"
    title: str  # Display name (basename without extension)
    depth: int = Field(ge=0)  # Hops from the root (root = 0)
    include_content: bool
    content: str | None = None
    children: list[ExportNode] = Field(default_factory=list)


def iter_nodes(root: ExportNode) -> Iterator[ExportNode]:
    """Yield every node of the tree in traversal (breadth-first) order."""
    queue: deque[ExportNode] = deque([root])
    while queue:
        node = queue.popleft()
        yield node
        queue.extend(node.children)


def count_nodes(root: ExportNode) -> int:
    return sum(1 for _ in iter_nodes(root))


class ExportMetadata(BaseModel):
    """Context handed to renderers alongside the export tree."""

    vault_name: str
    root_title: str
    content_depth: int
    title_depth: int
    missing_notes: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.now)

    @property
    def missing_count(self) -> int:
        return len(self.missing_notes)


class ExportResult(BaseModel):
    """Rendered export plus the statistics shown to the user."""

    output: str
    format: ExportFormat
    root: str  # Identifier of the root note
    note_count: int
    missing_notes: list[str] = Field(default_factory=list)
    token_count: int
    warning: str | None = None  # Context-size warning, if any


class ExportSettings(BaseModel):
    """Per-vault defaults, persisted in .smartexport.yaml."""

    default_content_depth: int = Field(
        default=DEFAULT_CONTENT_DEPTH, ge=MIN_DEPTH, le=MAX_CONTENT_DEPTH
    )
    default_title_depth: int = Field(
        default=DEFAULT_TITLE_DEPTH, ge=MIN_DEPTH, le=MAX_TITLE_DEPTH
    )
    default_export_format: ExportFormat = "xml"

    @model_validator(mode="after")
    def _title_not_below_content(self) -> ExportSettings:
        # Title depth is never allowed to fall below content depth
        if self.default_title_depth < self.default_content_depth:
            self.default_title_depth = self.default_content_depth
        return self
