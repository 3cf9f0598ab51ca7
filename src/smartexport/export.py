"""Export orchestration: traversal, rendering and size estimates.

Business logic shared by the CLI and the MCP server lives here; those modules
only parse arguments and serialize results.
"""

from __future__ import annotations

import difflib
import logging
import math
import posixpath
from pathlib import Path

from .config import (
    CHARS_PER_TOKEN,
    TOKEN_WARNING_EXCEEDS_MOST,
    TOKEN_WARNING_GPT4,
    TOKEN_WARNING_LARGE,
    clamp_depths,
    load_settings,
)
from .errors import NoteNotFoundError
from .exporters import get_renderer
from .models import ExportFormat, ExportMetadata, ExportResult, ExportSettings, count_nodes
from .provider import CachingProvider, NoteProvider, VaultProvider
from .traversal import BFSTraversal

log = logging.getLogger(__name__)


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def token_warning(token_count: int) -> str | None:
    """Context-size warning for a token estimate, or None if it fits comfortably."""
    if token_count > TOKEN_WARNING_EXCEEDS_MOST:
        return "Exceeds most LLM limits"
    if token_count > TOKEN_WARNING_GPT4:
        return "May exceed GPT-4 limit"
    if token_count > TOKEN_WARNING_LARGE:
        return "Large export"
    return None


async def build_export(
    root: str,
    *,
    vault_root: Path,
    content_depth: int,
    title_depth: int,
    export_format: ExportFormat = "xml",
    provider: NoteProvider | None = None,
) -> ExportResult | None:
    """Traverse from a root note and render the result.

    Args:
        root: Identifier (vault-relative path) of the root note.
        vault_root: Vault directory; used for the default provider and vault name.
        content_depth: Deepest level including full note content.
        title_depth: Deepest level included at all.
        export_format: Renderer to use.
        provider: Custom provider (defaults to a cached VaultProvider).

    Returns:
        ExportResult, or None if the root note does not exist.

    Raises:
        InvalidDepthError: If the depth limits are inconsistent.
        ProviderError: If a note cannot be read during traversal.
        InvalidFormatError: If the export format is unknown.
    """
    renderer = get_renderer(export_format)
    if provider is None:
        provider = CachingProvider(VaultProvider(vault_root))

    traversal = BFSTraversal(provider, content_depth, title_depth)
    tree = await traversal.traverse(root)
    if tree is None:
        return None

    missing_notes = traversal.get_missing_notes()
    metadata = ExportMetadata(
        vault_name=Path(vault_root).resolve().name,
        root_title=tree.title,
        content_depth=content_depth,
        title_depth=title_depth,
        missing_notes=missing_notes,
    )
    output = renderer(tree, metadata)
    token_count = estimate_tokens(output)
    note_count = count_nodes(tree)

    log.debug(
        "Exported %s: %d notes, %d missing, ~%d tokens",
        tree.identifier,
        note_count,
        len(missing_notes),
        token_count,
    )
    return ExportResult(
        output=output,
        format=export_format,
        root=tree.identifier,
        note_count=note_count,
        missing_notes=missing_notes,
        token_count=token_count,
        warning=token_warning(token_count),
    )


def suggest_notes(query: str, candidates: list[str], limit: int = 5) -> list[str]:
    """Suggest note identifiers similar to a root that did not resolve.

    Notes whose basename equals the query (case-insensitive) come first,
    followed by fuzzy path matches.
    """
    target = query.replace("\\", "/").strip().lstrip("/")
    if not target:
        return []
    target_alt = target[:-3] if target.lower().endswith(".md") else f"{target}.md"
    stem = posixpath.splitext(posixpath.basename(target))[0].lower()

    matches = [
        candidate
        for candidate in candidates
        if posixpath.splitext(posixpath.basename(candidate))[0].lower() == stem
    ]
    for query in (target, target_alt):
        for match in difflib.get_close_matches(query, candidates, n=limit, cutoff=0.6):
            if match not in matches:
                matches.append(match)
    return matches[:limit]


def resolve_depths(
    settings: ExportSettings,
    content_depth: int | None,
    title_depth: int | None,
) -> tuple[int, int]:
    """Fill unspecified depths from vault settings.

    When only one depth is given, the other is dragged along the way the
    settings sliders do it. When both are given they are used as-is and the
    traversal validates them.
    """
    if content_depth is not None and title_depth is not None:
        return content_depth, title_depth
    if content_depth is not None:
        return clamp_depths(content_depth, settings.default_title_depth, prefer="content")
    if title_depth is not None:
        return clamp_depths(settings.default_content_depth, title_depth, prefer="title")
    return settings.default_content_depth, settings.default_title_depth


async def export_note(
    root: str,
    *,
    vault_root: Path,
    content_depth: int | None = None,
    title_depth: int | None = None,
    export_format: ExportFormat | None = None,
) -> ExportResult:
    """Export a vault note using the vault's saved defaults for unset options.

    Raises:
        NoteNotFoundError: If the root note does not exist (with suggestions).
        InvalidDepthError: If the depth limits are inconsistent.
        ProviderError: If a note cannot be read during traversal.
    """
    settings = load_settings(vault_root)
    content, title = resolve_depths(settings, content_depth, title_depth)

    vault_provider = VaultProvider(vault_root)
    result = await build_export(
        root,
        vault_root=vault_root,
        content_depth=content,
        title_depth=title,
        export_format=export_format or settings.default_export_format,
        provider=CachingProvider(vault_provider),
    )
    if result is None:
        raise NoteNotFoundError(root, suggest_notes(root, vault_provider.list_notes()))
    return result
