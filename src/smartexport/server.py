"""FastMCP server for smartexport.

This module provides MCP protocol wrappers around the export service.
All actual logic lives in export.py - this file just handles MCP serialization.
"""

import logging

from fastmcp import FastMCP

from .config import get_vault_root
from .export import export_note
from .models import ExportFormat, ExportResult

log = logging.getLogger(__name__)


mcp = FastMCP(
    name="smartexport",
    instructions=(
        "Export a note and the notes it links to ([[wikilinks]], breadth-first) "
        "as one document. Use estimate_export_tokens first for large vaults."
    ),
)


@mcp.tool(
    name="smart_export",
    description=(
        "Export a vault note plus linked notes. Notes within content_depth hops "
        "include full text, notes within title_depth hops are listed by title."
    ),
)
async def smart_export_tool(
    root: str,
    content_depth: int | None = None,
    title_depth: int | None = None,
    export_format: ExportFormat | None = None,
    vault: str | None = None,
) -> ExportResult:
    """Export a note subgraph."""
    return await export_note(
        root,
        vault_root=get_vault_root(vault),
        content_depth=content_depth,
        title_depth=title_depth,
        export_format=export_format,
    )


@mcp.tool(
    name="estimate_export_tokens",
    description="Estimate the size of an export (notes, missing links, tokens) without returning it.",
)
async def estimate_export_tokens_tool(
    root: str,
    content_depth: int | None = None,
    title_depth: int | None = None,
    export_format: ExportFormat | None = None,
    vault: str | None = None,
) -> dict:
    """Estimate export size."""
    result = await export_note(
        root,
        vault_root=get_vault_root(vault),
        content_depth=content_depth,
        title_depth=title_depth,
        export_format=export_format,
    )
    return {
        "root": result.root,
        "note_count": result.note_count,
        "missing_notes": result.missing_notes,
        "token_count": result.token_count,
        "warning": result.warning,
    }


def main():
    """Run the MCP server."""
    from ._logging import configure_logging

    configure_logging()
    log.info("Starting smartexport MCP server")
    mcp.run()


if __name__ == "__main__":
    main()
