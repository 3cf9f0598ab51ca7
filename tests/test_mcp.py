"""Tests for MCP server tool wrappers.

Tests the MCP layer behavior: argument passing, response format, error handling.
Core logic is tested elsewhere - this file tests the MCP wrapper layer.
"""

from pathlib import Path

import pytest

from smartexport import config, server
from smartexport.config import ConfigurationError
from smartexport.errors import ErrorCode, InvalidDepthError, InvalidFormatError, NoteNotFoundError
from smartexport.models import ExportResult


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


async def _call_tool(tool_obj, /, *args, **kwargs):
    """Invoke the coroutine behind an MCP tool (FunctionTool or plain function)."""
    fn = getattr(tool_obj, "fn", tool_obj)
    bound = fn(*args, **kwargs)
    if callable(bound):
        return await bound()
    return await bound


# ─────────────────────────────────────────────────────────────────────────────
# smart_export
# ─────────────────────────────────────────────────────────────────────────────


class TestSmartExportTool:
    """Tests for the smart_export tool."""

    @pytest.mark.asyncio
    async def test_returns_export_result(self, sample_vault: Path):
        result = await _call_tool(server.smart_export_tool, root="root.md")

        assert isinstance(result, ExportResult)
        assert result.root == "root.md"
        assert result.note_count == 5
        assert result.missing_notes == ["missing"]
        assert result.output.startswith("<?xml")

    @pytest.mark.asyncio
    async def test_passes_depths_and_format(self, sample_vault: Path):
        result = await _call_tool(
            server.smart_export_tool,
            root="root.md",
            content_depth=1,
            title_depth=1,
            export_format="print-friendly-markdown",
        )

        assert result.format == "print-friendly-markdown"
        assert result.note_count == 3
        assert result.output.startswith("# root\n")

    @pytest.mark.asyncio
    async def test_explicit_vault(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("SMARTEXPORT_VAULT_ROOT", raising=False)
        vault = tmp_path / "other"
        vault.mkdir()
        (vault / "solo.md").write_text("Alone", encoding="utf-8")

        result = await _call_tool(server.smart_export_tool, root="solo", vault=str(vault))

        assert result.root == "solo.md"
        assert result.note_count == 1

    @pytest.mark.asyncio
    async def test_note_not_found(self, sample_vault: Path):
        with pytest.raises(NoteNotFoundError, match="Note not found: A.md"):
            await _call_tool(server.smart_export_tool, root="A.md")

    @pytest.mark.asyncio
    async def test_invalid_depths(self, sample_vault: Path):
        with pytest.raises(InvalidDepthError):
            await _call_tool(server.smart_export_tool, root="root.md", content_depth=5, title_depth=2)

    @pytest.mark.asyncio
    async def test_unknown_format(self, sample_vault: Path):
        with pytest.raises(InvalidFormatError) as exc_info:
            await _call_tool(server.smart_export_tool, root="root.md", export_format="pdf")

        assert exc_info.value.code == ErrorCode.INVALID_FORMAT

    @pytest.mark.asyncio
    async def test_no_vault(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("SMARTEXPORT_VAULT_ROOT", raising=False)
        monkeypatch.setattr(config, "_discover_vault", lambda: None)

        with pytest.raises(ConfigurationError):
            await _call_tool(server.smart_export_tool, root="root.md")


# ─────────────────────────────────────────────────────────────────────────────
# estimate_export_tokens
# ─────────────────────────────────────────────────────────────────────────────


class TestEstimateTokensTool:
    """Tests for the estimate_export_tokens tool."""

    @pytest.mark.asyncio
    async def test_summary_without_output(self, sample_vault: Path):
        result = await _call_tool(server.estimate_export_tokens_tool, root="root.md")

        assert set(result) == {"root", "note_count", "missing_notes", "token_count", "warning"}
        assert result["note_count"] == 5
        assert result["missing_notes"] == ["missing"]
        assert result["token_count"] > 0
        assert result["warning"] is None

    @pytest.mark.asyncio
    async def test_matches_full_export(self, sample_vault: Path):
        full = await _call_tool(server.smart_export_tool, root="root.md", export_format="llm-markdown")
        estimate = await _call_tool(
            server.estimate_export_tokens_tool, root="root.md", export_format="llm-markdown"
        )

        assert estimate["note_count"] == full.note_count
        # The export date is embedded in the output, so allow a one-token drift
        assert abs(estimate["token_count"] - full.token_count) <= 1
