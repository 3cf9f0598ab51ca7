"""Structured errors for smartexport.

Recoverable conditions (root not found, unresolved references) are data, not
exceptions. The classes here cover failures that end an export: bad depth
configuration and provider-level I/O failures. The CLI and MCP server map them
to stable error codes.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for programmatic consumers (--json-errors)."""

    NOTE_NOT_FOUND = "NOTE_NOT_FOUND"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INVALID_DEPTH = "INVALID_DEPTH"
    INVALID_FORMAT = "INVALID_FORMAT"
    VAULT_NOT_CONFIGURED = "VAULT_NOT_CONFIGURED"
    INVALID_SETTING = "INVALID_SETTING"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def format_error_json(code: ErrorCode | str, message: str, details: dict[str, Any] | None = None) -> str:
    """Format an error payload as a single JSON line."""
    code_value = code.value if isinstance(code, ErrorCode) else code
    error: dict[str, dict[str, Any]] = {"error": {"code": code_value, "message": message}}
    if details:
        error["error"]["details"] = details
    return json.dumps(error, default=str)


class SmartExportError(Exception):
    """Base class for errors that abort an export."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_json(self) -> str:
        return format_error_json(self.code, self.message, self.details)


class NoteNotFoundError(SmartExportError):
    """The requested root note does not exist in the vault."""

    code = ErrorCode.NOTE_NOT_FOUND

    def __init__(self, identifier: str, suggestions: list[str] | None = None) -> None:
        details: dict[str, Any] = {"identifier": identifier}
        if suggestions:
            details["suggestions"] = suggestions
            details["suggestion"] = f"Did you mean: {', '.join(suggestions)}?"
        super().__init__(f"Note not found: {identifier}", details)
        self.identifier = identifier
        self.suggestions = suggestions or []


class ProviderError(SmartExportError):
    """The note provider failed while reading a resolved note."""

    code = ErrorCode.PROVIDER_ERROR

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(
            f"Failed to read note '{identifier}': {reason}",
            {"identifier": identifier},
        )
        self.identifier = identifier
        self.reason = reason


class InvalidDepthError(SmartExportError, ValueError):
    """Depth limits violate content_depth >= 1 and title_depth >= content_depth."""

    code = ErrorCode.INVALID_DEPTH

    def __init__(self, content_depth: int, title_depth: int) -> None:
        if content_depth < 1:
            message = f"content_depth must be at least 1 (got {content_depth})"
        else:
            message = (
                f"title_depth ({title_depth}) must be greater than or equal to "
                f"content_depth ({content_depth})"
            )
        super().__init__(
            message,
            {"content_depth": content_depth, "title_depth": title_depth},
        )
        self.content_depth = content_depth
        self.title_depth = title_depth


class InvalidFormatError(SmartExportError, ValueError):
    """The requested export format has no renderer."""

    code = ErrorCode.INVALID_FORMAT

    def __init__(self, export_format: str, choices: list[str]) -> None:
        super().__init__(
            f"Unknown export format '{export_format}'. Choose from: {', '.join(choices)}",
            {"format": export_format, "choices": choices},
        )
        self.export_format = export_format
