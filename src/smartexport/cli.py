#!/usr/bin/env python3
"""
sx: CLI for smartexport

Usage:
    sx export path/to/note.md                  # Export to stdout (default format)
    sx export note.md --format llm-markdown    # Choose a renderer
    sx tokens note.md                          # Token estimate only
    sx missing note.md                         # Unresolved links
    sx config show                             # Vault defaults
"""

from __future__ import annotations

import asyncio
import difflib
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn, cast

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as SMARTEXPORT_VERSION
from .models import EXPORT_FORMATS, ExportFormat, ExportResult

log = logging.getLogger(__name__)


def run_async(coro):
    """Run async function synchronously."""
    return asyncio.run(coro)


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


# ─────────────────────────────────────────────────────────────────────────────
# Error Handling
# ─────────────────────────────────────────────────────────────────────────────


def _handle_error(
    ctx: click.Context,
    error: Exception,
    fallback_message: str | None = None,
    exit_code: int = 1,
) -> NoReturn:
    """Handle an error with optional JSON output.

    If --json-errors is enabled, outputs structured JSON error.
    Otherwise, outputs human-readable error message.

    Args:
        ctx: Click context (must have obj["json_errors"] set).
        error: The exception that occurred.
        fallback_message: Optional message to use for non-SmartExportError exceptions.
        exit_code: Exit code to use (default 1).
    """
    from .errors import SmartExportError, format_error_json

    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, SmartExportError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
            suggestion = error.details.get("suggestion") if error.details else None
            if suggestion:
                click.echo(f"Hint: {suggestion}", err=True)
    else:
        message = fallback_message or str(error)
        if json_errors:
            code = _infer_error_code(error)
            click.echo(format_error_json(code, message), err=True)
        else:
            click.echo(f"Error: {message}", err=True)

    sys.exit(exit_code)


def _infer_error_code(error: Exception):
    """Infer an error code for exceptions that are not SmartExportErrors."""
    from .config import ConfigurationError
    from .errors import ErrorCode

    if isinstance(error, ConfigurationError):
        return ErrorCode.VAULT_NOT_CONFIGURED
    if isinstance(error, ValueError):
        return ErrorCode.INVALID_SETTING
    return ErrorCode.INTERNAL_ERROR


def get_error_code_for_exception(exc: Exception) -> str:
    """Map Click exceptions to error codes."""
    if isinstance(exc, click.BadParameter):
        return "INVALID_ARGUMENT"
    elif isinstance(exc, click.MissingParameter):
        return "MISSING_ARGUMENT"
    elif isinstance(exc, click.NoSuchOption):
        return "UNKNOWN_OPTION"
    elif isinstance(exc, UsageError):
        return "USAGE_ERROR"
    elif isinstance(exc, ClickException):
        return "CLI_ERROR"
    return "UNKNOWN_ERROR"


# ─────────────────────────────────────────────────────────────────────────────
# JSON Error Handling
# ─────────────────────────────────────────────────────────────────────────────


class JsonErrorGroup(click.Group):
    """Custom Click group that formats errors as JSON when --json-errors is set.

    This handles Click validation errors (bad option values, missing args, etc.)
    that occur before the command callback is invoked. Also provides typo
    suggestions for unknown commands.
    """

    def resolve_command(self, ctx, args):
        """Override to suggest similar commands for typos."""
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(
                    cmd_name, self.list_commands(ctx), n=1, cutoff=0.6
                )
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        """Override main to catch errors during argument parsing.

        When --json-errors appears anywhere in argv it is moved to the front so
        Click parses it as a global flag, and Click runs with
        standalone_mode=False so usage errors surface as exceptions.
        """
        argv = list(args) if args is not None else list(sys.argv[1:])

        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        argv = [a for a in argv if a != "--json-errors"]
        argv.insert(0, "--json-errors")

        try:
            return super().main(
                argv,
                prog_name,
                complete_var,
                standalone_mode=False,
                **extra,
            )
        except ClickException as e:
            code = get_error_code_for_exception(e)
            click.echo(
                json.dumps({"error": {"code": code, "message": e.format_message()}}),
                err=True,
            )
            raise SystemExit(1)
        except SystemExit:
            raise
        except Exception as e:
            click.echo(
                json.dumps({"error": {"code": "INTERNAL_ERROR", "message": str(e)}}),
                err=True,
            )
            raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Shared Export Plumbing
# ─────────────────────────────────────────────────────────────────────────────


def _resolve_vault(ctx: click.Context, vault: str | None) -> Path:
    from .config import ConfigurationError, get_vault_root

    try:
        return get_vault_root(vault)
    except ConfigurationError as exc:
        _handle_error(ctx, exc)


def _run_export(
    ctx: click.Context,
    root: str,
    vault: str | None,
    content_depth: int | None,
    title_depth: int | None,
    export_format: str | None,
) -> ExportResult:
    from .errors import SmartExportError
    from .export import export_note

    vault_root = _resolve_vault(ctx, vault)
    try:
        return run_async(
            export_note(
                root,
                vault_root=vault_root,
                content_depth=content_depth,
                title_depth=title_depth,
                export_format=cast("ExportFormat | None", export_format),
            )
        )
    except SmartExportError as exc:
        _handle_error(ctx, exc)


def _format_tokens(result: ExportResult) -> str:
    text = f"~{result.token_count:,} tokens"
    if result.warning:
        text += f" ({result.warning})"
    return text


def depth_options(f):
    """Options shared by every command that runs a traversal."""
    f = click.option(
        "--format",
        "export_format",
        type=click.Choice(EXPORT_FORMATS),
        help="Output format (default from vault settings)",
    )(f)
    f = click.option(
        "--title-depth",
        "-t",
        type=click.IntRange(min=1),
        help="Levels to include at all; titles only beyond content depth",
    )(f)
    f = click.option(
        "--content-depth",
        "-c",
        type=click.IntRange(min=1),
        help="Levels of linked notes to include with full content",
    )(f)
    f = click.option(
        "--vault",
        type=click.Path(file_okay=False),
        envvar="SMARTEXPORT_VAULT_ROOT",
        help="Vault directory (default: discovered from cwd)",
    )(f)
    return f


# ─────────────────────────────────────────────────────────────────────────────
# Status Output (default when no subcommand)
# ─────────────────────────────────────────────────────────────────────────────


def _show_status() -> None:
    from .config import ConfigurationError, get_vault_root, load_settings
    from .provider import VaultProvider

    try:
        vault_root = get_vault_root()
    except ConfigurationError:
        click.echo("No vault found. Use --vault PATH or run inside an Obsidian vault.")
        click.echo("Run 'sx --help' for usage.")
        return

    settings = load_settings(vault_root)
    notes = VaultProvider(vault_root).list_notes()
    click.echo(f"Vault:         {vault_root}")
    click.echo(f"Notes:         {len(notes)}")
    click.echo(f"Content depth: {settings.default_content_depth}")
    click.echo(f"Title depth:   {settings.default_title_depth}")
    click.echo(f"Format:        {settings.default_export_format}")


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup, invoke_without_command=True)
@click.version_option(version=SMARTEXPORT_VERSION, prog_name="sx")
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="SMARTEXPORT_QUIET",
    help="Suppress the export summary and warnings",
)
@click.pass_context
def cli(ctx: click.Context, json_errors: bool, quiet: bool):
    """sx: export linked notes from a markdown vault.

    Starts at a root note and follows [[wikilinks]] breadth-first. Notes up to
    the content depth carry their full text; notes up to the title depth are
    listed by title only.

    \b
    Quick start:
      sx export Projects/alpha.md              # XML to stdout
      sx export alpha.md -c 2 -t 4 --format llm-markdown -o alpha.md
      sx tokens alpha.md                       # Size check before export
      sx missing alpha.md                      # Broken links

    \b
    Defaults:
      sx config show
      sx config set content-depth 2
    """
    from ._logging import set_quiet_mode

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet

    if quiet:
        set_quiet_mode(True)

    if ctx.invoked_subcommand is None:
        _show_status()


@cli.command()
@click.argument("root")
@depth_options
@click.option("--output", "-o", "output_path", type=click.Path(dir_okay=False), help="Write to file")
@click.option("--json", "as_json", is_flag=True, help="Output result and statistics as JSON")
@click.pass_context
def export(
    ctx: click.Context,
    root: str,
    vault: str | None,
    content_depth: int | None,
    title_depth: int | None,
    export_format: str | None,
    output_path: str | None,
    as_json: bool,
):
    """Export ROOT and its linked notes.

    ROOT is the note's path inside the vault (the .md extension is optional).
    """
    result = _run_export(ctx, root, vault, content_depth, title_depth, export_format)
    quiet = ctx.obj.get("quiet", False) if ctx.obj else False

    if output_path:
        try:
            Path(output_path).write_text(result.output, encoding="utf-8")
        except OSError as exc:
            _handle_error(ctx, exc, f"Cannot write {output_path}: {exc.strerror or exc}")

    if as_json:
        payload = result.model_dump()
        if output_path:
            payload["output_path"] = output_path
            payload.pop("output")
        output(payload, as_json=True)
        return

    if not output_path:
        click.echo(result.output, nl=False)

    if not quiet:
        destination = f" -> {output_path}" if output_path else ""
        click.echo(
            f"Exported {result.note_count} notes ({len(result.missing_notes)} missing), "
            f"{_format_tokens(result)}{destination}",
            err=True,
        )


@cli.command()
@click.argument("root")
@depth_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tokens(
    ctx: click.Context,
    root: str,
    vault: str | None,
    content_depth: int | None,
    title_depth: int | None,
    export_format: str | None,
    as_json: bool,
):
    """Estimate the token count of an export without printing it."""
    result = _run_export(ctx, root, vault, content_depth, title_depth, export_format)

    if as_json:
        output(
            {
                "root": result.root,
                "format": result.format,
                "note_count": result.note_count,
                "missing_count": len(result.missing_notes),
                "token_count": result.token_count,
                "warning": result.warning,
            },
            as_json=True,
        )
        return

    click.echo(_format_tokens(result))


@cli.command()
@click.argument("root")
@depth_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def missing(
    ctx: click.Context,
    root: str,
    vault: str | None,
    content_depth: int | None,
    title_depth: int | None,
    export_format: str | None,
    as_json: bool,
):
    """List links within reach of ROOT that do not resolve to a note."""
    result = _run_export(ctx, root, vault, content_depth, title_depth, export_format)

    if as_json:
        output({"root": result.root, "missing_notes": result.missing_notes}, as_json=True)
        return

    for name in result.missing_notes:
        click.echo(name)


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────

SETTING_KEYS = ("content-depth", "title-depth", "format")


@cli.group()
def config():
    """Show or change the vault's export defaults."""


@config.command("show")
@click.option("--vault", type=click.Path(file_okay=False), envvar="SMARTEXPORT_VAULT_ROOT")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, vault: str | None, as_json: bool):
    """Print the current export defaults."""
    from .config import load_settings, settings_path

    vault_root = _resolve_vault(ctx, vault)
    settings = load_settings(vault_root)

    if as_json:
        output(settings.model_dump(), as_json=True)
        return

    click.echo(f"Settings file: {settings_path(vault_root)}")
    click.echo(f"content-depth: {settings.default_content_depth}")
    click.echo(f"title-depth:   {settings.default_title_depth}")
    click.echo(f"format:        {settings.default_export_format}")


@config.command("set")
@click.argument("key", type=click.Choice(SETTING_KEYS))
@click.argument("value")
@click.option("--vault", type=click.Path(file_okay=False), envvar="SMARTEXPORT_VAULT_ROOT")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str, vault: str | None):
    """Change one export default.

    Raising content-depth above title-depth raises title-depth too; a
    title-depth below content-depth is raised to content-depth.
    """
    from pydantic import ValidationError

    from .config import MIN_DEPTH, clamp_depths, load_settings, save_settings
    from .models import ExportSettings

    vault_root = _resolve_vault(ctx, vault)
    settings = load_settings(vault_root)
    data = settings.model_dump()

    try:
        if key == "format":
            data["default_export_format"] = value
        else:
            depth = int(value)
            if depth < MIN_DEPTH:
                raise ValueError(f"depth must be at least {MIN_DEPTH}")
            if key == "content-depth":
                content, title = clamp_depths(depth, settings.default_title_depth, prefer="content")
            else:
                content = settings.default_content_depth
                title = max(depth, content)
            data["default_content_depth"] = content
            data["default_title_depth"] = title
        updated = ExportSettings.model_validate(data)
    except (ValueError, ValidationError) as exc:
        _handle_error(ctx, ValueError(f"Invalid value for {key}: {value} ({exc})"))

    path = save_settings(vault_root, updated)
    log.debug("Saved settings to %s", path)
    click.echo(
        f"content-depth={updated.default_content_depth} "
        f"title-depth={updated.default_title_depth} "
        f"format={updated.default_export_format}"
    )


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def main():
    """Entry point for sx CLI."""
    from ._logging import configure_logging

    configure_logging()
    cli()


if __name__ == "__main__":
    main()
