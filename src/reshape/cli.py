"""Command line interface for the Reshape project."""

from __future__ import annotations

import difflib
import signal
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Sequence

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from reshape.config import ConfigError, ConfigManager, ReshapeConfig, resolve_with_precedence
from reshape.ingestion import DirectoryNotFoundError, FolderScanner, MetadataProvider, ScanResponse
from reshape.log import configure_logging
from reshape.organization import (
    ConfigurationError,
    RenameExecuteResponse,
    RenameExecutor,
    RenamePlanner,
    RenamePreviewItem,
    RenamePreviewResponse,
    VacationModeOptions,
)
from reshape.patterns import (
    DEFAULT_PATTERNS,
    PLACEHOLDERS,
    DuplicatePatternError,
    PatternStore,
    PatternStoreError,
)

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print CLI output unless quiet/summary settings suppress it.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(str(root))}: {parts}.[/green]"


def _format_size(size: int) -> str:
    """Return ``size`` bytes as a short human-readable string."""
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{value:.2f}".rstrip("0").rstrip(".") + " GB"


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign ``value`` inside ``target`` following the dotted ``path``.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _split_extensions(values: Sequence[str]) -> list[str]:
    return [part for value in values for part in value.replace(",", " ").split() if part]


def _load_config() -> ReshapeConfig:
    """Load the effective configuration and configure logging from it.

    Raises:
        click.ClickException: If the configuration cannot be loaded.
    """
    try:
        manager = ConfigManager()
        config = manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(config.logging)
    return config


def _resolve_output_modes(
    ctx: click.Context,
    config: ReshapeConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into (quiet, summary_only)."""
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _build_scanner(config: ReshapeConfig) -> FolderScanner:
    return FolderScanner(
        recursive=config.scan.recursive,
        include_hidden=config.scan.include_hidden,
        follow_symlinks=config.scan.follow_symlinks,
    )


def _build_preview(
    config: ReshapeConfig,
    *,
    path: str,
    pattern: str | None,
    extensions: Sequence[str],
    vacation: bool,
    start_date: datetime | None,
    day_folder: str | None,
    subfolder: str | None,
) -> tuple[Path, str, list[RenamePreviewItem]]:
    """Scan ``path`` and plan renames, validating the pattern before any I/O.

    Returns:
        tuple[Path, str, list[RenamePreviewItem]]: Scan root, pattern used, and items.

    Raises:
        ConfigurationError: If no pattern was given and none is configured.
        DirectoryNotFoundError: If ``path`` does not exist.
    """
    effective_pattern = (pattern or config.rename.default_pattern or "").strip()
    if not effective_pattern:
        raise ConfigurationError(
            "A rename pattern is required. Pass --pattern or set rename.default_pattern."
        )

    vacation_options = None
    if vacation:
        vacation_options = VacationModeOptions(
            enabled=True,
            start_date=start_date.date() if start_date else None,
            day_folder_pattern=day_folder or config.vacation.day_folder_pattern,
            subfolder_pattern=subfolder or config.vacation.subfolder_pattern,
        )

    root = Path(path).expanduser()
    filters = _split_extensions(extensions) or config.scan.extensions
    records = _build_scanner(config).scan(root, filters)
    root = root.resolve()
    items = RenamePlanner().plan(records, effective_pattern, vacation_options, root=root)
    return root, effective_pattern, items


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.name


def _item_status(item: RenamePreviewItem) -> str:
    if item.has_conflict:
        return "[red]Conflict[/red]"
    if not item.is_selected:
        return "[yellow]Skipped[/yellow]"
    if item.is_noop:
        return "[dim]No change[/dim]"
    return "[green]OK[/green]"


def _render_preview(
    items: list[RenamePreviewItem],
    *,
    root: Path,
    pattern: str,
    quiet: bool,
    summary_only: bool,
) -> None:
    table = Table(title=f"Rename preview for {escape(str(root))}")
    table.add_column("Original", overflow="fold")
    table.add_column("New name", overflow="fold")
    table.add_column("Day", justify="right")
    table.add_column("Status")
    for item in items:
        original = item.original_name
        if item.relative_path:
            original = f"{item.relative_path}/{original}"
        table.add_row(
            escape(original),
            escape(item.new_name),
            str(item.day_number) if item.day_number is not None else "",
            _item_status(item),
        )
    _emit_message(table, mode="detail", quiet=quiet, summary_only=summary_only)
    _emit_message(
        f"[yellow]Pattern:[/yellow] {escape(pattern)}",
        mode="detail",
        quiet=quiet,
        summary_only=summary_only,
    )

    conflicts = sum(1 for item in items if item.has_conflict)
    if conflicts:
        _emit_message(
            f"[red]{conflicts} conflict(s) detected; conflicting files will not be renamed.[/red]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )


@contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """Yield an event that is set when the user presses Ctrl+C."""
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    previous = signal.getsignal(signal.SIGINT)
    signal.signal(signal.SIGINT, lambda _signum, _frame: cancel.set())
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


def _plan_options(command: Any) -> Any:
    """Attach the scan and pattern options shared by `preview` and `rename`."""
    options = [
        click.argument(
            "path",
            required=False,
            default=".",
            type=click.Path(file_okay=False, path_type=str),
        ),
        click.option(
            "-p", "--pattern", type=str, help="Rename pattern such as {year}-{month}-{day}_{filename}."
        ),
        click.option(
            "--ext",
            "extensions",
            multiple=True,
            help="Extension filter such as .jpg; repeat or comma-separate for several.",
        ),
        click.option(
            "--vacation", is_flag=True, help="Group files into day folders by capture date."
        ),
        click.option(
            "--start-date",
            type=click.DateTime(formats=["%Y-%m-%d"]),
            help="First vacation day (defaults to the earliest capture date).",
        ),
        click.option("--day-folder", type=str, help="Day folder pattern, e.g. 'Day {day_number}'."),
        click.option("--subfolder", type=str, help="Pattern for a folder inside each day folder."),
        click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of tables."),
        click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines."),
        click.option("--quiet", is_flag=True, help="Suppress non-error output."),
    ]
    for option in reversed(options):
        command = option(command)
    return command


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="reshape")
def cli() -> None:
    """Reshape batch-renames photos and other files using metadata patterns."""


@cli.command("list")
@click.argument(
    "path",
    required=False,
    default=".",
    type=click.Path(file_okay=False, path_type=str),
)
@click.option("--ext", "extensions", multiple=True, help="Extension filter such as .jpg.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing scanned files.")
def list_files(path: str, extensions: tuple[str, ...], json_output: bool) -> None:
    """List files under PATH together with a sample of their metadata."""
    config = _load_config()
    try:
        records = _build_scanner(config).scan(
            path, _split_extensions(extensions) or config.scan.extensions
        )
    except DirectoryNotFoundError as exc:
        _handle_cli_error(str(exc), code="not_found", json_output=json_output, original=exc)
        return

    root = Path(path).expanduser().resolve()
    if json_output:
        response = ScanResponse(folder_path=str(root), files=records, total_count=len(records))
        console.print_json(data=response.to_payload())
        return

    table = Table()
    table.add_column("Name", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Metadata", overflow="fold")
    for record in records:
        sample = ", ".join(f"{key}={value}" for key, value in list(record.metadata.items())[:3])
        name = f"{record.relative_path}/{record.name}" if record.relative_path else record.name
        table.add_row(
            escape(name),
            _format_size(record.size),
            record.modified_at.strftime("%Y-%m-%d %H:%M") if record.modified_at else "",
            f"[dim]{escape(sample)}...[/dim]",
        )
    console.print(Panel(table, title=escape(str(root))))
    console.print(f"[green]Found {len(records)} file(s).[/green]")


@cli.command()
@_plan_options
@click.pass_context
def preview(
    ctx: click.Context,
    path: str,
    pattern: str | None,
    extensions: tuple[str, ...],
    vacation: bool,
    start_date: datetime | None,
    day_folder: str | None,
    subfolder: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Show how files under PATH would be renamed without changing anything."""
    config = _load_config()
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
    )
    try:
        root, effective_pattern, items = _build_preview(
            config,
            path=path,
            pattern=pattern,
            extensions=extensions,
            vacation=vacation,
            start_date=start_date,
            day_folder=day_folder,
            subfolder=subfolder,
        )
    except ConfigurationError as exc:
        _handle_cli_error(
            str(exc), code="configuration_error", json_output=json_output, original=exc
        )
        return
    except DirectoryNotFoundError as exc:
        _handle_cli_error(str(exc), code="not_found", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=RenamePreviewResponse.from_items(items).to_payload())
        return

    _render_preview(
        items, root=root, pattern=effective_pattern, quiet=quiet_enabled, summary_only=summary_only
    )
    _emit_message(
        _format_summary_line(
            "Preview",
            root,
            {
                "files": len(items),
                "renames": sum(1 for item in items if item.is_actionable),
                "conflicts": sum(1 for item in items if item.has_conflict),
            },
        ),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@_plan_options
@click.option("--dry-run", is_flag=True, help="Report planned renames without moving files.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def rename(
    ctx: click.Context,
    path: str,
    pattern: str | None,
    extensions: tuple[str, ...],
    vacation: bool,
    start_date: datetime | None,
    day_folder: str | None,
    subfolder: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    dry_run: bool,
    yes: bool,
) -> None:
    """Rename files under PATH according to the pattern."""
    config = _load_config()
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
    )
    needs_confirmation = config.rename.confirm and not yes and not dry_run
    if json_output and needs_confirmation:
        raise click.ClickException("--json requires --yes or --dry-run.")

    try:
        root, effective_pattern, items = _build_preview(
            config,
            path=path,
            pattern=pattern,
            extensions=extensions,
            vacation=vacation,
            start_date=start_date,
            day_folder=day_folder,
            subfolder=subfolder,
        )
    except ConfigurationError as exc:
        _handle_cli_error(
            str(exc), code="configuration_error", json_output=json_output, original=exc
        )
        return
    except DirectoryNotFoundError as exc:
        _handle_cli_error(str(exc), code="not_found", json_output=json_output, original=exc)
        return

    if not json_output:
        _render_preview(
            items,
            root=root,
            pattern=effective_pattern,
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    pending = sum(1 for item in items if item.is_actionable)
    if needs_confirmation and pending and not click.confirm(f"Rename {pending} file(s)?"):
        console.print("[yellow]Operation cancelled.[/yellow]")
        return

    with _cancel_on_interrupt() as cancel:
        results = RenameExecutor().execute(items, root, dry_run=dry_run, cancel=cancel)
    response = RenameExecuteResponse.from_results(results)

    if json_output:
        console.print_json(data=response.to_payload())
        return

    for result in results:
        original = escape(result.original_path.name)
        target = escape(_display_path(result.new_path, root))
        if result.success:
            _emit_message(
                f"[green]✓[/green] {original} → {target}",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        else:
            _emit_message(
                f"[red]✗ {original} → {target}: {escape(result.error or 'failed')}[/red]",
                mode="error",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    if cancel.is_set():
        _emit_message(
            "[yellow]Cancelled; remaining files were left untouched.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    if dry_run:
        _emit_message(
            "[yellow]Dry run - no files were changed.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line(
            "Rename",
            root,
            {
                "renamed": response.success_count,
                "failed": response.error_count,
                "dry_run": dry_run,
            },
        ),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the placeholder map as JSON.")
def metadata(file: str, json_output: bool) -> None:
    """Show the placeholder values available for FILE."""
    _load_config()
    target = Path(file).expanduser()
    if not target.is_file():
        _handle_cli_error(f"File not found: {file}", code="not_found", json_output=json_output)
        return

    try:
        extracted = MetadataProvider().extract(target)
    except OSError as exc:
        _handle_cli_error(str(exc), code="read_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=extracted.metadata)
        return

    table = Table(title=escape(str(target)))
    table.add_column("Placeholder")
    table.add_column("Value", overflow="fold")
    for key, value in extracted.metadata.items():
        table.add_row(escape(f"{{{key}}}"), escape(value))
    console.print(table)


@cli.group()
def pattern() -> None:
    """Manage saved rename patterns."""


def _pattern_store(config: ReshapeConfig) -> PatternStore:
    return PatternStore(Path(config.patterns.store_path))


@pattern.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit all patterns as JSON.")
def pattern_list(json_output: bool) -> None:
    """Show built-in and custom patterns."""
    store = _pattern_store(_load_config())
    try:
        custom = store.load()
    except PatternStoreError as exc:
        _handle_cli_error(
            str(exc), code="pattern_store_error", json_output=json_output, original=exc
        )
        return

    if json_output:
        console.print_json(data=[entry.to_payload() for entry in (*DEFAULT_PATTERNS, *custom)])
        return

    defaults_table = Table(title="Default patterns")
    defaults_table.add_column("Pattern")
    defaults_table.add_column("Description")
    for entry in DEFAULT_PATTERNS:
        defaults_table.add_row(f"[cyan]{escape(entry.pattern)}[/cyan]", escape(entry.description))
    console.print(defaults_table)

    if custom:
        custom_table = Table(title="Custom patterns")
        custom_table.add_column("Pattern")
        custom_table.add_column("Description")
        for entry in custom:
            custom_table.add_row(
                f"[green]{escape(entry.pattern)}[/green]", escape(entry.description)
            )
        console.print(custom_table)
    else:
        console.print("[dim]No custom patterns defined. Add one with 'reshape pattern add'.[/dim]")

    console.print("\n[dim]Available placeholders:[/dim]")
    for placeholder, description in PLACEHOLDERS:
        console.print(f"[dim]  {escape(placeholder)} - {description}[/dim]")


@pattern.command("add")
@click.argument("template")
@click.option("-d", "--description", default="", help="Description shown in pattern listings.")
def pattern_add(template: str, description: str) -> None:
    """Save TEMPLATE as a custom pattern."""
    store = _pattern_store(_load_config())
    try:
        entry = store.add(template, description)
    except DuplicatePatternError as exc:
        raise click.ClickException(str(exc)) from exc
    except PatternStoreError as exc:
        raise click.ClickException(f"Failed to add pattern: {exc}") from exc

    console.print("[green]Pattern added.[/green]")
    console.print(f"  Pattern: [cyan]{escape(entry.pattern)}[/cyan]")
    if entry.description:
        console.print(f"  Description: {escape(entry.description)}")


@pattern.command("remove")
@click.argument("template")
def pattern_remove(template: str) -> None:
    """Delete the custom pattern TEMPLATE."""
    store = _pattern_store(_load_config())
    try:
        removed = store.remove(template)
    except PatternStoreError as exc:
        raise click.ClickException(f"Failed to remove pattern: {exc}") from exc

    if not removed:
        raise click.ClickException(f"Pattern not found: {template}")
    console.print(f"[green]Pattern removed:[/green] [cyan]{escape(template)}[/cyan]")


@cli.group()
def config() -> None:
    """Manage Reshape configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'rename.confirm'.")

    try:
        manager.ensure_exists()
        before = manager.read_text().splitlines()
        parsed_value = yaml.safe_load(value)
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=ReshapeConfig(), file_overrides=file_data)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    diff = list(
        difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # The timestamp line always changes; ignore it when deciding whether anything happened.
    changed = [
        line
        for line in diff
        if line[:1] in "+-" and not line.startswith(("+++", "---")) and "Last updated" not in line
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
