"""Command line interface for LabelDesk."""

from __future__ import annotations

import asyncio
import difflib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from labeldesk.assets import AssetCatalog, AssetIdentity, HttpRangeFetcher, SchemeFetcher
from labeldesk.assets.models import Asset
from labeldesk.config import (
    ConfigError,
    ConfigManager,
    LabelDeskConfig,
    flatten_for_env,
    resolve_with_precedence,
)
from labeldesk.errors import LabelDeskError
from labeldesk.metadata import AssetMetadata, MetadataStore
from labeldesk.notifications import ConsoleNotifier
from labeldesk.project import Project
from labeldesk.storage import LocalAssetBackend, LocalStorageBackend
from labeldesk.tags import TagConsistencyEngine

console = Console()


@dataclass
class _Services:
    """Collaborators wired for a local project root."""

    identity: AssetIdentity
    catalog: AssetCatalog
    store: MetadataStore


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
        SystemExit: When emitting JSON output.
        click.ClickException: For non-JSON flows.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print CLI output according to quiet/summary settings."""
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _load_config() -> LabelDeskConfig:
    manager = ConfigManager()
    try:
        config = manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _configure_logging(config.logging.level)
    return config


def _configure_logging(level: str) -> None:
    root_logger = logging.getLogger("labeldesk")
    root_logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in root_logger.handlers):
        root_logger.addHandler(RichHandler(console=console, show_path=False))


def _output_modes(
    ctx: click.Context, config: LabelDeskConfig, *, quiet: bool, summary: bool, json_output: bool
) -> tuple[bool, bool]:
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary if explicit_summary else config.cli.summary_default
    if json_output:
        return False, False
    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _build_services(
    root: Path, folder: str, config: LabelDeskConfig, *, quiet: bool = False
) -> _Services:
    notifier = ConsoleNotifier(console, quiet=quiet)
    fetcher = SchemeFetcher(http=HttpRangeFetcher(timeout=config.sniffing.timeout_seconds))
    # Notices must fire before asyncio.run() returns.
    sniffing = config.sniffing.model_copy(update={"correction_notice_delay_seconds": 0.0})
    identity = AssetIdentity(fetcher, notifier, settings=sniffing)
    backend = LocalAssetBackend(
        root, identity, sidecar_suffixes=config.storage.sidecar_suffixes()
    )
    store = MetadataStore(
        LocalStorageBackend(root),
        notifier,
        settings=config.storage,
        generator_defaults=config.generators,
    )
    return _Services(identity=identity, catalog=AssetCatalog(backend, folder), store=store)


async def _flush_notices() -> None:
    """Yield once so correction notices scheduled with no delay are delivered."""
    await asyncio.sleep(0)


def _asset_summary(asset: Asset) -> dict[str, Any]:
    return asset.model_dump(mode="json")


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="labeldesk")
def cli() -> None:
    """LabelDesk keeps asset identities, label files, and tags consistent."""


@cli.command()
@click.argument("path")
@click.option("--name", type=str, help="Display name to use instead of the last path segment.")
@click.option("--json", "json_output", is_flag=True, help="Emit the asset record as JSON.")
def resolve(path: str, name: str | None, json_output: bool) -> None:
    """Resolve the identity and true format of the asset at PATH."""
    config = _load_config()
    services = _build_services(Path.cwd(), "", config, quiet=json_output)

    async def _resolve() -> Asset:
        asset = await services.identity.resolve(path, name)
        await _flush_notices()
        return asset

    try:
        asset = asyncio.run(_resolve())
    except LabelDeskError as exc:
        _handle_cli_error(str(exc), code="resolve_failed", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=_asset_summary(asset))
        return

    table = Table(show_header=False)
    for key, value in _asset_summary(asset).items():
        table.add_row(key, str(value))
    console.print(table)


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--folder", default="", help="Project folder relative to ROOT.")
@click.option("--json", "json_output", is_flag=True, help="Emit assets as JSON.")
def assets(root: Path, folder: str, json_output: bool) -> None:
    """List the assets located directly in a project folder under ROOT."""
    config = _load_config()
    services = _build_services(root, folder, config, quiet=json_output)

    async def _list() -> list[Asset]:
        listed = await services.catalog.get_assets()
        await _flush_notices()
        return listed

    listed = asyncio.run(_list())

    if json_output:
        console.print_json(data={"assets": [_asset_summary(asset) for asset in listed]})
        return

    table = Table(title=f"Assets in {folder or '.'}")
    for column in ("name", "format", "type", "size", "id"):
        table.add_column(column)
    for asset in listed:
        table.add_row(asset.name, asset.format, asset.type.value, str(asset.size), asset.id[:12])
    console.print(table)


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("name")
@click.option("--folder", default="", help="Project folder relative to ROOT.")
def show(root: Path, name: str, folder: str) -> None:
    """Print the loaded metadata of asset NAME as JSON."""
    config = _load_config()
    services = _build_services(root, folder, config)

    async def _load() -> AssetMetadata | None:
        for asset in await services.catalog.get_assets():
            if asset.name == name or asset.name.split("/")[-1] == name:
                return await services.store.load(asset)
        return None

    metadata = asyncio.run(_load())
    if metadata is None:
        raise click.ClickException(f"No asset named {name} in {folder or '.'}.")
    console.print_json(data=metadata.to_document())


@cli.group()
def tags() -> None:
    """Rename or delete tags across every asset of a project folder."""


def _run_tag_pass(
    ctx: click.Context,
    *,
    command: str,
    root: Path,
    folder: str,
    dry_run: bool,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
    tag_names: tuple[str, ...],
) -> None:
    config = _load_config()
    quiet_enabled, summary_only = _output_modes(
        ctx, config, quiet=quiet, summary=summary_mode, json_output=json_output
    )
    services = _build_services(root, folder, config, quiet=quiet_enabled or json_output)

    async def _pass() -> tuple[int, list[AssetMetadata]]:
        project = Project.from_assets(await services.catalog.get_assets(), folder_path=folder)
        engine = TagConsistencyEngine(services.store, project)
        if command == "rename":
            updated = await engine.rename(*tag_names)
        else:
            updated = await engine.delete(*tag_names)
        if not dry_run:
            await asyncio.gather(*(services.store.save(metadata) for metadata in updated))
        return len(project.assets), updated

    try:
        total, updated = asyncio.run(_pass())
    except LabelDeskError as exc:
        _handle_cli_error(str(exc), code="tag_pass_failed", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "command": command,
                "dry_run": dry_run,
                "assets": total,
                "updated": [metadata.asset.name for metadata in updated],
            }
        )
        return

    for metadata in updated:
        verb = "Would update" if dry_run else "Updated"
        _emit_message(
            f"{verb} {metadata.asset.name} (state={metadata.asset.state.name.lower()})",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line(
            f"tags {command}",
            root / folder if folder else root,
            {"assets": total, "updated": len(updated), "dry_run": dry_run},
        ),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


_TAG_PASS_OPTIONS = (
    click.option("--folder", default="", help="Project folder relative to ROOT."),
    click.option("--dry-run", is_flag=True, help="Report changes without saving them."),
    click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary."),
    click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines."),
    click.option("--quiet", is_flag=True, help="Suppress non-error output."),
)


def _tag_pass_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(_TAG_PASS_OPTIONS):
        func = option(func)
    return func


@tags.command("rename")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("old_name")
@click.argument("new_name")
@_tag_pass_options
@click.pass_context
def tags_rename(
    ctx: click.Context,
    root: Path,
    old_name: str,
    new_name: str,
    folder: str,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Rename tag OLD_NAME to NEW_NAME in every asset under ROOT."""
    _run_tag_pass(
        ctx,
        command="rename",
        root=root,
        folder=folder,
        dry_run=dry_run,
        json_output=json_output,
        quiet=quiet,
        summary_mode=summary_mode,
        tag_names=(old_name, new_name),
    )


@tags.command("delete")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("name")
@_tag_pass_options
@click.pass_context
def tags_delete(
    ctx: click.Context,
    root: Path,
    name: str,
    folder: str,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Delete tag NAME from every asset under ROOT."""
    _run_tag_pass(
        ctx,
        command="delete",
        root=root,
        folder=folder,
        dry_run=dry_run,
        json_output=json_output,
        quiet=quiet,
        summary_mode=summary_mode,
        tag_names=(name,),
    )


@cli.group()
def config() -> None:
    """Manage LabelDesk configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option(
    "--as-env",
    is_flag=True,
    help="Print the configuration as LABELDESK__SECTION__KEY environment assignments.",
)
def config_view(no_env: bool, as_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for key, value in flatten_for_env(loaded).items():
            console.print(f"{key}={value}", markup=False, highlight=False, soft_wrap=True)
        return

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'storage.label_suffix'.")

    try:
        parsed_value = yaml.safe_load(value)
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=LabelDeskConfig(), file_overrides=file_data)
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
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
