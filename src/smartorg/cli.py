"""Command line interface for smartorg."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from smartorg.config import ConfigError, ConfigManager, SmartOrgConfig
from smartorg.engine import Organizer, PassReport
from smartorg.logconfig import configure_logging
from smartorg.organization import FileOperation
from smartorg.rules import OrganizationRule, validate_rule
from smartorg.state import StateError, StateRepository
from smartorg.watch import WatchService

console = Console()


def _load_config(ctx: click.Context) -> SmartOrgConfig:
    """Load configuration once per invocation and configure logging.

    Args:
        ctx: Click context carrying the group-level options.

    Returns:
        SmartOrgConfig: Effective configuration.

    Raises:
        click.ClickException: If the configuration cannot be loaded.
    """
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        try:
            obj["config"] = ConfigManager().load()
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc
        configure_logging(obj["config"].logging, level_override=obj.get("log_level"))
    return obj["config"]


def _open_engine(ctx: click.Context) -> Organizer:
    config = _load_config(ctx)
    try:
        return Organizer(config, StateRepository(Path(config.state.path)))
    except StateError as exc:
        raise click.ClickException(str(exc)) from exc


def _operations_table(operations: Iterable[FileOperation], *, title: str) -> Table:
    table = Table(title=title)
    table.add_column("When", no_wrap=True)
    table.add_column("Kind")
    table.add_column("File")
    table.add_column("Result")
    for operation in operations:
        status = "green" if operation.success else "red"
        table.add_row(
            operation.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            operation.kind.value,
            operation.file_name,
            f"[{status}]{operation.description}[/{status}]",
        )
    return table


def _report_payload(report: PassReport) -> dict[str, Any]:
    return {
        "skipped": report.skipped,
        "stopped": report.stopped,
        "directories": [str(path) for path in report.directories],
        "counts": {
            "operations": len(report.operations),
            "succeeded": report.succeeded,
            "failed": report.failed,
            "unsupported": len(report.unsupported),
        },
        "operations": [operation.model_dump(mode="json") for operation in report.operations],
        "unsupported": [item.model_dump(mode="json") for item in report.unsupported],
        "scan_errors": dict(report.scan_errors),
    }


def _emit_report(report: PassReport, *, json_output: bool) -> None:
    if json_output:
        console.print_json(data=_report_payload(report))
        return
    if report.skipped:
        console.print("[yellow]An organize pass is already running; nothing done.[/yellow]")
        return
    if report.operations:
        console.print(_operations_table(report.operations, title="Operations"))
    for directory, error in report.scan_errors.items():
        console.print(f"[red]Could not scan {directory}: {error}[/red]")
    for item in report.unsupported:
        console.print(f"[yellow]{item.file_name}: {item.reason}[/yellow]")
    console.print(
        f"[green]Organized {len(report.directories)} director"
        f"{'y' if len(report.directories) == 1 else 'ies'}: "
        f"succeeded={report.succeeded}, failed={report.failed}.[/green]"
    )


def _find_rule(engine: Organizer, rule_id: str) -> OrganizationRule:
    rule_id = rule_id.strip().lower()
    if not rule_id:
        raise click.ClickException("Rule id must not be empty.")
    matches = [rule for rule in engine.rules if str(rule.id).startswith(rule_id)]
    if not matches:
        raise click.ClickException(f"No rule with id {rule_id}.")
    if len(matches) > 1:
        raise click.ClickException(f"Rule id prefix {rule_id} is ambiguous.")
    return matches[0]


def _read_rules_file(path: Path) -> list[OrganizationRule]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Could not read {path}: {exc}") from exc

    if isinstance(raw, dict) and "rules" in raw:
        raw = raw["rules"]
    entries = raw if isinstance(raw, list) else [raw]

    rules: list[OrganizationRule] = []
    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise click.ClickException(f"Rule {index} in {path} must be a mapping.")
        try:
            rule = OrganizationRule.model_validate(entry)
        except ValidationError as exc:
            raise click.ClickException(f"Rule {index} in {path} is invalid: {exc}") from exc
        problems = validate_rule(rule)
        if problems:
            joined = "\n  - ".join(problems)
            raise click.ClickException(f"Rule '{rule.name}' is misconfigured:\n  - {joined}")
        rules.append(rule)
    return rules


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="smartorg")
@click.option("--log-level", type=str, help="Override the configured logging level.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """smartorg sorts files in watched directories using prioritized rules."""
    ctx.ensure_object(dict)["log_level"] = log_level


@cli.command()
@click.argument("path", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Emit the pass report as JSON.")
@click.pass_context
def run(ctx: click.Context, path: Path | None, json_output: bool) -> None:
    """Organize PATH, or every watched directory when PATH is omitted."""
    engine = _open_engine(ctx)
    if path is None and not engine.watched_directories:
        raise click.ClickException("No watched directories. Add one with `smartorg dirs add`.")
    report = engine.organize_all() if path is None else engine.organize_directory(path)
    _emit_report(report, json_output=json_output)


@cli.command()
@click.option("--once", is_flag=True, help="Run a single pass over watched directories and exit.")
@click.option("--debounce", type=float, help="Override the debounce interval in seconds.")
@click.option("--json", "json_output", is_flag=True, help="Emit pass reports as JSON.")
@click.pass_context
def watch(ctx: click.Context, once: bool, debounce: float | None, json_output: bool) -> None:
    """Watch the configured directories and organize files as they change."""
    if debounce is not None and debounce <= 0:
        raise click.ClickException("--debounce must be greater than zero.")

    engine = _open_engine(ctx)
    if not engine.watched_directories:
        raise click.ClickException("No watched directories. Add one with `smartorg dirs add`.")

    service = WatchService(engine, debounce_seconds=debounce)
    if once:
        _emit_report(service.process_once(), json_output=json_output)
        return

    if not json_output:
        monitored = ", ".join(str(path) for path in engine.watched_directories)
        console.print(f"[cyan]Watching {monitored}. Press Ctrl+C to stop.[/cyan]")
    try:
        service.watch(lambda report: _emit_report(report, json_output=json_output))
    except KeyboardInterrupt:
        service.stop()
        if not json_output:
            console.print("[yellow]Watch stopped by user request.[/yellow]")
    except RuntimeError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.group()
def dirs() -> None:
    """Manage watched directories."""


@dirs.command("list")
@click.pass_context
def dirs_list(ctx: click.Context) -> None:
    engine = _open_engine(ctx)
    if not engine.watched_directories:
        console.print("[yellow]No watched directories.[/yellow]")
        return
    for directory in engine.watched_directories:
        console.print(str(directory))


@dirs.command("add")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
def dirs_add(ctx: click.Context, path: Path) -> None:
    engine = _open_engine(ctx)
    if engine.add_watched_directory(path):
        console.print(f"[green]Watching {path}.[/green]")
    else:
        console.print(f"[yellow]{path} is already watched.[/yellow]")


@dirs.command("remove")
@click.argument("path", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def dirs_remove(ctx: click.Context, path: Path) -> None:
    engine = _open_engine(ctx)
    if engine.remove_watched_directory(path):
        console.print(f"[green]Stopped watching {path}.[/green]")
    else:
        console.print(f"[yellow]{path} was not watched.[/yellow]")


@cli.group()
def rules() -> None:
    """Inspect and edit organization rules."""


@rules.command("list")
@click.pass_context
def rules_list(ctx: click.Context) -> None:
    """List rules in evaluation order."""
    engine = _open_engine(ctx)
    table = Table(title="Rules")
    table.add_column("Id", no_wrap=True)
    table.add_column("Name")
    table.add_column("Priority", justify="right")
    table.add_column("Enabled")
    table.add_column("Conditions")
    table.add_column("Actions")
    for rule in engine.rules:
        conditions = "\n".join(
            f"{c.condition_type.value} {c.operator.value} {c.value!r}" for c in rule.conditions
        )
        actions = "\n".join(
            " ".join([a.action_type.value, *(f"{k}={v}" for k, v in a.parameters.items())])
            for a in rule.actions
        )
        table.add_row(
            str(rule.id)[:8],
            rule.name,
            str(rule.priority),
            "yes" if rule.enabled else "no",
            conditions or "(always)",
            actions,
        )
    console.print(table)


@rules.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def rules_import(ctx: click.Context, file: Path) -> None:
    """Add the rules described in a YAML FILE."""
    imported = _read_rules_file(file)
    engine = _open_engine(ctx)
    for rule in imported:
        try:
            engine.add_rule(rule)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        console.print(f"[green]Added rule '{rule.name}' ({str(rule.id)[:8]}).[/green]")


@rules.command("remove")
@click.argument("rule_id")
@click.pass_context
def rules_remove(ctx: click.Context, rule_id: str) -> None:
    engine = _open_engine(ctx)
    rule = _find_rule(engine, rule_id)
    engine.remove_rule(rule)
    console.print(f"[green]Removed rule '{rule.name}'.[/green]")


@rules.command("enable")
@click.argument("rule_id")
@click.pass_context
def rules_enable(ctx: click.Context, rule_id: str) -> None:
    engine = _open_engine(ctx)
    rule = _find_rule(engine, rule_id)
    engine.set_rule_enabled(rule, True)
    console.print(f"[green]Enabled rule '{rule.name}'.[/green]")


@rules.command("disable")
@click.argument("rule_id")
@click.pass_context
def rules_disable(ctx: click.Context, rule_id: str) -> None:
    engine = _open_engine(ctx)
    rule = _find_rule(engine, rule_id)
    engine.set_rule_enabled(rule, False)
    console.print(f"[green]Disabled rule '{rule.name}'.[/green]")


@cli.command()
@click.option("--limit", type=int, help="Number of operations to show.")
@click.option("--json", "json_output", is_flag=True, help="Emit history as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int | None, json_output: bool) -> None:
    """Show the most recent operations, newest first."""
    engine = _open_engine(ctx)
    count = limit if limit is not None else engine.config.cli.history_limit
    operations = list(engine.recent_operations)[: max(0, count)]
    if json_output:
        console.print_json(data=[operation.model_dump(mode="json") for operation in operations])
        return
    if not operations:
        console.print("[yellow]No operations recorded yet.[/yellow]")
        return
    console.print(_operations_table(operations, title="Recent operations"))


@cli.command()
@click.option("--reset", is_flag=True, help="Zero the counters.")
@click.pass_context
def stats(ctx: click.Context, reset: bool) -> None:
    """Show or reset aggregate statistics."""
    engine = _open_engine(ctx)
    statistics = engine.reset_statistics() if reset else engine.statistics
    last = statistics.last_organization_date
    console.print(f"Files organized: {statistics.files_organized}")
    console.print(f"Errors: {statistics.errors}")
    console.print(f"Last organized: {last.isoformat() if last else 'never'}")


@cli.group()
def config() -> None:
    """Inspect smartorg configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration."""
    manager = ConfigManager()
    try:
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def main() -> None:
    """Entry point for ``python -m smartorg``."""
    cli(obj={})


__all__ = ["cli", "main"]
