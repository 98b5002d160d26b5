"""Command-line interface."""

import io
import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import NoReturn

import click

from newsbrew import __version__
from newsbrew.adapters import build_bindings
from newsbrew.config import AppConfig, ConfigLoader, ConfigValidationError
from newsbrew.curation import CurationEngine, DigestGenerationError
from newsbrew.export import (
    digest_to_json,
    encode_items,
    format_digest_text,
    format_item_line,
    sanitize_text,
)
from newsbrew.fetch import HttpFetcher
from newsbrew.observability import bind_run_context, configure_logging
from newsbrew.settings import AppSettings, get_settings
from newsbrew.store import (
    InvalidRuleError,
    ItemFilter,
    ItemNotFoundError,
    RuleKind,
    SourceNotFoundError,
    StateStore,
)
from newsbrew.sync import SyncRunner, format_sync_report


DEFAULT_LIST_LIMIT = 20

RULE_ICONS = {
    RuleKind.MUTE_DOMAIN: "🔇",
    RuleKind.MUTE_SOURCE: "🔇",
    RuleKind.BOOST_TAG: "🔊",
    RuleKind.BOOST_DOMAIN: "🔊",
}


@dataclass
class AppContext:
    """State shared by every command of one invocation."""

    config: AppConfig
    settings: AppSettings
    db_path: Path
    run_id: str

    @contextmanager
    def open_store(self) -> Generator[StateStore]:
        """Connect to the state store for the duration of a command."""
        with StateStore(self.db_path, run_id=self.run_id) as store:
            yield store


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load_config(path: Path, required: bool, run_id: str) -> AppConfig:
    loader = ConfigLoader(run_id)
    try:
        return loader.load(path, required=required)
    except ConfigValidationError as e:
        click.echo(f"Configuration validation failed: {e.file_path}", err=True)
        for formatted in e.format_errors():
            click.echo(f"  - {formatted}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: $NEWSBREW_CONFIG or ~/.config/newsbrew/newsbrew.yaml)",
)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Emit logs as JSON lines",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    db_path: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Curated, deduplicated digests from many news sources."""
    configure_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        output=sys.stderr,
        json_format=json_logs,
    )
    run_id = str(uuid.uuid4())
    bind_run_context(run_id)

    settings = get_settings()
    config = _load_config(
        settings.resolve_config_path(config_path),
        required=config_path is not None,
        run_id=run_id,
    )
    ctx.obj = AppContext(
        config=config,
        settings=settings,
        db_path=settings.resolve_db_path(db_path, config.db_path),
        run_id=run_id,
    )


@cli.command()
@click.pass_obj
def sync(app: AppContext) -> None:
    """Fetch all enabled sources and store their items."""
    http_client = HttpFetcher(app.config.fetch, app.run_id)
    bindings = build_bindings(
        app.config.enabled_sources, http_client, app.settings.github_token
    )
    with app.open_store() as store:
        runner = SyncRunner(
            store,
            run_id=app.run_id,
            max_workers=app.config.sync.max_workers,
            timeout_seconds=app.config.sync.timeout_seconds,
        )
        click.echo(f"Syncing {len(bindings)} sources...")
        report = runner.run(bindings)
    click.echo(format_sync_report(report))


@cli.command()
@click.option("--window", "window_hours", type=click.IntRange(min=1), default=None,
              help="Look-back window in hours")
@click.option("--max", "max_items", type=click.IntRange(min=1), default=None,
              help="Maximum items in the digest")
@click.option("--title", default=None, help="Digest title")
@click.option("--json", "json_output", is_flag=True, help="Print the digest as NDJSON")
@click.option("--no-save", is_flag=True, help="Do not store the digest in history")
@click.pass_obj
def digest(
    app: AppContext,
    window_hours: int | None,
    max_items: int | None,
    title: str | None,
    json_output: bool,
    no_save: bool,
) -> None:
    """Generate a ranked digest from stored items."""
    window = timedelta(hours=window_hours) if window_hours else None
    with app.open_store() as store:
        engine = CurationEngine(store, app.config.curation, run_id=app.run_id)
        try:
            result = engine.generate_digest(
                window=window, max_items=max_items, title=title
            )
        except DigestGenerationError as e:
            _fail(f"Digest generation failed: {e.message}")

        payload = digest_to_json(result)
        if not no_save:
            store.save_digest(
                payload, result.title, result.item_count, result.generated_at
            )

    if json_output:
        click.echo(payload)
    else:
        click.echo(format_digest_text(result))


def _item_filter(unread: bool, source: str | None, limit: int | None) -> ItemFilter:
    return ItemFilter(unread_only=unread, source_name=source, limit=limit)


@cli.command()
@click.option("--unread", is_flag=True, help="Only unread items")
@click.option("--source", default=None, help="Only items from this source")
@click.option("--limit", type=click.IntRange(min=1), default=DEFAULT_LIST_LIMIT,
              show_default=True)
@click.pass_obj
def items(app: AppContext, unread: bool, source: str | None, limit: int) -> None:
    """List stored items, best ranked first."""
    with app.open_store() as store:
        rows = store.list_items(_item_filter(unread, source, limit))
    if not rows:
        click.echo("No items.")
        return
    for item in rows:
        click.echo(format_item_line(item))


@cli.command()
@click.option("--unread", is_flag=True, help="Only unread items")
@click.option("--source", default=None, help="Only items from this source")
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.pass_obj
def export(app: AppContext, unread: bool, source: str | None, limit: int | None) -> None:
    """Write stored items as NDJSON to stdout."""
    with app.open_store() as store:
        rows = store.list_items(_item_filter(unread, source, limit))
    buffer = io.StringIO()
    encode_items(rows, buffer)
    click.echo(buffer.getvalue(), nl=False)


def _set_state(app: AppContext, item_id: str, action: str) -> None:
    with app.open_store() as store:
        try:
            item = store.get_item(item_id)
        except ItemNotFoundError as e:
            _fail(str(e))
        duplicates: list[str] = []
        if action == "read":
            store.mark_read(item.id)
            duplicates = store.get_deduped_ids(item.id)
        elif action == "saved":
            store.mark_saved(item.id)
        else:
            store.mark_unread(item.id)
    click.echo(f"✓ Marked {action}: {sanitize_text(item.title)}")
    if duplicates:
        click.echo(f"  Duplicates: {', '.join(duplicates)}")


@cli.command()
@click.argument("item_id")
@click.pass_obj
def read(app: AppContext, item_id: str) -> None:
    """Mark an item as read (id prefix accepted)."""
    _set_state(app, item_id, "read")


@cli.command()
@click.argument("item_id")
@click.pass_obj
def save(app: AppContext, item_id: str) -> None:
    """Save an item for later."""
    _set_state(app, item_id, "saved")


@cli.command()
@click.argument("item_id")
@click.pass_obj
def unread(app: AppContext, item_id: str) -> None:
    """Mark an item as unread again."""
    _set_state(app, item_id, "unread")


def _add_rule(app: AppContext, kind: RuleKind, pattern: str) -> None:
    with app.open_store() as store:
        try:
            rule = store.insert_rule(kind, pattern)
        except InvalidRuleError as e:
            _fail(str(e))
    click.echo(f"✓ Added rule #{rule.id} {rule.kind.value}: {rule.pattern}")


@cli.command()
@click.argument("domain")
@click.pass_obj
def mute(app: AppContext, domain: str) -> None:
    """Hide items linking to a domain."""
    _add_rule(app, RuleKind.MUTE_DOMAIN, domain)


@cli.command("mute-source")
@click.argument("name")
@click.pass_obj
def mute_source(app: AppContext, name: str) -> None:
    """Hide items from a source."""
    _add_rule(app, RuleKind.MUTE_SOURCE, name)


@cli.command()
@click.argument("tag")
@click.pass_obj
def boost(app: AppContext, tag: str) -> None:
    """Rank items carrying a tag (or from a source) higher."""
    _add_rule(app, RuleKind.BOOST_TAG, tag)


@cli.command("boost-domain")
@click.argument("pattern")
@click.pass_obj
def boost_domain(app: AppContext, pattern: str) -> None:
    """Add a boost pattern matched against tags and source names."""
    _add_rule(app, RuleKind.BOOST_DOMAIN, pattern)


@cli.command()
@click.pass_obj
def rules(app: AppContext) -> None:
    """List curation rules."""
    with app.open_store() as store:
        all_rules = store.list_rules()
    if not all_rules:
        click.echo("No rules.")
        return
    for rule in all_rules:
        status = "" if rule.enabled else " (disabled)"
        click.echo(
            f"  {RULE_ICONS[rule.kind]} #{rule.id} {rule.kind.value}: "
            f"{rule.pattern}{status}"
        )


@cli.command("rules-delete")
@click.argument("rule_id", type=int)
@click.pass_obj
def rules_delete(app: AppContext, rule_id: int) -> None:
    """Delete a rule by id."""
    with app.open_store() as store:
        deleted = store.delete_rule(rule_id)
    if not deleted:
        _fail(f"Rule not found: #{rule_id}")
    click.echo(f"✓ Deleted rule #{rule_id}")


def _toggle_rule(app: AppContext, rule_id: int, enabled: bool) -> None:
    with app.open_store() as store:
        updated = store.set_rule_enabled(rule_id, enabled)
    if not updated:
        _fail(f"Rule not found: #{rule_id}")
    click.echo(f"✓ {'Enabled' if enabled else 'Disabled'} rule #{rule_id}")


@cli.command("rules-enable")
@click.argument("rule_id", type=int)
@click.pass_obj
def rules_enable(app: AppContext, rule_id: int) -> None:
    """Re-enable a disabled rule."""
    _toggle_rule(app, rule_id, enabled=True)


@cli.command("rules-disable")
@click.argument("rule_id", type=int)
@click.pass_obj
def rules_disable(app: AppContext, rule_id: int) -> None:
    """Keep a rule but stop applying it."""
    _toggle_rule(app, rule_id, enabled=False)


@cli.command()
@click.pass_obj
def sources(app: AppContext) -> None:
    """List registered sources."""
    with app.open_store() as store:
        records = store.list_sources()
    if not records:
        click.echo("No sources registered yet. Run 'newsbrew sync' first.")
        return
    for record in records:
        status = "✗" if record.error_count > 0 else "✓"
        if not record.enabled:
            status = "-"
        last_sync = (
            record.last_sync.strftime("%Y-%m-%d %H:%M") if record.last_sync else "never"
        )
        click.echo(
            f"  {status} {record.icon} #{record.id} {record.name} ({record.kind}) "
            f"weight={record.weight:g} last_sync={last_sync} "
            f"errors={record.error_count}"
        )


@cli.command("sources-weight")
@click.argument("name")
@click.argument("weight", type=float)
@click.pass_obj
def sources_weight(app: AppContext, name: str, weight: float) -> None:
    """Set the scoring weight of a source."""
    with app.open_store() as store:
        try:
            record = store.set_source_weight(name, weight)
        except (SourceNotFoundError, ValueError) as e:
            _fail(str(e))
    click.echo(f"✓ {record.name} weight set to {record.weight:g}")


def _toggle_source(app: AppContext, name: str, enabled: bool) -> None:
    with app.open_store() as store:
        if not store.set_source_enabled(name, enabled):
            _fail(str(SourceNotFoundError(name)))
        record = store.get_source_by_name(name)
    label = record.name if record else name
    click.echo(f"✓ {'Enabled' if enabled else 'Disabled'} source {label}")


@cli.command("sources-enable")
@click.argument("name")
@click.pass_obj
def sources_enable(app: AppContext, name: str) -> None:
    """Sync a disabled source again."""
    _toggle_source(app, name, enabled=True)


@cli.command("sources-disable")
@click.argument("name")
@click.pass_obj
def sources_disable(app: AppContext, name: str) -> None:
    """Skip a source during sync."""
    _toggle_source(app, name, enabled=False)


@cli.command("db-stats")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def db_stats(app: AppContext, json_output: bool) -> None:
    """Show database statistics."""
    with app.open_store() as store:
        stats = store.get_stats()

    if json_output:
        click.echo(json.dumps(stats, indent=2, sort_keys=True))
        return

    click.echo("State Database Statistics")
    click.echo("=" * 40)
    click.echo(f"  Database: {app.db_path}")
    click.echo(f"  Schema Version: {stats['schema_version']}")
    click.echo(f"  Size: {stats['db_size_bytes']} bytes")
    click.echo("")
    click.echo("Table Row Counts:")
    for table in ("sources", "items", "rules", "dedup_edges", "digests"):
        click.echo(f"  {table}: {stats[table]}")
    click.echo("")
    click.echo("Items by State:")
    for state, count in stats["items_by_state"].items():
        click.echo(f"  {state}: {count}")


if __name__ == "__main__":
    cli()
