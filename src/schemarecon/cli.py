"""
Command-line interface for schemarecon.
"""

import logging
import logging.handlers
import sys
from dataclasses import replace
from functools import wraps
from pathlib import Path
from typing import Optional, Sequence, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .config import LoggingConfig, ReconConfig
from .exceptions import ConfigurationError, SchemaReconError, SnapshotError
from .schema.constraints import get_check_constraints
from .schema.correspondence import get_column_mapping, get_fk_mapping, get_index_mapping
from .schema.diff import get_deleted_foreign_keys, get_deleted_indexes, get_deleted_tables
from .schema.interleave import ancestors, children, interleave_status
from .schema.keys import validate_pk_edit
from .schema.tree import SortOrder, TreeNode, build_tree
from .store.loader import load_conversion_file
from .store.snapshot import ConversionStore, SchemaSide


console = Console()
logger = logging.getLogger(__name__)


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SchemaReconError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(0)
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            if "--debug" in sys.argv:
                import traceback
                traceback.print_exc()
            sys.exit(1)
    return wrapper


def _configure_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Install root handlers from the logging configuration."""
    level = logging.DEBUG if debug else getattr(logging, config.level)
    handlers = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.file,
                maxBytes=config.max_size,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )
    logging.basicConfig(level=level, format=config.format, handlers=handlers, force=True)


def _load(
    ctx: click.Context,
    conversion: str,
    rates: Optional[str],
    config: Optional[str],
) -> Tuple[ConversionStore, ReconConfig]:
    """Load configuration, set up logging and read the conversion document."""
    recon_config = ReconConfig.from_yaml(config) if config else ReconConfig()
    debug = bool(ctx.obj.get("debug")) or recon_config.debug
    _configure_logging(recon_config.logging, debug)

    store = load_conversion_file(conversion, rates)
    dialect = recon_config.resolve_dialect(store.dialect)
    if dialect != store.dialect:
        logger.info(f"Dialect overridden by configuration: {dialect.value}")
        store = replace(store, dialect=dialect)
    return store, recon_config


def _table_id(store: ConversionStore, ref: str) -> str:
    table_id = store.resolve_table_ref(ref)
    if table_id is None:
        raise SnapshotError(f"Table '{ref}' not found", {"database": store.database_name})
    return table_id


def _index_id(store: ConversionStore, table_id: str, ref: str) -> str:
    for snapshot in (store.target, store.source):
        table = snapshot.get(table_id)
        if table is None:
            continue
        for index in table.indexes:
            if ref in (index.id, index.name):
                return index.id
    raise SnapshotError(f"Index '{ref}' not found", {"table": table_id})


def _column_id(store: ConversionStore, table_id: str, ref: str) -> str:
    table = store.target.get(table_id)
    if table is not None:
        if ref in table.columns:
            return ref
        for column in table.columns.values():
            if column.name.lower() == ref.lower():
                return column.id
    # Unknown references are passed through; validation reports the outcome.
    return ref


conversion_argument = click.argument("conversion", type=click.Path(exists=True))
rates_option = click.option(
    "--rates",
    "-r",
    type=click.Path(exists=True),
    help="JSON file mapping table ids to conversion ratings",
)
config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path",
)


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug mode"
)
@click.pass_context
def main(ctx, debug):
    """schemarecon: Schema correspondence and object-tree reconciliation."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="schemarecon.yaml",
    help="Output configuration file path",
)
@handle_errors
def init(output: str):
    """Initialize a new schemarecon configuration file."""
    if Path(output).exists():
        if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
            return

    ReconConfig().to_yaml(output)
    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Adjust the dialect, type maps and explorer defaults")
    console.print("2. Run: schemarecon validate-config --config your-config.yaml")
    console.print("3. Run: schemarecon tree conversion.json --config your-config.yaml")


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@handle_errors
def validate_config(config: str):
    """Validate configuration file."""
    console.print(f"Validating configuration: {config}")

    try:
        recon_config = ReconConfig.from_yaml(config)
        recon_config.validate_config()

        console.print("[green]✓[/green] Configuration is valid")

        _display_config_summary(recon_config)

    except ConfigurationError as e:
        console.print(f"[red]✗[/red] Configuration error: {escape(str(e))}")
        sys.exit(1)


@main.command()
@conversion_argument
@click.option(
    "--side",
    type=click.Choice(["source", "target"]),
    default="target",
    help="Schema side to show",
)
@click.option("--search", "-s", default="", help="Case-insensitive name filter")
@click.option(
    "--sort",
    type=click.Choice(["asc", "desc", "none"]),
    help="Sibling order (defaults to the configured order)",
)
@rates_option
@config_option
@click.pass_context
@handle_errors
def tree(ctx, conversion: str, side: str, search: str, sort: Optional[str],
         rates: Optional[str], config: Optional[str]):
    """Show the object explorer tree for one schema side."""
    store, recon_config = _load(ctx, conversion, rates, config)
    if sort is None:
        order = SortOrder.parse(recon_config.explorer.sort_order)
    else:
        order = SortOrder.NONE if sort == "none" else SortOrder.parse(sort)

    root = build_tree(store, SchemaSide(side), search, order)
    rendered = Tree(f"[bold]{escape(root.name) or '(unnamed database)'}[/bold]")
    for child in root.children:
        _render_node(child, rendered, 1, recon_config)
    console.print(rendered)


def _node_label(node: TreeNode, config: ReconConfig) -> str:
    name = escape(node.name)
    if node.is_deleted:
        return f"[red strike]{name}[/red strike] [red]{escape(config.explorer.deleted_status)}[/red]"
    if node.status:
        return f"{name} [dim]{escape(node.status)}[/dim]"
    return name


def _render_node(node: TreeNode, parent: Tree, depth: int, config: ReconConfig) -> None:
    branch = parent.add(_node_label(node, config))
    if depth >= config.explorer.expand_depth:
        if node.is_expandable:
            branch.add(f"[dim]... {len(node.children)} more[/dim]")
        return
    for child in node.children:
        _render_node(child, branch, depth + 1, config)


@main.command()
@conversion_argument
@click.argument("table")
@rates_option
@config_option
@click.pass_context
@handle_errors
def columns(ctx, conversion: str, table: str, rates: Optional[str], config: Optional[str]):
    """Compare the columns of a table across both schemas."""
    store, recon_config = _load(ctx, conversion, rates, config)
    table_id = _table_id(store, table)
    rows = get_column_mapping(
        store, table_id, recon_config.get_type_map(store.dialect)
    )

    output = Table(title=f"Columns of {escape(store.target.table_name(table_id) or table)}")
    for heading, style in (
        ("#", "dim"), ("Source", "cyan"), ("Type", "cyan"), ("PK", "cyan"),
        ("#", "dim"), ("Target", "green"), ("Type", "green"), ("Length", "green"),
        ("PK", "green"), ("Not Null", "green"), ("Auto Gen", "green"),
    ):
        output.add_column(heading, style=style)

    for row in rows:
        src, tgt = row.source, row.target
        output.add_row(
            str(src.order) if src else "",
            escape(src.name) if src else "",
            escape(src.data_type) if src else "",
            "✓" if src and src.is_pk else "",
            str(tgt.order) if tgt else "",
            escape(tgt.name) if tgt else "",
            escape(tgt.data_type) if tgt else "",
            tgt.max_length if tgt else "",
            "✓" if tgt and tgt.is_pk else "",
            "✓" if tgt and tgt.not_null else "",
            escape(tgt.auto_gen) if tgt else "",
        )
    console.print(output)


@main.command("foreign-keys")
@conversion_argument
@click.argument("table")
@rates_option
@config_option
@click.pass_context
@handle_errors
def foreign_keys(ctx, conversion: str, table: str, rates: Optional[str], config: Optional[str]):
    """Compare the foreign keys of a table across both schemas."""
    store, _ = _load(ctx, conversion, rates, config)
    table_id = _table_id(store, table)

    output = Table(title=f"Foreign keys of {escape(store.target.table_name(table_id) or table)}")
    output.add_column("Source", style="cyan")
    output.add_column("Columns", style="cyan")
    output.add_column("References", style="cyan")
    output.add_column("Target", style="green")
    output.add_column("Columns", style="green")
    output.add_column("References", style="green")

    for row in get_fk_mapping(store, table_id):
        src, tgt = row.source, row.target
        output.add_row(
            escape(src.name) if src else "",
            escape(", ".join(src.column_names)) if src else "",
            escape(f"{src.refer_table_name}({', '.join(src.refer_column_names)})") if src else "",
            escape(tgt.name) if tgt else ("[red]deleted[/red]" if row.is_deleted else ""),
            escape(", ".join(tgt.column_names)) if tgt else "",
            escape(f"{tgt.refer_table_name}({', '.join(tgt.refer_column_names)})") if tgt else "",
        )
    console.print(output)


@main.command("index-keys")
@conversion_argument
@click.argument("table")
@click.argument("index")
@rates_option
@config_option
@click.pass_context
@handle_errors
def index_keys(ctx, conversion: str, table: str, index: str,
               rates: Optional[str], config: Optional[str]):
    """Compare the key columns of one index across both schemas."""
    store, _ = _load(ctx, conversion, rates, config)
    table_id = _table_id(store, table)
    index_id = _index_id(store, table_id, index)

    output = Table(title=f"Keys of index {escape(index)}")
    output.add_column("Source", style="cyan")
    output.add_column("Order", style="cyan")
    output.add_column("Desc", style="cyan")
    output.add_column("Target", style="green")
    output.add_column("Order", style="green")
    output.add_column("Desc", style="green")

    for row in get_index_mapping(store, table_id, index_id):
        src, tgt = row.source, row.target
        output.add_row(
            escape(src.name) if src else "",
            str(src.order) if src else "",
            "✓" if src and src.desc else "",
            escape(tgt.name) if tgt else "",
            str(tgt.order) if tgt else "",
            "✓" if tgt and tgt.desc else "",
        )
    console.print(output)


@main.command("check-constraints")
@conversion_argument
@click.argument("table")
@rates_option
@config_option
@click.pass_context
@handle_errors
def check_constraints(ctx, conversion: str, table: str,
                      rates: Optional[str], config: Optional[str]):
    """Compare the check constraints of a table across both schemas."""
    store, _ = _load(ctx, conversion, rates, config)
    table_id = _table_id(store, table)

    output = Table(title=f"Check constraints of {escape(store.target.table_name(table_id) or table)}")
    output.add_column("Row", style="dim")
    output.add_column("Source", style="cyan")
    output.add_column("Condition", style="cyan")
    output.add_column("Target", style="green")
    output.add_column("Condition", style="green")

    for row in get_check_constraints(store, table_id):
        output.add_row(
            row.delete_index,
            escape(row.source_name),
            escape(row.source_expression),
            escape(row.target_name),
            escape(row.target_expression),
        )
    console.print(output)


@main.command()
@conversion_argument
@rates_option
@config_option
@click.pass_context
@handle_errors
def deleted(ctx, conversion: str, rates: Optional[str], config: Optional[str]):
    """List source objects dropped from the target schema."""
    store, _ = _load(ctx, conversion, rates, config)

    output = Table(title="Deleted objects")
    output.add_column("Kind", style="magenta")
    output.add_column("Table", style="cyan")
    output.add_column("Name", style="red")

    for table in get_deleted_tables(store):
        output.add_row("table", escape(table.name), escape(table.name))
    for table_id, indexes in get_deleted_indexes(store).items():
        for index in indexes:
            output.add_row("index", escape(store.source.table_name(table_id)), escape(index.name))
    for table_id, fks in get_deleted_foreign_keys(store).items():
        for fk in fks:
            output.add_row("foreign key", escape(store.source.table_name(table_id)), escape(fk.name))

    if output.row_count == 0:
        console.print("[green]✓[/green] No objects were deleted")
        return
    console.print(output)


@main.command()
@conversion_argument
@click.argument("table")
@rates_option
@config_option
@click.pass_context
@handle_errors
def peers(ctx, conversion: str, table: str, rates: Optional[str], config: Optional[str]):
    """Show the interleave ancestors and children of a target table."""
    store, _ = _load(ctx, conversion, rates, config)
    table_id = _table_id(store, table)
    target = store.target

    status = interleave_status(target, table_id)
    if status.possible:
        console.print(f"Interleaved in: [cyan]{escape(target.table_name(status.parent_id))}[/cyan]")
    else:
        console.print(f"[dim]{escape(status.comment)}[/dim]")

    output = Table(title=f"Interleave peers of {escape(target.table_name(table_id))}")
    output.add_column("Relation", style="magenta")
    output.add_column("Table", style="cyan")
    output.add_column("Primary key", style="green")

    for relation, peer_ids in (
        ("ancestor", ancestors(target, table_id)),
        ("child", children(target, table_id)),
    ):
        for peer_id in peer_ids:
            peer = target.get(peer_id)
            output.add_row(
                relation,
                escape(peer.name),
                escape(", ".join(peer.column_name(c) for c in peer.pk_column_ids)),
            )
    console.print(output)


@main.command("validate-pk")
@conversion_argument
@click.argument("table")
@click.argument("key_columns", nargs=-1)
@rates_option
@config_option
@click.pass_context
@handle_errors
def validate_pk(ctx, conversion: str, table: str, key_columns: Sequence[str],
                rates: Optional[str], config: Optional[str]):
    """Check a proposed primary key (column ids or names, in key order)."""
    store, _ = _load(ctx, conversion, rates, config)
    table_id = _table_id(store, table)
    proposed = [_column_id(store, table_id, ref) for ref in key_columns]

    result = validate_pk_edit(store, table_id, proposed)
    if result.ok:
        console.print("[green]✓[/green] Primary key edit is allowed")
        return

    console.print(f"[red]✗[/red] {result.rule.value}: {escape(result.message)}")
    sys.exit(1)


def _display_config_summary(config: ReconConfig):
    """Display a summary of the configuration."""
    console.print("\n[blue]Configuration Summary[/blue]")

    settings = Table(title="Settings")
    settings.add_column("Setting", style="cyan")
    settings.add_column("Value", style="green")
    settings.add_row("Dialect", config.dialect or "(from conversion document)")
    settings.add_row("Sort order", config.explorer.sort_order or "(declaration order)")
    settings.add_row("Deleted status", config.explorer.deleted_status)
    settings.add_row("Expand depth", str(config.explorer.expand_depth))
    settings.add_row("Log level", config.logging.level)
    settings.add_row("Log file", config.logging.file or "-")
    console.print(settings)

    type_table = Table(title="Standard SQL to PostgreSQL Types")
    type_table.add_column("Standard SQL", style="cyan")
    type_table.add_column("PostgreSQL", style="magenta")
    for standard, pgsql in config.type_maps.standard_to_pgsql.items():
        type_table.add_row(standard, pgsql)
    console.print(type_table)


if __name__ == "__main__":
    main()
