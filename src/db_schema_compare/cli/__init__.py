"""CLI for comparing declared schemas against live databases.

Usage:
    db-schema-compare compare --model models.json --database snapshot.json
    db-schema-compare compare --model myapp.models:Base --profile staging --tree
    db-schema-compare snapshot --profile staging --output snapshot.json
    db-schema-compare errors --report schema-report.json
    db-schema-compare profiles

Commands:
    compare   - Compare a declared model with a snapshot or a live profile
    snapshot  - Introspect a profile and save the schema as JSON
    errors    - List the errors in a saved report
    profiles  - List available profiles
"""

import argparse
import asyncio
import importlib
import logging
import sys
from pathlib import Path

import psycopg
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from db_schema_compare.compare.comparer import CompareResult, compare_models_to_database
from db_schema_compare.compare.dialects import get_dialect
from db_schema_compare.compare.log import CompareLog, CompareState, list_all_errors
from db_schema_compare.compare.options import DEFAULT_DIALECT
from db_schema_compare.config.loader import load_db_config
from db_schema_compare.config.models import DatabaseConfig
from db_schema_compare.factory import (
    ProfileNotFoundError,
    get_active_profile_name,
    get_profile,
    introspect_profile,
)
from db_schema_compare.report import load_json_model, load_report, write_report
from db_schema_compare.schema.declared import DeclaredModel, DeclaredModelError
from db_schema_compare.schema.metadata import (
    declared_model_from_base,
    declared_model_from_metadata,
)
from db_schema_compare.schema.models import DatabaseModel

console = Console()
logger = logging.getLogger(__name__)

_STATE_STYLES = {
    CompareState.OK: "green",
    CompareState.NOT_IN_DATABASE: "red",
    CompareState.EXTRA_IN_DATABASE: "yellow",
    CompareState.DIFFERENT: "magenta",
}


# ============================================================================
# Helpers
# ============================================================================


def _load_config(args: argparse.Namespace) -> DatabaseConfig:
    """Load --config, else ./db.toml if present, else defaults."""
    if args.config:
        return load_db_config(Path(args.config))
    default_path = Path.cwd() / "db.toml"
    if default_path.exists():
        return load_db_config(default_path)
    return DatabaseConfig()


def _load_declared_model(reference: str, dialect: str) -> DeclaredModel:
    """Load a declared model from a JSON file or a ``module:attribute`` reference.

    The attribute may be a ``DeclaredModel``, a SQLAlchemy ``MetaData``, or a
    declarative base class.

    Raises:
        ValueError: If the reference cannot be turned into a declared model.
    """
    if reference.endswith(".json"):
        return load_json_model(reference, DeclaredModel)

    module_name, _, attr_name = reference.partition(":")
    if not attr_name:
        raise ValueError(
            f"Model reference '{reference}' must be a .json file or module:attribute"
        )
    target = getattr(importlib.import_module(module_name), attr_name)

    if isinstance(target, DeclaredModel):
        return target
    if hasattr(target, "registry"):
        return declared_model_from_base(target, dialect)
    if hasattr(target, "sorted_tables"):
        return declared_model_from_metadata(target, name=attr_name, dialect=dialect)
    raise ValueError(f"'{reference}' is not a DeclaredModel, MetaData or declarative base")


def _log_tree(logs: list[CompareLog], tree: Tree) -> Tree:
    for log in logs:
        style = _STATE_STYLES[log.state]
        branch = tree.add(f"[{style}]{log}[/{style}]")
        _log_tree(log.sub_logs, branch)
    return tree


def _print_result(result: CompareResult, show_tree: bool) -> None:
    if show_tree:
        console.print(_log_tree(result.logs, Tree("[bold]Comparison[/bold]")))

    errors = list(list_all_errors(result.logs))
    if not errors:
        console.print("[bold green]v[/bold green] No differences found")
        return

    console.print(f"[bold red]x[/bold red] {len(errors)} difference(s) found:")
    for error in errors:
        console.print(f"  {error}", markup=False, highlight=False)


# ============================================================================
# Command implementations
# ============================================================================


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare a declared model with a snapshot or a live profile.

    Returns:
        0 when the schemas match, 1 on differences or errors.
    """
    try:
        config = _load_config(args)
        compare_config = config.compare
        if args.dialect:
            compare_config = compare_config.model_copy(update={"dialect": args.dialect})
        if args.check_extra_tables:
            compare_config = compare_config.model_copy(update={"check_extra_tables": True})

        if args.database:
            database = load_json_model(args.database, DatabaseModel)
        else:
            name = get_active_profile_name(args.profile, args.env_prefix)
            profile = get_profile(config, name)
            if compare_config.dialect is None:
                compare_config = compare_config.model_copy(update={"dialect": profile.provider})
            console.print(f"Introspecting profile [bold cyan]{name}[/bold cyan]...", style="dim")
            database = asyncio.run(introspect_profile(profile, args.schema, compare_config))

        dialect_name = compare_config.dialect or DEFAULT_DIALECT
        dialect = get_dialect(dialect_name)
        declared = _load_declared_model(args.model, dialect_name)
        result = compare_models_to_database([declared], database, compare_config, dialect)
    except (
        DeclaredModelError,
        FileNotFoundError,
        ValueError,
        KeyError,
        ImportError,
        AttributeError,
        ProfileNotFoundError,
    ) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except psycopg.Error as e:
        console.print(f"[bold red]Error:[/bold red] Connection failed: {e}")
        return 1

    _print_result(result, args.tree)

    if args.output:
        path = write_report(result, args.output)
        console.print(f"Report written to [cyan]{path}[/cyan]")

    return 1 if result.has_errors else 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    """Introspect a profile and write its schema as JSON."""
    try:
        config = _load_config(args)
        name = get_active_profile_name(args.profile, args.env_prefix)
        profile = get_profile(config, name)
        database = asyncio.run(introspect_profile(profile, args.schema, config.compare))
    except (FileNotFoundError, ValueError, KeyError, ProfileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except psycopg.Error as e:
        console.print(f"[bold red]Error:[/bold red] Connection failed: {e}")
        return 1

    output = Path(args.output)
    output.write_text(database.model_dump_json(indent=2, by_alias=True))
    console.print(
        f"[bold green]v[/bold green] Saved {len(database.tables)} table(s) to [cyan]{output}[/cyan]"
    )
    return 0


def cmd_errors(args: argparse.Namespace) -> int:
    """List the errors recorded in a saved report."""
    try:
        result = load_report(args.report)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    _print_result(result, args.tree)
    return 1 if result.has_errors else 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.
    """
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(name, profile.provider, profile.description or "")

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-schema-compare",
        description="Compare declared schemas against live databases",
    )
    parser.add_argument("--config", default=None, help="Path to db.toml (default: ./db.toml)")
    parser.add_argument(
        "--env-prefix",
        default="",
        help="Prefix for environment variable lookup (e.g., APP_ reads APP_DB_PROFILE)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # compare command
    p_compare = subparsers.add_parser("compare", help="Compare a declared model with a database")
    p_compare.add_argument(
        "--model",
        required=True,
        help="Declared model: a .json file or module:attribute (MetaData or declarative base)",
    )
    source = p_compare.add_mutually_exclusive_group()
    source.add_argument("--database", help="DatabaseModel JSON snapshot to compare against")
    source.add_argument("--profile", help="Profile in db.toml to introspect")
    p_compare.add_argument("--dialect", help="Type naming rules (sqlserver, postgres)")
    p_compare.add_argument(
        "--schema", action="append", help="Schema to introspect (repeatable, default: public)"
    )
    p_compare.add_argument("--output", "-o", help="Write the full diff log as JSON")
    p_compare.add_argument("--tree", action="store_true", help="Print the whole diff log as a tree")
    p_compare.add_argument(
        "--check-extra-tables",
        action="store_true",
        help="Report tables no declared entity maps to",
    )
    p_compare.set_defaults(func=cmd_compare)

    # snapshot command
    p_snapshot = subparsers.add_parser("snapshot", help="Save a profile's schema as JSON")
    p_snapshot.add_argument("--profile", help="Profile in db.toml to introspect")
    p_snapshot.add_argument("--schema", action="append", help="Schema to introspect (repeatable)")
    p_snapshot.add_argument("--output", "-o", required=True, help="Output JSON file")
    p_snapshot.set_defaults(func=cmd_snapshot)

    # errors command
    p_errors = subparsers.add_parser("errors", help="List errors in a saved report")
    p_errors.add_argument("--report", required=True, help="Report JSON written by compare --output")
    p_errors.add_argument("--tree", action="store_true", help="Print the whole diff log as a tree")
    p_errors.set_defaults(func=cmd_errors)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for differences or errors).
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
