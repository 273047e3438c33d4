"""Click CLI for decoding legacy data tables and string tables."""
from __future__ import annotations

import functools
import logging
import time
from pathlib import Path
from typing import Optional

import click

from datatbls.config import DEFAULT_LANGUAGE, ITEM_SCHEMA
from datatbls.errors import DataTblsError
from datatbls.profiles import (
    load_config,
    resolve_profile,
    save_config,
    validate_profile_name,
    Config,
    Profile,
)


class Context:
    """Holds resolved paths derived from --data-dir / --profile / config."""

    def __init__(self, data_dir: Path | None = None, schema_dir: Path | None = None,
                 profile: str | None = None, language: str = DEFAULT_LANGUAGE):
        self._explicit_data_dir = data_dir
        self._explicit_schema_dir = schema_dir
        self._profile_name = profile
        self.language = language
        self._profile: Profile | None = None

    @property
    def profile(self) -> Profile:
        if self._profile is None:
            self._profile = resolve_profile(
                self._explicit_data_dir, self._explicit_schema_dir, self._profile_name,
            )
        return self._profile

    @property
    def data_dir(self) -> Path:
        return self.profile.data_dir

    @property
    def schema_dir(self) -> Path:
        if self._explicit_schema_dir is not None:
            return self._explicit_schema_dir
        return self.profile.schemas


pass_ctx = click.make_pass_decorator(Context)


def report_errors(func):
    """Turn decode, schema and missing-file errors into a clean CLI failure."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (DataTblsError, FileNotFoundError) as e:
            raise click.ClickException(str(e)) from e
    return wrapper


def _write_or_echo(text: str, output: Optional[str], what: str):
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"{what} written to {output}")
    else:
        click.echo(text)


def _load_strings(ctx: Context):
    from datatbls.manager import DataTables

    click.echo("Loading string tables...", nl=False, err=True)
    t0 = time.perf_counter()
    tables = DataTables()
    strings = tables.load_strings(ctx.data_dir, ctx.language)
    total = sum(strings.counts().values())
    click.echo(f" {total:,} strings in {time.perf_counter() - t0:.2f}s", err=True)
    return tables


@click.group()
@click.option(
    "--data-dir", required=False, default=None,
    type=click.Path(exists=False, file_okay=False, path_type=Path),
    help="Path to the extracted game data directory (optional if profiles configured)",
)
@click.option(
    "--schema-dir", required=False, default=None,
    type=click.Path(exists=False, file_okay=False, path_type=Path),
    help="Directory of *.toml table schemas (default: from profile, or ../schemas)",
)
@click.option(
    "--profile", "-p", default=None, type=str,
    help="Named profile to use (from datatbls init)",
)
@click.option("--lang", "language", default=DEFAULT_LANGUAGE, show_default=True,
              help="String table language folder")
@click.option("--verbose", "-v", is_flag=True, help="Log table loading details")
@click.version_option(package_name="datatbls")
@click.pass_context
def cli(ctx, data_dir: Optional[Path], schema_dir: Optional[Path], profile: Optional[str],
        language: str, verbose: bool):
    """datatbls - legacy data table and string table decoder.

    Decode schema-described .bin record tables, hashed .tbl string tables,
    and resolve global string ids across the five string tables.
    """
    if verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj = Context(data_dir=data_dir, schema_dir=schema_dir, profile=profile, language=language)


@cli.command()
def init():
    """Set up config profiles for data directories (interactive)."""
    config = load_config()

    if config.profiles:
        click.echo("Current profiles:")
        for name, p in config.profiles.items():
            default_marker = " (default)" if name == config.default_profile else ""
            click.echo(f"  {name}: {p.data_dir}{default_marker}")
        click.echo()
        if not click.confirm("Overwrite existing configuration?", default=False):
            click.echo("Aborted.")
            return
        config = Config()

    click.echo("Set up datatbls profiles. Each profile stores a path to the game's data directory.\n")

    while True:
        default_name = "default" if not config.profiles else None
        name = click.prompt("Profile name", default=default_name).strip()
        if not validate_profile_name(name):
            click.echo(f"Invalid profile name '{name}'. Use letters, digits, hyphens, underscores.")
            continue

        while True:
            dir_str = click.prompt("Path to data directory").strip().strip('"').strip("'")
            data_dir = Path(dir_str)
            if data_dir.is_dir():
                break
            click.echo(f"Directory not found: {data_dir}")

        schema_str = click.prompt("Schema directory (blank for default)", default="",
                                  show_default=False).strip().strip('"').strip("'")
        schema_dir = Path(schema_str) if schema_str else None

        config.profiles[name] = Profile(name=name, data_dir=data_dir, schema_dir=schema_dir)

        if len(config.profiles) == 1:
            config.default_profile = name
        elif click.confirm(f"Set '{name}' as the default profile?", default=False):
            config.default_profile = name

        if not click.confirm("\nAdd another profile?", default=False):
            break
        click.echo()

    if config.default_profile is None and config.profiles:
        config.default_profile = next(iter(config.profiles))

    saved_path = save_config(config)
    click.echo(f"\nConfig saved to {saved_path}\n")

    click.echo("Profiles:")
    for name, p in config.profiles.items():
        default_marker = " (default)" if name == config.default_profile else ""
        click.echo(f"  {name}: {p.data_dir} (schemas: {p.schemas}){default_marker}")


@cli.command()
@click.argument("tbl_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--header", "show_header", is_flag=True, help="Print the table header first")
@click.option("--output", "-o", type=click.Path(), default=None, help="Output file path")
@report_errors
def strings(tbl_file: Path, show_header: bool, output: Optional[str]):
    """Dump every key/value entry of a .tbl string table."""
    from datatbls.export.dump import dump_string_table
    from datatbls.strings.loader import StringTable

    table = StringTable.open(tbl_file)
    if show_header:
        click.echo(table.read_header())
        click.echo()
    _write_or_echo(dump_string_table(table.read()), output, "String table")


@cli.command()
@click.argument("ids", nargs=-1, required=True)
@pass_ctx
@report_errors
def resolve(ctx: Context, ids: tuple[str, ...]):
    """Resolve string ids (decimal or 0x hex) to text."""
    parsed = []
    for raw in ids:
        try:
            string_id = int(raw, 0)
        except ValueError:
            raise click.BadParameter(f"not a number: {raw}", param_hint="IDS")
        if not 0 <= string_id <= 0xFFFF:
            raise click.BadParameter(f"out of 16-bit range: {raw}", param_hint="IDS")
        parsed.append(string_id)

    tables = _load_strings(ctx)
    for string_id in parsed:
        text = tables.get_string_by_index(string_id)
        shown = text if text is not None else "(unresolved)"
        click.echo(f"{string_id:>5} 0x{string_id:04X}: {shown}")


@cli.command()
@click.argument("schema_files", nargs=-1,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_ctx
@report_errors
def validate(ctx: Context, schema_files: tuple[Path, ...]):
    """Check field offsets of schema files (default: every schema in the schema dir)."""
    from datatbls.bin.schema_config import load_schema

    paths = list(schema_files) or sorted(ctx.schema_dir.glob("*.toml"))
    if not paths:
        click.echo(f"No schemas found in {ctx.schema_dir}")
        return

    for path in paths:
        schema = load_schema(path)
        click.echo(f"  {schema.name:<24} {len(schema):>4} fields  {schema.record_size:>5} bytes  OK")
    click.echo(f"\n{len(paths)} schema(s) valid")


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("bin_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(["py", "json"]), default="py", show_default=True)
@click.option("--no-strings", is_flag=True, help="Don't resolve string ids (no data dir needed)")
@click.option("--output", "-o", type=click.Path(), default=None, help="Output file path")
@pass_ctx
@report_errors
def dump(ctx: Context, schema_file: Path, bin_file: Path, fmt: str, no_strings: bool,
         output: Optional[str]):
    """Decode a .bin record table with a schema and dump its records."""
    from datatbls.bin.reader import BinFile
    from datatbls.bin.schema_config import load_schema
    from datatbls.export.dump import dump_fields
    from datatbls.export.json_export import export_json

    schema = load_schema(schema_file)
    strings = None if no_strings else _load_strings(ctx).strings

    t0 = time.perf_counter()
    table = BinFile.open(bin_file, schema).read()
    click.echo(f"Decoded {len(table):,} records from {bin_file.name} "
               f"in {time.perf_counter() - t0:.2f}s", err=True)

    if fmt == "json":
        data = export_json(table, strings)
    else:
        data = dump_fields(table, strings)
    _write_or_echo(data, output, "Dump")


@cli.command()
@click.option("--name-field", default="name_str", show_default=True,
              help="String id field holding the item name")
@pass_ctx
@report_errors
def items(ctx: Context, name_field: str):
    """List class ids and names of weapons, armor and misc items."""
    from datatbls.bin.schema_config import load_schema

    schema_path = ctx.schema_dir / f"{ITEM_SCHEMA}.toml"
    if not schema_path.exists():
        raise click.UsageError(f"Item schema not found: {schema_path}")
    schema = load_schema(schema_path)
    tables = _load_strings(ctx)
    tables.load_tables(ctx.data_dir, {ITEM_SCHEMA: schema})

    for name, item_table in tables.items.items():
        click.echo(f"{name} (start {item_table.start_index}): {len(item_table.records):,} records",
                   err=True)
    for class_id, name in tables.item_ids(name_field):
        click.echo(f"{class_id:>4} {name}")
