"""Check that every type used by an IDL is supported by the type table."""

import argparse
from textwrap import dedent

from rich.console import Console
from rich.markup import escape

from idlmap.cli.utils import configure_logging, load_project
from idlmap.config import ConfigError
from idlmap.errors import UnsupportedTypeError
from idlmap.schema import Defined, Idl, Primitive, iter_idl_fields, walk_type
from idlmap.schema.idl import IdlParseError
from idlmap.type_mapper import TypeMapper, TypeMapperConfig


def find_unsupported_types(mapper: TypeMapper, idl: Idl) -> list[tuple[str, str]]:
    """Return ``(location, key)`` for every unsupported primitive or alias target."""
    unsupported = []
    for owner, field in iter_idl_fields(idl):
        location = f'{owner}.{field.name}'
        for ty in walk_type(field.type):
            if isinstance(ty, Primitive):
                key = ty.key
            elif isinstance(ty, Defined) and ty.name in mapper.config.type_aliases:
                key = mapper.config.type_aliases[ty.name]
            else:
                continue
            try:
                mapper.assert_supported(key, f'map {location}')
            except UnsupportedTypeError:
                unsupported.append((location, key))
    return unsupported


def check_command(args: argparse.Namespace) -> None:
    """Execute the check command."""
    configure_logging(args.verbose)
    console = Console()

    try:
        config, idl = load_project(args.config)
    except (ConfigError, IdlParseError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e

    mapper = TypeMapper(TypeMapperConfig(type_aliases=config.type_aliases))
    unsupported = find_unsupported_types(mapper, idl)
    if not unsupported:
        console.print(f"[green]All types used by {escape(idl.name)} are supported[/green]")
        return

    for location, key in unsupported:
        console.print(f"[bold red]Unsupported:[/bold red] {escape(key)} [dim]required for[/dim] {escape(location)}")
    raise SystemExit(1)


def add_parser(subparsers) -> None:
    parser = subparsers.add_parser(
        "check",
        help="Check that all types of an IDL are supported.",
        description=dedent("""
            Validate every primitive type and type alias target used by the IDL
            referenced by the config file against the type table, without
            mapping anything. Exits with status 1 if any type is unsupported.
        """)
    )
    parser.add_argument("config", help="Path to the idlmap config file (*.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.set_defaults(func=check_command)
