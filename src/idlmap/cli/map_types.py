"""Map the accounts, types and instructions of an IDL and print the result."""

import argparse
from textwrap import dedent

from rich.box import SIMPLE
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from idlmap.analyzer import MappedDeclaration, analyze_idl
from idlmap.cli.utils import configure_logging, load_project
from idlmap.config import ConfigError
from idlmap.errors import TypeMapperError
from idlmap.schema.idl import IdlParseError

_SECTIONS = ('accounts', 'types', 'instructions')


def create_declaration_table(declaration: MappedDeclaration) -> Table:
    """Create a table with the mapped fields of a declaration."""
    title = f"{declaration.kind} [bold]{escape(declaration.name)}[/bold]"
    table = Table(title=title, title_justify="left", show_header=True, header_style="bold", box=SIMPLE)
    table.add_column("Field", style="cyan", overflow="fold")
    table.add_column("Type", style="green", overflow="fold")
    table.add_column("Serde", overflow="fold")

    for mapped in declaration.fields:
        name = escape(mapped.name)
        if mapped.padding:
            name += " [dim](padding)[/dim]"
        table.add_row(name, escape(mapped.type), escape(mapped.serde))

    if declaration.scalar_variants is not None:
        table.add_row("[dim]variants[/dim]", escape(" | ".join(declaration.scalar_variants)), escape(declaration.serde or ""))

    for variant in declaration.data_variants or []:
        serde = ", ".join(f"{f.name}: {f.type}" for f in variant.fields)
        table.add_row(f"[dim]variant[/dim] {escape(variant.name)}", "", escape(serde))

    return table


def print_declaration(console: Console, declaration: MappedDeclaration) -> None:
    console.print(create_declaration_table(declaration))
    console.print(f"  [dim]serde:[/dim] {escape(declaration.serde_var)}  [dim]fixable:[/dim] {declaration.fixable}")
    for line in declaration.imports:
        console.print(f"  {escape(line)}", highlight=False, soft_wrap=True)
    console.print()


def map_command(args: argparse.Namespace) -> None:
    """Execute the map command."""
    configure_logging(args.verbose)
    console = Console()

    try:
        config, idl = load_project(args.config)
        analysis = analyze_idl(idl, config.sdk_dir, config.type_aliases)
    except (ConfigError, IdlParseError, TypeMapperError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e

    console.print(f"\n[bold blue]{escape(idl.name)}[/bold blue] [dim]({config.idl_generator})[/dim]\n")

    sections = args.only or _SECTIONS
    for section in _SECTIONS:
        if section not in sections:
            continue
        for declaration in getattr(analysis, section):
            print_declaration(console, declaration)


def add_parser(subparsers) -> None:
    parser = subparsers.add_parser(
        "map",
        help="Map the types of an IDL to native types and serde combinators.",
        description=dedent("""
            Map every account, custom type and instruction of the IDL referenced
            by the config file and print for each of them:
            - The native type and serde combinator of every field
            - Whether the encoding is fixed-size or fixable
            - The import statements the generated file needs
        """)
    )
    parser.add_argument("config", help="Path to the idlmap config file (*.json)")
    parser.add_argument(
        "--only",
        action="append",
        choices=_SECTIONS,
        help="Only print the given section (can be repeated)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.set_defaults(func=map_command)
