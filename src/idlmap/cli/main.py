import argparse

from idlmap.cli import check, map_types


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idlmap",
        description=(
            "Command line interface for idlmap. Maps IDL types to native types "
            "and serde combinators."
        ),
    )
    parser.set_defaults(func=lambda args: parser.print_help())

    subparsers = parser.add_subparsers(dest="command")

    map_types.add_parser(subparsers)
    check.add_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
