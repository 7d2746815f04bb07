"""Argument helpers shared by the scripts/ entry points."""

from __future__ import annotations

import argparse
import logging

from registry_bench.services.variants import TABLE_VARIANTS, TableVariant, parse_variant


def positive_int(value: str) -> int:
    try:
        number = int(str(value).replace("_", ""))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def variant_arg(value: str) -> TableVariant:
    try:
        return parse_variant(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def add_table_argument(parser: argparse.ArgumentParser, *, allow_all: bool = False) -> None:
    choices = "|".join(v.value for v in TABLE_VARIANTS)
    if allow_all:
        group = parser.add_mutually_exclusive_group()
        group.add_argument("--table", type=variant_arg, help=f"Table variant ({choices}).")
        group.add_argument("--all", action="store_true", help="Apply to all four variants.")
    else:
        parser.add_argument(
            "--table",
            type=variant_arg,
            help=f"Table variant ({choices}); defaults to TABLE_VARIANT.",
        )


def resolve_variant(args: argparse.Namespace, default: str) -> TableVariant:
    return args.table or parse_variant(default)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
