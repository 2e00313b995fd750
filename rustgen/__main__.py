"""Entry point: python -m rustgen

Reads the given Swagger documents, generates models.rs and operations.rs.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .codegen import run
from .config import Config, PropertyName
from .errors import CodegenError

logger = logging.getLogger("rustgen")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rustgen", description=__doc__.splitlines()[0])
    parser.add_argument("input_files", nargs="*", help="Swagger JSON documents (paths or URLs)")
    parser.add_argument("-o", "--output", type=Path, help="Output folder for models.rs and operations.rs")
    parser.add_argument("--api-version", help="Version stamped into the generated header")
    parser.add_argument(
        "--box",
        nargs=3,
        action="append",
        default=[],
        metavar=("FILE", "SCHEMA", "PROPERTY"),
        help="Box a self-referential property (repeatable)",
    )
    parser.add_argument("--config", type=Path, help="JSON config file with the same fields")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> Config:
    if args.config:
        config = Config.from_file(args.config)
    elif args.input_files and args.output:
        config = Config(output_folder=args.output, input_files=args.input_files)
    else:
        raise SystemExit("rustgen: give INPUT... and --output, or --config")

    updates: dict = {}
    if args.config and args.input_files:
        updates["input_files"] = args.input_files
    if args.config and args.output:
        updates["output_folder"] = args.output
    if args.api_version:
        updates["api_version"] = args.api_version
    if args.box:
        updates["box_properties"] = config.box_properties | {
            PropertyName(file_path=f, schema_name=s, property_name=p) for f, s, p in args.box
        }
    return config.model_copy(update=updates)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = _build_config(args)
        result = run(config)
    except CodegenError as err:
        logger.error("%s", err)
        return 1

    print(f"Generated {result.models_path} ({result.type_count} types)")
    print(f"Generated {result.client_path} ({result.function_count} functions)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
