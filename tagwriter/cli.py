"""Command-line interface for tagwriter."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, Optional

import yaml
from defusedxml.common import DefusedXmlException
from defusedxml.ElementTree import ParseError
from defusedxml.ElementTree import parse as safe_parse
from pydantic import ValidationError

from .content import ContentError
from .document import load_document, render_document
from .io_utils import warn
from .models import TagNode, WriterConfig, load_writer_config
from .xml_writer import XmlWriterError


def _load_config(args: argparse.Namespace) -> WriterConfig:
    data: dict = {}
    if args.config:
        path = Path(args.config)
        try:
            data = dict(load_writer_config(path))
        except (ValidationError, yaml.YAMLError) as exc:
            raise SystemExit(f"Invalid writer config in {path}: {exc}") from exc

    if args.indent is not None:
        data["data_mode"] = True
        data["data_indent"] = args.indent
    if args.encoding:
        data["encoding"] = args.encoding
    if args.out:
        data["output"] = Path(args.out)
    elif data.get("output") is None:
        data["output"] = getattr(sys.stdout, "buffer", sys.stdout)
        data["close_output"] = False

    try:
        return WriterConfig.model_validate(data)
    except ValidationError as exc:
        raise SystemExit(f"Invalid writer options: {exc}") from exc


def _load_tree(path: Path) -> TagNode:
    try:
        return load_document(path)
    except (ValidationError, ValueError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise SystemExit(f"Invalid document in {path}: {exc}") from exc


def _handle_render(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    node = _load_tree(input_path)
    config = _load_config(args)
    try:
        render_document(node, config)
    except (ContentError, XmlWriterError) as exc:
        raise SystemExit(f"Cannot write {input_path}: {exc}") from exc


def check_files(paths: Iterable[Path]) -> list[str]:
    """Parse each file and return one message per malformed document."""
    errors: list[str] = []
    for path in paths:
        try:
            safe_parse(path)
        except (ParseError, DefusedXmlException, OSError) as exc:
            errors.append(f"[check] {path}: {exc}")
    return errors


def _handle_check(args: argparse.Namespace) -> None:
    errors = check_files(Path(p) for p in args.files)
    if errors:
        for message in errors:
            warn(message)
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tagwriter",
        description="Write well-formed XML documents from declarative trees.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="tagwriter 0.1.0",
        help="Show the tagwriter version and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser(
        "render",
        help="Render a YAML or JSON element tree to XML.",
        description=(
            "Load an element tree (tag, attr, text, children) and write it as an "
            "XML document."
        ),
    )
    render_parser.add_argument("input", help="YAML or JSON document tree.")
    render_parser.add_argument(
        "--out", help="Output XML path. Writes to stdout when omitted."
    )
    render_parser.add_argument("--config", help="YAML file with writer options.")
    render_parser.add_argument(
        "--indent",
        type=int,
        help="Write one element per line, indented by this many spaces.",
    )
    render_parser.add_argument("--encoding", help="Output encoding (default utf-8).")
    render_parser.set_defaults(func=_handle_render)

    check_parser = subparsers.add_parser(
        "check",
        help="Check that XML files are well-formed.",
        description="Parse each file and report the ones that are not well-formed.",
    )
    check_parser.add_argument("files", nargs="+", help="XML files to check.")
    check_parser.set_defaults(func=_handle_check)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


__all__ = ["build_parser", "check_files", "main"]


if __name__ == "__main__":
    main()
