#!/usr/bin/env python3
"""zoopgen: expand zoop.class / zoop.mixin declarations into plain Zig structs.

Usage: zoopgen --source-dir src --output-dir .zig-cache/zoop-generated
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import GeneratorConfig
from .decls import SourceUnit
from .diagnostics import Diagnostic
from .engine import Generator
from .lexer import Lexer, LexerError

logger = logging.getLogger("zoopgen")


def _format_error(source: str, filename: str, message: str,
                  line: int, col: int, severity: str = "error") -> str:
    """Format a diagnostic with source context and caret."""
    lines = source.split('\n')
    if line < 1 or line > len(lines):
        return f"{severity}: {message}\n --> {filename}:{line}:{col}"
    source_line = lines[line - 1]
    width = len(str(line))
    pad = " " * width
    caret_offset = max(col - 1, 0)
    caret = " " * caret_offset + "^"
    return (
        f"{severity}: {message}\n"
        f" {pad}--> {filename}:{line}:{col}\n"
        f" {pad} |\n"
        f" {line} | {source_line}\n"
        f" {pad} | {caret}"
    )


def format_diagnostic(diag: Diagnostic, sources: dict[str, str]) -> str:
    message = f"{diag.kind}: {diag.message}"
    if diag.declaration:
        message += f" (in '{diag.declaration}')"
    severity = diag.severity.value
    if diag.unit in sources:
        return _format_error(sources[diag.unit], diag.unit, message,
                             diag.line, diag.col, severity)
    return f"{severity}: {message}"


def _check_path(path: str, flag: str):
    if ".." in Path(path).parts:
        print(f"Error: {flag} '{path}' must not contain '..'", file=sys.stderr)
        sys.exit(1)


def discover_units(source_dir: str) -> list[SourceUnit]:
    """Every *.zig file under `source_dir`, sorted by relative path."""
    root = Path(source_dir)
    units = []
    for path in sorted(root.rglob("*.zig")):
        if not path.is_file():
            continue
        rel = path.relative_to(root).as_posix()
        units.append(SourceUnit(rel, path.read_text(encoding="utf-8")))
    return units


def write_outputs(output_dir: str, outputs: dict[str, str]):
    for name, text in outputs.items():
        out_path = os.path.join(output_dir, *name.split("/"))
        os.makedirs(os.path.dirname(out_path), exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(text)


def _emit_tokens(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File '{path}' not found", file=sys.stderr)
        sys.exit(1)
    try:
        tokens = Lexer(source, path).tokenize()
    except LexerError as e:
        raw_msg = str(e).rsplit(" at ", 1)[0]
        print(_format_error(source, path, raw_msg, e.line, e.col), file=sys.stderr)
        sys.exit(1)
    for tok in tokens:
        print(tok)


def build_parser() -> argparse.ArgumentParser:
    argparser = argparse.ArgumentParser(
        prog="zoopgen", description="zoop class/mixin code generator for Zig")
    argparser.add_argument("--source-dir", help="Directory scanned for *.zig units")
    argparser.add_argument("--output-dir", help="Directory receiving generated units")
    argparser.add_argument("--getter-prefix", default="get_", help="Prefix for property getters")
    argparser.add_argument("--setter-prefix", default="set_", help="Prefix for property setters")
    argparser.add_argument("--method-prefix", default="",
                           help="Prefix for methods copied from ancestors and mixins")
    argparser.add_argument("--max-field-count", type=int, default=0xFFFF,
                           help="Maximum fields and properties per declaration")
    argparser.add_argument("--jobs", "-j", type=int, default=1,
                           help="Worker threads for scanning and generation")
    argparser.add_argument("--emit-tokens", metavar="FILE",
                           help="Print the token stream of FILE and exit")
    argparser.add_argument("--emit-order", action="store_true",
                           help="Print the generation order instead of writing output")
    argparser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return argparser


def main(argv=None):
    argparser = build_parser()
    args = argparser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    if args.emit_tokens:
        _emit_tokens(args.emit_tokens)
        return

    if not args.source_dir or not args.output_dir:
        argparser.error("--source-dir and --output-dir are required")
    _check_path(args.source_dir, "--source-dir")
    _check_path(args.output_dir, "--output-dir")
    if not os.path.isdir(args.source_dir):
        print(f"Error: Source directory '{args.source_dir}' not found", file=sys.stderr)
        sys.exit(1)

    try:
        config = GeneratorConfig(
            getter_prefix=args.getter_prefix,
            setter_prefix=args.setter_prefix,
            method_prefix=args.method_prefix,
            max_field_count=args.max_field_count,
            jobs=args.jobs,
        )
    except ValueError as e:
        argparser.error(str(e))

    units = discover_units(args.source_dir)
    logger.debug("found %d unit(s) under %s", len(units), args.source_dir)
    result = Generator(config).run(units)
    sources = {u.name: u.text for u in units}

    for diag in result.warnings:
        print(format_diagnostic(diag, sources), file=sys.stderr)
    if not result.ok:
        for diag in result.errors:
            print(format_diagnostic(diag, sources), file=sys.stderr)
        print(f"zoopgen: {len(result.errors)} error(s), no output written",
              file=sys.stderr)
        sys.exit(1)

    if args.emit_order:
        for name in result.order:
            print(name)
        return

    write_outputs(args.output_dir, result.outputs)
    print(f"Generated {len(result.outputs)} unit(s) into {args.output_dir}")


if __name__ == "__main__":
    main()
