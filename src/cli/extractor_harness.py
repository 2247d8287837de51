# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI verification harness for declaration extraction."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, TextIO

import pathspec
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from tsdecl import ExtractionOptions, ExtractionResult, Symbol, extract
from tsdecl.errors import Diagnostic

logger = logging.getLogger(__name__)

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "kind": 1,
    "name": 3,
    "modifiers": 2,
    "detail": 5,
    "location": 2,
}
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")
SKIPPED_DIRECTORIES: frozenset[str] = frozenset({".git", "node_modules"})


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class SourceFilter:
    """Decide which files below a project root are declaration sources.

    A file is a source when its name ends with one of the accepted suffixes
    (``.d.ts`` is covered by ``.ts``) and no ``.gitignore`` in the project
    excludes it. Dependency and VCS directories are never entered.
    """

    def __init__(self, ignored: pathspec.GitIgnoreSpec, suffixes: tuple[str, ...]) -> None:
        self._ignored = ignored
        self._suffixes = suffixes

    @classmethod
    def for_project(cls, root_path: Path, suffixes: tuple[str, ...]) -> "SourceFilter":
        """Collect the root and nested .gitignore files of a project.

        Raises:
            OSError: If a .gitignore file cannot be read.
            UnicodeDecodeError: If a .gitignore file is not UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(root_path.rglob(".gitignore")):
            if any(part in SKIPPED_DIRECTORIES for part in ignore_path.relative_to(root_path).parts):
                continue
            base = ignore_path.parent.relative_to(root_path).as_posix()
            patterns.extend(
                cls._rebase_pattern(line, "" if base == "." else base)
                for line in ignore_path.read_text(encoding="utf-8").splitlines()
            )
        return cls(pathspec.GitIgnoreSpec.from_lines(patterns), suffixes)

    def enters(self, relative_dir: str) -> bool:
        """Return True if discovery should descend into the directory."""
        if relative_dir.rsplit("/", 1)[-1] in SKIPPED_DIRECTORIES:
            return False
        return not (
            self._ignored.match_file(relative_dir)
            or self._ignored.match_file(f"{relative_dir}/")
        )

    def accepts(self, relative_file: str) -> bool:
        """Return True for a non-ignored file with an accepted suffix."""
        return relative_file.endswith(self._suffixes) and not self._ignored.match_file(
            relative_file
        )

    @staticmethod
    def _rebase_pattern(line: str, base: str) -> str:
        """Rewrite a pattern of a nested .gitignore relative to the project root.

        Patterns of ``pkg/.gitignore`` apply below ``pkg/`` only, so ``/x.ts``
        becomes ``/pkg/x.ts`` and ``x.ts`` becomes ``pkg/x.ts``. Comments,
        blank lines and escaped leading characters pass through.
        """
        if not base or not line or line.lstrip().startswith("#") or line.startswith(("\\!", "\\#")):
            return line
        negated = line.startswith("!")
        pattern = line[1:] if negated else line
        anchored = pattern.startswith("/")
        pattern = pattern.lstrip("/")
        rebased = f"{base}/{pattern}" if pattern else base
        if anchored:
            rebased = f"/{rebased}"
        return f"!{rebased}" if negated else rebased


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="tsdecl")
    parser.add_argument(
        "--path", required=True, help="Source file or project root to extract."
    )
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    parser.add_argument(
        "--workers", type=int, default=4, help="Parser worker threads."
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any error diagnostic is reported.",
    )
    parser.add_argument(
        "--log-level", choices=LOG_LEVELS, default="INFO", help="Logging threshold."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run the extraction command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    logging.getLogger().setLevel(args.log_level)

    try:
        options = ExtractionOptions(max_workers=args.workers)
    except ValueError as exc:
        logger.warning(f"Invalid options (workers={args.workers} error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    root_path = Path(args.path)
    try:
        files = discover_sources(root_path=root_path, suffixes=options.suffixes)
        sources = [
            (path.read_text(encoding="utf-8"), _display_name(path, root_path))
            for path in files
        ]
    except ValidationError as exc:
        logger.warning(f"Validation failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read sources (path={root_path} error={exc})")
        stderr.write(f"Failed to read sources: {exc}\n")
        return 2

    result = extract(sources, options)
    _write_diagnostics(diagnostics=result.diagnostics, stderr=stderr)
    if args.format == "json":
        payload = json.dumps(_payload(result), indent=2, sort_keys=True, default=_json_default)
        if args.output:
            try:
                output_path = Path(args.output)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(payload, encoding="utf-8")
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            console = Console(file=stdout, force_terminal=False, color_system="truecolor")
            console.print(payload, markup=False, highlight=False, soft_wrap=True)
    else:
        _write_table(result=result, stdout=stdout)

    if args.strict and result.has_errors:
        return 1
    return 0


def discover_sources(root_path: Path, suffixes: tuple[str, ...]) -> list[Path]:
    """Collect source files below a root, honouring .gitignore files.

    Args:
        root_path: A single source file or a project directory.
        suffixes: Accepted file suffixes.

    Returns:
        Source paths in sorted breadth-first order.

    Raises:
        ValidationError: If the path does not exist.
        OSError: If .gitignore files cannot be read.
    """
    if not root_path.exists():
        raise ValidationError(f"Path does not exist: {root_path}")
    if root_path.is_file():
        return [root_path]

    source_filter = SourceFilter.for_project(root_path=root_path, suffixes=suffixes)
    found: list[Path] = []
    queue: list[Path] = [root_path]
    while queue:
        current = queue.pop(0)
        for child in sorted(current.iterdir(), key=lambda item: item.name):
            relative = child.relative_to(root_path).as_posix()
            if child.is_dir():
                if source_filter.enters(relative):
                    queue.append(child)
                else:
                    logger.debug(f"Skipped directory (path={relative})")
            elif source_filter.accepts(relative):
                found.append(child)
    logger.info(f"Source discovery completed (path={root_path} files={len(found)})")
    return found


def _display_name(path: Path, root_path: Path) -> str:
    if root_path.is_file():
        return path.name
    return path.relative_to(root_path).as_posix()


def _write_diagnostics(diagnostics: list[Diagnostic], stderr: TextIO) -> None:
    for diagnostic in diagnostics:
        stderr.write(f"{diagnostic}\n")


def _payload(result: ExtractionResult) -> dict[str, Any]:
    tree = result.tree
    return {
        "files": {name: [asdict(s) for s in symbols] for name, symbols in tree.files.items()},
        "symbols": [asdict(symbol) for symbol in tree.symbols],
        "modules": {name: asdict(module) for name, module in tree.modules.items()},
        "global_symbols": [asdict(symbol) for symbol in tree.global_symbols],
        "diagnostics": [asdict(diagnostic) for diagnostic in result.diagnostics],
    }


def _json_default(value: object) -> object:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _write_table(result: ExtractionResult, stdout: TextIO) -> None:
    """Write an outline table per file.

    Args:
        result: Extraction result.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    sections: list[tuple[str, list[Symbol]]] = list(result.tree.files.items())
    if result.tree.modules:
        sections.append(("declare module", list(result.tree.modules.values())))
    if result.tree.global_symbols:
        sections.append(("declare global", result.tree.global_symbols))
    for title, symbols in sections:
        console.rule(title, style=Style(color="cyan"), characters="-")
        table = Table(show_header=True, show_lines=False, expand=True)
        for column, ratio in TABLE_COLUMN_RATIOS.items():
            table.add_column(column, ratio=ratio, overflow="fold")
        for symbol, depth in _outline(symbols, depth=0):
            table.add_row(
                symbol.kind,
                "  " * depth + (symbol.name or "<anonymous>"),
                " ".join(sorted(symbol.modifiers)),
                _detail(symbol),
                str(symbol.locations[0]) if symbol.locations else "",
            )
        console.print(table)


def _outline(symbols: list[Symbol], depth: int):
    for symbol in symbols:
        yield symbol, depth
        yield from _outline(symbol.members, depth + 1)


def _detail(symbol: Symbol) -> str:
    if symbol.signatures:
        return "\n".join(str(signature) for signature in symbol.signatures)
    if symbol.type is not None:
        return str(symbol.type)
    if symbol.value is not None:
        return symbol.value.text or ""
    if symbol.extends:
        return "extends " + ", ".join(str(e) for e in symbol.extends)
    return ""


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
