# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public extraction entry points."""

import concurrent.futures
import logging
from dataclasses import dataclass, field
from typing import Sequence

from tsdecl.errors import Diagnostic
from tsdecl.model import SymbolTree
from tsdecl.nodes import PerFileAst
from tsdecl.parser import Parser
from tsdecl.resolver import SymbolResolver

logger = logging.getLogger(__name__)

DEFAULT_SUFFIXES: tuple[str, ...] = (".ts", ".tsx", ".mts", ".cts")


@dataclass(frozen=True)
class ExtractionOptions:
    """Represent extraction settings.

    Attributes:
        max_workers: Worker threads used to parse files in parallel.
        suffixes: File suffixes treated as declaration sources.
    """

    max_workers: int = 4
    suffixes: tuple[str, ...] = DEFAULT_SUFFIXES

    def __post_init__(self) -> None:
        if self.max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        if not self.suffixes:
            raise ValueError("suffixes must not be empty")
        invalid = sorted(s for s in self.suffixes if not s.startswith("."))
        if invalid:
            raise ValueError(f"Unsupported suffixes: {', '.join(invalid)}")


@dataclass(frozen=True)
class ExtractionResult:
    """Represent the outcome of a full extraction run."""

    asts: list[PerFileAst]
    tree: SymbolTree
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)


def parse_file(source_text: str, file_name: str) -> tuple[PerFileAst, list[Diagnostic]]:
    """Parse one source unit.

    Args:
        source_text: Complete text of the unit.
        file_name: Name used for locations and diagnostics; a ``.d.ts`` name
            makes the whole unit ambient.

    Returns:
        The per-file AST and its lexical and syntactic diagnostics.
    """
    ast, diagnostics = Parser(source_text, file_name).parse()
    logger.info(
        f"Parse completed (file_name={file_name} declarations={len(ast.declarations)} "
        f"diagnostics={len(diagnostics)})"
    )
    return ast, diagnostics


def build_symbol_tree(
    per_file_asts: Sequence[PerFileAst],
) -> tuple[SymbolTree, list[Diagnostic]]:
    """Fold per-file ASTs into the merged symbol tree.

    Args:
        per_file_asts: Parsed units in file-processing order.

    Returns:
        The symbol tree and its merge diagnostics.
    """
    return SymbolResolver().build(per_file_asts)


def parse_files(
    sources: Sequence[tuple[str, str]], max_workers: int = 4
) -> list[tuple[PerFileAst, list[Diagnostic]]]:
    """Parse several units in parallel.

    Args:
        sources: ``(source_text, file_name)`` pairs.
        max_workers: Maximum number of worker threads.

    Returns:
        One ``(ast, diagnostics)`` pair per input, in input order.

    Raises:
        ValueError: If ``max_workers`` is not greater than zero.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be > 0")
    results: list[tuple[PerFileAst, list[Diagnostic]] | None] = [None] * len(sources)
    if not sources:
        return []
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(parse_file, source_text, file_name): index
            for index, (source_text, file_name) in enumerate(sources)
        }
        for future in concurrent.futures.as_completed(future_to_index):
            results[future_to_index[future]] = future.result()
    logger.debug(f"Parallel parse completed (files={len(sources)} max_workers={max_workers})")
    return [result for result in results if result is not None]


def extract(
    sources: Sequence[tuple[str, str]], options: ExtractionOptions | None = None
) -> ExtractionResult:
    """Run the whole pipeline over a set of units.

    Args:
        sources: ``(source_text, file_name)`` pairs in file-processing order.
        options: Extraction settings; defaults apply when omitted.

    Returns:
        Per-file ASTs, the merged tree and all diagnostics (parse diagnostics
        of every file in input order, then merge diagnostics).
    """
    options = options or ExtractionOptions()
    parsed = parse_files(sources, max_workers=options.max_workers)
    asts = [ast for ast, _ in parsed]
    diagnostics = [diagnostic for _, file_diagnostics in parsed for diagnostic in file_diagnostics]
    tree, merge_diagnostics = build_symbol_tree(asts)
    diagnostics.extend(merge_diagnostics)
    logger.info(
        f"Extraction completed (files={len(asts)} symbols={len(tree.symbols)} "
        f"diagnostics={len(diagnostics)})"
    )
    return ExtractionResult(asts=asts, tree=tree, diagnostics=diagnostics)
