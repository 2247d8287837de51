# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Declaration extraction for TypeScript-style sources."""

from tsdecl.errors import Diagnostic, ExtractionError, LexError, MergeConflict, ParseError
from tsdecl.extractor import (
    ExtractionOptions,
    ExtractionResult,
    build_symbol_tree,
    extract,
    parse_file,
    parse_files,
)
from tsdecl.model import Parameter, Signature, Symbol, SymbolTree
from tsdecl.nodes import PerFileAst
from tsdecl.types import TypeExpression

__all__ = [
    "Diagnostic",
    "ExtractionError",
    "ExtractionOptions",
    "ExtractionResult",
    "LexError",
    "MergeConflict",
    "Parameter",
    "ParseError",
    "PerFileAst",
    "Signature",
    "Symbol",
    "SymbolTree",
    "TypeExpression",
    "build_symbol_tree",
    "extract",
    "parse_file",
    "parse_files",
]
