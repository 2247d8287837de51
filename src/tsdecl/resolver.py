# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Fold per-file declaration fragments into the merged symbol tree."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Sequence

from tsdecl.errors import Diagnostic, MergeConflict, Severity
from tsdecl.model import (
    Location,
    Parameter,
    Signature,
    Symbol,
    SymbolKind,
    SymbolTree,
)
from tsdecl.nodes import Declaration, DeclarationKind, PerFileAst

logger = logging.getLogger(__name__)

_SYMBOL_KINDS: dict[DeclarationKind, SymbolKind] = {
    "variable": "variable",
    "function": "function",
    "class": "class",
    "interface": "interface",
    "enum": "enum",
    "enum_member": "enum_member",
    "namespace": "namespace",
    "module": "namespace",
    "type_alias": "type_alias",
    "property": "property",
    "method": "method",
    "get_accessor": "accessor",
    "set_accessor": "accessor",
    "constructor": "constructor",
    "index_signature": "index_signature",
    "call_signature": "method",
    "construct_signature": "constructor",
    "static_initializer": "static_initializer",
}
_OVERLOADABLE_KINDS: frozenset[str] = frozenset({"function", "method", "constructor"})
_MERGEABLE_KINDS: frozenset[str] = _OVERLOADABLE_KINDS | {"interface", "namespace", "accessor"}
# Kinds whose same-named declarations in different files share one project scope.
_PROJECT_MERGEABLE_KINDS: frozenset[str] = frozenset({"namespace"})
_ANONYMOUS_KINDS: frozenset[str] = frozenset({"static_initializer"})


@dataclass
class _FileSymbols:
    """Result of folding one file."""

    symbols: list[Symbol] = field(default_factory=list)
    modules: list[Symbol] = field(default_factory=list)
    global_symbols: list[Symbol] = field(default_factory=list)


class SymbolResolver:
    """Build a ``SymbolTree`` from one or more per-file ASTs.

    Folding happens in two phases: every file is folded on its own (overload
    sets, interface and namespace re-declarations, accessor pairs, parameter
    property promotion), then namespaces, module augmentations and global
    augmentations that share a qualified name are merged across files in file
    order. Overload sets outside classes are checked only after this second
    phase, so a namespace function may take its overloads from one file and
    its implementation from another.
    """

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []

    def build(self, asts: Sequence[PerFileAst]) -> tuple[SymbolTree, list[Diagnostic]]:
        """Fold all files and merge them into one tree.

        Args:
            asts: Per-file ASTs in file-processing order.

        Returns:
            The symbol tree and every merge diagnostic, in discovery order.
        """
        self._diagnostics = []
        tree = SymbolTree()
        folded = [self.fold_file(ast) for ast in asts]

        # Overload sets are only complete once namespaces, modules and global
        # augmentations from every file have been merged.
        tree.symbols = self._finalize(
            self._merge_scope(
                [copy.deepcopy(s) for f in folded for s in f.symbols], project=True
            ),
            None,
        )
        modules = self._merge_scope(
            [copy.deepcopy(s) for f in folded for s in f.modules], project=False
        )
        for module in self._finalize(modules, None):
            tree.modules[module.name] = module
        tree.global_symbols = self._finalize(
            self._merge_scope(
                [copy.deepcopy(s) for f in folded for s in f.global_symbols], project=False
            ),
            None,
        )
        for ast, file_symbols in zip(asts, folded):
            tree.files[ast.file_name] = self._finalize(
                file_symbols.symbols, None, report=False
            )
        logger.info(
            f"Symbol tree built (files={len(asts)} symbols={len(tree.symbols)} "
            f"modules={len(tree.modules)} global_symbols={len(tree.global_symbols)} "
            f"diagnostics={len(self._diagnostics)})"
        )
        return tree, list(self._diagnostics)

    def fold_file(self, ast: PerFileAst) -> "_FileSymbols":
        """Fold the top-level declarations of one file.

        Args:
            ast: Parsed file.

        Returns:
            Top-level symbols, string-named module augmentations and global
            augmentation members of the file, merged but with top-level and
            namespace overload sets not yet finalised.
        """
        result = _FileSymbols()
        top_level = self._convert_all(ast.declarations, ast.file_name, result)
        result.symbols = self._merge_scope(top_level, project=False)
        result.modules = self._merge_scope(result.modules, project=False)
        result.global_symbols = self._merge_scope(result.global_symbols, project=False)
        logger.debug(
            f"Folded file (file_name={ast.file_name} symbols={len(result.symbols)} "
            f"modules={len(result.modules)} global_symbols={len(result.global_symbols)})"
        )
        return result

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _convert_all(
        self, declarations: list[Declaration], file_name: str, sink: _FileSymbols
    ) -> list[Symbol]:
        symbols: list[Symbol] = []
        for declaration in declarations:
            if declaration.kind == "global":
                sink.global_symbols.extend(
                    self._convert_all(declaration.members, file_name, sink)
                )
                continue
            symbol = self._convert(declaration, file_name, sink)
            if declaration.kind == "module":
                sink.modules.append(symbol)
            else:
                symbols.append(symbol)
        return symbols

    def _convert(self, declaration: Declaration, file_name: str, sink: _FileSymbols) -> Symbol:
        """Turn one declaration fragment into an unmerged symbol fragment."""
        kind = _SYMBOL_KINDS[declaration.kind]
        is_ambient = declaration.ambient or "declared" in declaration.modifiers
        location = Location(file_name=file_name, position=declaration.position)
        symbol = Symbol(
            kind=kind,
            name=declaration.name,
            modifiers=declaration.modifiers,
            type_parameters=declaration.type_parameters,
            decorators=declaration.decorators,
            is_ambient=is_ambient,
            computed=declaration.computed,
            type=declaration.type,
            initializer=declaration.initializer,
            value=declaration.value,
            extends=declaration.extends,
            implements=declaration.implements,
            doc_comment=declaration.doc_comment,
            locations=[location],
        )
        signature = declaration.signature
        if signature is not None:
            if kind in _OVERLOADABLE_KINDS and signature.has_body:
                symbol.implementation = signature
            else:
                symbol.signatures.append(signature)

        if kind in ("namespace", "interface", "enum"):
            symbol.members = self._merge_scope(
                self._convert_all(declaration.members, file_name, sink), project=False
            )
        elif kind == "class":
            symbol.members = self._finalize(
                self._merge_scope(
                    [self._convert(m, file_name, sink) for m in declaration.members],
                    project=False,
                ),
                symbol,
            )
            symbol.members = self._promote_parameter_properties(symbol, file_name)

        symbol.has_implementation = self._has_implementation(declaration, symbol)
        return symbol

    @staticmethod
    def _has_implementation(declaration: Declaration, symbol: Symbol) -> bool:
        if symbol.kind in _OVERLOADABLE_KINDS or symbol.kind == "accessor":
            return declaration.has_body
        if symbol.kind in ("variable", "property"):
            return declaration.initializer is not None
        if symbol.kind in ("interface", "type_alias", "index_signature", "enum_member"):
            return False
        return not symbol.is_ambient

    def _promote_parameter_properties(self, class_symbol: Symbol, file_name: str) -> list[Symbol]:
        """Insert a property after the constructor for each parameter property.

        Only the implementation constructor is scanned, and a parameter is
        promoted iff it carries an accessibility modifier or ``readonly``.
        """
        members: list[Symbol] = []
        for member in class_symbol.members:
            members.append(member)
            if member.kind != "constructor" or member.name != "constructor":
                continue
            for overload in member.signatures:
                if overload.has_body or overload is member.implementation:
                    continue
                for parameter in overload.parameters:
                    if parameter.is_parameter_property:
                        self._report(
                            member,
                            f"Parameter property '{parameter.name}' is only allowed in a "
                            "constructor implementation",
                            severity="warning",
                        )
            if member.implementation is None:
                continue
            for parameter in member.implementation.parameters:
                if not parameter.is_parameter_property:
                    continue
                promoted = self._parameter_property(parameter, member)
                clash = next(
                    (
                        m
                        for m in [*members, *class_symbol.members]
                        if m.kind == "property" and m.name == promoted.name
                        and "static" not in m.modifiers
                    ),
                    None,
                )
                if clash is not None:
                    self._report(clash, f"Duplicate identifier '{promoted.name}'")
                    continue
                logger.debug(
                    f"Promoted parameter property (file_name={file_name} "
                    f"class={class_symbol.name} property={promoted.name})"
                )
                members.append(promoted)
        return members

    @staticmethod
    def _parameter_property(parameter: Parameter, constructor: Symbol) -> Symbol:
        modifiers: set[str] = set(parameter.modifiers)
        if parameter.accessibility is not None:
            modifiers.add(parameter.accessibility)
        if parameter.readonly:
            modifiers.add("readonly")
        if parameter.optional:
            modifiers.add("optional")
        return Symbol(
            kind="property",
            name=parameter.name,
            modifiers=frozenset(modifiers),
            decorators=parameter.decorators,
            is_ambient=constructor.is_ambient,
            has_implementation=True,
            type=parameter.type,
            initializer=parameter.default,
            locations=list(constructor.locations),
        )

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def _merge_scope(self, fragments: list[Symbol], project: bool) -> list[Symbol]:
        """Fold fragments of one scope by (name, kind) in first-occurrence order.

        Args:
            fragments: Symbol fragments in source (and file) order.
            project: Key non-namespace symbols by file as well, since every
                file is its own module scope.

        Returns:
            One symbol per merge key.
        """
        merged: list[Symbol] = []
        by_key: dict[tuple, Symbol] = {}
        for fragment in fragments:
            if fragment.kind in _ANONYMOUS_KINDS or (
                fragment.name == "" and fragment.kind in ("method", "constructor")
            ):
                merged.append(fragment)
                continue
            key: tuple = (fragment.name, fragment.kind, "static" in fragment.modifiers)
            if project and fragment.kind not in _PROJECT_MERGEABLE_KINDS:
                key = (fragment.locations[0].file_name, *key)
            existing = by_key.get(key)
            if existing is None:
                by_key[key] = fragment
                merged.append(fragment)
                continue
            try:
                self._merge(existing, fragment)
            except MergeConflict as exc:
                self._attach(existing, exc, fragment.locations[0].file_name)
        return merged

    def _merge(self, existing: Symbol, fragment: Symbol) -> None:
        """Merge ``fragment`` into ``existing``.

        Raises:
            MergeConflict: If the fragment has to be rejected.
        """
        position = fragment.locations[0].position
        if existing.kind not in _MERGEABLE_KINDS:
            raise MergeConflict(f"Duplicate identifier '{existing.name}'", position)

        existing.locations.extend(fragment.locations)
        if existing.doc_comment is None:
            existing.doc_comment = fragment.doc_comment

        if existing.kind in _OVERLOADABLE_KINDS:
            self._merge_overload(existing, fragment)
        elif existing.kind == "accessor":
            self._merge_accessor(existing, fragment)
        else:
            self._merge_container(existing, fragment)

    def _merge_overload(self, existing: Symbol, fragment: Symbol) -> None:
        position = fragment.locations[0].position
        for modifier, label in (("exported", "exported or non-exported"), ("declared", "ambient or non-ambient")):
            if (modifier in existing.modifiers) != (modifier in fragment.modifiers):
                self._report(
                    existing,
                    f"Overload signatures of '{existing.name}' must all be {label}",
                    severity="warning",
                    position=position,
                )
        if existing.implementation is not None and fragment.signatures:
            self._report(
                existing,
                f"Overload signature of '{existing.name}' follows its implementation",
                severity="warning",
                position=position,
            )
        existing.signatures.extend(fragment.signatures)
        if fragment.implementation is None:
            return
        if existing.implementation is not None:
            raise MergeConflict(f"Duplicate function implementation '{existing.name}'", position)
        existing.implementation = fragment.implementation
        existing.has_implementation = True
        existing.decorators = existing.decorators + fragment.decorators
        existing.modifiers = existing.modifiers | fragment.modifiers

    def _merge_accessor(self, existing: Symbol, fragment: Symbol) -> None:
        for signature in fragment.signatures:
            if any(s.role == signature.role for s in existing.signatures):
                raise MergeConflict(
                    f"Duplicate {signature.role} accessor '{existing.name}'",
                    fragment.locations[0].position,
                )
            existing.signatures.append(signature)
        existing.modifiers = existing.modifiers | fragment.modifiers
        existing.decorators = existing.decorators + fragment.decorators
        existing.has_implementation = existing.has_implementation or fragment.has_implementation

    def _merge_container(self, existing: Symbol, fragment: Symbol) -> None:
        """Merge interface or namespace re-declarations by concatenating members."""
        if existing.is_exported != fragment.is_exported:
            self._report(
                existing,
                f"Individual declarations in merged declaration '{existing.name}' "
                "must be all exported or all local",
                severity="warning",
                position=fragment.locations[0].position,
            )
        if existing.kind == "interface" and _type_parameter_names(existing) != _type_parameter_names(fragment):
            self._report(
                existing,
                f"All declarations of '{existing.name}' must have identical type parameters",
                severity="warning",
                position=fragment.locations[0].position,
            )
        known = {expression.text for expression in existing.extends}
        existing.extends = existing.extends + tuple(
            e for e in fragment.extends if e.text not in known
        )
        existing.is_ambient = existing.is_ambient and fragment.is_ambient
        existing.has_implementation = existing.has_implementation or fragment.has_implementation
        existing.members = self._merge_scope(existing.members + fragment.members, project=False)

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------

    def _finalize(
        self, symbols: list[Symbol], container: Symbol | None, report: bool = True
    ) -> list[Symbol]:
        """Check overload sets and fill in single-implementation signatures.

        Args:
            symbols: Members of one fully merged scope.
            container: Enclosing symbol, ``None`` at the top level.
            report: Record overload diagnostics; off for the per-file views,
                whose symbols are checked once in the project tree.

        Returns:
            ``symbols``, finalised in place.
        """
        for symbol in symbols:
            if symbol.kind in _OVERLOADABLE_KINDS:
                self._finalize_overloads(symbol, container, report)
            if symbol.kind in ("namespace", "interface", "enum"):
                self._finalize(symbol.members, symbol, report)
        return symbols

    def _finalize_overloads(self, symbol: Symbol, container: Symbol | None, report: bool) -> None:
        implementation = symbol.implementation
        if implementation is None:
            if report and self._requires_body(symbol, container):
                self._report(
                    symbol,
                    f"Implementation of '{symbol.name}' is missing or does not "
                    "immediately follow its overloads",
                )
            symbol.has_implementation = False
            return
        symbol.has_implementation = True
        if not symbol.signatures:
            symbol.signatures = [implementation]
            return
        if not report:
            return
        required, maximum = _arity(implementation)
        for overload in symbol.signatures:
            overload_required, overload_maximum = _arity(overload)
            too_many = maximum is not None and (
                overload_maximum is None or overload_maximum > maximum
            )
            too_few = overload_maximum is not None and overload_maximum < required
            if too_many or too_few:
                self._report(
                    symbol,
                    f"Overload signature {overload} of '{symbol.name}' is not compatible "
                    f"with its implementation signature {implementation}",
                )

    @staticmethod
    def _requires_body(symbol: Symbol, container: Symbol | None) -> bool:
        if symbol.is_ambient or symbol.modifiers & {"abstract", "declared", "optional"}:
            return False
        if symbol.name == "" or any(s.role in ("call", "construct") for s in symbol.signatures):
            return False
        if container is not None and (container.kind == "interface" or container.is_ambient):
            return False
        return True

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _report(
        self,
        symbol: Symbol,
        message: str,
        severity: Severity = "error",
        position=None,
    ) -> None:
        location = symbol.locations[0] if symbol.locations else None
        conflict = MergeConflict(
            message,
            position if position is not None else location.position,
            severity=severity,
        )
        self._attach(symbol, conflict, location.file_name if location else "<unknown>")

    def _attach(self, symbol: Symbol, conflict: MergeConflict, file_name: str) -> None:
        diagnostic = conflict.to_diagnostic(file_name)
        symbol.diagnostics.append(diagnostic)
        self._diagnostics.append(diagnostic)
        logger.warning(
            f"Merge conflict (file_name={file_name} position={conflict.position} "
            f"symbol={symbol.name} error={conflict.message})"
        )


def _arity(signature: Signature) -> tuple[int, int | None]:
    parameters = [p for p in signature.parameters if p.name != "this"]
    required = sum(1 for p in parameters if p.is_required)
    if any(p.rest for p in parameters):
        return required, None
    return required, len(parameters)


def _type_parameter_names(symbol: Symbol) -> tuple[str, ...]:
    return tuple(parameter.name for parameter in symbol.type_parameters)

