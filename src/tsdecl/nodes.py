# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-file abstract syntax tree of declarations."""

from dataclasses import dataclass, field
from typing import Literal

from tsdecl.model import Decorator, EnumValue, Signature, TypeParameter
from tsdecl.tokens import Position
from tsdecl.types import TypeExpression

DeclarationKind = Literal[
    "variable",
    "function",
    "class",
    "interface",
    "enum",
    "enum_member",
    "namespace",
    # string-named ambient module: declare module "name" { ... }
    "module",
    # declare global { ... }
    "global",
    "type_alias",
    "property",
    "method",
    "get_accessor",
    "set_accessor",
    "constructor",
    "index_signature",
    "call_signature",
    "construct_signature",
    "static_initializer",
]


@dataclass
class Declaration:
    """One declaration fragment as written in source.

    Repeated fragments (overloads, interface or namespace re-declarations) stay
    separate here; the resolver folds them.
    """

    kind: DeclarationKind
    name: str
    position: Position
    modifiers: frozenset[str] = frozenset()
    computed: bool = False
    ambient: bool = False
    type_parameters: tuple[TypeParameter, ...] = ()
    signature: Signature | None = None
    has_body: bool = False
    members: list["Declaration"] = field(default_factory=list)
    decorators: tuple[Decorator, ...] = ()
    type: TypeExpression | None = None
    initializer: str | None = None
    value: EnumValue | None = None
    extends: tuple[TypeExpression, ...] = ()
    implements: tuple[TypeExpression, ...] = ()
    doc_comment: str | None = None

    @property
    def is_exported(self) -> bool:
        return "exported" in self.modifiers


@dataclass(frozen=True)
class ImportBinding:
    """One name introduced by an import.

    Attributes:
        local: Local binding name.
        imported: Imported export name; ``*`` for namespace imports,
            ``default`` for default imports.
    """

    local: str
    imported: str


@dataclass(frozen=True)
class ImportDeclaration:
    """Represent one import statement."""

    module: str | None
    position: Position
    bindings: tuple[ImportBinding, ...] = ()
    type_only: bool = False


@dataclass(frozen=True)
class ExportList:
    """Represent ``export { ... }``, ``export * from`` and ``export =`` forms.

    Attributes:
        names: ``(local, exported)`` pairs; empty for star exports.
        module: Re-export source module, if any.
        star: ``export * from`` form.
        type_only: ``export type { ... }`` form.
    """

    position: Position
    names: tuple[tuple[str, str], ...] = ()
    module: str | None = None
    star: bool = False
    type_only: bool = False


@dataclass
class PerFileAst:
    """All top-level declarations of one source unit in source order."""

    file_name: str
    declarations: list[Declaration] = field(default_factory=list)
    imports: list[ImportDeclaration] = field(default_factory=list)
    export_lists: list[ExportList] = field(default_factory=list)
