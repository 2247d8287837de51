# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Symbol model handed to renderers."""

from dataclasses import dataclass, field
from typing import Iterator, Literal

from tsdecl.errors import Diagnostic
from tsdecl.tokens import Position
from tsdecl.types import TypeExpression

SymbolKind = Literal[
    "variable",
    "function",
    "class",
    "interface",
    "enum",
    "enum_member",
    "namespace",
    "type_alias",
    "property",
    "method",
    "accessor",
    "constructor",
    "index_signature",
    "static_initializer",
]

Modifier = Literal[
    "public",
    "private",
    "protected",
    "static",
    "readonly",
    "abstract",
    "optional",
    "exported",
    "default",
    "declared",
    "const",
    "override",
    "async",
]

Accessibility = Literal["public", "private", "protected"]
SignatureRole = Literal["call", "construct", "get", "set", "index"]
EnumValueKind = Literal["literal", "computed", "implicit"]

ACCESSIBILITY_MODIFIERS: frozenset[str] = frozenset({"public", "private", "protected"})


@dataclass(frozen=True)
class Location:
    """Declaration site of a symbol fragment."""

    file_name: str
    position: Position

    def __str__(self) -> str:
        return f"{self.file_name}:{self.position}"


@dataclass(frozen=True)
class TypeParameter:
    """Represent one generic type parameter."""

    name: str
    constraint: TypeExpression | None = None
    default: TypeExpression | None = None


@dataclass(frozen=True)
class Decorator:
    """Represent one decorator application.

    Attributes:
        expression: Decorator reference text without the ``@`` sigil.
        invoked: Whether the decorator was written with parentheses.
        arguments: Argument texts; ``None`` when not invoked.
        order: Source-order index among the decorators of one target.
    """

    expression: str
    invoked: bool = False
    arguments: tuple[str, ...] | None = None
    order: int = 0


@dataclass(frozen=True)
class Parameter:
    """Represent one signature parameter.

    Attributes:
        name: Parameter name, or the binding pattern text when destructured.
        type: Annotated type, if any.
        optional: Declared with ``?``.
        has_default: Declared with an initializer.
        rest: Declared with ``...``.
        accessibility: Accessibility modifier on a constructor parameter.
        readonly: ``readonly`` modifier on a constructor parameter.
        default: Initializer text.
        bindings: Names bound by a destructuring pattern.
        decorators: Parameter decorators in source order.
        modifiers: Remaining parameter modifiers (``override``).
    """

    name: str
    type: TypeExpression | None = None
    optional: bool = False
    has_default: bool = False
    rest: bool = False
    accessibility: Accessibility | None = None
    readonly: bool = False
    default: str | None = None
    bindings: tuple[str, ...] = ()
    decorators: tuple[Decorator, ...] = ()
    modifiers: frozenset[str] = frozenset()

    @property
    def is_parameter_property(self) -> bool:
        """Return True if the parameter declares a class property."""
        return self.accessibility is not None or self.readonly

    @property
    def is_required(self) -> bool:
        return not (self.optional or self.has_default or self.rest)


@dataclass(frozen=True)
class Signature:
    """Represent one callable signature.

    Attributes:
        parameters: Ordered parameters.
        return_type: Annotated return type, if any.
        type_parameters: Ordered generic parameters.
        role: Special role (call/construct/index signature or accessor half).
        has_body: Whether the declaration carrying it had a body.
    """

    parameters: tuple[Parameter, ...] = ()
    return_type: TypeExpression | None = None
    type_parameters: tuple[TypeParameter, ...] = ()
    role: SignatureRole | None = None
    has_body: bool = False

    @property
    def required_count(self) -> int:
        return sum(1 for parameter in self.parameters if parameter.is_required)

    @property
    def max_count(self) -> int | None:
        """Return the maximum accepted argument count; ``None`` if unbounded."""
        if any(parameter.rest for parameter in self.parameters):
            return None
        return len(self.parameters)

    def __str__(self) -> str:
        generics = ""
        if self.type_parameters:
            generics = "<" + ", ".join(p.name for p in self.type_parameters) + ">"
        parameters = ", ".join(_format_parameter(p) for p in self.parameters)
        result = f": {self.return_type}" if self.return_type is not None else ""
        return f"{generics}({parameters}){result}"


def _format_parameter(parameter: Parameter) -> str:
    text = ("..." if parameter.rest else "") + parameter.name
    if parameter.optional:
        text += "?"
    if parameter.type is not None:
        text += f": {parameter.type}"
    return text


@dataclass(frozen=True)
class EnumValue:
    """Enum member initializer, kept unevaluated."""

    kind: EnumValueKind
    text: str | None = None


@dataclass
class Symbol:
    """Represent one merged declaration.

    Attributes:
        kind: Declaration kind.
        name: Declared name; for non-literal computed keys the key expression
            text in brackets; empty for anonymous members.
        modifiers: Modifier set.
        type_parameters: Generic parameters of the declaration itself.
        signatures: Overload signatures, or the single implementation signature
            when no overloads exist. Accessors hold their get and set halves.
        implementation: Signature of the accepted implementation, if any.
        members: Ordered child symbols.
        decorators: Decorators in source order.
        is_ambient: Declared in an ambient context.
        has_implementation: A body (or initializer) was seen.
        computed: The name is an unevaluated computed key.
        type: Annotated type of a variable or property, or alias target.
        initializer: Initializer expression text.
        value: Enum member value.
        extends: Heritage references.
        implements: ``implements`` references of a class.
        doc_comment: Raw ``/** */`` comment preceding the first fragment.
        locations: Declaration site of every merged fragment.
        diagnostics: Merge and parse reports about this symbol.
    """

    kind: SymbolKind
    name: str
    modifiers: frozenset[Modifier] = frozenset()
    type_parameters: tuple[TypeParameter, ...] = ()
    signatures: list[Signature] = field(default_factory=list)
    implementation: Signature | None = None
    members: list["Symbol"] = field(default_factory=list)
    decorators: tuple[Decorator, ...] = ()
    is_ambient: bool = False
    has_implementation: bool = False
    computed: bool = False
    type: TypeExpression | None = None
    initializer: str | None = None
    value: EnumValue | None = None
    extends: tuple[TypeExpression, ...] = ()
    implements: tuple[TypeExpression, ...] = ()
    doc_comment: str | None = None
    locations: list[Location] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def is_exported(self) -> bool:
        return "exported" in self.modifiers

    @property
    def get_signature(self) -> Signature | None:
        return next((s for s in self.signatures if s.role == "get"), None)

    @property
    def set_signature(self) -> Signature | None:
        return next((s for s in self.signatures if s.role == "set"), None)

    def member(self, name: str, kind: SymbolKind | None = None) -> "Symbol | None":
        """Return the first member with the given name (and kind)."""
        for member in self.members:
            if member.name == name and (kind is None or member.kind == kind):
                return member
        return None

    def walk(self) -> Iterator["Symbol"]:
        """Yield this symbol and all nested members, depth first."""
        yield self
        for member in self.members:
            yield from member.walk()


@dataclass
class SymbolTree:
    """Final merged model of one or more source units.

    Attributes:
        symbols: Project root scope: top-level symbols of every file in file
            order, with namespaces sharing a qualified name merged.
        modules: String-named ambient module declarations keyed by the literal.
        global_symbols: Contents of all ``declare global`` blocks.
        files: Top-level symbols per file, after the per-file fold.
    """

    symbols: list[Symbol] = field(default_factory=list)
    modules: dict[str, Symbol] = field(default_factory=dict)
    global_symbols: list[Symbol] = field(default_factory=list)
    files: dict[str, list[Symbol]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.symbols or self.modules or self.global_symbols)

    def find(self, name: str, kind: SymbolKind | None = None) -> Symbol | None:
        """Return the first top-level symbol with the given name (and kind)."""
        for symbol in self.symbols:
            if symbol.name == name and (kind is None or symbol.kind == kind):
                return symbol
        return None

    def walk(self) -> Iterator[Symbol]:
        """Yield every symbol in the tree, depth first."""
        for symbol in self.symbols:
            yield from symbol.walk()
        for module in self.modules.values():
            yield from module.walk()
        for symbol in self.global_symbols:
            yield from symbol.walk()
