# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Structural type expression tree.

Type expressions are captured, never evaluated. Equality compares structure
(kinds, names and children) and ignores the verbatim source text, so the same
type written with different spacing compares equal.
"""

from dataclasses import dataclass, field
from typing import Literal

TypeKind = Literal[
    # string, number, any, unknown, never, void, ...
    "keyword",
    # Name or Name<Args>; children are the type arguments
    "reference",
    "literal",
    "union",
    "intersection",
    "array",
    "tuple",
    # labeled (name: T) or optional (T?) tuple element
    "tuple_member",
    "rest",
    "function",
    "constructor",
    "object",
    # member of an object type; name is the member name
    "member",
    "conditional",
    "infer",
    "mapped",
    "template_literal",
    "indexed_access",
    # keyof / unique / readonly; name is the operator
    "operator",
    # typeof x
    "query",
    "predicate",
    "this",
    "import",
    "parenthesized",
    # computed expressions kept as opaque text
    "expression",
]


@dataclass(frozen=True)
class TypeExpression:
    """One node of a captured type expression.

    Attributes:
        kind: Structural category.
        text: Verbatim source text of the whole node.
        name: Kind-specific label (referenced name, keyword, operator, member name).
        children: Ordered sub-expressions.
    """

    kind: TypeKind
    text: str = field(compare=False)
    name: str | None = None
    children: tuple["TypeExpression", ...] = ()

    def __str__(self) -> str:
        return self.text

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


def opaque_expression(text: str) -> TypeExpression:
    """Wrap unevaluated expression text as a type-expression-like placeholder."""
    return TypeExpression(kind="expression", text=text, name=text)
