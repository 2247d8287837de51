# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Token types and source positions produced by the lexer."""

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    """Lexical category of a token."""

    IDENTIFIER = auto()
    KEYWORD = auto()
    PUNCTUATION = auto()
    STRING = auto()
    NUMBER = auto()
    REGEX = auto()
    # `text` without substitutions
    TEMPLATE = auto()
    # `text${
    TEMPLATE_HEAD = auto()
    # }text${
    TEMPLATE_MIDDLE = auto()
    # }text`
    TEMPLATE_TAIL = auto()
    COMMENT = auto()
    # @ in front of a decorator expression
    AT = auto()
    # #name
    PRIVATE_NAME = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position.

    Attributes:
        line: 1-based line number.
        column: 1-based column number.
        offset: 0-based character offset into the source text.
    """

    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token.

    Attributes:
        kind: Lexical category.
        text: Exact source text of the token.
        start: Position of the first character.
        end: Position just past the last character.
    """

    kind: TokenKind
    text: str
    start: Position
    end: Position

    def is_(self, *texts: str) -> bool:
        """Return True for a non-literal token whose text is one of ``texts``."""
        return self.kind in _WORD_OR_PUNCT and self.text in texts

    @property
    def is_name(self) -> bool:
        """Return True if the token can serve as a property or member name."""
        return self.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)


_WORD_OR_PUNCT = frozenset(
    {TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.PUNCTUATION, TokenKind.AT}
)

# Reserved words. Contextual words (type, namespace, declare, readonly, public,
# get, set, ...) are lexed as identifiers and recognised by the parser.
KEYWORDS: frozenset[str] = frozenset(
    {
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "new",
        "null",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
    }
)

# Longest first so that greedy matching picks ``===`` over ``==``. A lone ``>``
# is never combined here; see ``Lexer.rescan_greater_than``.
PUNCTUATORS: tuple[str, ...] = (
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    "**",
    "++",
    "--",
    "&&",
    "||",
    "??",
    "?.",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ";",
    ",",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    "=",
    ".",
    "#",
)
