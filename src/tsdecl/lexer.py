# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""On-demand, seekable lexer.

The lexer is parser-assisted: a few tokens are ambiguous without knowing the
syntactic position, so the parser asks for them to be re-scanned:

* ``>`` is always produced alone so nested type argument lists close one
  bracket at a time; ``rescan_greater_than`` joins ``>>``, ``>=`` and friends
  in expression position.
* ``/`` and ``/=`` are produced as punctuation; ``rescan_slash_as_regex``
  re-reads them as a regular expression literal in operand position.
* ``}`` that closes a template substitution is re-read by
  ``rescan_template_continuation`` as a template middle or tail.
"""

import logging
from dataclasses import dataclass

from tsdecl.errors import LexError
from tsdecl.tokens import KEYWORDS, PUNCTUATORS, Position, Token, TokenKind

logger = logging.getLogger(__name__)

_LINE_TERMINATORS = "\n\r\u2028\u2029"
_GREATER_THAN_FORMS = (">>>=", ">>>", ">>=", ">>", ">=", ">")


@dataclass(frozen=True, slots=True)
class LexerState:
    """Snapshot of the scan position, used for lookahead and backtracking."""

    offset: int
    line: int
    column: int


def _is_identifier_start(char: str) -> bool:
    return char.isalpha() or char in "$_"


def _is_identifier_part(char: str) -> bool:
    return char.isalnum() or char in "$_\u200c\u200d"


class Lexer:
    """Turn source text into tokens, one ``scan`` call at a time."""

    def __init__(self, source: str) -> None:
        """Initialize lexer state.

        Args:
            source: Complete source text of one unit.
        """
        self._source = source
        self._length = len(source)
        self._offset = 0
        self._line = 1
        self._column = 1

    def state(self) -> LexerState:
        """Return the current scan position."""
        return LexerState(offset=self._offset, line=self._line, column=self._column)

    def restore(self, state: LexerState) -> None:
        """Seek back (or forward) to a previously captured position."""
        self._offset = state.offset
        self._line = state.line
        self._column = state.column

    def position(self) -> Position:
        return Position(line=self._line, column=self._column, offset=self._offset)

    def scan(self) -> Token:
        """Scan the next token, comments included.

        Returns:
            The next token; an ``EOF`` token once the input is exhausted.

        Raises:
            LexError: On an unterminated string, template or block comment.
                The scan position is already past the offending text.
        """
        self._skip_whitespace()
        start = self.position()
        if self._offset >= self._length:
            return Token(TokenKind.EOF, "", start, start)

        char = self._source[self._offset]
        following = self._peek(1)

        if char == "/" and following == "/":
            self._advance_until_line_end()
            return self._token(TokenKind.COMMENT, start)
        if char == "/" and following == "*":
            return self._scan_block_comment(start)
        if char == "#" and start.offset == 0 and following == "!":
            self._advance_until_line_end()
            return self._token(TokenKind.COMMENT, start)
        if char in "'\"":
            return self._scan_string(start, char)
        if char == "`":
            self._advance(1)
            return self._scan_template_body(start, TokenKind.TEMPLATE, TokenKind.TEMPLATE_HEAD)
        if char.isdigit() or (char == "." and following.isdigit()):
            return self._scan_number(start)
        if _is_identifier_start(char) or char == "\\":
            self._scan_identifier_part()
            text = self._source[start.offset : self._offset]
            kind = TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENTIFIER
            return self._token(kind, start)
        if char == "#" and (_is_identifier_start(following) or following == "\\"):
            self._advance(1)
            self._scan_identifier_part()
            return self._token(TokenKind.PRIVATE_NAME, start)
        if char == "@":
            self._advance(1)
            return self._token(TokenKind.AT, start)
        return self._scan_punctuation(start)

    def rescan_greater_than(self, token: Token) -> Token:
        """Re-read a ``>`` token as the longest operator starting there."""
        if token.text != ">":
            return token
        for form in _GREATER_THAN_FORMS:
            if self._source.startswith(form, token.start.offset):
                self.restore(
                    LexerState(token.start.offset, token.start.line, token.start.column)
                )
                self._advance(len(form))
                return self._token(TokenKind.PUNCTUATION, token.start)
        return token

    def rescan_slash_as_regex(self, token: Token) -> Token:
        """Re-read a ``/`` or ``/=`` token as a regular expression literal.

        Raises:
            LexError: If the literal is not closed before the end of the line.
        """
        self.restore(LexerState(token.start.offset, token.start.line, token.start.column))
        self._advance(1)
        in_class = False
        while True:
            if self._offset >= self._length or self._current() in _LINE_TERMINATORS:
                raise LexError("Unterminated regular expression literal", token.start)
            char = self._current()
            if char == "\\":
                self._advance(2)
                continue
            self._advance(1)
            if char == "[":
                in_class = True
            elif char == "]":
                in_class = False
            elif char == "/" and not in_class:
                break
        self._scan_identifier_part()
        return self._token(TokenKind.REGEX, token.start)

    def rescan_template_continuation(self, token: Token) -> Token:
        """Re-read a ``}`` closing a substitution as a template middle or tail.

        Raises:
            LexError: If the template is not closed before the end of input.
        """
        self.restore(LexerState(token.start.offset, token.start.line, token.start.column))
        self._advance(1)
        return self._scan_template_body(
            token.start, TokenKind.TEMPLATE_TAIL, TokenKind.TEMPLATE_MIDDLE
        )

    def _scan_template_body(
        self, start: Position, closed_kind: TokenKind, open_kind: TokenKind
    ) -> Token:
        while self._offset < self._length:
            char = self._current()
            if char == "\\":
                self._advance(2)
            elif char == "`":
                self._advance(1)
                return self._token(closed_kind, start)
            elif char == "$" and self._peek(1) == "{":
                self._advance(2)
                return self._token(open_kind, start)
            else:
                self._advance(1)
        raise LexError(
            "Unterminated template literal", start, token=self._token(closed_kind, start)
        )

    def _scan_string(self, start: Position, quote: str) -> Token:
        self._advance(1)
        while self._offset < self._length:
            char = self._current()
            if char == "\\":
                self._advance(2)
                continue
            if char in "\n\r":
                break
            self._advance(1)
            if char == quote:
                return self._token(TokenKind.STRING, start)
        raise LexError(
            "Unterminated string literal", start, token=self._token(TokenKind.STRING, start)
        )

    def _scan_block_comment(self, start: Position) -> Token:
        end = self._source.find("*/", self._offset + 2)
        if end < 0:
            self._advance(self._length - self._offset)
            raise LexError("Unterminated block comment", start)
        self._advance(end + 2 - self._offset)
        return self._token(TokenKind.COMMENT, start)

    def _scan_number(self, start: Position) -> Token:
        source = self._source
        if source[self._offset] == "0" and self._peek(1) in ("x", "X", "o", "O", "b", "B"):
            self._advance(2)
            while self._offset < self._length and (
                self._current().isalnum() or self._current() == "_"
            ):
                self._advance(1)
            return self._token(TokenKind.NUMBER, start)
        self._skip_digits()
        if self._current() == "." and self._offset < self._length:
            self._advance(1)
            self._skip_digits()
        if self._current() in ("e", "E") and (
            self._peek(1).isdigit() or (self._peek(1) in "+-" and self._peek(2).isdigit())
        ):
            self._advance(2)
            self._skip_digits()
        if self._current() == "n":
            self._advance(1)
        return self._token(TokenKind.NUMBER, start)

    def _scan_punctuation(self, start: Position) -> Token:
        source = self._source
        for punctuator in PUNCTUATORS:
            if source.startswith(punctuator, self._offset):
                # `a?.5:b` is a conditional, not optional chaining
                if punctuator == "?." and self._peek(2).isdigit():
                    continue
                self._advance(len(punctuator))
                return self._token(TokenKind.PUNCTUATION, start)
        self._advance(1)
        return self._token(TokenKind.PUNCTUATION, start)

    def _scan_identifier_part(self) -> None:
        while self._offset < self._length:
            char = self._current()
            if char == "\\" and self._peek(1) == "u":
                self._advance(2)
                if self._current() == "{":
                    while self._offset < self._length and self._current() != "}":
                        self._advance(1)
                    self._advance(1)
                else:
                    self._advance(4)
            elif _is_identifier_part(char):
                self._advance(1)
            else:
                break

    def _skip_digits(self) -> None:
        while self._offset < self._length and (
            self._current().isdigit() or self._current() == "_"
        ):
            self._advance(1)

    def _skip_whitespace(self) -> None:
        while self._offset < self._length and (
            self._current().isspace() or self._current() == "\ufeff"
        ):
            self._advance(1)

    def _advance_until_line_end(self) -> None:
        while self._offset < self._length and self._current() not in _LINE_TERMINATORS:
            self._advance(1)

    def _advance(self, count: int) -> None:
        end = min(self._offset + count, self._length)
        while self._offset < end:
            char = self._source[self._offset]
            self._offset += 1
            if char == "\n" or (char == "\r" and self._current() != "\n"):
                self._line += 1
                self._column = 1
            elif char in "\u2028\u2029":
                self._line += 1
                self._column = 1
            else:
                self._column += 1

    def _current(self) -> str:
        if self._offset < self._length:
            return self._source[self._offset]
        return ""

    def _peek(self, distance: int) -> str:
        index = self._offset + distance
        if index < self._length:
            return self._source[index]
        return ""

    def _token(self, kind: TokenKind, start: Position) -> Token:
        return Token(
            kind=kind,
            text=self._source[start.offset : self._offset],
            start=start,
            end=self.position(),
        )


def tokenize(source: str) -> list[Token]:
    """Scan a whole source text without parser feedback.

    Regex literals and compound ``>`` operators are not recognised in this
    mode; it is meant for inspection and tests.

    Args:
        source: Source text.

    Returns:
        All tokens including comments, ending with an ``EOF`` token.

    Raises:
        LexError: On the first unterminated literal or comment.
    """
    lexer = Lexer(source)
    tokens: list[Token] = []
    depth: list[str] = []
    while True:
        token = lexer.scan()
        if token.kind is TokenKind.TEMPLATE_HEAD:
            depth.append("template")
        elif token.is_("{"):
            depth.append("{")
        elif token.is_("}") and depth:
            if depth.pop() == "template":
                token = lexer.rescan_template_continuation(token)
                if token.kind is TokenKind.TEMPLATE_MIDDLE:
                    depth.append("template")
        tokens.append(token)
        if token.kind is TokenKind.EOF:
            logger.debug(f"Tokenized source (tokens={len(tokens)})")
            return tokens
