# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Recursive-descent declaration parser.

The parser pulls tokens from a ``Lexer`` one at a time and builds one
``Declaration`` per declaration fragment. Expressions (initializers, default
values, decorator arguments, computed keys) are never parsed: their tokens are
consumed with bracket tracking and kept as verbatim source text. Bodies of
functions, methods and static blocks are skipped the same way.

Malformed declarations raise ``ParseError``; ``Parser.parse`` records it and
resynchronises at the next top-level declaration boundary.
"""

import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from tsdecl.errors import Diagnostic, ExtractionError, LexError, ParseError
from tsdecl.lexer import Lexer, LexerState
from tsdecl.model import (
    ACCESSIBILITY_MODIFIERS,
    Decorator,
    EnumValue,
    Parameter,
    Signature,
    SignatureRole,
    TypeParameter,
)
from tsdecl.module_syntax import ModuleSyntaxMixin
from tsdecl.nodes import (
    Declaration,
    DeclarationKind,
    PerFileAst,
)
from tsdecl.tokens import Position, Token, TokenKind
from tsdecl.types import TypeExpression, TypeKind, opaque_expression

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DECLARATION_STARTS = frozenset(
    {
        "export",
        "declare",
        "function",
        "class",
        "interface",
        "enum",
        "namespace",
        "module",
        "type",
        "const",
        "let",
        "var",
        "abstract",
        "async",
        "import",
    }
)
_MEMBER_MODIFIERS = frozenset(
    {
        "public",
        "private",
        "protected",
        "static",
        "readonly",
        "abstract",
        "override",
        "declare",
        "async",
        "accessor",
    }
)
_PARAMETER_MODIFIERS = frozenset(
    {"public", "private", "protected", "readonly", "override"}
)
_KEYWORD_TYPES = frozenset(
    {
        "any",
        "unknown",
        "never",
        "void",
        "undefined",
        "null",
        "string",
        "number",
        "boolean",
        "bigint",
        "symbol",
        "object",
        "intrinsic",
    }
)
_CONFLICTING_MODIFIERS = (
    ("public", "private"),
    ("public", "protected"),
    ("private", "protected"),
    ("abstract", "static"),
    ("abstract", "private"),
)
# Tokens after which `/` starts a regular expression rather than a division.
_REGEX_PRECEDING_KEYWORDS = frozenset(
    {"return", "typeof", "case", "do", "else", "in", "instanceof", "new", "delete", "void", "throw"}
)
_EXPRESSION_CONTINUATIONS = frozenset(
    {
        ".",
        "?.",
        "+",
        "*",
        "/",
        "%",
        "**",
        "&&",
        "||",
        "??",
        "?",
        ":",
        "=",
        "==",
        "===",
        "!=",
        "!==",
        "<",
        ">",
        "<=",
        "<<",
        "|",
        "&",
        "^",
        "=>",
        ",",
        "instanceof",
        "in",
        "as",
        "satisfies",
    }
)
_CLOSERS = {"{": "}", "(": ")", "[": "]"}


@dataclass(frozen=True)
class _Snapshot:
    lexer_state: LexerState
    token: Token
    previous: Token | None
    newline_before: bool
    doc_comment: str | None
    depth: int


class Parser(ModuleSyntaxMixin):
    """Parse one source unit into a ``PerFileAst``."""

    def __init__(self, source: str, file_name: str = "<input>") -> None:
        """Initialize parser state and read the first token.

        Args:
            source: Complete source text.
            file_name: Name used in diagnostics; ``.d.ts`` names make the whole
                unit an ambient context.
        """
        self._source = source
        self._file_name = file_name
        self._lexer = Lexer(source)
        self._diagnostics: list[Diagnostic] = []
        self._reported: set[tuple[int, str]] = set()
        self._previous: Token | None = None
        self._newline_before = False
        self._doc_comment: str | None = None
        # brace depth of consumed tokens; template substitution braces excluded
        self._depth = 0
        self._ast = PerFileAst(file_name=file_name)
        self._token = self._scan_significant()
        self._newline_before = True

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> tuple[PerFileAst, list[Diagnostic]]:
        """Parse the whole unit with statement-level error recovery.

        Returns:
            The per-file AST and all diagnostics raised while building it.
        """
        ambient = self._file_name.endswith(".d.ts")
        while not self._at_eof():
            start_offset = self._token.start.offset
            try:
                self._ast.declarations.extend(self._parse_statement(ambient))
            except ParseError as exc:
                self._report(exc)
                logger.warning(
                    f"Recovered from parse error (file_name={self._file_name} "
                    f"position={exc.position} error={exc.message})"
                )
                self._recover(start_offset)
        logger.debug(
            f"Parsed file (file_name={self._file_name} "
            f"declarations={len(self._ast.declarations)} diagnostics={len(self._diagnostics)})"
        )
        return self._ast, list(self._diagnostics)

    # ------------------------------------------------------------------
    # Token plumbing
    # ------------------------------------------------------------------

    def _scan_significant(self) -> Token:
        doc_comment = None
        while True:
            try:
                token = self._lexer.scan()
            except LexError as exc:
                self._report(exc)
                if exc.token is None:
                    continue
                token = exc.token
            if token.kind is TokenKind.COMMENT:
                if token.text.startswith("/**") and token.text != "/**/":
                    doc_comment = token.text
                continue
            self._doc_comment = doc_comment
            return token

    def _next(self) -> Token:
        """Consume the current token and return it."""
        consumed = self._token
        if consumed.is_("{"):
            self._depth += 1
        elif consumed.is_("}"):
            self._depth = max(0, self._depth - 1)
        self._previous = consumed
        self._token = self._scan_significant()
        self._newline_before = self._token.start.line > consumed.end.line
        return consumed

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            lexer_state=self._lexer.state(),
            token=self._token,
            previous=self._previous,
            newline_before=self._newline_before,
            doc_comment=self._doc_comment,
            depth=self._depth,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._lexer.restore(snapshot.lexer_state)
        self._token = snapshot.token
        self._previous = snapshot.previous
        self._newline_before = snapshot.newline_before
        self._doc_comment = snapshot.doc_comment
        self._depth = snapshot.depth

    def _lookahead(self, probe: Callable[[], T]) -> T:
        """Run ``probe`` and rewind to the current token afterwards."""
        snapshot = self._snapshot()
        try:
            return probe()
        finally:
            self._restore(snapshot)

    def _try_parse(self, attempt: Callable[[], T]) -> T | None:
        """Run ``attempt``; on ``ParseError`` rewind and return ``None``."""
        snapshot = self._snapshot()
        try:
            return attempt()
        except ParseError:
            self._restore(snapshot)
            return None

    def _peek(self) -> Token:
        return self._lookahead(lambda: (self._next(), self._token)[1])

    def _peek_same_line(self, *texts: str) -> bool:
        """Return True if the next token is on this line and matches ``texts``."""
        following = self._peek()
        if following.start.line != self._token.end.line:
            return False
        if not texts:
            return following.is_name
        if "<identifier>" in texts and following.kind is TokenKind.IDENTIFIER:
            return True
        if "<string>" in texts and following.kind is TokenKind.STRING:
            return True
        return following.is_(*texts)

    def _at(self, *texts: str) -> bool:
        return self._token.is_(*texts)

    def _at_eof(self) -> bool:
        return self._token.kind is TokenKind.EOF

    def _eat(self, text: str) -> bool:
        if self._token.is_(text):
            self._next()
            return True
        return False

    def _expect(self, text: str) -> Token:
        if not self._token.is_(text):
            raise self._unexpected(repr(text))
        return self._next()

    def _expect_identifier(self) -> str:
        if self._token.kind is not TokenKind.IDENTIFIER:
            raise self._unexpected("identifier")
        return self._next().text

    def _unexpected(self, expected: str) -> ParseError:
        found = self._token.text if not self._at_eof() else "end of input"
        return ParseError("Unexpected token", self._token.start, expected, found)

    def _text_from(self, start_offset: int) -> str:
        end = self._previous.end.offset if self._previous is not None else start_offset
        return self._source[start_offset:end]

    def _report(self, exc: ExtractionError) -> None:
        key = (exc.position.offset, exc.message)
        if key in self._reported:
            return
        self._reported.add(key)
        self._diagnostics.append(exc.to_diagnostic(self._file_name))

    def _warn(self, message: str, position: Position) -> None:
        self._report(ParseError(message, position, severity="warning"))

    def _consume_semicolon(self) -> None:
        if self._eat(";"):
            return
        if self._at("}") or self._at_eof() or self._newline_before:
            return
        raise self._unexpected("';'")

    # ------------------------------------------------------------------
    # Skipping and expression capture
    # ------------------------------------------------------------------

    def _regex_allowed(self) -> bool:
        previous = self._previous
        if previous is None:
            return True
        if previous.kind is TokenKind.PUNCTUATION:
            return previous.text not in (")", "]", "}", "++", "--")
        if previous.kind is TokenKind.KEYWORD:
            return previous.text in _REGEX_PRECEDING_KEYWORDS
        return previous.kind in (TokenKind.TEMPLATE_HEAD, TokenKind.TEMPLATE_MIDDLE)

    def _rescan(self, rescan: Callable[[Token], Token]) -> None:
        try:
            self._token = rescan(self._token)
        except LexError as exc:
            self._report(exc)

    def _consume_nested(self, stack: list[str]) -> Token:
        """Consume one token of an unparsed run, tracking bracket nesting."""
        token = self._token
        if token.kind is TokenKind.TEMPLATE_HEAD:
            stack.append("${")
        elif token.is_("{", "(", "["):
            stack.append(_CLOSERS[token.text])
        elif token.is_("}") and stack and stack[-1] == "${":
            self._rescan(self._lexer.rescan_template_continuation)
            if self._token.kind is not TokenKind.TEMPLATE_MIDDLE:
                stack.pop()
        elif token.is_("}", ")", "]"):
            if stack and stack[-1] == token.text:
                stack.pop()
        elif token.is_("/", "/=") and self._regex_allowed():
            self._rescan(self._lexer.rescan_slash_as_regex)
        elif token.is_(">"):
            self._rescan(self._lexer.rescan_greater_than)
        return self._next()

    def _skip_block(self) -> None:
        """Skip a brace-delimited body starting at the current ``{``."""
        start = self._token.start
        stack: list[str] = []
        self._consume_nested(stack)
        while stack:
            if self._at_eof():
                raise ParseError("Unterminated block", start, "'}'", "end of input")
            self._consume_nested(stack)

    def _continues_expression(self) -> bool:
        previous = self._previous
        if self._token.text in _EXPRESSION_CONTINUATIONS and self._token.kind in (
            TokenKind.PUNCTUATION,
            TokenKind.KEYWORD,
            TokenKind.IDENTIFIER,
        ):
            return True
        if previous is None:
            return True
        if previous.kind is TokenKind.PUNCTUATION:
            return previous.text not in (")", "]", "}", "++", "--")
        return previous.kind is TokenKind.KEYWORD and previous.text in _REGEX_PRECEDING_KEYWORDS

    def _capture_expression(self, *stop: str, continuation: bool = False) -> str:
        """Consume an unparsed expression and return its source text.

        The run ends before a depth-zero token in ``stop``, before an
        unbalanced closing bracket, or at a line break that ends the statement.
        With ``continuation`` the caller already consumed the start of the
        expression and an empty run is accepted.
        """
        start = self._token.start
        stack: list[str] = []
        consumed = 1 if continuation else 0
        while True:
            if self._at_eof():
                if stack:
                    raise ParseError("Unterminated expression", start, repr(stack[-1]), "end of input")
                break
            if not stack:
                if self._at(*stop) or self._at(")", "]", "}"):
                    break
                if consumed and self._newline_before and not self._continues_expression():
                    break
            self._consume_nested(stack)
            consumed += 1
        if not consumed:
            raise self._unexpected("expression")
        return self._text_from(start.offset).strip()

    def _skip_statement(self) -> None:
        """Skip a statement that declares nothing."""
        stack: list[str] = []
        consumed = False
        while not self._at_eof():
            if not stack:
                if consumed and self._eat(";"):
                    return
                if self._at(")", "]", "}"):
                    if not consumed:
                        raise self._unexpected("statement")
                    return
                if consumed and self._newline_before and (
                    self._starts_declaration()
                    or (self._previous is not None and self._previous.is_("}"))
                ):
                    return
            self._consume_nested(stack)
            consumed = True

    def _starts_declaration(self) -> bool:
        return self._token.kind is TokenKind.AT or (
            self._token.is_(*_DECLARATION_STARTS)
        )

    def _recover(self, start_offset: int) -> None:
        """Discard tokens up to the next top-level declaration boundary."""
        if self._token.start.offset == start_offset and not self._at_eof():
            self._next()
        stack: list[str] = []
        while not self._at_eof():
            if self._depth == 0 and "${" not in stack and self._starts_declaration():
                previous = self._previous
                if self._newline_before or previous is None or previous.is_(";", "}"):
                    return
            self._consume_nested(stack)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self, ambient: bool) -> list[Declaration]:
        doc_comment = self._doc_comment
        position = self._token.start
        if self._eat(";"):
            return []
        decorators = self._parse_decorators()
        if self._at("import") and not self._peek().is_("(", "."):
            self._parse_import()
            return []

        modifiers: set[str] = set()
        if self._at("export"):
            self._next()
            if self._parse_export_form(position):
                return []
            modifiers.add("exported")
            if self._eat("default"):
                modifiers.add("default")
                if not self._at_default_declaration():
                    initializer = self._capture_expression(";")
                    self._consume_semicolon()
                    return [
                        Declaration(
                            kind="variable",
                            name="default",
                            position=position,
                            modifiers=frozenset(modifiers),
                            ambient=ambient,
                            initializer=initializer,
                            has_body=True,
                            doc_comment=doc_comment,
                        )
                    ]
        if self._at("declare") and self._peek_same_line():
            self._next()
            modifiers.add("declared")
            ambient = True

        declarations = self._parse_declaration(
            modifiers, decorators, ambient, doc_comment, position
        )
        if declarations is not None:
            return declarations
        if modifiers or decorators:
            raise self._unexpected("declaration")
        self._skip_statement()
        return []

    def _at_default_declaration(self) -> bool:
        if self._at("function", "class", "interface", "enum"):
            return True
        if self._at("abstract"):
            return self._peek_same_line("class")
        if self._at("async"):
            return self._peek_same_line("function")
        if self._at("type"):
            return self._peek_same_line("<identifier>")
        return False

    def _parse_declaration(
        self,
        modifiers: set[str],
        decorators: tuple[Decorator, ...],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> list[Declaration] | None:
        token = self._token
        if token.is_("const") and self._peek_same_line("enum"):
            self._next()
            modifiers.add("const")
            return [self._parse_enum(modifiers, ambient, doc_comment, position)]
        if token.is_("var", "const") or (
            token.is_("let") and self._peek_same_line("<identifier>", "[", "{")
        ):
            return self._parse_variable_statement(modifiers, ambient, doc_comment)
        if token.is_("async") and self._peek_same_line("function"):
            self._next()
            modifiers.add("async")
            token = self._token
        if token.is_("function"):
            return [self._parse_function(modifiers, ambient, doc_comment, position)]
        if token.is_("abstract") and self._peek_same_line("class"):
            self._next()
            modifiers.add("abstract")
            token = self._token
        if token.is_("class"):
            return [
                self._parse_class(modifiers, decorators, ambient, doc_comment, position)
            ]
        if token.is_("interface") and self._peek_same_line("<identifier>"):
            return [self._parse_interface(modifiers, ambient, doc_comment, position)]
        if token.is_("enum"):
            return [self._parse_enum(modifiers, ambient, doc_comment, position)]
        if token.is_("type") and self._peek_same_line("<identifier>"):
            return [self._parse_type_alias(modifiers, ambient, doc_comment, position)]
        if token.is_("namespace") and self._peek_same_line("<identifier>"):
            return [self._parse_namespace(modifiers, ambient, doc_comment, position)]
        if token.is_("module") and self._peek_same_line("<identifier>", "<string>"):
            return [self._parse_namespace(modifiers, ambient, doc_comment, position)]
        if (
            token.is_("global")
            and ("declared" in modifiers or ambient)
            and self._peek_same_line("{")
        ):
            self._next()
            members = self._parse_block_statements(True)
            return [
                Declaration(
                    kind="global",
                    name="global",
                    position=position,
                    modifiers=frozenset(modifiers),
                    ambient=True,
                    members=members,
                    doc_comment=doc_comment,
                )
            ]
        return None

    def _parse_block_statements(self, ambient: bool) -> list[Declaration]:
        self._expect("{")
        declarations: list[Declaration] = []
        while not self._at("}"):
            if self._at_eof():
                raise self._unexpected("'}'")
            declarations.extend(self._parse_statement(ambient))
        self._next()
        return declarations

    # ------------------------------------------------------------------
    # Decorators and modifiers
    # ------------------------------------------------------------------

    def _parse_decorators(self) -> tuple[Decorator, ...]:
        decorators: list[Decorator] = []
        while self._token.kind is TokenKind.AT:
            self._next()
            start = self._token.start.offset
            if self._at("("):
                self._consume_nested_group()
            else:
                if not self._token.is_name:
                    raise self._unexpected("decorator name")
                self._next()
                while self._at(".") and self._peek().is_name:
                    self._next()
                    self._next()
                if self._at("<"):
                    self._parse_type_arguments()
            expression = self._text_from(start)
            arguments: tuple[str, ...] | None = None
            if self._at("("):
                arguments = self._parse_argument_texts()
            decorators.append(
                Decorator(
                    expression=expression,
                    invoked=arguments is not None,
                    arguments=arguments,
                    order=len(decorators),
                )
            )
        return tuple(decorators)

    def _consume_nested_group(self) -> None:
        stack: list[str] = []
        self._consume_nested(stack)
        while stack:
            if self._at_eof():
                raise self._unexpected(repr(stack[-1]))
            self._consume_nested(stack)

    def _parse_argument_texts(self) -> tuple[str, ...]:
        self._expect("(")
        arguments: list[str] = []
        while not self._at(")"):
            arguments.append(self._capture_expression(","))
            if not self._eat(","):
                break
        self._expect(")")
        return tuple(arguments)

    def _add_modifier(self, modifiers: set[str], modifier: str, position: Position) -> None:
        """Add a modifier, rejecting repeats and conflicting combinations."""
        if modifier in modifiers:
            raise ParseError(f"'{modifier}' modifier already seen", position)
        for first, second in _CONFLICTING_MODIFIERS:
            other = second if modifier == first else first if modifier == second else None
            if other is not None and other in modifiers:
                raise ParseError(
                    f"'{modifier}' modifier cannot be used with '{other}' modifier",
                    position,
                )
        modifiers.add(modifier)

    def _at_member_modifier(self) -> bool:
        if self._token.kind is not TokenKind.IDENTIFIER or self._token.text not in _MEMBER_MODIFIERS:
            return False
        following = self._peek()
        if following.kind in (
            TokenKind.IDENTIFIER,
            TokenKind.KEYWORD,
            TokenKind.STRING,
            TokenKind.NUMBER,
            TokenKind.PRIVATE_NAME,
        ):
            return True
        return following.is_("[", "*", "#") or (self._at("static") and following.is_("{"))

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _parse_variable_statement(
        self, modifiers: set[str], ambient: bool, doc_comment: str | None
    ) -> list[Declaration]:
        keyword = self._next().text
        if keyword == "const":
            modifiers = modifiers | {"const"}
        declarations: list[Declaration] = []
        while True:
            position = self._token.start
            if self._at("{", "["):
                names = self._parse_binding_pattern()
                pattern = True
            else:
                names = [self._expect_identifier()]
                pattern = False
            self._eat("!")
            annotation = self._parse_type() if self._eat(":") else None
            initializer: str | None = None
            signature: Signature | None = None
            if self._eat("="):
                signature, initializer = self._parse_initializer(";", ",")
            for name in names:
                declarations.append(
                    Declaration(
                        kind="variable",
                        name=name,
                        position=position,
                        modifiers=frozenset(modifiers),
                        ambient=ambient,
                        signature=signature,
                        has_body=initializer is not None,
                        type=None if pattern else annotation,
                        initializer=initializer,
                        doc_comment=doc_comment,
                    )
                )
            if not self._eat(","):
                break
        self._consume_semicolon()
        return declarations

    def _parse_initializer(self, *stop: str) -> tuple[Signature | None, str]:
        """Capture an initializer, recovering the signature of function expressions."""
        start = self._token.start.offset
        signature = None
        if self._at("function") or (self._at("async") and self._peek_same_line("function")):
            signature = self._try_parse(self._parse_function_expression_signature)
        elif self._at("(", "<", "async") or (
            self._token.kind is TokenKind.IDENTIFIER and self._peek().is_("=>")
        ):
            signature = self._try_parse(self._parse_arrow_signature)
        # Anything after a function expression (a call, a member access)
        # belongs to the same initializer.
        self._capture_expression(*stop, continuation=signature is not None)
        return signature, self._text_from(start).strip()

    def _parse_arrow_signature(self) -> Signature:
        self._eat("async")
        type_parameters = self._parse_type_parameters()
        if self._token.kind is TokenKind.IDENTIFIER:
            parameters: tuple[Parameter, ...] = (Parameter(name=self._next().text),)
        else:
            parameters = self._parse_parameters()
        return_type = self._parse_return_type() if self._eat(":") else None
        self._expect("=>")
        if self._at("{"):
            self._skip_block()
        else:
            self._capture_expression(";", ",")
        return Signature(
            parameters=parameters,
            return_type=return_type,
            type_parameters=type_parameters,
            has_body=True,
        )

    def _parse_function_expression_signature(self) -> Signature:
        self._eat("async")
        self._expect("function")
        self._eat("*")
        if self._token.kind is TokenKind.IDENTIFIER:
            self._next()
        type_parameters = self._parse_type_parameters()
        parameters = self._parse_parameters()
        return_type = self._parse_return_type() if self._eat(":") else None
        if not self._at("{"):
            raise self._unexpected("'{'")
        self._skip_block()
        return Signature(
            parameters=parameters,
            return_type=return_type,
            type_parameters=type_parameters,
            has_body=True,
        )

    def _parse_binding_pattern(self) -> list[str]:
        """Parse an object or array binding pattern and flatten its names."""
        names: list[str] = []
        if self._eat("{"):
            while not self._at("}"):
                if self._eat("..."):
                    names.append(self._expect_identifier())
                else:
                    key, _ = self._parse_property_name()
                    if self._eat(":"):
                        names.extend(self._parse_binding_target())
                    else:
                        names.append(key)
                    if self._eat("="):
                        self._capture_expression(",", "}")
                if not self._eat(","):
                    break
            self._expect("}")
            return names
        self._expect("[")
        while not self._at("]"):
            if self._eat(","):
                continue
            self._eat("...")
            names.extend(self._parse_binding_target())
            if self._eat("="):
                self._capture_expression(",", "]")
            if not self._eat(","):
                break
        self._expect("]")
        return names

    def _parse_binding_target(self) -> list[str]:
        if self._at("{", "["):
            return self._parse_binding_pattern()
        return [self._expect_identifier()]

    # ------------------------------------------------------------------
    # Functions and parameters
    # ------------------------------------------------------------------

    def _parse_function(
        self,
        modifiers: set[str],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> Declaration:
        self._expect("function")
        self._eat("*")
        if "default" in modifiers and self._at("(", "<"):
            name = "default"
        else:
            name = self._expect_identifier()
        type_parameters = self._parse_type_parameters()
        parameters = self._parse_parameters()
        return_type = self._parse_return_type() if self._eat(":") else None
        has_body = self._parse_optional_body(ambient, position)
        return Declaration(
            kind="function",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            ambient=ambient,
            type_parameters=type_parameters,
            signature=Signature(
                parameters=parameters,
                return_type=return_type,
                type_parameters=type_parameters,
                has_body=has_body,
            ),
            has_body=has_body,
            doc_comment=doc_comment,
        )

    def _parse_optional_body(self, ambient: bool, position: Position) -> bool:
        if self._at("{"):
            if ambient:
                self._warn("An implementation cannot be declared in ambient contexts", position)
            self._skip_block()
            return True
        self._consume_semicolon()
        return False

    def _parse_parameters(self) -> tuple[Parameter, ...]:
        self._expect("(")
        parameters: list[Parameter] = []
        while not self._at(")"):
            parameters.append(self._parse_parameter())
            if not self._eat(","):
                break
        self._expect(")")
        return tuple(parameters)

    def _parse_parameter(self) -> Parameter:
        decorators = self._parse_decorators()
        modifiers: set[str] = set()
        while (
            self._token.kind is TokenKind.IDENTIFIER
            and self._token.text in _PARAMETER_MODIFIERS
            and (self._peek().kind is TokenKind.IDENTIFIER or self._peek().is_("{", "[", "this"))
        ):
            self._add_modifier(modifiers, self._token.text, self._token.start)
            self._next()
        rest = self._eat("...")
        bindings: tuple[str, ...] = ()
        if self._at("{", "["):
            start = self._token.start.offset
            bindings = tuple(self._parse_binding_pattern())
            name = self._text_from(start)
        elif self._at("this"):
            name = self._next().text
        else:
            name = self._expect_identifier()
        optional = self._eat("?")
        annotation = self._parse_type() if self._eat(":") else None
        default = self._capture_expression(",", ")") if self._eat("=") else None
        accessibility = next((m for m in ("public", "private", "protected") if m in modifiers), None)
        return Parameter(
            name=name,
            type=annotation,
            optional=optional,
            has_default=default is not None,
            rest=rest,
            accessibility=accessibility,
            readonly="readonly" in modifiers,
            default=default,
            bindings=bindings,
            decorators=decorators,
            modifiers=frozenset(modifiers - ACCESSIBILITY_MODIFIERS - {"readonly"}),
        )

    def _parse_type_parameters(self) -> tuple[TypeParameter, ...]:
        if not self._eat("<"):
            return ()
        parameters: list[TypeParameter] = []
        while not self._at(">"):
            while self._at("const", "in", "out") and self._peek().kind is TokenKind.IDENTIFIER:
                self._next()
            name = self._expect_identifier()
            constraint = self._parse_type() if self._eat("extends") else None
            default = self._parse_type() if self._eat("=") else None
            parameters.append(TypeParameter(name=name, constraint=constraint, default=default))
            if not self._eat(","):
                break
        self._expect(">")
        return tuple(parameters)

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def _parse_class(
        self,
        modifiers: set[str],
        decorators: tuple[Decorator, ...],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> Declaration:
        self._expect("class")
        if self._token.kind is TokenKind.IDENTIFIER and not self._at("implements"):
            name = self._next().text
        elif "default" in modifiers:
            name = "default"
        else:
            raise self._unexpected("class name")
        type_parameters = self._parse_type_parameters()
        extends: tuple[TypeExpression, ...] = ()
        implements: tuple[TypeExpression, ...] = ()
        if self._eat("extends"):
            extends = self._parse_heritage_list()
        if self._eat("implements"):
            implements = self._parse_heritage_list()
        members = self._parse_class_members(ambient)
        return Declaration(
            kind="class",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            ambient=ambient,
            type_parameters=type_parameters,
            has_body=True,
            members=members,
            decorators=decorators,
            extends=extends,
            implements=implements,
            doc_comment=doc_comment,
        )

    def _parse_heritage_list(self) -> tuple[TypeExpression, ...]:
        references: list[TypeExpression] = []
        while True:
            start = self._token.start.offset
            reference = self._parse_type_reference()
            if self._at("("):
                self._consume_nested_group()
                reference = opaque_expression(self._text_from(start))
            references.append(reference)
            if not self._eat(","):
                return tuple(references)

    def _parse_class_members(self, ambient: bool) -> list[Declaration]:
        self._expect("{")
        members: list[Declaration] = []
        while not self._at("}"):
            if self._at_eof():
                raise self._unexpected("'}'")
            if self._eat(";"):
                continue
            members.append(self._parse_class_member(ambient))
        self._next()
        return members

    def _parse_class_member(self, ambient: bool) -> Declaration:
        doc_comment = self._doc_comment
        position = self._token.start
        decorators = self._parse_decorators()
        modifiers: set[str] = set()
        while self._at_member_modifier():
            if self._at("static") and self._peek().is_("{"):
                break
            word = self._next()
            if word.text == "accessor":
                continue
            modifier = "declared" if word.text == "declare" else word.text
            self._add_modifier(modifiers, modifier, word.start)

        if self._at("static") and self._peek().is_("{"):
            self._next()
            self._skip_block()
            return Declaration(
                kind="static_initializer",
                name="",
                position=position,
                modifiers=frozenset({"static"}),
                ambient=ambient,
                has_body=True,
                doc_comment=doc_comment,
            )
        if self._at_index_signature():
            declaration = self._parse_index_signature(modifiers, ambient, position, doc_comment)
            self._consume_member_terminator()
            return declaration

        generator = self._eat("*")
        kind: DeclarationKind = "method"
        role: SignatureRole | None = None
        if self._at("get", "set") and self._at_accessor_name():
            role = "get" if self._next().text == "get" else "set"
            kind = "get_accessor" if role == "get" else "set_accessor"
        name_token = self._token
        name, computed = self._parse_property_name()
        if self._eat("?"):
            modifiers.add("optional")
        self._eat("!")

        if self._at("(", "<") or generator or role is not None:
            if role is None and not computed and name == "constructor" and name_token.kind is not TokenKind.STRING:
                kind = "constructor"
            type_parameters = self._parse_type_parameters()
            parameters = self._parse_parameters()
            return_type = self._parse_return_type() if self._eat(":") else None
            if self._at("{"):
                if ambient or "abstract" in modifiers:
                    self._warn("An implementation cannot be declared here", position)
                self._skip_block()
                has_body = True
            else:
                self._consume_member_terminator()
                has_body = False
            return Declaration(
                kind=kind,
                name=name,
                position=position,
                modifiers=frozenset(modifiers),
                computed=computed,
                ambient=ambient,
                type_parameters=type_parameters,
                signature=Signature(
                    parameters=parameters,
                    return_type=return_type,
                    type_parameters=type_parameters,
                    role=role,
                    has_body=has_body,
                ),
                has_body=has_body,
                decorators=decorators,
                doc_comment=doc_comment,
            )

        annotation = self._parse_type() if self._eat(":") else None
        initializer = None
        signature = None
        if self._eat("="):
            signature, initializer = self._parse_initializer(";", "}")
        self._consume_member_terminator()
        return Declaration(
            kind="property",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            computed=computed,
            ambient=ambient,
            signature=signature,
            has_body=initializer is not None,
            decorators=decorators,
            type=annotation,
            initializer=initializer,
            doc_comment=doc_comment,
        )

    def _at_accessor_name(self) -> bool:
        following = self._peek()
        if following.is_("(", ":", "?", "=", ";", "<", "}", ",", "!"):
            return False
        return following.is_name or following.kind in (
            TokenKind.STRING,
            TokenKind.NUMBER,
            TokenKind.PRIVATE_NAME,
        ) or following.is_("[")

    def _consume_member_terminator(self) -> None:
        if self._eat(";") or self._eat(","):
            return
        if self._at("}") or self._newline_before:
            return
        raise self._unexpected("';'")

    def _parse_property_name(self) -> tuple[str, bool]:
        """Parse a member name; return ``(name, computed)``.

        Literal computed keys (``["a"]``, ``[1]``) are normalised to the literal.
        Any other computed key is kept as its bracketed source text.
        """
        token = self._token
        if token.is_name or token.kind is TokenKind.PRIVATE_NAME:
            return self._next().text, False
        if token.kind is TokenKind.STRING:
            return self._string_value(self._next()), False
        if token.kind is TokenKind.NUMBER:
            return self._next().text, False
        if token.is_("["):
            start = token.start.offset
            self._next()
            inner = self._token
            if inner.kind in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.TEMPLATE) and self._peek().is_("]"):
                self._next()
                self._next()
                if inner.kind is TokenKind.NUMBER:
                    return inner.text, False
                return inner.text[1:-1], False
            self._capture_expression("]")
            self._expect("]")
            return self._text_from(start), True
        raise self._unexpected("property name")

    def _at_index_signature(self) -> bool:
        if not self._at("["):
            return False

        def probe() -> bool:
            self._next()
            if self._token.kind is not TokenKind.IDENTIFIER:
                return False
            self._next()
            return self._at(":")

        return self._lookahead(probe)

    def _parse_index_signature(
        self,
        modifiers: set[str],
        ambient: bool,
        position: Position,
        doc_comment: str | None,
    ) -> Declaration:
        self._expect("[")
        key_name = self._expect_identifier()
        self._expect(":")
        key_type = self._parse_type()
        self._expect("]")
        if self._eat("?"):
            modifiers.add("optional")
        value_type = self._parse_type() if self._eat(":") else None
        return Declaration(
            kind="index_signature",
            name=f"[{key_type.text}]",
            position=position,
            modifiers=frozenset(modifiers),
            ambient=ambient,
            signature=Signature(
                parameters=(Parameter(name=key_name, type=key_type),),
                return_type=value_type,
                role="index",
            ),
            type=value_type,
            doc_comment=doc_comment,
        )

    # ------------------------------------------------------------------
    # Interfaces and type members
    # ------------------------------------------------------------------

    def _parse_interface(
        self,
        modifiers: set[str],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> Declaration:
        self._expect("interface")
        name = self._expect_identifier()
        type_parameters = self._parse_type_parameters()
        extends = self._parse_heritage_list() if self._eat("extends") else ()
        members = self._parse_type_members(ambient)
        return Declaration(
            kind="interface",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            ambient=ambient,
            type_parameters=type_parameters,
            members=members,
            extends=extends,
            doc_comment=doc_comment,
        )

    def _parse_type_members(self, ambient: bool) -> list[Declaration]:
        self._expect("{")
        members: list[Declaration] = []
        while not self._at("}"):
            if self._at_eof():
                raise self._unexpected("'}'")
            members.append(self._parse_type_member(ambient))
            self._consume_member_terminator()
        self._next()
        return members

    def _parse_type_member(self, ambient: bool) -> Declaration:
        doc_comment = self._doc_comment
        position = self._token.start
        modifiers: set[str] = set()
        if self._at("readonly") and self._at_member_modifier():
            self._next()
            modifiers.add("readonly")
        if self._at_index_signature():
            return self._parse_index_signature(modifiers, ambient, position, doc_comment)
        kind: DeclarationKind
        role: SignatureRole | None = None
        computed = False
        if self._at("(", "<"):
            kind, name, role = "call_signature", "", "call"
        elif self._at("new") and self._peek().is_("(", "<"):
            self._next()
            kind, name, role = "construct_signature", "", "construct"
        else:
            kind = "method"
            if self._at("get", "set") and self._at_accessor_name():
                role = "get" if self._next().text == "get" else "set"
                kind = "get_accessor" if role == "get" else "set_accessor"
            name, computed = self._parse_property_name()
            if self._eat("?"):
                modifiers.add("optional")
        if kind != "method" or self._at("(", "<"):
            type_parameters = self._parse_type_parameters()
            parameters = self._parse_parameters()
            return_type = self._parse_return_type() if self._eat(":") else None
            return Declaration(
                kind=kind,
                name=name,
                position=position,
                modifiers=frozenset(modifiers),
                computed=computed,
                ambient=ambient,
                type_parameters=type_parameters,
                signature=Signature(
                    parameters=parameters,
                    return_type=return_type,
                    type_parameters=type_parameters,
                    role=role,
                ),
                doc_comment=doc_comment,
            )
        annotation = self._parse_type() if self._eat(":") else None
        return Declaration(
            kind="property",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            computed=computed,
            ambient=ambient,
            type=annotation,
            doc_comment=doc_comment,
        )

    # ------------------------------------------------------------------
    # Enums, aliases, namespaces
    # ------------------------------------------------------------------

    def _parse_enum(
        self,
        modifiers: set[str],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> Declaration:
        self._expect("enum")
        name = self._expect_identifier()
        self._expect("{")
        members: list[Declaration] = []
        while not self._at("}"):
            member_doc = self._doc_comment
            member_position = self._token.start
            member_name, computed = self._parse_property_name()
            if self._eat("="):
                text = self._capture_expression(",", "}")
                value = EnumValue(kind=_classify_enum_value(text), text=text)
            else:
                value = EnumValue(kind="implicit")
            members.append(
                Declaration(
                    kind="enum_member",
                    name=member_name,
                    position=member_position,
                    computed=computed,
                    ambient=ambient,
                    value=value,
                    doc_comment=member_doc,
                )
            )
            if not self._eat(","):
                break
        self._expect("}")
        return Declaration(
            kind="enum",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            ambient=ambient,
            members=members,
            doc_comment=doc_comment,
        )

    def _parse_type_alias(
        self,
        modifiers: set[str],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> Declaration:
        self._expect("type")
        name = self._expect_identifier()
        type_parameters = self._parse_type_parameters()
        self._expect("=")
        target = self._parse_type()
        self._consume_semicolon()
        return Declaration(
            kind="type_alias",
            name=name,
            position=position,
            modifiers=frozenset(modifiers),
            ambient=ambient,
            type_parameters=type_parameters,
            type=target,
            doc_comment=doc_comment,
        )

    def _parse_namespace(
        self,
        modifiers: set[str],
        ambient: bool,
        doc_comment: str | None,
        position: Position,
    ) -> Declaration:
        self._next()
        if self._token.kind is TokenKind.STRING:
            name = self._string_value(self._next())
            members: list[Declaration] = []
            if self._at("{"):
                members = self._parse_block_statements(True)
            else:
                self._consume_semicolon()
            return Declaration(
                kind="module",
                name=name,
                position=position,
                modifiers=frozenset(modifiers),
                ambient=True,
                members=members,
                doc_comment=doc_comment,
            )
        names = [self._expect_identifier()]
        while self._eat("."):
            names.append(self._expect_identifier())
        members = self._parse_block_statements(ambient)
        # A.B.C { ... } nests C inside B inside A; inner segments are exported.
        for index in range(len(names) - 1, -1, -1):
            outermost = index == 0
            declaration = Declaration(
                kind="namespace",
                name=names[index],
                position=position,
                modifiers=frozenset(modifiers if outermost else modifiers | {"exported"}),
                ambient=ambient,
                members=members,
                doc_comment=doc_comment if outermost else None,
            )
            members = [declaration]
        return declaration

    # ------------------------------------------------------------------
    # Type expressions
    # ------------------------------------------------------------------

    def _type_node(
        self,
        kind: TypeKind,
        start: int,
        name: str | None = None,
        children: tuple[TypeExpression, ...] = (),
    ) -> TypeExpression:
        return TypeExpression(kind=kind, text=self._text_from(start), name=name, children=children)

    def _parse_type(self, allow_conditional: bool = True) -> TypeExpression:
        start = self._token.start.offset
        if self._at_function_type():
            return self._parse_function_type()
        check = self._parse_union_type()
        if allow_conditional and self._at("extends") and not self._newline_before:
            self._next()
            extends = self._parse_type(allow_conditional=False)
            self._expect("?")
            true_type = self._parse_type()
            self._expect(":")
            false_type = self._parse_type()
            return self._type_node(
                "conditional", start, children=(check, extends, true_type, false_type)
            )
        return check

    def _parse_return_type(self) -> TypeExpression:
        """Parse a return type, allowing ``x is T`` and ``asserts x`` predicates."""
        start = self._token.start.offset
        if self._at("asserts") and self._peek_same_line("<identifier>", "this"):
            self._next()
            subject = self._next().text
            children = (self._parse_type(),) if self._eat("is") else ()
            return self._type_node("predicate", start, name=f"asserts {subject}", children=children)
        if (self._token.kind is TokenKind.IDENTIFIER or self._at("this")) and self._peek_same_line("is"):
            subject = self._next().text
            self._next()
            return self._type_node("predicate", start, name=subject, children=(self._parse_type(),))
        return self._parse_type()

    def _at_function_type(self) -> bool:
        if self._at("<"):
            return True
        if self._at("new") or (self._at("abstract") and self._peek().is_("new")):
            return True
        if not self._at("("):
            return False

        def probe() -> bool:
            try:
                self._parse_parameters()
            except ParseError:
                return False
            return self._at("=>")

        return self._lookahead(probe)

    def _parse_function_type(self) -> TypeExpression:
        start = self._token.start.offset
        kind: TypeKind = "function"
        if self._eat("abstract") or self._at("new"):
            self._expect("new")
            kind = "constructor"
        self._parse_type_parameters()
        parameters = self._parse_parameters()
        self._expect("=>")
        return_type = self._parse_return_type()
        children = tuple(p.type for p in parameters if p.type is not None) + (return_type,)
        return self._type_node(kind, start, children=children)

    def _parse_union_type(self) -> TypeExpression:
        return self._parse_composite_type("|", "union", self._parse_intersection_type)

    def _parse_intersection_type(self) -> TypeExpression:
        return self._parse_composite_type("&", "intersection", self._parse_type_operator)

    def _parse_composite_type(
        self, operator: str, kind: TypeKind, parse_operand: Callable[[], TypeExpression]
    ) -> TypeExpression:
        start = self._token.start.offset
        if self._eat(operator):
            # leading `|` / `&` is not part of the first operand's text
            start = self._token.start.offset
        operands = [self._parse_operand_or_function(parse_operand)]
        while self._eat(operator):
            operands.append(self._parse_operand_or_function(parse_operand))
        if len(operands) == 1:
            return operands[0]
        return self._type_node(kind, start, children=tuple(operands))

    def _parse_operand_or_function(self, parse_operand: Callable[[], TypeExpression]) -> TypeExpression:
        if self._at_function_type():
            return self._parse_function_type()
        return parse_operand()

    def _parse_type_operator(self) -> TypeExpression:
        start = self._token.start.offset
        if self._at("keyof", "unique", "readonly") and self._token.kind is TokenKind.IDENTIFIER and not self._peek().is_(
            ",", ")", "]", ">", "=", ";", "|", "&", "}", "?", ":"
        ):
            operator = self._next().text
            operand = self._parse_type_operator()
            return self._type_node("operator", start, name=operator, children=(operand,))
        if self._at("infer") and self._peek().kind is TokenKind.IDENTIFIER:
            self._next()
            name = self._expect_identifier()
            constraint = None
            if self._at("extends"):
                constraint = self._try_parse(self._parse_infer_constraint)
            children = (constraint,) if constraint is not None else ()
            return self._type_node("infer", start, name=name, children=children)
        return self._parse_postfix_type()

    def _parse_infer_constraint(self) -> TypeExpression:
        self._expect("extends")
        constraint = self._parse_type(allow_conditional=False)
        if self._at("?"):
            raise self._unexpected("end of constraint")
        return constraint

    def _parse_postfix_type(self) -> TypeExpression:
        start = self._token.start.offset
        result = self._parse_primary_type()
        while self._at("[") and not self._newline_before:
            self._next()
            if self._eat("]"):
                result = self._type_node("array", start, children=(result,))
            else:
                index = self._parse_type()
                self._expect("]")
                result = self._type_node("indexed_access", start, children=(result, index))
        return result

    def _parse_primary_type(self) -> TypeExpression:
        token = self._token
        start = token.start.offset
        if token.is_("("):
            self._next()
            inner = self._parse_type()
            self._expect(")")
            return self._type_node("parenthesized", start, children=(inner,))
        if token.is_("{"):
            if self._at_mapped_type():
                return self._parse_mapped_type()
            return self._parse_object_type()
        if token.is_("["):
            return self._parse_tuple_type()
        if token.kind in (TokenKind.STRING, TokenKind.NUMBER) or token.is_("true", "false"):
            self._next()
            return self._type_node("literal", start, name=token.text)
        if token.is_("-") and self._peek().kind is TokenKind.NUMBER:
            self._next()
            self._next()
            return self._type_node("literal", start, name=self._text_from(start))
        if token.kind is TokenKind.TEMPLATE:
            self._next()
            return self._type_node("template_literal", start)
        if token.kind is TokenKind.TEMPLATE_HEAD:
            return self._parse_template_literal_type()
        if token.is_("typeof"):
            self._next()
            if self._at("import"):
                entity = self._parse_import_type()
                return self._type_node("query", start, name=entity.text, children=(entity,))
            name = self._parse_entity_name_allowing_keywords()
            arguments = self._parse_type_arguments() if self._at("<") and not self._newline_before else ()
            return self._type_node("query", start, name=name, children=arguments)
        if token.is_("this"):
            self._next()
            return self._type_node("this", start, name="this")
        if token.is_("import"):
            return self._parse_import_type()
        if token.is_("void", "null") or (
            token.kind is TokenKind.IDENTIFIER
            and token.text in _KEYWORD_TYPES
            and not self._peek().is_(".")
        ):
            self._next()
            return self._type_node("keyword", start, name=token.text)
        if token.kind is TokenKind.IDENTIFIER:
            return self._parse_type_reference()
        raise self._unexpected("type")

    def _parse_type_reference(self) -> TypeExpression:
        start = self._token.start.offset
        name = self._parse_entity_name()
        arguments: tuple[TypeExpression, ...] = ()
        if self._at("<") and not self._newline_before:
            arguments = self._parse_type_arguments()
        return self._type_node("reference", start, name=name, children=arguments)

    def _parse_entity_name_allowing_keywords(self) -> str:
        if not self._token.is_name:
            raise self._unexpected("identifier")
        parts = [self._next().text]
        while self._at(".") and self._peek().is_name:
            self._next()
            parts.append(self._next().text)
        return ".".join(parts)

    def _parse_type_arguments(self) -> tuple[TypeExpression, ...]:
        self._expect("<")
        arguments: list[TypeExpression] = []
        while not self._at(">"):
            arguments.append(self._parse_type())
            if not self._eat(","):
                break
        self._expect(">")
        return tuple(arguments)

    def _parse_import_type(self) -> TypeExpression:
        start = self._token.start.offset
        self._expect("import")
        self._expect("(")
        module = self._expect_string()
        self._expect(")")
        qualifier = ""
        while self._eat("."):
            qualifier += "." + self._next().text
        arguments = self._parse_type_arguments() if self._at("<") else ()
        return self._type_node("import", start, name=module + qualifier, children=arguments)

    def _parse_template_literal_type(self) -> TypeExpression:
        """Parse `head${T}middle${U}tail`, re-scanning each closing brace."""
        start = self._token.start.offset
        self._next()
        spans: list[TypeExpression] = []
        while True:
            spans.append(self._parse_type())
            if not self._at("}"):
                raise self._unexpected("'}'")
            self._rescan(self._lexer.rescan_template_continuation)
            closing = self._next()
            if closing.kind is TokenKind.TEMPLATE_TAIL:
                return self._type_node("template_literal", start, children=tuple(spans))
            if closing.kind is not TokenKind.TEMPLATE_MIDDLE:
                raise ParseError("Unterminated template literal type", closing.start)

    def _parse_tuple_type(self) -> TypeExpression:
        start = self._token.start.offset
        self._expect("[")
        elements: list[TypeExpression] = []
        while not self._at("]"):
            element_start = self._token.start.offset
            rest = self._eat("...")
            label = None
            if self._token.kind is TokenKind.IDENTIFIER and (
                self._peek().is_(":") or (self._peek().is_("?") and self._lookahead(self._label_then_colon))
            ):
                label = self._next().text
                self._eat("?")
                self._expect(":")
            element = self._parse_type()
            if self._eat("?") or label is not None:
                element = self._type_node("tuple_member", element_start, name=label, children=(element,))
            if rest:
                element = self._type_node("rest", element_start, children=(element,))
            elements.append(element)
            if not self._eat(","):
                break
        self._expect("]")
        return self._type_node("tuple", start, children=tuple(elements))

    def _label_then_colon(self) -> bool:
        self._next()
        self._next()
        return self._at(":")

    def _at_mapped_type(self) -> bool:
        def probe() -> bool:
            self._next()
            if self._at("+", "-"):
                self._next()
            if self._at("readonly"):
                self._next()
            if not self._eat("["):
                return False
            if self._token.kind is not TokenKind.IDENTIFIER:
                return False
            self._next()
            return self._at("in")

        return self._lookahead(probe)

    def _parse_mapped_type(self) -> TypeExpression:
        start = self._token.start.offset
        self._expect("{")
        if self._at("+", "-"):
            self._next()
        self._eat("readonly")
        self._expect("[")
        key = self._expect_identifier()
        self._expect("in")
        children = [self._parse_type()]
        if self._eat("as"):
            children.append(self._parse_type())
        self._expect("]")
        if self._at("+", "-"):
            self._next()
        self._eat("?")
        if self._eat(":"):
            children.append(self._parse_type())
        self._eat(";") or self._eat(",")
        self._expect("}")
        return self._type_node("mapped", start, name=key, children=tuple(children))

    def _parse_object_type(self) -> TypeExpression:
        start = self._token.start.offset
        self._expect("{")
        members: list[TypeExpression] = []
        while not self._at("}"):
            if self._at_eof():
                raise self._unexpected("'}'")
            member_start = self._token.start.offset
            declaration = self._parse_type_member(ambient=True)
            members.append(
                self._type_node(
                    "member",
                    member_start,
                    name=declaration.name,
                    children=_member_types(declaration),
                )
            )
            self._consume_member_terminator()
        self._next()
        return self._type_node("object", start, children=tuple(members))


def _member_types(declaration: Declaration) -> tuple[TypeExpression, ...]:
    if declaration.signature is None:
        return (declaration.type,) if declaration.type is not None else ()
    signature = declaration.signature
    types = [p.type for p in signature.parameters if p.type is not None]
    if signature.return_type is not None:
        types.append(signature.return_type)
    return tuple(types)


def _classify_enum_value(text: str) -> str:
    """Return ``literal`` for a lone string/number literal, else ``computed``."""
    lexer = Lexer(text)
    try:
        first = lexer.scan()
        if first.is_("-", "+"):
            first = lexer.scan()
            literal_kinds: tuple[TokenKind, ...] = (TokenKind.NUMBER,)
        else:
            literal_kinds = (TokenKind.STRING, TokenKind.NUMBER, TokenKind.TEMPLATE)
        trailing = lexer.scan()
    except LexError:
        return "computed"
    if first.kind in literal_kinds and trailing.kind is TokenKind.EOF:
        return "literal"
    return "computed"


def parse(source: str, file_name: str = "<input>") -> tuple[PerFileAst, list[Diagnostic]]:
    """Parse one source unit.

    Args:
        source: Complete source text.
        file_name: Name used in diagnostics.

    Returns:
        The per-file AST and its diagnostics.
    """
    return Parser(source, file_name).parse()
