# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Import declarations and export lists.

None of these forms declares a symbol; they are recorded on the per-file AST
so that renderers can show a file's module surface.
"""

from tsdecl.nodes import ExportList, ImportBinding, ImportDeclaration, PerFileAst
from tsdecl.tokens import Position, Token, TokenKind


class ModuleSyntaxMixin:
    """Parse ``import`` and ``export`` forms for ``Parser``.

    Relies on the token plumbing of the parser (``_token``, ``_peek``,
    ``_next``, ``_eat``, ``_expect``, ``_unexpected``) and on its expression
    and block skipping.
    """

    _ast: PerFileAst

    def _parse_import(self) -> None:
        position = self._expect("import").start
        type_only = False
        if self._at("type") and (
            self._peek().is_("{", "*")
            or (self._peek().kind is TokenKind.IDENTIFIER and not self._peek().is_("from"))
        ):
            self._next()
            type_only = True
        if self._token.kind is TokenKind.STRING:
            module = self._string_value(self._next())
            self._consume_semicolon()
            self._ast.imports.append(ImportDeclaration(module=module, position=position))
            return

        bindings: list[ImportBinding] = []
        if self._token.kind is TokenKind.IDENTIFIER and not self._at("from"):
            local = self._next().text
            if self._eat("="):
                self._parse_import_equals(local, position, type_only)
                return
            bindings.append(ImportBinding(local=local, imported="default"))
            self._eat(",")
        if self._eat("*"):
            self._expect("as")
            bindings.append(ImportBinding(local=self._expect_identifier(), imported="*"))
        elif self._at("{"):
            for imported, local in self._parse_named_bindings():
                bindings.append(ImportBinding(local=local, imported=imported))
        self._expect("from")
        module = self._expect_string()
        if self._at("with", "assert") and self._peek_same_line("{"):
            self._next()
            self._skip_block()
        self._consume_semicolon()
        self._ast.imports.append(
            ImportDeclaration(
                module=module,
                position=position,
                bindings=tuple(bindings),
                type_only=type_only,
            )
        )

    def _parse_import_equals(self, local: str, position: Position, type_only: bool) -> None:
        module: str | None = None
        if self._at("require") and self._peek().is_("("):
            self._next()
            self._expect("(")
            module = self._expect_string()
            self._expect(")")
            imported = "*"
        else:
            imported = self._parse_entity_name()
        self._consume_semicolon()
        self._ast.imports.append(
            ImportDeclaration(
                module=module,
                position=position,
                bindings=(ImportBinding(local=local, imported=imported),),
                type_only=type_only,
            )
        )

    def _parse_named_bindings(self) -> list[tuple[str, str]]:
        """Parse ``{ a, b as c, type d }`` into ``(name, alias)`` pairs."""
        self._expect("{")
        pairs: list[tuple[str, str]] = []
        while not self._at("}"):
            if self._at("type") and self._peek().kind in (
                TokenKind.IDENTIFIER,
                TokenKind.KEYWORD,
                TokenKind.STRING,
            ) and not self._peek().is_("as"):
                self._next()
            name = self._parse_module_export_name()
            alias = name
            if self._eat("as"):
                alias = self._parse_module_export_name()
            pairs.append((name, alias))
            if not self._eat(","):
                break
        self._expect("}")
        return pairs

    def _parse_module_export_name(self) -> str:
        if self._token.kind is TokenKind.STRING:
            return self._string_value(self._next())
        if not self._token.is_name:
            raise self._unexpected("name")
        return self._next().text

    def _parse_export_form(self, position: Position) -> bool:
        """Parse export forms that declare nothing; return True if one was found."""
        type_only = False
        if self._at("type") and self._peek().is_("{", "*"):
            self._next()
            type_only = True
        if self._at("{"):
            names = tuple(self._parse_named_bindings())
            module = self._expect_string() if self._eat("from") else None
            self._consume_semicolon()
            self._ast.export_lists.append(
                ExportList(position=position, names=names, module=module, type_only=type_only)
            )
            return True
        if self._eat("*"):
            names: tuple[tuple[str, str], ...] = ()
            if self._eat("as"):
                names = (("*", self._parse_module_export_name()),)
            self._expect("from")
            module = self._expect_string()
            self._consume_semicolon()
            self._ast.export_lists.append(
                ExportList(
                    position=position,
                    names=names,
                    module=module,
                    star=not names,
                    type_only=type_only,
                )
            )
            return True
        if self._eat("="):
            expression = self._capture_expression(";")
            self._consume_semicolon()
            self._ast.export_lists.append(
                ExportList(position=position, names=((expression, "export="),))
            )
            return True
        if self._at("as") and self._peek_same_line("namespace"):
            self._next()
            self._next()
            self._expect_identifier()
            self._consume_semicolon()
            return True
        if self._at("import"):
            self._parse_import()
            return True
        return False

    def _expect_string(self) -> str:
        if self._token.kind is not TokenKind.STRING:
            raise self._unexpected("string literal")
        return self._string_value(self._next())

    @staticmethod
    def _string_value(token: Token) -> str:
        return token.text[1:-1]

    def _parse_entity_name(self) -> str:
        parts = [self._expect_identifier()]
        while self._at(".") and self._peek().is_name:
            self._next()
            parts.append(self._next().text)
        return ".".join(parts)
