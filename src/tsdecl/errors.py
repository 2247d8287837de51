# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Diagnostics and the extraction error taxonomy."""

from dataclasses import dataclass
from typing import Literal

from tsdecl.tokens import Position, Token

Severity = Literal["error", "warning", "info"]
DiagnosticCode = Literal["lex", "parse", "merge"]


@dataclass(frozen=True)
class Diagnostic:
    """Represent one non-fatal, position-tagged report.

    Attributes:
        file_name: Source unit the report belongs to.
        position: Source position of the anomaly.
        severity: Report severity.
        code: Pipeline stage that produced the report.
        message: Human readable description.
    """

    file_name: str
    position: Position
    severity: Severity
    code: DiagnosticCode
    message: str

    def __str__(self) -> str:
        return f"{self.file_name}:{self.position}: {self.severity}: {self.message}"


class ExtractionError(RuntimeError):
    """Base class for recoverable extraction failures."""

    code: DiagnosticCode = "parse"

    def __init__(
        self, message: str, position: Position, severity: Severity = "error"
    ) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        self.severity: Severity = severity

    def to_diagnostic(self, file_name: str) -> Diagnostic:
        """Convert the error into a diagnostic record.

        Args:
            file_name: Source unit the error was raised for.

        Returns:
            Diagnostic carrying this error's position, severity and message.
        """
        return Diagnostic(
            file_name=file_name,
            position=self.position,
            severity=self.severity,
            code=self.code,
            message=self.message,
        )


class LexError(ExtractionError):
    """Represent an unterminated string, template, regex or comment.

    Attributes:
        token: Best-effort token covering the malformed text, when the
            scanner can still produce one.
    """

    code: DiagnosticCode = "lex"

    def __init__(self, message: str, position: Position, token: Token | None = None) -> None:
        super().__init__(message, position)
        self.token = token


class ParseError(ExtractionError):
    """Represent an unexpected token."""

    code: DiagnosticCode = "parse"

    def __init__(
        self,
        message: str,
        position: Position,
        expected: str | None = None,
        found: str | None = None,
        severity: Severity = "error",
    ) -> None:
        if expected is not None:
            message = f"{message}: expected {expected}, found {found!r}"
        super().__init__(message, position, severity)
        self.expected = expected
        self.found = found


class MergeConflict(ExtractionError):
    """Represent an incompatible overload set or a non-mergeable duplicate."""

    code: DiagnosticCode = "merge"
