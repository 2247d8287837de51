# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the on-demand lexer."""

import pytest

from tsdecl.errors import LexError
from tsdecl.lexer import Lexer, tokenize
from tsdecl.tokens import Position, TokenKind


def _kinds_and_texts(source: str) -> list[tuple[TokenKind, str]]:
    return [(token.kind, token.text) for token in tokenize(source)]


def test_lex_001_tokenize_classifies_words_and_punctuation() -> None:
    tokens = _kinds_and_texts("export declare const x: number = 0x1F;")

    assert tokens == [
        (TokenKind.KEYWORD, "export"),
        (TokenKind.IDENTIFIER, "declare"),
        (TokenKind.KEYWORD, "const"),
        (TokenKind.IDENTIFIER, "x"),
        (TokenKind.PUNCTUATION, ":"),
        (TokenKind.IDENTIFIER, "number"),
        (TokenKind.PUNCTUATION, "="),
        (TokenKind.NUMBER, "0x1F"),
        (TokenKind.PUNCTUATION, ";"),
        (TokenKind.EOF, ""),
    ]


def test_lex_002_greater_than_is_never_combined_while_scanning() -> None:
    tokens = _kinds_and_texts("Map<string, Array<number>>= a >>> b")

    texts = [text for _, text in tokens]
    assert texts[:9] == ["Map", "<", "string", ",", "Array", "<", "number", ">", ">"]
    assert texts[9] == "="
    assert texts.count(">") == 5


def test_lex_003_rescan_greater_than_joins_shift_operators() -> None:
    lexer = Lexer("a >>>= b")
    lexer.scan()
    greater = lexer.scan()

    rescanned = lexer.rescan_greater_than(greater)

    assert greater.text == ">"
    assert rescanned.text == ">>>="
    assert lexer.scan().text == "b"


def test_lex_004_template_literal_spans_are_split_into_head_middle_tail() -> None:
    tokens = _kinds_and_texts("`on${Capitalize<T>}-${U}!`")

    assert [kind for kind, _ in tokens] == [
        TokenKind.TEMPLATE_HEAD,
        TokenKind.IDENTIFIER,
        TokenKind.PUNCTUATION,
        TokenKind.IDENTIFIER,
        TokenKind.PUNCTUATION,
        TokenKind.TEMPLATE_MIDDLE,
        TokenKind.IDENTIFIER,
        TokenKind.TEMPLATE_TAIL,
        TokenKind.EOF,
    ]
    assert tokens[0][1] == "`on${"
    assert tokens[5][1] == "}-${"
    assert tokens[7][1] == "}!`"


def test_lex_005_decorator_and_private_name_sigils_have_own_kinds() -> None:
    tokens = _kinds_and_texts("@validate #secret = 1")

    assert tokens[0] == (TokenKind.AT, "@")
    assert tokens[1] == (TokenKind.IDENTIFIER, "validate")
    assert tokens[2] == (TokenKind.PRIVATE_NAME, "#secret")


def test_lex_006_comments_are_tokens_and_positions_track_lines() -> None:
    tokens = tokenize("/** doc */\n// line\n  let value")

    assert tokens[0].kind is TokenKind.COMMENT
    assert tokens[0].text == "/** doc */"
    assert tokens[1].kind is TokenKind.COMMENT
    assert tokens[2].start == Position(line=3, column=3, offset=21)
    assert str(tokens[2].start) == "3:3"


def test_lex_007_unterminated_string_raises_and_advances() -> None:
    lexer = Lexer('"abc\nnext')

    with pytest.raises(LexError) as exc_info:
        lexer.scan()

    assert exc_info.value.position.line == 1
    assert exc_info.value.code == "lex"
    assert exc_info.value.token.text == '"abc'
    assert lexer.scan().text == "next"


def test_lex_008_unterminated_block_comment_raises_at_end_of_input() -> None:
    lexer = Lexer("let a; /* never closed")
    for _ in range(3):
        lexer.scan()

    with pytest.raises(LexError, match="block comment"):
        lexer.scan()

    assert lexer.scan().kind is TokenKind.EOF


def test_lex_009_rescan_slash_reads_regular_expression_with_class() -> None:
    lexer = Lexer("/[/}]+/gi;")
    slash = lexer.scan()

    regex = lexer.rescan_slash_as_regex(slash)

    assert regex.kind is TokenKind.REGEX
    assert regex.text == "/[/}]+/gi"
    assert lexer.scan().text == ";"


def test_lex_010_state_and_restore_rewind_the_scan_position() -> None:
    lexer = Lexer("alpha beta gamma")
    lexer.scan()
    state = lexer.state()
    assert lexer.scan().text == "beta"

    lexer.restore(state)

    assert lexer.scan().text == "beta"
    assert lexer.scan().text == "gamma"


def test_lex_011_numbers_accept_separators_exponents_and_bigint() -> None:
    tokens = _kinds_and_texts("1_000 1.5e-3 10n .5")

    assert [text for kind, text in tokens if kind is TokenKind.NUMBER] == [
        "1_000",
        "1.5e-3",
        "10n",
        ".5",
    ]
